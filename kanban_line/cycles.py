"""
The two recurring activations of the line: replenishment and production.
Each activation is applied to the store as a single batch.
"""
import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)


@dataclass
class SimulationContext:
    """Run parameters and clocks handed to every activation."""
    restock_time_stretch: float
    completion_time_stretch: float
    tick_interval: float
    low_stock_threshold: int
    base_completion_duration: float
    jitter: float
    # Clocks
    replenishment_activations: int = 0
    production_activations: int = 0
    production_time: float = 0.0  # Simulated seconds elapsed on the stations

    @property
    def tick_duration(self):
        """Simulated seconds that pass on a station per completion tick."""
        return self.tick_interval * self.completion_time_stretch


@dataclass
class ReplenishmentReport:
    activation: int
    fulfilled: List[int] = field(default_factory=list)  # bin ids
    requested: List[int] = field(default_factory=list)  # bin ids


@dataclass
class ProductionReport:
    activation: int
    lamps: list = field(default_factory=list)
    blocked: List[int] = field(default_factory=list)  # station ids


def replenish(store, context):
    """
    Runner pass over every bin. Order matters:
    1. Fulfill: bins flagged on the previous pass get the item's full default stock and the flag clears.
    2. Request: any bin at or below the threshold (and not already out) is flagged.
    A bin flagged now is refilled on the next pass, never this one.
    """
    report = ReplenishmentReport(context.replenishment_activations + 1)

    with store.batch():
        for bin_ in store.bins.values():
            if bin_.currently_replacing:
                bin_.stock_level = store.item_for_bin(bin_).default_stock_level
                bin_.currently_replacing = False
                bin_.restock_count += 1
                report.fulfilled.append(bin_.id)

        for bin_ in store.bins.values():
            if not bin_.currently_replacing and bin_.stock_level <= context.low_stock_threshold:
                bin_.currently_replacing = True
                report.requested.append(bin_.id)
    context.replenishment_activations = report.activation

    if report.fulfilled or report.requested:
        logger.debug(
            f"Restock pass {report.activation}: fulfilled {report.fulfilled}, requested {report.requested}"
        )
    return report


def completion_duration(worker, context, rng):
    """Time for the worker's next lamp: base duration scaled by efficiency and jittered."""
    return context.base_completion_duration * worker.efficiency * rng.jitter(context.jitter)


def produce(store, packer, rng, context):
    """
    Completion pass over every station. Order matters:
    1. Stations still working (countdown > 0) lose one tick of simulated time; the countdown may go negative.
    2. Each due station (countdown <= 0) with every bin stocked consumes one unit per bin,
       rolls for a defect, packs a lamp, and adds a fresh duration on top of the remaining countdown.
       A due station short on stock is left untouched until a later pass finds stock.
    """
    report = ProductionReport(context.production_activations + 1)
    now = context.production_time + context.tick_duration

    with store.batch():
        for station in store.stations.values():
            if station.countdown > 0:
                station.countdown -= context.tick_duration

        for station in store.stations.values():
            if not station.is_due:
                continue

            bins = store.bins_for_station(station.id)
            if not all(bin_.stock_level >= 1 for bin_ in bins):
                station.stalled_ticks += 1
                report.blocked.append(station.id)
                continue

            for bin_ in bins:
                store.take_one(bin_)

            worker = store.worker_for_station(station)
            defected = rng.defect_draw() < worker.defect_rate
            lamp = packer.pack(station.id, defected, created_at=now)
            report.lamps.append(lamp)

            station.countdown += completion_duration(worker, context, rng)
            station.completed += 1
    context.production_activations = report.activation
    context.production_time = now

    if report.blocked:
        logger.debug(f"Completion pass {report.activation}: stations {report.blocked} waiting on stock")
    return report
