"""
Core simulation logic.
"""
import logging
import time

import simpy

from .config import validate_config
from .cycles import SimulationContext, produce, replenish
from .entities import StationState
from .packer import LampPacker
from .random_source import RandomSource
from .store import EntityStore

logger = logging.getLogger(__name__)


class KanbanSimulation:
    """
    Kanban lamp line driven by a simpy clock.

    The environment clock is in real seconds. The runner (replenishment) fires every
    RESTOCK_PERIOD / RESTOCK_TIME_STRETCH seconds and the stations are checked every
    TICK_INTERVAL seconds, each check moving TICK_INTERVAL * COMPLETION_TIME_STRETCH
    simulated seconds. Both processes do a whole activation between two timeouts, so
    activations never overlap; at the same instant the runner goes first.
    """
    def __init__(self, config_scenario, seed=None, random_source=None):
        self.config = validate_config(config_scenario)
        self.env = simpy.Environment()
        self.rng = random_source if random_source is not None else RandomSource(seed)
        self.context = SimulationContext(
            restock_time_stretch=self.config["RESTOCK_TIME_STRETCH"],
            completion_time_stretch=self.config["COMPLETION_TIME_STRETCH"],
            tick_interval=self.config["TICK_INTERVAL"],
            low_stock_threshold=self.config["LOW_STOCK_THRESHOLD"],
            base_completion_duration=self.config["BASE_COMPLETION_DURATION"],
            jitter=self.config["JITTER"],
        )
        self.store = EntityStore()
        self._build_line()
        self.packer = LampPacker(self.store, self.config["TRAY_CAPACITY"], self.config["SERIAL_PREFIX"])
        self._started = False

        # Stats
        self.restock_requests = 0
        self.restocks_fulfilled = 0

        logger.info(
            f"{self.config['NAME']}: {len(self.store.stations)} stations, "
            f"{len(self.store.bins)} bins, time stretch {self.config['TIME_STRETCH']}"
        )

    def log(self, message):
        logger.debug(f"[{self.env.now:.1f}] {message}")

    def _build_line(self):
        """Seed items, workers, stations and one bin per (item, station)."""
        items_by_name = {}
        for spec in self.config["ITEMS"]:
            items_by_name[spec["name"]] = self.store.add_item(spec["name"], spec["default_stock_level"])

        workers = [
            self.store.add_worker(w["efficiency"], w["defect_rate"], w["experience"])
            for w in self.config["WORKERS"]
        ]

        for spec in self.config["STATIONS"]:
            worker = workers[spec["worker"]]
            countdown = spec["countdown"]
            if countdown is None:
                # Everyone starts on their first lamp
                countdown = (self.context.base_completion_duration * worker.efficiency
                             * self.rng.jitter(self.context.jitter))
            station = self.store.add_station(worker.id, countdown)
            for name in spec["items"]:
                item = items_by_name[name]
                stock = spec["initial_stock"].get(name, item.default_stock_level)
                self.store.add_bin(item.id, station.id, stock)

    # --- Clock ---
    @property
    def restock_interval(self):
        """Real seconds between runner passes."""
        return self.config["RESTOCK_PERIOD"] / self.context.restock_time_stretch

    def start(self):
        """Register both recurring processes with the environment (once)."""
        if not self._started:
            self.env.process(self.replenishment_process())
            self.env.process(self.production_process())
            self._started = True

    def run(self, until=None):
        self.start()
        until = self.config["SIM_TIME"] if until is None else until
        logger.info(f"Running {self.config['NAME']} until t={until}")
        self.env.run(until=until)
        logger.info(
            f"{self.config['NAME']} stopped at t={self.env.now}: "
            f"{len(self.store.lamps)} lamps in {len(self.store.trays)} trays"
        )

    def run_realtime(self, until=None, realtime_factor=1.0):
        """
        Step the environment while sleeping to follow the wall clock.
        realtime_factor: real seconds per environment second (lower = faster).
        """
        self.start()
        until = self.config["SIM_TIME"] if until is None else until
        last_sim_time = self.env.now
        last_real_time = time.time()

        while self.env.peek() < until:
            self.env.step()

            # Sync to real time
            sim_elapsed = self.env.now - last_sim_time
            target_real_elapsed = sim_elapsed * realtime_factor
            actual_real_elapsed = time.time() - last_real_time
            if actual_real_elapsed < target_real_elapsed:
                time.sleep(target_real_elapsed - actual_real_elapsed)

            last_sim_time = self.env.now
            last_real_time = time.time()

        # Advance the clock to the horizon, as run() does
        if self.env.now < until:
            self.env.run(until=until)

    def replenishment_process(self):
        """Runner loop: one pass, then wait for the round trip."""
        while True:
            yield self.env.timeout(self.restock_interval)
            self.advance_replenishment()

    def production_process(self):
        """Station loop: one completion check per tick."""
        while True:
            yield self.env.timeout(self.context.tick_interval)
            self.advance_production()

    # --- Single activations (also used directly for deterministic stepping) ---
    def advance_replenishment(self):
        report = replenish(self.store, self.context)
        self.restock_requests += len(report.requested)
        self.restocks_fulfilled += len(report.fulfilled)
        return report

    def advance_production(self):
        report = produce(self.store, self.packer, self.rng, self.context)
        for lamp in report.lamps:
            self.log(f"{lamp} from Station_{lamp.station_id}{' (defected)' if lamp.defected else ''}")
        return report

    # --- Read-only queries ---
    def station_state(self, station):
        if not station.is_due:
            return StationState.WORKING
        if all(b.stock_level >= 1 for b in self.store.bins_for_station(station.id)):
            return StationState.DUE
        return StationState.BLOCKED

    def list_bins(self):
        return [
            {
                "id": b.id,
                "item_id": b.item_id,
                "item": self.store.item_for_bin(b).name,
                "station_id": b.station_id,
                "stock_level": b.stock_level,
                "currently_replacing": b.currently_replacing,
                "restock_count": b.restock_count,
            }
            for b in self.store.bins.values()
        ]

    def list_stations(self):
        return [
            {
                "id": s.id,
                "worker_id": s.worker_id,
                "countdown": s.countdown,
                "state": self.station_state(s).value,
                "completed": s.completed,
                "stalled_ticks": s.stalled_ticks,
            }
            for s in self.store.stations.values()
        ]

    def list_trays(self):
        return [
            {
                "id": t.id,
                "capacity": t.capacity,
                "fill_level": len(t.lamps),
                "is_full": t.is_full,
                "is_current": t.id == self.store.current_tray_id,
            }
            for t in self.store.trays.values()
        ]

    def list_lamps(self):
        return [
            {
                "serial": lamp.serial,
                "tray_id": lamp.tray_id,
                "station_id": lamp.station_id,
                "position": lamp.position,
                "defected": lamp.defected,
                "created_at": lamp.created_at,
            }
            for lamp in self.store.lamps.values()
        ]

    def stats(self):
        lamps = self.store.lamps.values()
        return {
            "lamps_produced": len(self.store.lamps),
            "lamps_defected": sum(1 for lamp in lamps if lamp.defected),
            "trays_used": len(self.store.trays),
            "stalled_ticks": sum(s.stalled_ticks for s in self.store.stations.values()),
            "restock_requests": self.restock_requests,
            "restocks_fulfilled": self.restocks_fulfilled,
            "production_time": self.context.production_time,
            "replenishment_activations": self.context.replenishment_activations,
            "production_activations": self.context.production_activations,
        }
