"""
Entity store holding the whole state of the line.
"""
import logging
from contextlib import contextmanager

from .entities import Bin, Item, Lamp, Station, Tray, Worker

logger = logging.getLogger(__name__)


class InvariantViolation(RuntimeError):
    """Raised when a mutation would break the line's consistency rules. Fatal."""


class EntityStore:
    """
    Container for all line entities.
    Ids are 1-based and handed out by per-entity counters, never reused.
    """
    def __init__(self):
        self.items = {}
        self.workers = {}
        self.stations = {}
        self.bins = {}
        self.trays = {}
        self.lamps = {}  # serial -> Lamp, insertion ordered
        self.current_tray_id = None  # tray the packer is filling
        self._next_ids = {"item": 1, "worker": 1, "station": 1, "bin": 1, "tray": 1}

        # Relationship indexes
        self._bins_by_station = {}
        self._lamps_by_tray = {}
        self._lamps_by_station = {}

    def _new_id(self, kind):
        new_id = self._next_ids[kind]
        self._next_ids[kind] += 1
        return new_id

    # --- Creation ---
    def add_item(self, name, default_stock_level):
        item = Item(self._new_id("item"), name, default_stock_level)
        self.items[item.id] = item
        return item

    def add_worker(self, efficiency, defect_rate, experience=None):
        worker = Worker(self._new_id("worker"), efficiency, defect_rate, experience)
        self.workers[worker.id] = worker
        return worker

    def add_station(self, worker_id, countdown):
        station = Station(self._new_id("station"), worker_id, countdown)
        self.stations[station.id] = station
        self._bins_by_station[station.id] = []
        self._lamps_by_station[station.id] = []
        return station

    def add_bin(self, item_id, station_id, stock_level):
        if stock_level < 0:
            raise InvariantViolation(f"Bin for item {item_id} at station {station_id} starts below zero")
        if any(b.item_id == item_id for b in self._bins_by_station[station_id]):
            raise InvariantViolation(f"Station {station_id} already has a bin for item {item_id}")
        bin_ = Bin(self._new_id("bin"), item_id, station_id, stock_level)
        self.bins[bin_.id] = bin_
        self._bins_by_station[station_id].append(bin_)
        return bin_

    def add_tray(self, capacity):
        tray = Tray(self._new_id("tray"), capacity)
        self.trays[tray.id] = tray
        self._lamps_by_tray[tray.id] = []
        return tray

    def add_lamp(self, lamp: Lamp):
        if lamp.serial in self.lamps:
            raise InvariantViolation(f"Duplicate serial {lamp.serial}")
        self.lamps[lamp.serial] = lamp
        self._lamps_by_tray[lamp.tray_id].append(lamp)
        self._lamps_by_station[lamp.station_id].append(lamp)
        return lamp

    # --- Relationships ---
    def bins_for_station(self, station_id):
        return list(self._bins_by_station[station_id])

    def item_for_bin(self, bin_):
        return self.items[bin_.item_id]

    def worker_for_station(self, station):
        return self.workers[station.worker_id]

    def lamps_for_tray(self, tray_id):
        return list(self._lamps_by_tray[tray_id])

    def lamps_for_station(self, station_id):
        return list(self._lamps_by_station[station_id])

    # --- Mutation ---
    def take_one(self, bin_):
        """Consume a single unit from a bin."""
        if bin_.stock_level < 1:
            raise InvariantViolation(f"{bin_} has no stock to consume")
        bin_.stock_level -= 1

    @contextmanager
    def batch(self):
        """
        Apply a group of mutations as one unit.
        If the block raises, every entity is put back the way it was and the error propagates.
        """
        snapshot = self._snapshot()
        try:
            yield self
        except Exception:
            logger.error("Batch failed, rolling back store state")
            self._restore(snapshot)
            raise

    def _snapshot(self):
        # Only what an activation can touch: bin and station scalars, the tray being
        # filled, and high-water marks for everything append-only
        current = self.trays.get(self.current_tray_id)
        return {
            "bins": {i: (b.stock_level, b.currently_replacing, b.restock_count) for i, b in self.bins.items()},
            "stations": {i: (s.countdown, s.completed, s.stalled_ticks) for i, s in self.stations.items()},
            "current_tray_id": self.current_tray_id,
            "current_tray_fill": len(current.lamps) if current is not None else 0,
            "lamp_count": len(self.lamps),
            "station_lamp_counts": {i: len(v) for i, v in self._lamps_by_station.items()},
            "next_ids": dict(self._next_ids),
        }

    def _restore(self, snapshot):
        # Restore in place so outside references to entities stay valid
        for bin_id, (stock_level, replacing, restocks) in snapshot["bins"].items():
            bin_ = self.bins[bin_id]
            bin_.stock_level, bin_.currently_replacing, bin_.restock_count = stock_level, replacing, restocks
        for station_id, (countdown, completed, stalled) in snapshot["stations"].items():
            station = self.stations[station_id]
            station.countdown, station.completed, station.stalled_ticks = countdown, completed, stalled

        # Trays opened during the batch
        first_new_tray = snapshot["next_ids"]["tray"]
        for tray_id in range(first_new_tray, self._next_ids["tray"]):
            self.trays.pop(tray_id, None)
            self._lamps_by_tray.pop(tray_id, None)

        tray_id = snapshot["current_tray_id"]
        if tray_id is not None:
            fill = snapshot["current_tray_fill"]
            del self.trays[tray_id].lamps[fill:]
            del self._lamps_by_tray[tray_id][fill:]

        # Lamps created during the batch; the dict is insertion ordered
        while len(self.lamps) > snapshot["lamp_count"]:
            self.lamps.popitem()
        for station_id, count in snapshot["station_lamp_counts"].items():
            del self._lamps_by_station[station_id][count:]

        self._next_ids = snapshot["next_ids"]
        self.current_tray_id = tray_id
