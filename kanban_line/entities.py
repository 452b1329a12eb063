"""
Entities of the assembly line.
"""
from enum import Enum


class StationState(Enum):
    WORKING = "WORKING"  # countdown > 0
    DUE = "DUE"  # countdown <= 0, stock available
    BLOCKED = "BLOCKED"  # countdown <= 0, at least one bin empty


class Item:
    def __init__(self, id, name, default_stock_level):
        self.id = id
        self.name = name
        self.default_stock_level = default_stock_level

    def __repr__(self):
        return f"Item_{self.id}({self.name})"


class Bin:
    """One bin per (item, station). currently_replacing means the runner is out fetching a full one."""
    def __init__(self, id, item_id, station_id, stock_level):
        self.id = id
        self.item_id = item_id
        self.station_id = station_id
        self.stock_level = stock_level
        self.currently_replacing = False
        self.restock_count = 0

    def __repr__(self):
        return f"Bin_{self.id}"


class Worker:
    def __init__(self, id, efficiency, defect_rate, experience=None):
        self.id = id
        self.efficiency = efficiency
        self.defect_rate = defect_rate
        self.experience = experience

    def __repr__(self):
        return f"Worker_{self.id}"


class Station:
    def __init__(self, id, worker_id, countdown):
        self.id = id
        self.worker_id = worker_id
        # Simulated seconds left on the current lamp; signed, overshoot is kept
        self.countdown = countdown

        # Stats
        self.completed = 0
        self.stalled_ticks = 0

    @property
    def is_due(self):
        return self.countdown <= 0

    def __repr__(self):
        return f"Station_{self.id}"


class Tray:
    def __init__(self, id, capacity):
        self.id = id
        self.capacity = capacity
        self.lamps = []  # serials, in packing order

    @property
    def is_full(self):
        return len(self.lamps) >= self.capacity

    def __repr__(self):
        return f"Tray_{self.id}"


class Lamp:
    __slots__ = ("serial", "tray_id", "station_id", "position", "defected", "created_at")

    def __init__(self, serial, tray_id, station_id, position, defected, created_at):
        self.serial = serial
        self.tray_id = tray_id
        self.station_id = station_id
        self.position = position
        self.defected = defected
        self.created_at = created_at

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError(f"Lamp {self.serial} is immutable")
        object.__setattr__(self, name, value)

    def __repr__(self):
        return f"Lamp_{self.serial}"
