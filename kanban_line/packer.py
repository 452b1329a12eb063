"""
Packing of finished lamps into test trays.
"""
import logging

from .config import SERIAL_PREFIX, SERIAL_TRAY_DIGITS, TRAY_CAPACITY
from .entities import Lamp

logger = logging.getLogger(__name__)


def format_serial(tray_ordinal, position, capacity=TRAY_CAPACITY, prefix=SERIAL_PREFIX):
    """
    Serial from the tray ordinal and the 1-based position in that tray.
    e.g. tray 3, position 7 -> "LP00000307"
    """
    position_digits = max(2, len(str(capacity)))
    return f"{prefix}{tray_ordinal:0{SERIAL_TRAY_DIGITS}d}{position:0{position_digits}d}"


class LampPacker:
    """
    Puts every new lamp on the current tray, opening a fresh tray when it is full.
    The current tray is tracked explicitly (store.current_tray_id) instead of searching for the newest one.
    """
    def __init__(self, store, capacity=TRAY_CAPACITY, prefix=SERIAL_PREFIX):
        self.store = store
        self.capacity = capacity
        self.prefix = prefix
        if store.current_tray_id is None:
            self.open_tray()

    @property
    def current_tray(self):
        return self.store.trays[self.store.current_tray_id]

    def open_tray(self):
        tray = self.store.add_tray(self.capacity)
        self.store.current_tray_id = tray.id
        logger.debug(f"{tray} opened")
        return tray

    def pack(self, station_id, defected, created_at=None):
        """Create the lamp for a finished unit and place it on a tray."""
        tray = self.current_tray
        if tray.is_full:
            tray = self.open_tray()

        position = len(tray.lamps) + 1
        serial = format_serial(tray.id, position, self.capacity, self.prefix)
        lamp = Lamp(serial, tray.id, station_id, position, defected, created_at)
        self.store.add_lamp(lamp)
        tray.lamps.append(serial)
        logger.debug(f"{lamp} packed on {tray} (station {station_id}, defected={defected})")
        return lamp
