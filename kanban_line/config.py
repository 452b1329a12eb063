"""
Configuration constants and scenarios for the Kanban Line Simulation.
"""

# Simulation Time Unit: Seconds
# The simpy clock runs in real seconds; TIME_STRETCH converts them to simulated seconds.
SIM_TIME = 3600  # 1 hour of real time
TIME_STRETCH = 60  # "2" twice as fast, "0.5" half as fast

# Runner / Replenishment
RESTOCK_PERIOD = 300  # Runner round trip (simulated seconds)
LOW_STOCK_THRESHOLD = 5

# Production
TICK_INTERVAL = 1  # Real seconds between completion checks
BASE_COMPLETION_DURATION = 60  # Simulated seconds per lamp for a baseline worker
JITTER = 0.1  # Completion time varies within +/- 10%

# Packing
TRAY_CAPACITY = 60
SERIAL_PREFIX = "LP"
SERIAL_TRAY_DIGITS = 6

# Worker experience presets (efficiency: 1.0 baseline, <1 faster; defect_rate in %)
EXPERIENCE_PROFILES = {
    "rookie": {"efficiency": 1.5, "defect_rate": 0.85},
    "experienced": {"efficiency": 1.0, "defect_rate": 0.5},
    "expert": {"efficiency": 0.85, "defect_rate": 0.15},
}

LAMP_ITEMS = [
    {"name": "Lamp base", "default_stock_level": 25},
    {"name": "Harp", "default_stock_level": 60},
    {"name": "Socket", "default_stock_level": 50},
    {"name": "Bulb", "default_stock_level": 40},
    {"name": "Shade", "default_stock_level": 20},
    {"name": "Cord", "default_stock_level": 45},
]

# Scenarios
# Scenario A: Mixed crew (one of each experience level plus extra rookies)
SCENARIO_A = {
    "NAME": "Scenario A (Mixed crew)",
    "TIME_STRETCH": TIME_STRETCH,
    "LOW_STOCK_THRESHOLD": LOW_STOCK_THRESHOLD,
    "TRAY_CAPACITY": TRAY_CAPACITY,
    "BASE_COMPLETION_DURATION": BASE_COMPLETION_DURATION,
    "ITEMS": LAMP_ITEMS,
    "WORKERS": [
        {"experience": "rookie"},
        {"experience": "rookie"},
        {"experience": "experienced"},
        {"experience": "expert"},
    ],
    "STATIONS": [{"worker": 0}, {"worker": 1}, {"worker": 2}, {"worker": 3}],
}

# Scenario B: Experienced crew with deeper bins
SCENARIO_B = {
    "NAME": "Scenario B (Experienced crew)",
    "TIME_STRETCH": TIME_STRETCH,
    "LOW_STOCK_THRESHOLD": LOW_STOCK_THRESHOLD,
    "TRAY_CAPACITY": TRAY_CAPACITY,
    "BASE_COMPLETION_DURATION": BASE_COMPLETION_DURATION,
    "ITEMS": [dict(item, default_stock_level=item["default_stock_level"] * 2) for item in LAMP_ITEMS],
    "WORKERS": [
        {"experience": "experienced"},
        {"experience": "experienced"},
        {"experience": "expert"},
        {"experience": "expert"},
    ],
    "STATIONS": [{"worker": 0}, {"worker": 1}, {"worker": 2}, {"worker": 3}],
}


class ConfigurationError(ValueError):
    """Raised when a scenario cannot be used to build a line."""


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(config, key, default):
    value = config.get(key, default)
    if not _is_number(value):
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    return value


def _positive(config, key, default):
    value = _number(config, key, default)
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {value!r}")
    return value


def resolve_worker(spec):
    """Fill a worker seed from its experience profile; explicit values win."""
    worker = {}
    experience = spec.get("experience")
    if experience is not None:
        if experience not in EXPERIENCE_PROFILES:
            raise ConfigurationError(f"Unknown worker experience {experience!r}")
        worker.update(EXPERIENCE_PROFILES[experience])
    worker.update({k: v for k, v in spec.items() if k != "experience"})
    worker["experience"] = experience

    if "efficiency" not in worker or "defect_rate" not in worker:
        raise ConfigurationError(f"Worker {spec!r} needs an experience or efficiency and defect_rate")
    _number(worker, "efficiency", None)
    _number(worker, "defect_rate", None)
    if worker["efficiency"] <= 0:
        raise ConfigurationError(f"Worker efficiency must be positive, got {worker['efficiency']!r}")
    if not 0 <= worker["defect_rate"] <= 100:
        raise ConfigurationError(f"Worker defect_rate must be within [0, 100], got {worker['defect_rate']!r}")
    return worker


def validate_config(config):
    """
    Check a scenario dict and return a normalized copy with every default filled in.
    Raises ConfigurationError on the first problem found.
    """
    time_stretch = _positive(config, "TIME_STRETCH", TIME_STRETCH)
    settings = {
        "NAME": config.get("NAME", "Unnamed scenario"),
        "TIME_STRETCH": time_stretch,
        "RESTOCK_TIME_STRETCH": _positive(config, "RESTOCK_TIME_STRETCH", time_stretch),
        "COMPLETION_TIME_STRETCH": _positive(config, "COMPLETION_TIME_STRETCH", time_stretch),
        "RESTOCK_PERIOD": _positive(config, "RESTOCK_PERIOD", RESTOCK_PERIOD),
        "TICK_INTERVAL": _positive(config, "TICK_INTERVAL", TICK_INTERVAL),
        "TRAY_CAPACITY": _positive(config, "TRAY_CAPACITY", TRAY_CAPACITY),
        "BASE_COMPLETION_DURATION": _positive(config, "BASE_COMPLETION_DURATION", BASE_COMPLETION_DURATION),
        "SIM_TIME": _positive(config, "SIM_TIME", SIM_TIME),
        "SERIAL_PREFIX": config.get("SERIAL_PREFIX", SERIAL_PREFIX),
    }

    if not float(settings["TRAY_CAPACITY"]).is_integer():
        raise ConfigurationError("TRAY_CAPACITY must be a whole number")
    settings["TRAY_CAPACITY"] = int(settings["TRAY_CAPACITY"])

    threshold = _number(config, "LOW_STOCK_THRESHOLD", LOW_STOCK_THRESHOLD)
    if threshold < 0:
        raise ConfigurationError(f"LOW_STOCK_THRESHOLD cannot be negative, got {threshold!r}")
    settings["LOW_STOCK_THRESHOLD"] = threshold

    jitter = _number(config, "JITTER", JITTER)
    if not 0 <= jitter < 1:
        raise ConfigurationError(f"JITTER must be within [0, 1), got {jitter!r}")
    settings["JITTER"] = jitter

    for key in ("ITEMS", "WORKERS", "STATIONS"):
        if not config.get(key):
            raise ConfigurationError(f"{key} must list at least one entry")

    items = []
    names = set()
    for item in config["ITEMS"]:
        name = item.get("name")
        if not name or name in names:
            raise ConfigurationError(f"Item names must be present and unique, got {name!r}")
        level = item.get("default_stock_level")
        if not _is_number(level) or level < 0:
            raise ConfigurationError(f"Item {name!r} needs a non-negative default_stock_level")
        names.add(name)
        items.append({"name": name, "default_stock_level": item["default_stock_level"]})
    settings["ITEMS"] = items

    settings["WORKERS"] = [resolve_worker(w) for w in config["WORKERS"]]

    initial_stock = dict(config.get("INITIAL_BIN_STOCK", {}))
    _check_stock_map(initial_stock, names)

    stations = []
    for station in config["STATIONS"]:
        worker = station.get("worker")
        if not isinstance(worker, int) or not 0 <= worker < len(settings["WORKERS"]):
            raise ConfigurationError(f"Station refers to unknown worker {worker!r}")
        station_items = station.get("items", [item["name"] for item in items])
        unknown = set(station_items) - names
        if unknown:
            raise ConfigurationError(f"Station refers to unknown items {sorted(unknown)}")
        stock = dict(initial_stock)
        stock.update(station.get("initial_stock", {}))
        _check_stock_map(stock, names)
        stations.append({
            "worker": worker,
            "items": list(station_items),
            "countdown": station.get("countdown"),
            "initial_stock": stock,
        })
    settings["STATIONS"] = stations
    return settings


def _check_stock_map(stock, names):
    for name, level in stock.items():
        if name not in names:
            raise ConfigurationError(f"Initial stock given for unknown item {name!r}")
        if not _is_number(level) or level < 0:
            raise ConfigurationError(f"Initial stock for {name!r} cannot be negative, got {level!r}")
