import copy
import unittest

from kanban_line.config import (
    EXPERIENCE_PROFILES, SCENARIO_A, ConfigurationError, resolve_worker, validate_config,
)
from kanban_line.sim_model import KanbanSimulation


def broken(**changes):
    config = copy.deepcopy(SCENARIO_A)
    config.update(changes)
    return config


class TestValidateConfig(unittest.TestCase):
    def test_defaults_filled_in(self):
        settings = validate_config({
            "ITEMS": [{"name": "Cord", "default_stock_level": 10}],
            "WORKERS": [{"experience": "expert"}],
            "STATIONS": [{"worker": 0}],
        })
        self.assertEqual(settings["LOW_STOCK_THRESHOLD"], 5)
        self.assertEqual(settings["TRAY_CAPACITY"], 60)
        self.assertEqual(settings["BASE_COMPLETION_DURATION"], 60)
        self.assertEqual(settings["RESTOCK_TIME_STRETCH"], settings["TIME_STRETCH"])
        self.assertEqual(settings["STATIONS"][0]["items"], ["Cord"])
        self.assertIsNone(settings["STATIONS"][0]["countdown"])

    def test_whole_float_tray_capacity_becomes_int(self):
        settings = validate_config(broken(TRAY_CAPACITY=60.0))
        self.assertEqual(settings["TRAY_CAPACITY"], 60)
        self.assertIsInstance(settings["TRAY_CAPACITY"], int)

        sim = KanbanSimulation(broken(TRAY_CAPACITY=60.0, STATIONS=[{"worker": 0, "countdown": 0}]), seed=0)
        sim.advance_production()
        self.assertEqual(sim.list_lamps()[0]["serial"], "LP00000101")

    def test_experience_profile_with_override(self):
        worker = resolve_worker({"experience": "rookie", "defect_rate": 3})
        self.assertEqual(worker["efficiency"], EXPERIENCE_PROFILES["rookie"]["efficiency"])
        self.assertEqual(worker["defect_rate"], 3)
        self.assertEqual(worker["experience"], "rookie")

    def test_scenarios_are_valid(self):
        sim = KanbanSimulation(SCENARIO_A, seed=0)
        self.assertEqual(len(sim.list_stations()), 4)
        self.assertEqual(len(sim.list_bins()), 4 * len(SCENARIO_A["ITEMS"]))
        self.assertEqual(len(sim.list_trays()), 1)

    def test_station_item_subset_and_stock_override(self):
        config = broken(
            STATIONS=[{"worker": 0, "items": ["Bulb", "Shade"], "initial_stock": {"Bulb": 7}}],
            INITIAL_BIN_STOCK={"Shade": 3},
        )
        sim = KanbanSimulation(config, seed=0)
        self.assertEqual(
            [(b["item"], b["stock_level"]) for b in sim.list_bins()],
            [("Bulb", 7), ("Shade", 3)],
        )


class TestConfigurationRejected(unittest.TestCase):
    def assertRejected(self, config):
        with self.assertRaises(ConfigurationError):
            KanbanSimulation(config)

    def test_non_positive_tray_capacity(self):
        self.assertRejected(broken(TRAY_CAPACITY=0))
        self.assertRejected(broken(TRAY_CAPACITY=-60))

    def test_negative_stock(self):
        self.assertRejected(broken(ITEMS=[{"name": "Bulb", "default_stock_level": -1}]))
        self.assertRejected(broken(INITIAL_BIN_STOCK={"Bulb": -3}))

    def test_non_positive_efficiency(self):
        self.assertRejected(broken(WORKERS=[{"efficiency": 0, "defect_rate": 1}]))
        self.assertRejected(broken(WORKERS=[{"experience": "expert", "efficiency": -1}]))

    def test_defect_rate_out_of_range(self):
        self.assertRejected(broken(WORKERS=[{"efficiency": 1, "defect_rate": 101}]))
        self.assertRejected(broken(WORKERS=[{"efficiency": 1, "defect_rate": -0.5}]))

    def test_timing(self):
        self.assertRejected(broken(TIME_STRETCH=0))
        self.assertRejected(broken(RESTOCK_TIME_STRETCH=-2))
        self.assertRejected(broken(BASE_COMPLETION_DURATION=0))
        self.assertRejected(broken(TICK_INTERVAL=0))
        self.assertRejected(broken(JITTER=1))

    def test_bad_references(self):
        self.assertRejected(broken(STATIONS=[{"worker": 9}]))
        self.assertRejected(broken(STATIONS=[{"worker": 0, "items": ["Lens"]}]))
        self.assertRejected(broken(INITIAL_BIN_STOCK={"Lens": 4}))
        self.assertRejected(broken(WORKERS=[{"experience": "wizard"}]))
        self.assertRejected(broken(WORKERS=[{"efficiency": 1.0}]))

    def test_non_numeric_values(self):
        self.assertRejected(broken(LOW_STOCK_THRESHOLD=None))
        self.assertRejected(broken(JITTER="0.1"))
        self.assertRejected(broken(TICK_INTERVAL="1"))
        self.assertRejected(broken(TIME_STRETCH=True))
        self.assertRejected(broken(TRAY_CAPACITY=float("inf")))
        self.assertRejected(broken(TRAY_CAPACITY=60.5))
        self.assertRejected(broken(WORKERS=[{"efficiency": "fast", "defect_rate": 1}]))
        self.assertRejected(broken(ITEMS=[{"name": "Bulb", "default_stock_level": None}]))
        self.assertRejected(broken(INITIAL_BIN_STOCK={"Bulb": "3"}))

    def test_missing_collections(self):
        self.assertRejected(broken(ITEMS=[]))
        self.assertRejected(broken(STATIONS=[]))
        self.assertRejected(broken(LOW_STOCK_THRESHOLD=-1))


if __name__ == '__main__':
    unittest.main()
