import unittest

from kanban_line.config import SCENARIO_A
from kanban_line.sim_model import KanbanSimulation


class RecordingSimulation(KanbanSimulation):
    """Records (cycle, clock time) for every activation."""
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.activations = []

    def advance_replenishment(self):
        self.activations.append(("restock", self.env.now))
        return super().advance_replenishment()

    def advance_production(self):
        self.activations.append(("production", self.env.now))
        return super().advance_production()


class TestScheduler(unittest.TestCase):
    def test_periods(self):
        sim = RecordingSimulation(SCENARIO_A, seed=0)
        sim.run(until=10.5)
        restocks = [t for kind, t in sim.activations if kind == "restock"]
        ticks = [t for kind, t in sim.activations if kind == "production"]
        self.assertEqual(restocks, [5, 10])  # 300 simulated seconds / stretch 60
        self.assertEqual(ticks, list(range(1, 11)))
        self.assertEqual(sim.context.production_time, 600)

    def test_runner_goes_first_at_same_instant(self):
        sim = RecordingSimulation(SCENARIO_A, seed=0)
        sim.run(until=10.5)
        self.assertLess(sim.activations.index(("restock", 5)), sim.activations.index(("production", 5)))
        self.assertLess(sim.activations.index(("restock", 10)), sim.activations.index(("production", 10)))

    def test_cycles_scale_independently(self):
        config = dict(SCENARIO_A, RESTOCK_TIME_STRETCH=30, COMPLETION_TIME_STRETCH=120)
        sim = RecordingSimulation(config, seed=0)
        sim.run(until=20.5)
        restocks = [t for kind, t in sim.activations if kind == "restock"]
        self.assertEqual(restocks, [10, 20])
        self.assertEqual(sim.context.tick_duration, 120)
        self.assertEqual(sim.context.production_time, 2400)

    def test_start_is_idempotent(self):
        sim = RecordingSimulation(SCENARIO_A, seed=0)
        sim.start()
        sim.start()
        sim.run(until=3.5)
        self.assertEqual(len(sim.activations), 3)

    def test_run_can_resume(self):
        sim = KanbanSimulation(SCENARIO_A, seed=0)
        sim.run(until=100)
        produced = sim.stats()["lamps_produced"]
        sim.run(until=200)
        self.assertEqual(sim.env.now, 200)
        self.assertGreater(sim.stats()["lamps_produced"], produced)


if __name__ == '__main__':
    unittest.main()
