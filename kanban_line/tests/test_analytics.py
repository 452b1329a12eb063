import os
import tempfile
import unittest

import pandas as pd

from kanban_line.analytics import Analytics
from kanban_line.config import SCENARIO_A, SCENARIO_B
from kanban_line.sim_model import KanbanSimulation


class TestAnalytics(unittest.TestCase):
    def setUp(self):
        self.analytics = Analytics()
        for scenario in (SCENARIO_A, SCENARIO_B):
            sim = KanbanSimulation(scenario, seed=1)
            sim.run(until=600)
            self.analytics.add_result(scenario["NAME"], sim)

    def test_kpis(self):
        table = self.analytics.to_dataframe()
        self.assertEqual(list(table.index), [SCENARIO_A["NAME"], SCENARIO_B["NAME"]])
        for _, row in table.iterrows():
            self.assertGreater(row["lamps_produced"], 0)
            self.assertGreater(row["throughput_per_hour"], 0)
            self.assertGreaterEqual(row["defect_rate"], 0)
            self.assertLessEqual(row["defect_rate"], 100)

    def test_export_and_graphs(self):
        with tempfile.TemporaryDirectory() as output_dir:
            paths = self.analytics.export_lamps(output_dir)
            self.assertEqual(len(paths), 2)
            lamps = pd.read_csv(paths[0])
            self.assertEqual(len(lamps), self.analytics.results[SCENARIO_A["NAME"]]["lamps_produced"])
            self.assertIn("serial", lamps.columns)

            self.analytics.generate_graphs(output_dir)
            for name in ("throughput_comparison.png", "defect_rate_comparison.png", "stall_comparison.png"):
                self.assertTrue(os.path.exists(os.path.join(output_dir, name)))


if __name__ == '__main__':
    unittest.main()
