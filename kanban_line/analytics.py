"""
Analytics and Visualization.
"""
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import os
import numpy as np


class Analytics:
    def __init__(self):
        self.results = {}  # {scenario_name: stats_dict}
        self.lamp_tables = {}  # {scenario_name: DataFrame}

    def add_result(self, scenario_name, simulation_obj):
        stats = simulation_obj.stats()
        hours = stats["production_time"] / 3600 if stats["production_time"] else 0
        produced = stats["lamps_produced"]
        stations = simulation_obj.list_stations()
        stats.update({
            "throughput_per_hour": produced / hours if hours else 0,
            "defect_rate": 100.0 * stats["lamps_defected"] / produced if produced else 0,
            "avg_stalled_ticks": np.mean([s["stalled_ticks"] for s in stations]) if stations else 0,
        })
        self.results[scenario_name] = stats
        self.lamp_tables[scenario_name] = pd.DataFrame(
            simulation_obj.list_lamps(),
            columns=["serial", "tray_id", "station_id", "position", "defected", "created_at"],
        )

    def to_dataframe(self):
        """One row per scenario."""
        return pd.DataFrame.from_dict(self.results, orient="index")

    def export_lamps(self, output_dir="results"):
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)
        paths = []
        for name, table in self.lamp_tables.items():
            filename = "".join(c if c.isalnum() else "_" for c in name).strip("_").lower()
            path = os.path.join(output_dir, f"{filename}_lamps.csv")
            table.to_csv(path, index=False)
            paths.append(path)
        return paths

    def print_summary(self):
        print("\n=== SIMULATION RESULTS ===")
        for name, stats in self.results.items():
            print(f"Scenario: {name}")
            print(f"  - Lamps Produced: {stats['lamps_produced']} in {stats['trays_used']} trays")
            print(f"  - Throughput: {stats['throughput_per_hour']:.1f} lamps/h (simulated)")
            print(f"  - Defect Rate: {stats['defect_rate']:.2f}%")
            print(f"  - Stalled Station Ticks: {stats['stalled_ticks']} (avg {stats['avg_stalled_ticks']:.1f}/station)")
            print(f"  - Restocks: {stats['restocks_fulfilled']} fulfilled / {stats['restock_requests']} requested")
            print("-" * 30)

    def generate_graphs(self, output_dir="results"):
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        scenarios = list(self.results.keys())
        throughput = [self.results[s]["throughput_per_hour"] for s in scenarios]
        defects = [self.results[s]["defect_rate"] for s in scenarios]
        stalls = [self.results[s]["stalled_ticks"] for s in scenarios]

        # 1. Throughput Comparison
        plt.figure(figsize=(10, 6))
        plt.bar(scenarios, throughput, color=['red', 'green'])
        plt.title('Throughput: Lamps per Simulated Hour')
        plt.ylabel('Lamps / h')
        plt.savefig(f"{output_dir}/throughput_comparison.png")
        plt.close()

        # 2. Defect Rate Comparison
        plt.figure(figsize=(10, 6))
        plt.bar(scenarios, defects, color=['red', 'green'])
        plt.title('Defect Rate')
        plt.ylabel('Defected (%)')
        plt.savefig(f"{output_dir}/defect_rate_comparison.png")
        plt.close()

        # 3. Stock-out Comparison
        plt.figure(figsize=(10, 6))
        plt.bar(scenarios, stalls, color=['blue', 'orange'])
        plt.title('Station Ticks Blocked on Stock')
        plt.ylabel('Ticks')
        plt.savefig(f"{output_dir}/stall_comparison.png")
        plt.close()

        print(f"Graphs saved to {os.path.abspath(output_dir)}")
