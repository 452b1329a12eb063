"""
Multi-Round Simulation Analysis
Runs 20 seeded rounds of each scenario (Mixed crew vs Experienced crew) and generates comparison graphs.
"""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from kanban_line.config import SCENARIO_A, SCENARIO_B
from kanban_line.sim_model import KanbanSimulation

# Number of rounds to run
NUM_ROUNDS = 20
RUN_TIME = 3600  # real seconds per round (60 simulated hours at the default stretch)


def run_scenario_headless(scenario, seed, until=RUN_TIME):
    """Run one scenario to completion and return its stats."""
    sim = KanbanSimulation(scenario, seed=seed)
    sim.run(until=until)
    stats = sim.stats()
    produced = stats["lamps_produced"]
    return {
        "Lamps": produced,
        "Defect Rate": 100.0 * stats["lamps_defected"] / produced if produced else 0.0,
        "Stalled Ticks": stats["stalled_ticks"],
    }


def run_multiple_rounds(num_rounds=NUM_ROUNDS):
    """Run multiple rounds of both scenarios and collect statistics."""
    mixed_results = []
    experienced_results = []

    print(f"Running {num_rounds} rounds of each scenario...\n")

    for i in range(num_rounds):
        print(f"Round {i+1}/{num_rounds}...", end=" ")

        stats1 = run_scenario_headless(SCENARIO_A, seed=i)
        mixed_results.append(stats1)

        stats2 = run_scenario_headless(SCENARIO_B, seed=i)
        experienced_results.append(stats2)

        print(f"Mixed: {stats1['Lamps']} lamps, {stats1['Defect Rate']:.2f}% | "
              f"Experienced: {stats2['Lamps']} lamps, {stats2['Defect Rate']:.2f}%")

    return mixed_results, experienced_results


def generate_graphs(mixed_results, experienced_results, output_dir="."):
    """Generate comparison graphs for lamps produced, defect rate and stalls."""

    rounds = range(1, len(mixed_results) + 1)
    metrics = ["Lamps", "Defect Rate", "Stalled Ticks"]
    colors = ['#e74c3c', '#3498db']

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(f'Mixed vs Experienced Crew Comparison\n({len(mixed_results)} Rounds)',
                 fontsize=14, fontweight='bold')

    # ===== Graphs 1-3: Metric per Round (Line Chart) =====
    for ax, metric in zip([axes[0, 0], axes[0, 1], axes[1, 0]], metrics):
        ax.plot(rounds, [r[metric] for r in mixed_results], 'o-', color=colors[0],
                label='Mixed crew', linewidth=2, markersize=6)
        ax.plot(rounds, [r[metric] for r in experienced_results], 's-', color=colors[1],
                label='Experienced crew', linewidth=2, markersize=6)
        ax.set_xlabel('Round', fontsize=11)
        ax.set_ylabel(metric, fontsize=11)
        ax.set_title(f'{metric} per Round', fontsize=12, fontweight='bold')
        ax.legend()
        ax.grid(True, alpha=0.3)

    # ===== Graph 4: Box Plot Comparison =====
    ax4 = axes[1, 1]
    bp = ax4.boxplot([[r["Lamps"] for r in mixed_results], [r["Lamps"] for r in experienced_results]],
                     positions=[1, 2], widths=0.6, patch_artist=True)
    for box, color in zip(bp['boxes'], colors):
        box.set_facecolor(color)
        box.set_alpha(0.7)
    ax4.set_xticks([1, 2])
    ax4.set_xticklabels(['Mixed', 'Experienced'])
    ax4.set_title('Lamps Produced (Box Plot)', fontsize=12, fontweight='bold')
    ax4.grid(True, alpha=0.3, axis='y')

    plt.tight_layout()

    output_path = f"{output_dir}/simulation_comparison.png"
    plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
    plt.close(fig)
    print(f"\nGraph saved to: {output_path}")

    return output_path


def print_summary_stats(mixed_results, experienced_results):
    print("\n" + "="*70)
    print("SUMMARY STATISTICS")
    print("="*70)

    print(f"\n{'Metric':<25} | {'Mixed crew':<20} | {'Experienced crew':<20}")
    print("-" * 70)
    for metric in ("Lamps", "Defect Rate", "Stalled Ticks"):
        mixed = [r[metric] for r in mixed_results]
        experienced = [r[metric] for r in experienced_results]
        print(f"{'Avg ' + metric:<25} | {np.mean(mixed):<20.2f} | {np.mean(experienced):<20.2f}")
        print(f"{'Std Dev ' + metric:<25} | {np.std(mixed):<20.2f} | {np.std(experienced):<20.2f}")
        print(f"{'Min ' + metric:<25} | {np.min(mixed):<20.2f} | {np.min(experienced):<20.2f}")
        print(f"{'Max ' + metric:<25} | {np.max(mixed):<20.2f} | {np.max(experienced):<20.2f}")
        print("-" * 70)


# ==========================================
# MAIN EXECUTION
# ==========================================

if __name__ == "__main__":
    print("="*70)
    print("MULTI-ROUND SIMULATION ANALYSIS")
    print("="*70)
    print(f"Configuration: {NUM_ROUNDS} rounds, {len(SCENARIO_A['STATIONS'])} stations")
    print("="*70 + "\n")

    mixed_results, experienced_results = run_multiple_rounds(NUM_ROUNDS)
    print_summary_stats(mixed_results, experienced_results)
    generate_graphs(mixed_results, experienced_results)
