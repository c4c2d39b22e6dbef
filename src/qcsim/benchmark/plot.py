"""
Benchmark plots.

Usage:
    from qcsim.benchmark import scaling_sweep
    from qcsim.benchmark.plot import plot_scaling

    plot_scaling(scaling_sweep(range(2, 18, 2)), "scaling.png")
"""
import os
from typing import List

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt

from . import BenchmarkResult

STYLE = {
    'figure.facecolor': '#0D1117',
    'axes.facecolor': '#161B22',
    'axes.edgecolor': '#30363D',
    'axes.labelcolor': '#C9D1D9',
    'text.color': '#C9D1D9',
    'xtick.color': '#8B949E',
    'ytick.color': '#8B949E',
    'grid.color': '#21262D',
    'font.family': 'monospace',
}


def plot_scaling(results: List[BenchmarkResult], path: str,
                 dark_mode: bool = True) -> str:
    """Plot execution time against qubit count (log scale) and save to ``path``."""
    if not results:
        raise ValueError("No benchmark results to plot")

    with plt.rc_context(STYLE if dark_mode else {}):
        fig, ax = plt.subplots(figsize=(8, 5))
        qubits = [r.qubits for r in results]
        times = [r.execution_time for r in results]
        ax.plot(qubits, times, 'o-', color='#2196F3', linewidth=2,
                label='state-vector run')
        ax.set_yscale('log')
        ax.set_xlabel('Qubits')
        ax.set_ylabel('Time (ms)')
        ax.set_title('Simulation time vs. register width')
        ax.grid(True, alpha=0.8)
        ax.legend()

        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(path, dpi=120, bbox_inches='tight')
        plt.close(fig)
    return path
