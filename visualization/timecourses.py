"""
Time Course Visualization Module

Provides functions for visualizing how VM state evolves over a run and how
function decays over accumulated mutations.

Public API:
    plot_execution_trace(snapshots, outpath) -> None
    plot_decay_curve(curve, outpath) -> None
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for file output

from typing import Dict, List, Any, Sequence, Union
import pandas as pd
from pathlib import Path

from vm import VMSnapshot


# Default style settings
STYLE_CONFIG = {
    'figure.figsize': (10, 6),
    'axes.labelsize': 12,
    'axes.titlesize': 14,
    'legend.fontsize': 10,
    'lines.linewidth': 2,
    'axes.grid': True,
    'grid.alpha': 0.3
}

# Color palette for traced quantities
COLORS = {
    'stack': '#E63946',      # Red for stack depth
    'rotation': '#457B9D',   # Blue for heading
    'scale': '#F4A261',      # Orange for scale
    'x': '#2A9D8F',          # Teal for x position
    'y': '#8D5A97',          # Purple for y position
    'functional': '#2E7D32',
}


def snapshots_to_dataframe(snapshots: Sequence[VMSnapshot]) -> pd.DataFrame:
    """
    Flatten snapshots into one row per executed step.

    Columns: step, stack_depth, stack_top, x, y, rotation, scale,
    hue, saturation, lightness, scope_depth
    """
    rows = []
    for s in snapshots:
        rows.append({
            'step': s.instruction_count,
            'stack_depth': len(s.stack),
            'stack_top': s.stack[-1] if s.stack else np.nan,
            'x': s.position.x,
            'y': s.position.y,
            'rotation': s.rotation,
            'scale': s.scale,
            'hue': s.color.h,
            'saturation': s.color.s,
            'lightness': s.color.l,
            'scope_depth': len(s.scope_stack),
        })
    return pd.DataFrame(rows)


def plot_execution_trace(
    snapshots: Union[Sequence[VMSnapshot], pd.DataFrame],
    outpath: Union[str, Path],
    title: str = "Execution Trace",
    figsize: tuple = (10, 8),
    dpi: int = 150
) -> None:
    """
    Plot stack depth, transform and position over instruction steps.

    Args:
        snapshots: Snapshots from CodonVM.run(), or their DataFrame form
        outpath: Output path for saved figure (PNG, PDF, etc.)
        title: Plot title
        figsize: Figure size in inches
        dpi: Resolution in dots per inch

    Example:
        >>> plot_execution_trace(vm.run(tokens), 'trace.png')
    """
    plt.style.use('seaborn-v0_8-whitegrid')

    df = snapshots if isinstance(snapshots, pd.DataFrame) else snapshots_to_dataframe(snapshots)

    fig, axes = plt.subplots(3, 1, figsize=figsize, sharex=True)
    ax_stack, ax_transform, ax_position = axes

    if df.empty:
        ax_stack.text(0.5, 0.5, 'No instructions executed', ha='center', va='center',
                      fontsize=14, transform=ax_stack.transAxes)
    else:
        step = df['step'].values

        ax_stack.step(step, df['stack_depth'].values, where='post',
                      color=COLORS['stack'], label='Stack depth')
        ax_stack.legend(loc='best')

        ax_transform.plot(step, df['rotation'].values, color=COLORS['rotation'],
                          label='Rotation (deg)')
        ax_scale = ax_transform.twinx()
        ax_scale.plot(step, df['scale'].values, color=COLORS['scale'],
                      linestyle='--', label='Scale')
        ax_scale.set_ylabel('Scale')
        lines = ax_transform.get_lines() + ax_scale.get_lines()
        ax_transform.legend(lines, [l.get_label() for l in lines], loc='best')

        ax_position.plot(step, df['x'].values, color=COLORS['x'], label='x')
        ax_position.plot(step, df['y'].values, color=COLORS['y'], label='y')
        ax_position.legend(loc='best')

    ax_stack.set_ylabel('Depth')
    ax_stack.set_title(title)
    ax_transform.set_ylabel('Rotation (deg)')
    ax_position.set_ylabel('Position (px)')
    ax_position.set_xlabel('Instruction Step')

    plt.tight_layout()
    plt.savefig(outpath, dpi=dpi, bbox_inches='tight')
    plt.close(fig)


def plot_decay_curve(
    curve: Union[Dict[str, Any], Any],
    outpath: Union[str, Path],
    title: str = "Function Decay Under Accumulated Mutations",
    figsize: tuple = (10, 6),
    dpi: int = 150
) -> None:
    """
    Plot mean robustness (with std band) and percent functional per step.

    Args:
        curve: DecayCurve or its to_dict() form
        outpath: Output path
    """
    if not isinstance(curve, dict):
        curve = curve.to_dict()

    plt.style.use('seaborn-v0_8-whitegrid')
    fig, ax = plt.subplots(figsize=figsize)

    x = np.asarray(curve.get('mutation_counts', []))
    if len(x) == 0:
        ax.text(0.5, 0.5, 'No data available', ha='center', va='center',
                fontsize=14, transform=ax.transAxes)
    else:
        mean = np.asarray(curve['mean_robustness'])
        std = np.asarray(curve['std_robustness'])
        ax.plot(x, mean, color=COLORS['rotation'], label='Mean robustness')
        ax.fill_between(x, np.clip(mean - std, 0, 1), np.clip(mean + std, 0, 1),
                        color=COLORS['rotation'], alpha=0.2)
        ax.plot(x, np.asarray(curve['pct_functional']) / 100, color=COLORS['functional'],
                linestyle='--', label='Fraction functional')
        ax.legend(loc='best')

    ax.set_ylim(0, 1.05)
    ax.set_xlabel('Accumulated Mutations')
    ax.set_ylabel('Robustness')
    ax.set_title(f"{title} (n={curve.get('n_trajectories', 0)})")

    plt.tight_layout()
    plt.savefig(outpath, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
