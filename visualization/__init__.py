"""
Visualization Module

Provides rendering and plotting for genome analysis, including an
off-screen matplotlib canvas for genome output, execution traces and
mutation impact heatmaps.

Public API:
    - MatplotlibRenderer: Renderer that draws genomes to PNG / pixel arrays
    - plot_execution_trace: VM state over instruction steps
    - plot_decay_curve: Robustness decay over accumulated mutations
    - plot_impact_heatmap: Impact frequency by mutation type
    - plot_impact_pie: Impact level distribution
"""

from .canvas_renderer import MatplotlibRenderer
from .timecourses import plot_execution_trace, plot_decay_curve, snapshots_to_dataframe
from .heatmaps import plot_impact_heatmap, plot_impact_pie, plot_codon_impact_profile

__all__ = [
    'MatplotlibRenderer',
    'plot_execution_trace',
    'plot_decay_curve',
    'snapshots_to_dataframe',
    'plot_impact_heatmap',
    'plot_impact_pie',
    'plot_codon_impact_profile'
]
