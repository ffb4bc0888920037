"""
Heatmap Visualization Module

Provides functions for visualizing mutation impact across mutation types
and codon positions.

Public API:
    plot_impact_heatmap(matrix, outpath) -> None
    plot_codon_impact_profile(rates, outpath) -> None
    plot_impact_pie(impact_counts, outpath) -> None
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend

from typing import Dict, List, Optional, Union
import pandas as pd
from pathlib import Path


# Color maps for different visualizations
IMPACT_CMAP = 'RdYlGn_r'  # Red = frequent, Green = rare

# Colors for each impact level
IMPACT_COLORS = {
    'SILENT': '#2E7D32',        # Green - tolerated
    'LOCAL': '#FFA726',         # Orange
    'MAJOR': '#EF5350',         # Red
    'CATASTROPHIC': '#424242',  # Dark gray
}


def _save_placeholder(outpath, title: str, dpi: int) -> None:
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.text(0.5, 0.5, 'No data available', ha='center', va='center',
            fontsize=14, transform=ax.transAxes)
    ax.set_title(title)
    plt.savefig(outpath, dpi=dpi, bbox_inches='tight')
    plt.close(fig)


def plot_impact_heatmap(
    matrix: Union[np.ndarray, pd.DataFrame],
    outpath: Union[str, Path],
    row_labels: Optional[List[str]] = None,
    col_labels: Optional[List[str]] = None,
    title: str = "Mutation Impact by Type",
    xlabel: str = "Impact Level",
    ylabel: str = "Mutation Type",
    figsize: tuple = (9, 6),
    dpi: int = 150,
    cmap: str = IMPACT_CMAP,
    annot: bool = True
) -> None:
    """
    Create a heatmap of impact-level frequency per mutation type.

    Args:
        matrix: 2D array or DataFrame of frequencies (0-1 scale)
                Rows = mutation types, Cols = impact levels
        outpath: Output path for PNG file
        row_labels: Labels for rows (e.g., mutation types)
        col_labels: Labels for columns (e.g., impact levels)
        title: Plot title
        xlabel: X-axis label
        ylabel: Y-axis label
        figsize: Figure size in inches
        dpi: Resolution
        cmap: Matplotlib colormap name
        annot: Whether to annotate cells with values

    Output:
        Saves PNG heatmap to outpath
    """
    if isinstance(matrix, pd.DataFrame):
        if row_labels is None:
            row_labels = list(matrix.index)
        if col_labels is None:
            col_labels = list(matrix.columns)
        matrix = matrix.values

    if matrix.size == 0:
        _save_placeholder(outpath, title, dpi)
        return

    fig, ax = plt.subplots(figsize=figsize)

    im = ax.imshow(matrix, cmap=cmap, aspect='auto', vmin=0, vmax=1)
    fig.colorbar(im, ax=ax, label='Fraction of Variants', shrink=0.8)

    if row_labels is not None and len(row_labels) == matrix.shape[0]:
        ax.set_yticks(np.arange(len(row_labels)))
        ax.set_yticklabels(row_labels)

    if col_labels is not None and len(col_labels) == matrix.shape[1]:
        ax.set_xticks(np.arange(len(col_labels)))
        ax.set_xticklabels(col_labels, rotation=45, ha='right')

    # Annotate only small matrices
    if annot and matrix.size <= 100:
        for i in range(matrix.shape[0]):
            for j in range(matrix.shape[1]):
                text_color = 'white' if matrix[i, j] > 0.5 else 'black'
                ax.text(j, i, f'{matrix[i, j]:.2f}', ha='center', va='center',
                        color=text_color, fontsize=8)

    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.set_title(title)

    plt.tight_layout()
    plt.savefig(outpath, dpi=dpi, bbox_inches='tight')
    plt.close(fig)


def plot_codon_impact_profile(
    rates: np.ndarray,
    outpath: Union[str, Path],
    codon_labels: Optional[List[str]] = None,
    title: str = "Disruption Rate by Codon",
    figsize: tuple = (12, 4),
    dpi: int = 150
) -> None:
    """
    Bar chart of the fraction of mutations at each codon that changed output.

    Args:
        rates: Disruption rate per codon index (0-1)
        outpath: Output path
        codon_labels: Optional codon text for x tick labels
    """
    if len(rates) == 0:
        _save_placeholder(outpath, title, dpi)
        return

    fig, ax = plt.subplots(figsize=figsize)
    x = np.arange(len(rates))
    ax.bar(x, rates, color=plt.get_cmap(IMPACT_CMAP)(rates))

    if codon_labels is not None and len(codon_labels) == len(rates) and len(rates) <= 40:
        ax.set_xticks(x)
        ax.set_xticklabels(codon_labels, rotation=90, fontsize=8)

    ax.set_ylim(0, 1)
    ax.set_xlabel('Codon Index')
    ax.set_ylabel('Disruption Rate')
    ax.set_title(title)

    plt.tight_layout()
    plt.savefig(outpath, dpi=dpi, bbox_inches='tight')
    plt.close(fig)


def plot_impact_pie(
    impact_counts: Dict[str, int],
    outpath: Union[str, Path],
    title: str = "Mutation Impact Distribution",
    figsize: tuple = (8, 8),
    dpi: int = 150
) -> None:
    """
    Create a pie chart of impact level distribution.

    Args:
        impact_counts: Dict mapping impact level to count
        outpath: Output path
        title: Plot title
        figsize: Figure size
        dpi: Resolution
    """
    if not impact_counts or sum(impact_counts.values()) == 0:
        _save_placeholder(outpath, title, dpi)
        return

    fig, ax = plt.subplots(figsize=figsize)

    labels = list(impact_counts.keys())
    sizes = list(impact_counts.values())
    colors = [IMPACT_COLORS.get(label, '#757575') for label in labels]

    wedges, texts, autotexts = ax.pie(
        sizes,
        labels=labels,
        colors=colors,
        autopct='%1.1f%%',
        startangle=90,
        pctdistance=0.75
    )

    for text in texts:
        text.set_fontsize(10)
    for autotext in autotexts:
        autotext.set_fontsize(9)
        autotext.set_color('white')
        autotext.set_weight('bold')

    ax.set_title(title, fontsize=14)

    total = sum(sizes)
    ax.text(0, 0, f'N={total}', ha='center', va='center', fontsize=12)

    plt.tight_layout()
    plt.savefig(outpath, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
