"""
Robustness Metrics Module

Computes robustness metrics from batch mutation results.
These metrics quantify how tolerant a genome's visual output is to mutations.

Public API:
    compute_robustness(results) -> dict
    compute_codon_impact_rates(results) -> np.ndarray
    compute_impact_matrix(results) -> dict
"""

import numpy as np
import pandas as pd
from typing import Dict, List, Any, Optional

from mutation_engine import MutationType

from .impact_classifier import ImpactLevel


IMPACT_LABELS = [level.value for level in ImpactLevel]
TOLERATED_LABEL = ImpactLevel.SILENT.value


def compute_robustness(
    results: pd.DataFrame,
    label_column: str = 'impact'
) -> Dict[str, Any]:
    """
    Compute robustness metrics from batch mutation results.

    Analyzes the distribution of impact levels and identifies
    vulnerable codons or mutation types.

    Args:
        results: DataFrame with one row per mutated variant
            Required columns: impact
            Optional: mutation_type, codon_index, pixel_diff, confidence
        label_column: Name of column containing impact labels

    Returns:
        Dict containing:
            - 'total_variants': Total number of variants analyzed
            - 'pct_silent': Percentage of variants with no visible change
            - 'pct_disrupted': Percentage of variants with any visible change
            - 'impact_distribution': Dict of impact level counts
            - 'impact_percentages': Dict of impact level percentages
            - 'codon_vulnerability': Dict of disruption rates by codon index
            - 'mutation_type_effects': Dict of effects by mutation type
            - 'robustness_score': Overall robustness score (0-1)
            - 'summary_stats': Additional summary statistics

    Notes:
        Robustness score = fraction of variants whose output is unchanged
        Higher score = more robust genome
    """
    if results.empty:
        return _empty_robustness_result()

    total = len(results)

    impact_counts = {str(k): int(v) for k, v in results[label_column].value_counts().items()}
    impact_pcts = {
        level: (count / total) * 100
        for level, count in impact_counts.items()
    }

    silent_count = impact_counts.get(TOLERATED_LABEL, 0)
    pct_silent = (silent_count / total) * 100
    robustness_score = silent_count / total

    codon_vulnerability = {}
    if 'codon_index' in results.columns:
        codon_vulnerability = _compute_group_effects(results, 'codon_index', label_column)

    mutation_type_effects = {}
    if 'mutation_type' in results.columns:
        mutation_type_effects = _compute_group_effects(results, 'mutation_type', label_column)

    return {
        'total_variants': total,
        'pct_silent': pct_silent,
        'pct_disrupted': 100 - pct_silent,
        'impact_distribution': impact_counts,
        'impact_percentages': impact_pcts,
        'codon_vulnerability': codon_vulnerability,
        'mutation_type_effects': mutation_type_effects,
        'robustness_score': robustness_score,
        'summary_stats': _compute_summary_stats(results, label_column)
    }


def _empty_robustness_result() -> Dict[str, Any]:
    """Return empty robustness result for edge cases."""
    return {
        'total_variants': 0,
        'pct_silent': 0.0,
        'pct_disrupted': 0.0,
        'impact_distribution': {},
        'impact_percentages': {},
        'codon_vulnerability': {},
        'mutation_type_effects': {},
        'robustness_score': 0.0,
        'summary_stats': {}
    }


def _compute_group_effects(
    results: pd.DataFrame,
    group_column: str,
    label_column: str
) -> Dict[str, Dict[str, Any]]:
    """
    Disruption rate and dominant impact for each value of a grouping column.
    """
    stats = {}

    for key, group in results.dropna(subset=[group_column]).groupby(group_column):
        impact_counts = group[label_column].value_counts()
        silent_count = impact_counts.get(TOLERATED_LABEL, 0)

        disrupted = impact_counts.drop(TOLERATED_LABEL, errors='ignore')
        dominant = disrupted.idxmax() if len(disrupted) > 0 else 'none'

        stats[str(key)] = {
            'disruption_rate': 1 - (silent_count / len(group)),
            'total_mutations': len(group),
            'dominant_impact': dominant,
            'impact_breakdown': {str(k): int(v) for k, v in impact_counts.items()}
        }

    return stats


def _compute_summary_stats(
    results: pd.DataFrame,
    label_column: str
) -> Dict[str, Any]:
    """
    Compute summary statistics from results.
    """
    stats = {}

    if 'pixel_diff' in results.columns:
        stats['mean_pixel_diff'] = float(results['pixel_diff'].mean())
        stats['std_pixel_diff'] = float(results['pixel_diff'].std())
        by_impact = results.groupby(label_column)['pixel_diff'].mean()
        stats['pixel_diff_by_impact'] = {str(k): float(v) for k, v in by_impact.items()}

    if 'confidence' in results.columns:
        stats['mean_confidence'] = float(results['confidence'].mean())

    if 'length_delta' in results.columns:
        stats['frameshift_fraction'] = float((results['length_delta'] % 3 != 0).mean())

    return stats


def compute_codon_impact_rates(
    results: pd.DataFrame,
    n_codons: Optional[int] = None,
    position_column: str = 'affected_codons',
    label_column: str = 'impact'
) -> np.ndarray:
    """
    Fraction of mutations touching each codon that changed the output.

    Args:
        results: DataFrame with a list-valued affected-codons column
        n_codons: Genome length in codons (inferred if not provided)

    Returns:
        Array of disruption rates per codon index
    """
    if position_column not in results.columns:
        return np.array([])

    if n_codons is None:
        all_positions = [p for lst in results[position_column] for p in lst]
        n_codons = max(all_positions) + 1 if all_positions else 0

    if n_codons == 0:
        return np.array([])

    mutation_counts = np.zeros(n_codons)
    disrupted_counts = np.zeros(n_codons)

    for positions, label in zip(results[position_column], results[label_column]):
        for pos in positions:
            if 0 <= pos < n_codons:
                mutation_counts[pos] += 1
                if label != TOLERATED_LABEL:
                    disrupted_counts[pos] += 1

    with np.errstate(divide='ignore', invalid='ignore'):
        rates = np.where(mutation_counts > 0, disrupted_counts / mutation_counts, 0)

    return rates


def compute_impact_matrix(
    results: pd.DataFrame,
    mutation_types: Optional[List[str]] = None,
    label_column: str = 'impact'
) -> Dict[str, Any]:
    """
    Impact-level frequency matrix by mutation type.

    Returns:
        Dict with 'matrix' (mutation_types x impact levels, row-normalized),
        'type_labels' and 'impact_labels'
    """
    if mutation_types is None:
        mutation_types = [t.value for t in MutationType]

    matrix = np.zeros((len(mutation_types), len(IMPACT_LABELS)))

    if 'mutation_type' in results.columns and not results.empty:
        table = pd.crosstab(results['mutation_type'], results[label_column], normalize='index')
        table = table.reindex(index=mutation_types, columns=IMPACT_LABELS, fill_value=0.0)
        matrix = table.fillna(0.0).to_numpy()

    return {
        'matrix': matrix,
        'type_labels': mutation_types,
        'impact_labels': IMPACT_LABELS
    }
