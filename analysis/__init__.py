"""
Analysis Module

Provides tools for comparing genomes and analyzing mutation outcomes,
including codon-level diffs, codon usage statistics, visual impact
prediction, robustness metrics and evolutionary walks.

Public API:
    - compare_genomes: Codon-by-codon diff of two genomes
    - analyze_codon_usage: Codon composition statistics
    - predict_mutation_impact: Render-and-compare impact classification
    - compute_robustness: Compute robustness metrics from batch results
    - simulate_mutation_walk: Multi-mutation trajectory simulation
"""

from .genome_diff import compare_genomes, GenomeComparison, GenomeDifference
from .codon_usage import analyze_codon_usage, compare_analyses, CodonUsage
from .impact_classifier import (
    predict_mutation_impact,
    predict_mutation_impact_batch,
    classify_impact,
    compute_pixel_diff,
    ImpactLevel,
    ImpactPrediction,
    ImpactPredictionError
)
from .robustness_metrics import (
    compute_robustness,
    compute_codon_impact_rates,
    compute_impact_matrix
)
from .evolutionary_walks import (
    simulate_mutation_walk,
    simulate_multiple_walks,
    compute_decay_curve,
    analyze_type_vulnerability,
    MutationTrajectory,
    DecayCurve
)

__all__ = [
    'compare_genomes',
    'GenomeComparison',
    'GenomeDifference',
    # Codon usage
    'analyze_codon_usage',
    'compare_analyses',
    'CodonUsage',
    # Impact prediction
    'predict_mutation_impact',
    'predict_mutation_impact_batch',
    'classify_impact',
    'compute_pixel_diff',
    'ImpactLevel',
    'ImpactPrediction',
    'ImpactPredictionError',
    # Robustness
    'compute_robustness',
    'compute_codon_impact_rates',
    'compute_impact_matrix',
    # Evolutionary walks
    'simulate_mutation_walk',
    'simulate_multiple_walks',
    'compute_decay_curve',
    'analyze_type_vulnerability',
    'MutationTrajectory',
    'DecayCurve'
]
