"""
Tests for genome comparison, codon usage, impact prediction, robustness
metrics and evolutionary walks.
"""

import sys
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pandas as pd

from lexer import tokenize
from mutation_engine import (
    Mutation,
    MutationType,
    apply_silent_mutation,
    apply_nonsense_mutation,
)
from analysis import (
    compare_genomes,
    analyze_codon_usage,
    compare_analyses,
    compute_pixel_diff,
    classify_impact,
    predict_mutation_impact,
    ImpactLevel,
    ImpactPredictionError,
    compute_robustness,
    compute_codon_impact_rates,
    compute_impact_matrix,
    simulate_mutation_walk,
    simulate_multiple_walks,
    compute_decay_curve,
    analyze_type_vulnerability,
)
from analysis.evolutionary_walks import assess_genome, Phenotype


GENOME = "ATG GAA AGG GGA TAA"


class TestGenomeDiff(unittest.TestCase):

    def test_identical(self):
        comparison = compare_genomes(GENOME, "atg gaa\nagg gga taa ; same")
        self.assertTrue(comparison.identical)
        self.assertEqual(comparison.differences, [])

    def test_single_difference(self):
        comparison = compare_genomes("ATG GGA TAA", "ATG GGC TAA")
        self.assertEqual(len(comparison.differences), 1)
        diff = comparison.differences[0]
        self.assertEqual((diff.position, diff.original, diff.mutated), (1, "GGA", "GGC"))

    def test_trailing_codons(self):
        comparison = compare_genomes("ATG GGA TAA", "ATG GGA")
        self.assertEqual(len(comparison.differences), 1)
        self.assertEqual(comparison.differences[0].original, "TAA")
        self.assertEqual(comparison.differences[0].mutated, "")
        self.assertEqual(len(comparison.to_dataframe()), 1)


class TestCodonUsage(unittest.TestCase):

    def test_basic_usage(self):
        usage = analyze_codon_usage(tokenize(GENOME))
        self.assertEqual(usage.total_codons, 5)
        self.assertAlmostEqual(usage.opcode_families['drawing'], 20.0)
        self.assertAlmostEqual(usage.opcode_families['control'], 40.0)
        self.assertAlmostEqual(usage.gc_content, 40.0)
        self.assertAlmostEqual(usage.at_content, 60.0)
        self.assertEqual(usage.opcode_distribution['CIRCLE'], 1)

    def test_self_similarity(self):
        usage = analyze_codon_usage(tokenize(GENOME))
        self.assertAlmostEqual(compare_analyses(usage, usage), 100.0)

    def test_empty(self):
        usage = analyze_codon_usage([])
        self.assertEqual(usage.total_codons, 0)
        self.assertEqual(usage.gc_content, 0.0)
        self.assertIn('signature', usage.to_dict())


class TestImpactPrediction(unittest.TestCase):

    def test_pixel_diff_blank(self):
        blank = np.full((10, 10, 3), 255, dtype=np.uint8)
        self.assertEqual(compute_pixel_diff(blank, blank.copy()), 0.0)

    def test_pixel_diff_inked_union(self):
        a = np.full((10, 10, 3), 255, dtype=np.uint8)
        a[0:2, 0:2] = 0
        b = a.copy()
        b[5, 5] = 0
        self.assertAlmostEqual(compute_pixel_diff(a, b), 20.0)

    def test_pixel_diff_shape_mismatch(self):
        with self.assertRaises(ValueError):
            compute_pixel_diff(np.zeros((2, 2, 3)), np.zeros((3, 3, 3)))

    def test_classify_thresholds(self):
        self.assertEqual(classify_impact(1.0, 'point'), ImpactLevel.SILENT)
        self.assertEqual(classify_impact(10.0, 'point'), ImpactLevel.LOCAL)
        self.assertEqual(classify_impact(30.0, 'point'), ImpactLevel.MAJOR)
        self.assertEqual(classify_impact(80.0, 'point'), ImpactLevel.CATASTROPHIC)
        self.assertEqual(
            classify_impact(10.0, 'point', thresholds={'silent_max': 15.0}),
            ImpactLevel.SILENT
        )

    def test_silent_mutation_is_silent(self):
        mutation = apply_silent_mutation(GENOME, position=3, seed=1)
        prediction = predict_mutation_impact(GENOME, mutation, width=100, height=100)
        self.assertEqual(prediction.impact, ImpactLevel.SILENT)
        self.assertEqual(prediction.pixel_diff_percent, 0.0)
        self.assertGreater(prediction.confidence, 0.9)

    def test_removing_only_shape_is_catastrophic(self):
        mutation = apply_nonsense_mutation(GENOME, position=3, seed=0)
        prediction = predict_mutation_impact(GENOME, mutation, width=100, height=100)
        self.assertEqual(prediction.impact, ImpactLevel.CATASTROPHIC)
        self.assertAlmostEqual(prediction.pixel_diff_percent, 100.0)

    def test_both_fail(self):
        mutation = Mutation(
            original="GGA TAA",
            mutated="GGC TAA",
            mutation_type=MutationType.SILENT,
            position=0,
            description="test",
        )
        with self.assertRaises(ImpactPredictionError):
            predict_mutation_impact("GGA TAA", mutation, width=50, height=50)

    def test_instruction_ceiling_applies(self):
        mutation = apply_silent_mutation(GENOME, position=3, seed=1)
        with self.assertRaises(ImpactPredictionError):
            predict_mutation_impact(GENOME, mutation, width=50, height=50, max_instructions=2)


class TestRobustnessMetrics(unittest.TestCase):

    def setUp(self):
        self.results = pd.DataFrame({
            'variant_id': range(10),
            'impact': ['SILENT'] * 6 + ['LOCAL'] * 3 + ['MAJOR'],
            'mutation_type': ['silent'] * 5 + ['missense'] * 5,
            'codon_index': [1, 1, 2, 2, 3, 3, 1, 2, 3, 3],
            'affected_codons': [[1], [1], [2], [2], [3], [3], [1], [2], [3], [3, 4]],
            'pixel_diff': [0.0] * 6 + [10.0] * 3 + [40.0],
        })

    def test_compute_robustness(self):
        metrics = compute_robustness(self.results)
        self.assertEqual(metrics['total_variants'], 10)
        self.assertAlmostEqual(metrics['pct_silent'], 60.0)
        self.assertAlmostEqual(metrics['robustness_score'], 0.6)
        self.assertEqual(metrics['impact_distribution']['LOCAL'], 3)
        self.assertAlmostEqual(
            metrics['mutation_type_effects']['silent']['disruption_rate'], 0.0
        )
        self.assertEqual(metrics['codon_vulnerability']['3']['total_mutations'], 4)

    def test_empty_results(self):
        metrics = compute_robustness(pd.DataFrame())
        self.assertEqual(metrics['total_variants'], 0)
        self.assertEqual(metrics['robustness_score'], 0.0)

    def test_codon_impact_rates(self):
        rates = compute_codon_impact_rates(self.results, n_codons=5)
        self.assertEqual(len(rates), 5)
        self.assertAlmostEqual(rates[0], 0.0)
        self.assertAlmostEqual(rates[1], 1 / 3)
        self.assertAlmostEqual(rates[4], 1.0)

    def test_impact_matrix(self):
        impact = compute_impact_matrix(self.results)
        matrix = impact['matrix']
        self.assertEqual(matrix.shape, (7, 4))
        silent_row = impact['type_labels'].index('silent')
        missense_row = impact['type_labels'].index('missense')
        self.assertAlmostEqual(matrix[silent_row].sum(), 1.0)
        self.assertAlmostEqual(matrix[missense_row].sum(), 1.0)
        self.assertAlmostEqual(matrix[impact['type_labels'].index('frameshift')].sum(), 0.0)


class TestEvolutionaryWalks(unittest.TestCase):

    def test_assess_genome(self):
        phenotype, calls = assess_genome(GENOME)
        self.assertEqual(phenotype, Phenotype.FUNCTIONAL)
        self.assertEqual(calls, [('circle', (10,))])
        self.assertEqual(assess_genome("ATG TAA")[0], Phenotype.NO_OUTPUT)
        self.assertEqual(assess_genome("ATGG")[0], Phenotype.SYNTAX_ERROR)
        self.assertEqual(assess_genome("GGA TAA")[0], Phenotype.RUNTIME_ERROR)
        self.assertEqual(assess_genome(GENOME, max_instructions=2)[0], Phenotype.RUNTIME_ERROR)

    def test_single_walk(self):
        trajectory = simulate_mutation_walk(GENOME, max_mutations=5, seed=1)
        self.assertEqual(trajectory.steps[0].mutation_type, 'wild_type')
        self.assertEqual(trajectory.steps[0].robustness_score, 1.0)
        self.assertLessEqual(trajectory.total_mutations, 5)
        self.assertEqual(sum(trajectory.type_breakdown.values()), trajectory.total_mutations)

    def test_non_functional_wild_type(self):
        with self.assertWarns(UserWarning):
            trajectory = simulate_mutation_walk("GGA TAA", max_mutations=3, seed=0)
        self.assertEqual(trajectory.steps, [])

    def test_walk_instruction_ceiling(self):
        with self.assertWarns(UserWarning):
            trajectories = simulate_multiple_walks(
                GENOME, n_walks=2, max_mutations=2, seed=0, max_instructions=2
            )
        self.assertTrue(all(t.steps == [] for t in trajectories))

    def test_decay_curve(self):
        trajectories = simulate_multiple_walks(GENOME, n_walks=3, max_mutations=4, seed=0)
        curve = compute_decay_curve(trajectories)
        self.assertEqual(curve.n_trajectories, 3)
        self.assertEqual(curve.mutation_counts[0], 0)
        self.assertEqual(curve.mean_robustness[0], 1.0)
        self.assertEqual(curve.pct_functional[0], 100.0)

        vulnerability = analyze_type_vulnerability(trajectories)
        self.assertIn('ranking', vulnerability)


if __name__ == '__main__':
    unittest.main(verbosity=2)
