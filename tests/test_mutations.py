"""
Tests for the mutation engine.
"""

import random
import sys
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from codec import STOP_CODONS, CODON_TABLE, OpcodeFamily, family_of, translate_genome
from lexer import clean_genome
from mutation_engine import (
    MutationType,
    MutationRates,
    MutationError,
    UnknownMutationTypeError,
    apply_silent_mutation,
    apply_missense_mutation,
    apply_nonsense_mutation,
    apply_point_mutation,
    apply_insertion,
    apply_deletion,
    apply_frameshift_mutation,
    apply_random_mutation,
    get_mutation_by_type,
    parse_genome,
)


# PUSH 10, CIRCLE, PUSH 5, LINE, STOP
GENOME = "ATG GAA AGG GGA GAA ACC AAA TAA"
LITERAL_INDICES = {2, 5}


class TestCodonLevelMutations(unittest.TestCase):

    def test_silent_keeps_opcodes(self):
        for seed in range(20):
            m = apply_silent_mutation(GENOME, seed=seed)
            self.assertEqual(m.mutation_type, MutationType.SILENT)
            self.assertEqual(translate_genome(m.mutated), translate_genome(GENOME))
            before, after = parse_genome(GENOME), parse_genome(m.mutated)
            self.assertEqual(sum(a != b for a, b in zip(before, after)), 1)
            self.assertEqual(m.affected_codons, [m.position])

    def test_silent_without_synonym(self):
        with self.assertRaises(MutationError):
            apply_silent_mutation(GENOME, position=0, seed=1)

    def test_missense_changes_family(self):
        m = apply_missense_mutation(GENOME, position=3, seed=0)
        new_codon = parse_genome(m.mutated)[3]
        new_family = family_of(CODON_TABLE[new_codon])
        self.assertNotEqual(new_family, OpcodeFamily.DRAWING)
        self.assertNotEqual(new_family, OpcodeFamily.CONTROL)
        changed = [i for i, (a, b) in enumerate(zip(parse_genome(GENOME), parse_genome(m.mutated)))
                   if a != b]
        self.assertEqual(changed, [3])

    def test_missense_random_skips_control(self):
        for seed in range(20):
            m = apply_missense_mutation(GENOME, seed=seed)
            self.assertNotIn(m.position, (0, 7))

    def test_nonsense_truncates(self):
        m = apply_nonsense_mutation(GENOME, position=3)
        codons = parse_genome(m.mutated)
        self.assertIn(codons[3], STOP_CODONS)
        self.assertEqual(m.affected_codons, [4, 5, 6, 7])
        self.assertEqual(len(codons), len(parse_genome(GENOME)))

    def test_nonsense_reports_unreachable_codons(self):
        genome = "ATG GAA AGG GGA GAA AGG CCA TAA"
        for seed in range(10):
            m = apply_nonsense_mutation(genome, seed=seed)
            codons = parse_genome(m.mutated)
            self.assertIn(codons[m.position], STOP_CODONS)
            self.assertEqual(m.affected_codons, list(range(m.position + 1, 8)))
            self.assertIn(f"codon {m.position}", m.description)

    def test_nonsense_avoids_literals(self):
        for seed in range(30):
            m = apply_nonsense_mutation(GENOME, seed=seed)
            self.assertNotIn(m.position, LITERAL_INDICES)
            self.assertTrue(1 <= m.position <= 6)
        with self.assertRaises(MutationError):
            apply_nonsense_mutation(GENOME, position=2)

    def test_nonsense_needs_interior_codon(self):
        with self.assertRaises(MutationError):
            apply_nonsense_mutation("ATG TAA", seed=0)

    def test_notation(self):
        m = apply_silent_mutation(GENOME, position=3, seed=0)
        self.assertTrue(str(m).startswith("c4GGA>GG"))


class TestBaseLevelMutations(unittest.TestCase):

    def test_point_changes_one_base(self):
        for seed in range(20):
            m = apply_point_mutation(GENOME, seed=seed)
            before, after = clean_genome(GENOME), clean_genome(m.mutated)
            self.assertEqual(len(before), len(after))
            self.assertEqual(sum(a != b for a, b in zip(before, after)), 1)
            self.assertEqual(m.affected_codons, [m.position // 3])

    def test_insertion_in_frame(self):
        m = apply_insertion(GENOME, position=3, length=3, seed=0)
        self.assertEqual(m.length_delta, 3)
        self.assertFalse(m.is_frameshift)
        self.assertEqual(len(clean_genome(m.mutated)), len(clean_genome(GENOME)) + 3)

    def test_insertion_out_of_frame(self):
        m = apply_insertion(GENOME, position=4, length=1, seed=0)
        self.assertTrue(m.is_frameshift)
        self.assertEqual(str(m), f"ins5{m.replacement_bases}")

    def test_deletion(self):
        m = apply_deletion(GENOME, position=3, length=3)
        self.assertEqual(m.original_bases, "GAA")
        self.assertEqual(m.length_delta, -3)
        self.assertEqual(parse_genome(m.mutated)[1], "AGG")

    def test_deletion_past_end(self):
        n = len(clean_genome(GENOME))
        with self.assertRaises(MutationError):
            apply_deletion(GENOME, position=n - 1, length=2)

    def test_deletion_on_short_genomes(self):
        for genome in ("ATG", "AT"):
            for seed in range(200):
                m = apply_deletion(genome, seed=seed)
                remaining = len(clean_genome(m.mutated))
                self.assertGreaterEqual(remaining, 1)
                self.assertLess(remaining, len(genome))

    def test_deletion_single_base(self):
        with self.assertRaises(MutationError):
            apply_deletion("A", seed=0)

    def test_frameshift_changes_downstream(self):
        for seed in range(10):
            m = apply_frameshift_mutation(GENOME, seed=seed)
            self.assertEqual(m.mutation_type, MutationType.FRAMESHIFT)
            self.assertNotEqual(m.length_delta % 3, 0)

            before, after = parse_genome(GENOME), parse_genome(m.mutated)
            for i in range(m.position // 3, max(len(before), len(after))):
                old = before[i] if i < len(before) else ''
                new = after[i] if i < len(after) else ''
                self.assertNotEqual(old, new)

    def test_empty_genome(self):
        with self.assertRaises(MutationError):
            apply_point_mutation("")
        with self.assertRaises(MutationError):
            apply_silent_mutation("   ")


class TestDispatch(unittest.TestCase):

    def test_get_mutation_by_type(self):
        m = get_mutation_by_type("silent", GENOME, seed=1)
        self.assertEqual(m.mutation_type, MutationType.SILENT)

    def test_unknown_type(self):
        with self.assertRaises(UnknownMutationTypeError):
            get_mutation_by_type("inversion", GENOME)

    def test_reproducible(self):
        a = apply_random_mutation(GENOME, rng=random.Random(7))
        b = apply_random_mutation(GENOME, rng=random.Random(7))
        self.assertEqual(a.mutated, b.mutated)
        self.assertEqual(a.mutation_type, b.mutation_type)

    def test_impossible_type_falls_back_to_point(self):
        rates = MutationRates.only(MutationType.NONSENSE)
        m = apply_random_mutation("ATG TAA", rates=rates, seed=0)
        self.assertEqual(m.mutation_type, MutationType.POINT)

    def test_rates(self):
        norm = MutationRates().normalized
        self.assertAlmostEqual(sum(norm.values()), 1.0)
        with self.assertRaises(ValueError):
            MutationRates(silent_rate=-1)
        only = MutationRates.only(MutationType.SILENT).normalized
        self.assertEqual(only[MutationType.SILENT], 1.0)

    def test_to_dict(self):
        d = apply_nonsense_mutation(GENOME, position=3).to_dict()
        self.assertEqual(d['type'], 'nonsense')
        self.assertEqual(d['affected_codons'], [4, 5, 6, 7])


if __name__ == '__main__':
    unittest.main(verbosity=2)
