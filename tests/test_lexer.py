"""
Tests for tokenization and genome validation.
"""

import sys
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lexer import (
    GenomeSyntaxError,
    Severity,
    tokenize,
    parse,
    clean_genome,
    validate_frame,
    validate_structure,
    has_errors,
)


class TestTokenizer(unittest.TestCase):
    """Source text -> codon tokens."""

    def test_comments_and_whitespace(self):
        tokens = tokenize("ATG GAA AGG ; draw\nGGA TAA")
        self.assertEqual([t.text for t in tokens], ["ATG", "GAA", "AGG", "GGA", "TAA"])
        self.assertEqual([t.position for t in tokens], [0, 3, 6, 9, 12])
        self.assertEqual([t.line for t in tokens], [1, 1, 1, 2, 2])

    def test_rna_lowercase_normalized(self):
        self.assertEqual([t.text for t in tokenize("aug uaa")], ["ATG", "TAA"])

    def test_empty_source(self):
        self.assertEqual(tokenize(""), [])
        self.assertEqual(tokenize("; only a comment\n"), [])

    def test_invalid_character(self):
        with self.assertRaises(GenomeSyntaxError) as ctx:
            tokenize("ATG\nAXG")
        self.assertEqual(ctx.exception.line, 2)
        self.assertEqual(ctx.exception.column, 2)
        self.assertIn("Invalid character 'X'", str(ctx.exception))

    def test_length_not_multiple_of_three(self):
        with self.assertRaises(GenomeSyntaxError) as ctx:
            tokenize("ATGG")
        self.assertIn("not divisible by 3", str(ctx.exception))

    def test_clean_genome(self):
        self.assertEqual(clean_genome("atg ; x\n GGA"), "ATGGGA")


class TestDirectives(unittest.TestCase):
    """'; @mode:' comment directive."""

    def test_default_mode(self):
        self.assertEqual(parse("ATG TAA").metadata.mode, "centered")

    def test_forward_mode(self):
        result = parse("; @mode: forward-only\nATG TAA")
        self.assertEqual(result.metadata.mode, "forward")
        self.assertEqual(len(result.tokens), 2)

    def test_unknown_mode_warns(self):
        with self.assertWarns(UserWarning):
            result = parse("; @mode: sideways\nATG TAA")
        self.assertEqual(result.metadata.mode, "centered")


class TestStructureValidation(unittest.TestCase):
    """START / STOP / PUSH structure checks."""

    def test_valid_program(self):
        tokens = tokenize("ATG GAA AGG GGA TAA")
        self.assertEqual(validate_structure(tokens), [])

    def test_empty_genome(self):
        diagnostics = validate_structure([])
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0].message, "Genome is empty")
        self.assertTrue(has_errors(diagnostics))

    def test_missing_start(self):
        diagnostics = validate_structure(tokenize("GGA TAA"))
        self.assertTrue(has_errors(diagnostics))
        self.assertIn("START", diagnostics[0].message)
        self.assertEqual(diagnostics[0].position, 0)

    def test_missing_stop(self):
        diagnostics = validate_structure(tokenize("ATG GAA AGG GGA"))
        self.assertTrue(has_errors(diagnostics))
        self.assertIn("STOP", diagnostics[-1].message)

    def test_unreachable_codons_warn(self):
        diagnostics = validate_structure(tokenize("ATG TAA GGA GGA"))
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0].severity, Severity.WARNING)
        self.assertIn("2 codons after STOP", diagnostics[0].message)
        self.assertFalse(has_errors(diagnostics))

    def test_push_literal_is_not_stop(self):
        # TAA here is the value pushed, not a terminator
        tokens = tokenize("ATG GAA TAA GGA TAA")
        self.assertEqual(validate_structure(tokens), [])

    def test_push_without_literal(self):
        diagnostics = validate_structure(tokenize("ATG GAA"))
        messages = [d.message for d in diagnostics]
        self.assertIn("PUSH has no literal codon after it", messages)

    def test_diagnostic_to_dict(self):
        d = validate_structure(tokenize("GGA TAA"))[0].to_dict()
        self.assertEqual(d['severity'], 'error')
        self.assertEqual(d['line'], 1)


class TestFrameValidation(unittest.TestCase):
    """Whitespace inside codons."""

    def test_mid_triplet_break(self):
        diagnostics = validate_frame("AT G")
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(
            diagnostics[0].message,
            "Mid-triplet break: whitespace splits a codon after 2 of 3 bases"
        )
        self.assertEqual(diagnostics[0].severity, Severity.WARNING)

    def test_clean_frame(self):
        self.assertEqual(validate_frame("ATG GGA\nTAA ; comment AT G"), [])

    def test_trailing_whitespace_ignored(self):
        self.assertEqual(validate_frame("ATG GG \n"), [])


if __name__ == '__main__':
    unittest.main(verbosity=2)
