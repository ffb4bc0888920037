"""
Smoke Tests for the Codon Genome Mutation Analyzer

Minimal tests to verify the package works end-to-end.
Runs a small analysis (5 variants) through the CLI and checks outputs exist.
"""

import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pandas as pd


# Two shapes and a color change
FLOWER_GENOME = """; simple flower
ATG
GAA CCC GAA TTT GAA GAT TTA   ; color
GAA AGG GGA                   ; circle r=10
GAA GGA GAA GAA ACA           ; move right
GAA ACC GCA                   ; triangle
TAA
"""


class TestSmokeTests(unittest.TestCase):
    """
    Smoke tests to verify basic functionality.

    These tests check that:
    1. Package imports work
    2. Core functions run without errors
    3. Output files are generated
    """

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test artifacts."""
        import shutil
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write_genome(self, text, name='test.genome'):
        path = os.path.join(self.temp_dir, name)
        with open(path, 'w') as f:
            f.write(text)
        return path

    def test_imports(self):
        """Test that all package modules can be imported."""
        from codec import decode, encode, CODON_TABLE
        from lexer import tokenize, validate_structure
        from vm import CodonVM, RecordingRenderer
        from mutation_engine import apply_random_mutation, MutationType
        from analysis import predict_mutation_impact, compute_robustness
        from visualization import MatplotlibRenderer, plot_impact_heatmap

        self.assertTrue(True)  # If we get here, imports worked

    def test_canvas_renderer(self):
        """Rendering a genome puts ink on the canvas."""
        from vm import execute_genome
        from visualization import MatplotlibRenderer

        renderer = MatplotlibRenderer(100, 100)
        execute_genome(FLOWER_GENOME, renderer)
        pixels = renderer.to_array()

        self.assertEqual(pixels.shape, (100, 100, 3))
        self.assertEqual(renderer.draw_count, 2)
        self.assertTrue((pixels < 250).any())

        outpath = os.path.join(self.temp_dir, 'genome.png')
        renderer.save(outpath)
        self.assertTrue(os.path.exists(outpath))

    def test_visualization_doesnt_crash(self):
        """Test that visualization functions don't crash."""
        from lexer import tokenize
        from vm import CodonVM, RecordingRenderer
        from visualization import plot_impact_heatmap, plot_impact_pie, plot_execution_trace

        matrix = np.random.default_rng(42).random((4, 3))
        heatmap_path = os.path.join(self.temp_dir, 'test_heatmap.png')
        plot_impact_heatmap(
            matrix,
            heatmap_path,
            row_labels=['A', 'B', 'C', 'D'],
            col_labels=['X', 'Y', 'Z']
        )
        self.assertTrue(os.path.exists(heatmap_path))

        pie_path = os.path.join(self.temp_dir, 'pie.png')
        plot_impact_pie({'SILENT': 3, 'MAJOR': 1}, pie_path)
        self.assertTrue(os.path.exists(pie_path))

        snapshots = CodonVM(RecordingRenderer()).run(tokenize(FLOWER_GENOME))
        trace_path = os.path.join(self.temp_dir, 'trace.png')
        plot_execution_trace(snapshots, trace_path)
        self.assertTrue(os.path.exists(trace_path))

    def test_full_pipeline_mini(self):
        """
        Test the full pipeline with 5 variants.

        This is the main smoke test that verifies main.py functionality.
        """
        import main

        genome_path = self._write_genome(FLOWER_GENOME)
        out_dir = os.path.join(self.temp_dir, 'out')

        exit_code = main.main([
            genome_path, '--n', '5', '--seed', '1', '--canvas-size', '64',
            '--output-dir', out_dir, '--quiet'
        ])
        self.assertEqual(exit_code, 0)

        for name in ('genome.png', 'execution_trace.png', 'results.csv',
                     'robustness_summary.json', 'impact_heatmap.png',
                     'impact_distribution.png', 'codon_usage.json'):
            self.assertTrue(os.path.exists(os.path.join(out_dir, name)), name)

        loaded_df = pd.read_csv(os.path.join(out_dir, 'results.csv'))
        self.assertEqual(len(loaded_df), 5)
        self.assertIn('impact', loaded_df.columns)

        with open(os.path.join(out_dir, 'robustness_summary.json')) as f:
            summary = json.load(f)
        self.assertEqual(summary['total_variants'], 5)

    def test_invalid_genome_exits_nonzero(self):
        import main

        genome_path = self._write_genome("GGA TAA")
        exit_code = main.main([
            genome_path, '--output-dir', self.temp_dir, '--quiet'
        ])
        self.assertEqual(exit_code, 1)

        bad_path = self._write_genome("ATGX", name='bad.genome')
        self.assertEqual(main.main([bad_path, '--validate-only']), 1)

    def test_validate_only(self):
        import main

        genome_path = self._write_genome(FLOWER_GENOME)
        self.assertEqual(main.main([genome_path, '--validate-only', '--json']), 0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
