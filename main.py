#!/usr/bin/env python3
"""
Codon Genome Mutation Analyzer - Main CLI

This is the main entry point for validating, rendering and mutation-testing
a codon genome program.

The pipeline:
1. Tokenize and validate the genome (frame + structure diagnostics)
2. Execute it on an off-screen canvas and save the render and execution trace
3. Generate N mutant variants and predict each one's visual impact
4. Output results.csv, robustness_summary.json, impact_heatmap.png and
   impact_distribution.png (plus evolutionary walks with --multi-mutation)

Usage:
    python main.py examples/flower.genome --n 200
    python main.py my.genome --validate-only --json
    python main.py my.genome --n 100 --types silent missense --output-dir ./results
"""

import argparse
import json
import random
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Optional
import warnings

import numpy as np
import pandas as pd

from codec import translate_genome
from lexer import (
    GenomeSyntaxError,
    has_errors,
    parse,
    validate_frame,
    validate_structure,
)
from vm import CodonVM, VMError, DEFAULT_MAX_INSTRUCTIONS

from mutation_engine import (
    MutationError,
    MutationRates,
    MutationType,
    apply_random_mutation,
)

from analysis import (
    ImpactPredictionError,
    analyze_codon_usage,
    compute_robustness,
    compute_decay_curve,
    predict_mutation_impact,
    simulate_multiple_walks,
)
from analysis.codon_usage import format_analysis
from analysis.evolutionary_walks import analyze_type_vulnerability
from analysis.robustness_metrics import compute_codon_impact_rates, compute_impact_matrix

from visualization import MatplotlibRenderer
from visualization.heatmaps import (
    plot_impact_heatmap,
    plot_impact_pie,
    plot_codon_impact_profile,
)
from visualization.timecourses import plot_execution_trace, plot_decay_curve


MUTATION_TAGS = [t.value for t in MutationType]


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Validate, render and mutation-test a codon genome',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py flower.genome --n 200
    python main.py flower.genome --validate-only --json
    python main.py flower.genome --n 100 --types point frameshift --seed 42
    python main.py flower.genome --multi-mutation --walks 20 --walk-length 15
        """
    )

    parser.add_argument(
        'genome',
        help='Path to a genome source file'
    )

    parser.add_argument(
        '--n', type=int, default=200,
        help='Number of mutant variants to generate (default: 200)'
    )

    parser.add_argument(
        '--mutations-per-variant', type=int, default=1,
        help='Number of mutations per variant (default: 1)'
    )

    parser.add_argument(
        '--types', nargs='+', choices=MUTATION_TAGS, default=None,
        help='Restrict random mutations to these types (default: all, weighted)'
    )

    parser.add_argument(
        '--output-dir', type=str, default='.',
        help='Output directory for results (default: current directory)'
    )

    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )

    parser.add_argument(
        '--canvas-size', type=int, default=200,
        help='Canvas width/height in pixels for impact prediction (default: 200)'
    )

    parser.add_argument(
        '--max-instructions', type=int, default=DEFAULT_MAX_INSTRUCTIONS,
        help=f'Instruction ceiling per run (default: {DEFAULT_MAX_INSTRUCTIONS})'
    )

    parser.add_argument(
        '--validate-only', action='store_true',
        help='Only run validation and exit'
    )

    parser.add_argument(
        '--json', action='store_true',
        help='Print validation diagnostics as JSON'
    )

    parser.add_argument(
        '--multi-mutation', action='store_true',
        help='Run evolutionary walk (multi-mutation trajectory) analysis'
    )

    parser.add_argument(
        '--walks', type=int, default=10,
        help='Number of evolutionary walks (default: 10)'
    )

    parser.add_argument(
        '--walk-length', type=int, default=10,
        help='Maximum mutations per walk (default: 10)'
    )

    parser.add_argument(
        '--quiet', action='store_true',
        help='Suppress progress output'
    )

    return parser.parse_args(argv)


def convert_for_json(obj):
    """Convert numpy types for JSON serialization."""
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return None if np.isnan(obj) else float(obj)
    elif isinstance(obj, float) and np.isnan(obj):
        return None
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {str(k): convert_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_for_json(i) for i in obj]
    return obj


def validate_genome(source: str, as_json: bool = False, quiet: bool = False) -> bool:
    """
    Run frame and structure validation and report diagnostics.

    Returns:
        True if the genome has no errors
    """
    try:
        parsed = parse(source)
    except GenomeSyntaxError as e:
        if as_json:
            print(json.dumps({'valid': False, 'errors': [
                {'message': str(e), 'line': e.line, 'column': e.column, 'severity': 'error'}
            ]}, indent=2))
        else:
            print(f"Syntax error: {e}")
        return False

    diagnostics = validate_frame(source) + validate_structure(parsed.tokens)
    valid = not has_errors(diagnostics)

    if as_json:
        print(json.dumps({
            'valid': valid,
            'codons': len(parsed.tokens),
            'mode': parsed.metadata.mode,
            'diagnostics': [d.to_dict() for d in diagnostics],
        }, indent=2))
    elif not quiet or not valid:
        print(f"Codons: {len(parsed.tokens)}  Mode: {parsed.metadata.mode}")
        for d in diagnostics:
            where = f"line {d.line}" if d.line is not None else f"base {d.position}"
            print(f"  [{d.severity.value.upper()}] {where}: {d.message}")
            if d.fix:
                print(f"      fix: {d.fix}")
        if not diagnostics:
            print("  No problems found")

    return valid


def run_monte_carlo(
    genome: str,
    n_variants: int,
    n_mutations: int,
    rates: MutationRates,
    canvas_size: int,
    seed: Optional[int],
    quiet: bool,
    max_instructions: int = DEFAULT_MAX_INSTRUCTIONS
) -> pd.DataFrame:
    """
    Run Monte Carlo mutation analysis.

    Args:
        genome: Wild-type genome text
        n_variants: Number of mutant variants to generate
        n_mutations: Mutations per variant
        rates: Relative mutation type weights
        canvas_size: Off-screen canvas size for impact prediction
        seed: Random seed
        quiet: Suppress progress output
        max_instructions: Instruction ceiling for each render

    Returns:
        DataFrame with one row per variant
    """
    rng = random.Random(seed)
    original_opcodes = [op.value for op in translate_genome(genome)]

    results = []
    start_time = time.time()

    for i in range(n_variants):
        if not quiet and (i + 1) % 50 == 0:
            elapsed = time.time() - start_time
            rate = (i + 1) / elapsed
            eta = (n_variants - i - 1) / rate
            print(f"Progress: {i+1}/{n_variants} ({100*(i+1)/n_variants:.1f}%) "
                  f"- ETA: {eta:.1f}s")

        try:
            mutations = []
            current = genome
            for _ in range(n_mutations):
                mutation = apply_random_mutation(current, rates=rates, rng=rng)
                mutations.append(mutation)
                current = mutation.mutated

            # Score the combined variant under the last mutation's type
            combined = replace(mutations[-1], original=genome, mutated=current)
            prediction = predict_mutation_impact(
                genome, combined, width=canvas_size, height=canvas_size,
                max_instructions=max_instructions
            )

            first = mutations[0]
            codon_index = first.position if first.mutation_type.is_codon_level else first.position // 3

            results.append({
                'variant_id': i,
                'n_mutations': len(mutations),
                'mutations': ';'.join(str(m) for m in mutations),
                'mutation_type': first.type,
                'position': first.position,
                'codon_index': codon_index,
                'affected_codons': sorted({c for m in mutations for c in m.affected_codons}),
                'length_delta': sum(m.length_delta for m in mutations),
                'opcodes_changed': [op.value for op in translate_genome(current)] != original_opcodes,
                'mutated_genome': current,
                'impact': prediction.impact.value,
                'pixel_diff': prediction.pixel_diff_percent,
                'confidence': prediction.confidence,
                'confidence_level': prediction.confidence_level.value,
                'description': prediction.description,
            })

        except (MutationError, ImpactPredictionError) as e:
            warnings.warn(f"Variant {i} failed: {e}")
            results.append({
                'variant_id': i,
                'n_mutations': 0,
                'mutations': '',
                'mutation_type': '',
                'position': np.nan,
                'codon_index': np.nan,
                'affected_codons': [],
                'length_delta': 0,
                'opcodes_changed': False,
                'mutated_genome': '',
                'impact': 'ERROR',
                'pixel_diff': np.nan,
                'confidence': np.nan,
                'confidence_level': '',
                'description': '',
                'error': str(e)
            })

    return pd.DataFrame(results)


def render_genome(source: str, output_dir: Path, max_instructions: int) -> Optional[Any]:
    """Render the wild-type genome and its execution trace. Returns snapshots."""
    parsed = parse(source)
    renderer = MatplotlibRenderer()
    vm = CodonVM(renderer, max_instructions=max_instructions, value_mode=parsed.metadata.mode)
    try:
        snapshots = vm.run(parsed.tokens)
    except VMError as e:
        print(f"Execution error: {e}")
        snapshots = e.snapshots

    renderer.save(output_dir / 'genome.png')
    plot_execution_trace(snapshots, output_dir / 'execution_trace.png')
    return snapshots


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_args(argv)

    source = Path(args.genome).read_text()

    if args.validate_only:
        return 0 if validate_genome(source, as_json=args.json, quiet=args.quiet) else 1

    print("=" * 60)
    print("CODON GENOME MUTATION ANALYZER")
    print("=" * 60)
    print(f"Genome: {args.genome}")
    print(f"Variants to generate: {args.n}")
    print(f"Mutations per variant: {args.mutations_per_variant}")
    print(f"Mutation types: {', '.join(args.types) if args.types else 'all (weighted)'}")
    print(f"Output directory: {args.output_dir}")
    if args.seed is not None:
        print(f"Random seed: {args.seed}")
    print("=" * 60)

    if not validate_genome(source, as_json=args.json, quiet=args.quiet):
        print("\nGenome has errors; fix them before mutation analysis.")
        return 1

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    # Render wild-type
    print("\nRendering genome...")
    snapshots = render_genome(source, output_dir, args.max_instructions)
    print(f"Executed {len(snapshots)} instruction steps")
    print(f"Saved render to: {output_dir / 'genome.png'}")
    print(f"Saved execution trace to: {output_dir / 'execution_trace.png'}")

    usage = analyze_codon_usage(parse(source).tokens)
    if not args.quiet:
        print("\n" + format_analysis(usage))
    usage_path = output_dir / 'codon_usage.json'
    with open(usage_path, 'w') as f:
        json.dump(convert_for_json(usage.to_dict()), f, indent=2)

    rates = MutationRates.only(*[MutationType(t) for t in args.types]) if args.types else MutationRates()

    if args.multi_mutation:
        print("\nRunning multi-mutation trajectory analysis...")
        trajectories = simulate_multiple_walks(
            source,
            n_walks=args.walks,
            max_mutations=args.walk_length,
            rates=rates,
            seed=args.seed,
            max_instructions=args.max_instructions
        )
        curve = compute_decay_curve(trajectories)
        walks_path = output_dir / 'evolutionary_walks.json'
        with open(walks_path, 'w') as f:
            json.dump(convert_for_json({
                'trajectories': [t.to_dict() for t in trajectories],
                'decay_curve': curve.to_dict(),
                'type_vulnerability': analyze_type_vulnerability(trajectories)
            }), f, indent=2)
        plot_decay_curve(curve, output_dir / 'decay_curve.png')
        print(f"Saved evolutionary walks to: {walks_path}")

    # Run Monte Carlo
    print("\nRunning Monte Carlo mutation analysis...")
    start_time = time.time()

    results_df = run_monte_carlo(
        genome=source,
        n_variants=args.n,
        n_mutations=args.mutations_per_variant,
        rates=rates,
        canvas_size=args.canvas_size,
        seed=args.seed,
        quiet=args.quiet,
        max_instructions=args.max_instructions
    )

    elapsed = time.time() - start_time
    print(f"\nAnalysis completed in {elapsed:.2f} seconds")
    if elapsed > 0:
        print(f"Rate: {args.n / elapsed:.1f} variants/second")

    results_path = output_dir / 'results.csv'
    results_df.to_csv(results_path, index=False)
    print(f"\nSaved results to: {results_path}")

    print("\nComputing robustness metrics...")
    robustness = compute_robustness(results_df, label_column='impact')

    robustness_path = output_dir / 'robustness_summary.json'
    with open(robustness_path, 'w') as f:
        json.dump(convert_for_json(robustness), f, indent=2)
    print(f"Saved robustness summary to: {robustness_path}")

    print("\n" + "=" * 60)
    print("ROBUSTNESS SUMMARY")
    print("=" * 60)
    print(f"Total variants analyzed: {robustness['total_variants']}")
    print(f"Silent (output unchanged): {robustness['pct_silent']:.1f}%")
    print(f"Disrupted: {robustness['pct_disrupted']:.1f}%")
    print(f"Robustness score: {robustness['robustness_score']:.3f}")
    print("\nImpact distribution:")
    for level, pct in sorted(robustness['impact_percentages'].items(),
                             key=lambda x: -x[1]):
        print(f"  {level}: {pct:.1f}%")

    print("\nGenerating visualizations...")

    impact = compute_impact_matrix(results_df)
    heatmap_path = output_dir / 'impact_heatmap.png'
    plot_impact_heatmap(
        impact['matrix'],
        heatmap_path,
        row_labels=impact['type_labels'],
        col_labels=impact['impact_labels'],
        title='Visual Impact by Mutation Type',
        annot=True
    )
    print(f"Saved impact heatmap to: {heatmap_path}")

    pie_path = output_dir / 'impact_distribution.png'
    plot_impact_pie(robustness['impact_distribution'], pie_path)
    print(f"Saved impact distribution to: {pie_path}")

    codons = [t.text for t in parse(source).tokens]
    profile_path = output_dir / 'codon_profile.png'
    plot_codon_impact_profile(
        compute_codon_impact_rates(results_df, n_codons=len(codons)),
        profile_path,
        codon_labels=codons
    )
    print(f"Saved codon profile to: {profile_path}")

    print("\n" + "=" * 60)
    print("ANALYSIS COMPLETE")
    print("=" * 60)
    print(f"\nOutput files:")
    print(f"  - {results_path}")
    print(f"  - {robustness_path}")
    print(f"  - {heatmap_path}")
    print(f"  - {pie_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
