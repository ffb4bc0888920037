"""
Codon Usage Module

Composition statistics for a tokenized genome, analogous to codon usage
bias tables in real genomics.

Reported metrics:
- Codon frequency and GC/AT content
- Opcode distribution and percentage per opcode family
- Top codons / opcodes and usage per 2-base codon family (e.g. GG*)
- Signature: drawing density, transform density, complexity, redundancy

Public API:
    analyze_codon_usage(tokens) -> CodonUsage
    compare_analyses(a, b) -> float
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd

from codec import CODON_TABLE, OpcodeFamily, family_of
from lexer import CodonToken


TOP_N = 5

# Weights for compare_analyses (each group sums to 1)
FAMILY_WEIGHTS = {
    OpcodeFamily.DRAWING: 0.3,
    OpcodeFamily.TRANSFORM: 0.2,
    OpcodeFamily.STACK: 0.2,
    OpcodeFamily.CONTROL: 0.15,
    OpcodeFamily.COLOR: 0.15,
}
SIGNATURE_WEIGHTS = {'drawing_density': 0.4, 'transform_density': 0.3, 'complexity': 0.3}
SECTION_WEIGHTS = {'family': 0.5, 'gc': 0.2, 'signature': 0.3}


@dataclass
class CodonUsage:
    """
    Codon composition of a genome.

    Attributes:
        total_codons: Number of codons analyzed
        codon_frequency: Count per codon, most common first
        gc_content: Percent of bases that are G or C
        at_content: Percent of bases that are A or T
        opcode_distribution: Count per opcode name
        opcode_families: Percent of codons per family name
        top_codons: Up to 5 (codon, count) pairs
        top_opcodes: Up to 5 (opcode, count) pairs
        codon_family_usage: Count per 2-base prefix
        signature: drawing_density, transform_density (percent),
                   complexity (unique opcodes / codons) and
                   redundancy (codons / unique opcodes)
    """
    total_codons: int
    codon_frequency: pd.Series
    gc_content: float
    at_content: float
    opcode_distribution: pd.Series
    opcode_families: Dict[str, float]
    top_codons: List[Tuple[str, int]] = field(default_factory=list)
    top_opcodes: List[Tuple[str, int]] = field(default_factory=list)
    codon_family_usage: pd.Series = None
    signature: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'total_codons': self.total_codons,
            'codon_frequency': {k: int(v) for k, v in self.codon_frequency.items()},
            'gc_content': float(self.gc_content),
            'at_content': float(self.at_content),
            'opcode_distribution': {k: int(v) for k, v in self.opcode_distribution.items()},
            'opcode_families': self.opcode_families,
            'top_codons': self.top_codons,
            'top_opcodes': self.top_opcodes,
            'codon_family_usage': {k: int(v) for k, v in self.codon_family_usage.items()},
            'signature': self.signature,
        }


def analyze_codon_usage(tokens: Sequence[CodonToken]) -> CodonUsage:
    """
    Compute composition statistics for a token list.

    Args:
        tokens: Codon tokens from lexer.tokenize()

    Returns:
        CodonUsage; all percentages are 0 for an empty token list
    """
    codons = pd.Series([t.text for t in tokens], dtype=object)
    total = len(codons)

    codon_frequency = codons.value_counts()
    bases = pd.Series(list(''.join(codons)), dtype=object)
    if len(bases) > 0:
        gc_content = float(bases.isin(['G', 'C']).mean() * 100)
        at_content = float(bases.isin(['A', 'T']).mean() * 100)
    else:
        gc_content = at_content = 0.0

    opcodes = codons.map(lambda c: CODON_TABLE[c].value)
    families = codons.map(lambda c: family_of(CODON_TABLE[c]).value)
    opcode_distribution = opcodes.value_counts()

    family_counts = families.value_counts()
    opcode_families = {
        f.value: (float(family_counts.get(f.value, 0)) / total * 100) if total else 0.0
        for f in OpcodeFamily
    }

    codon_family_usage = codons.str[:2].value_counts()

    unique_opcodes = len(opcode_distribution)
    signature = {
        'drawing_density': opcode_families[OpcodeFamily.DRAWING.value],
        'transform_density': opcode_families[OpcodeFamily.TRANSFORM.value],
        'complexity': unique_opcodes / total if total else 0.0,
        'redundancy': total / (unique_opcodes or 1),
    }

    return CodonUsage(
        total_codons=total,
        codon_frequency=codon_frequency,
        gc_content=gc_content,
        at_content=at_content,
        opcode_distribution=opcode_distribution,
        opcode_families=opcode_families,
        top_codons=[(k, int(v)) for k, v in codon_frequency.head(TOP_N).items()],
        top_opcodes=[(k, int(v)) for k, v in opcode_distribution.head(TOP_N).items()],
        codon_family_usage=codon_family_usage,
        signature=signature,
    )


def compare_analyses(a: CodonUsage, b: CodonUsage) -> float:
    """
    Similarity between two analyses, 0-100 (100 = identical composition).

    Weighted blend of family percentages (50%), GC content (20%) and
    signature metrics (30%).
    """
    family_similarity = sum(
        (100 - abs(a.opcode_families[f.value] - b.opcode_families[f.value])) * w
        for f, w in FAMILY_WEIGHTS.items()
    )
    gc_similarity = 100 - abs(a.gc_content - b.gc_content)
    signature_similarity = (
        (100 - abs(a.signature['drawing_density'] - b.signature['drawing_density']))
        * SIGNATURE_WEIGHTS['drawing_density']
        + (100 - abs(a.signature['transform_density'] - b.signature['transform_density']))
        * SIGNATURE_WEIGHTS['transform_density']
        + (100 - abs(a.signature['complexity'] - b.signature['complexity']) * 100)
        * SIGNATURE_WEIGHTS['complexity']
    )
    return (
        family_similarity * SECTION_WEIGHTS['family']
        + gc_similarity * SECTION_WEIGHTS['gc']
        + signature_similarity * SECTION_WEIGHTS['signature']
    )


def format_analysis(usage: CodonUsage) -> str:
    """Multi-line text summary of a CodonUsage."""
    lines = [
        f"Total codons: {usage.total_codons}",
        f"GC content: {usage.gc_content:.1f}%  AT content: {usage.at_content:.1f}%",
        "Opcode families:",
    ]
    for name, pct in usage.opcode_families.items():
        lines.append(f"  {name:<10} {pct:5.1f}%")
    if usage.top_codons:
        lines.append("Top codons: " + ", ".join(f"{c} ({n})" for c, n in usage.top_codons))
    if usage.top_opcodes:
        lines.append("Top opcodes: " + ", ".join(f"{o} ({n})" for o, n in usage.top_opcodes))
    sig = usage.signature
    lines.append(
        f"Signature: drawing {sig['drawing_density']:.1f}%, "
        f"transform {sig['transform_density']:.1f}%, "
        f"complexity {sig['complexity']:.2f}, redundancy {sig['redundancy']:.2f}"
    )
    return "\n".join(lines)
