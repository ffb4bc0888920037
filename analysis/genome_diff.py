"""
Genome Diff Module

Codon-by-codon comparison of two genomes, used to show exactly which codons
a mutation touched. Neither genome is executed.

Public API:
    compare_genomes(original, mutated) -> GenomeComparison
"""

from dataclasses import dataclass, field
from typing import List

import pandas as pd

from mutation_engine import parse_genome


@dataclass(frozen=True)
class GenomeDifference:
    """
    A single differing codon slot.

    Attributes:
        position: Codon index
        original: Codon in the original genome ('' if the original is shorter)
        mutated: Codon in the mutated genome ('' if the mutated genome is shorter)
    """
    position: int
    original: str
    mutated: str


@dataclass
class GenomeComparison:
    """Aligned codon lists and the positions where they differ."""
    original_codons: List[str] = field(default_factory=list)
    mutated_codons: List[str] = field(default_factory=list)
    differences: List[GenomeDifference] = field(default_factory=list)

    @property
    def identical(self) -> bool:
        return not self.differences

    def to_dataframe(self) -> pd.DataFrame:
        """Differences as a DataFrame with position/original/mutated columns."""
        return pd.DataFrame(
            [(d.position, d.original, d.mutated) for d in self.differences],
            columns=['position', 'original', 'mutated'],
        )


def compare_genomes(original: str, mutated: str) -> GenomeComparison:
    """
    Compare two genomes codon by codon.

    Both inputs are split into codons (comments and irregular whitespace
    are tolerated). Codons are compared index by index up to the shorter
    length; any extra codons on either side are reported as trailing
    differences with '' for the missing side.

    Example:
        >>> compare_genomes("ATG GGA TAA", "ATG GGC TAA").differences
        [GenomeDifference(position=1, original='GGA', mutated='GGC')]
    """
    original_codons = parse_genome(original)
    mutated_codons = parse_genome(mutated)

    differences = []
    shared = min(len(original_codons), len(mutated_codons))
    for i in range(shared):
        if original_codons[i] != mutated_codons[i]:
            differences.append(GenomeDifference(i, original_codons[i], mutated_codons[i]))

    for i in range(shared, len(original_codons)):
        differences.append(GenomeDifference(i, original_codons[i], ''))
    for i in range(shared, len(mutated_codons)):
        differences.append(GenomeDifference(i, '', mutated_codons[i]))

    return GenomeComparison(
        original_codons=original_codons,
        mutated_codons=mutated_codons,
        differences=differences,
    )
