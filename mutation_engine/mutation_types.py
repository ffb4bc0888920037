"""
Mutation Types Module

Defines data structures for representing mutations applied to codon genomes.
These types are shared by the mutation engine, the impact classifier and the
Monte Carlo robustness analysis.

Biological context:
- Silent: codon swapped for a synonym, program unchanged
- Missense: codon swapped for one encoding a different instruction
- Nonsense: premature STOP truncates the program
- Point: one base substituted (may be silent, missense or nonsense)
- Insertion / Deletion: bases added or removed (frameshift unless a multiple of 3)
- Frameshift: 1-2 base indel that scrambles every downstream codon
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List


class MutationType(Enum):
    """
    Enumeration of possible mutation types.

    Codon-level types (SILENT, MISSENSE, NONSENSE) use codon indices for
    their position; base-level types (POINT, INSERTION, DELETION,
    FRAMESHIFT) use offsets into the whitespace-free base string.
    """
    SILENT = "silent"
    MISSENSE = "missense"
    NONSENSE = "nonsense"
    POINT = "point"
    INSERTION = "insertion"
    DELETION = "deletion"
    FRAMESHIFT = "frameshift"

    @property
    def is_codon_level(self) -> bool:
        return self in (MutationType.SILENT, MutationType.MISSENSE, MutationType.NONSENSE)


@dataclass
class Mutation:
    """
    Represents a single mutation event and its result.

    Attributes:
        original: Genome text as given to the mutation function
        mutated: Resulting genome as space-separated codons
        mutation_type: Which of the seven mutation types was applied
        position: Codon index (codon-level types) or base offset (base-level types)
        description: Human-readable summary naming the position and change
        affected_codons: Codon indices whose meaning changed or became unreachable
        original_bases: Bases removed or replaced at the position
        replacement_bases: Bases inserted or substituted at the position

    Biological notes:
    - For substitutions: len(original_bases) == len(replacement_bases)
    - For insertions: original_bases is empty
    - For deletions: replacement_bases is empty
    """
    original: str
    mutated: str
    mutation_type: MutationType
    position: int
    description: str
    affected_codons: List[int] = field(default_factory=list)
    original_bases: str = ''
    replacement_bases: str = ''

    def __str__(self) -> str:
        """Human-readable mutation notation."""
        if self.mutation_type.is_codon_level:
            return f"c{self.position+1}{self.original_bases}>{self.replacement_bases}"
        elif self.mutation_type == MutationType.POINT:
            return f"{self.original_bases}{self.position+1}{self.replacement_bases}"
        elif self.replacement_bases:
            return f"ins{self.position+1}{self.replacement_bases}"
        else:
            return f"del{self.position+1}{self.original_bases}"

    @property
    def type(self) -> str:
        """String tag of the mutation type."""
        return self.mutation_type.value

    @property
    def length_delta(self) -> int:
        """Change in base count."""
        return len(self.replacement_bases) - len(self.original_bases)

    @property
    def is_frameshift(self) -> bool:
        """
        Check if mutation shifts the reading frame.

        Frameshifts occur when indels are not multiples of 3,
        disrupting the reading frame.
        """
        return self.length_delta % 3 != 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': self.type,
            'position': self.position,
            'description': self.description,
            'original': self.original,
            'mutated': self.mutated,
            'affected_codons': list(self.affected_codons),
            'notation': str(self),
        }


@dataclass
class MutationRates:
    """
    Relative weights for choosing a random mutation type.

    Attributes:
        silent_rate .. frameshift_rate: Non-negative relative weights

    Note: Rates are normalized internally so they sum to 1.
    """
    silent_rate: float = 0.15
    missense_rate: float = 0.2
    nonsense_rate: float = 0.05
    point_rate: float = 0.3
    insertion_rate: float = 0.1
    deletion_rate: float = 0.1
    frameshift_rate: float = 0.1

    def __post_init__(self):
        """Validate rates."""
        rates = self.as_dict().values()
        if any(r < 0 for r in rates):
            raise ValueError("All rates must be non-negative")
        if sum(rates) == 0:
            raise ValueError("At least one rate must be > 0")

    @classmethod
    def only(cls, *types: MutationType) -> 'MutationRates':
        """Equal weights over the given types, zero for the rest."""
        if not types:
            raise ValueError("At least one mutation type is required")
        weights = {f"{t.value}_rate": 0.0 for t in MutationType}
        for t in types:
            weights[f"{MutationType(t).value}_rate"] = 1.0
        return cls(**weights)

    def as_dict(self) -> Dict[MutationType, float]:
        return {t: getattr(self, f"{t.value}_rate") for t in MutationType}

    @property
    def normalized(self) -> Dict[MutationType, float]:
        """Return normalized rates that sum to 1."""
        rates = self.as_dict()
        total = sum(rates.values())
        return {t: r / total for t, r in rates.items()}
