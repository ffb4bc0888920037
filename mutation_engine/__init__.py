"""
Mutation Engine Module

Provides tools for introducing controlled mutations into codon genomes,
from single-codon substitutions through frame-shifting indels.

Public API:
    - apply_*_mutation / apply_insertion / apply_deletion: The seven mutation types
    - get_mutation_by_type: Dispatch on a MutationType or its tag
    - apply_random_mutation: Draw a type from MutationRates and apply it
    - MutationType: Enum of mutation types
    - Mutation: Dataclass describing a single mutation and its result
"""

from .mutation_types import MutationType, Mutation, MutationRates
from .sequence_mutator import (
    apply_silent_mutation,
    apply_missense_mutation,
    apply_nonsense_mutation,
    apply_point_mutation,
    apply_insertion,
    apply_deletion,
    apply_frameshift_mutation,
    get_mutation_by_type,
    apply_random_mutation,
    parse_genome,
    format_as_codons,
    MutationError,
    UnknownMutationTypeError,
)

__all__ = [
    'MutationType', 'Mutation', 'MutationRates',
    'apply_silent_mutation', 'apply_missense_mutation', 'apply_nonsense_mutation',
    'apply_point_mutation', 'apply_insertion', 'apply_deletion',
    'apply_frameshift_mutation', 'get_mutation_by_type', 'apply_random_mutation',
    'parse_genome', 'format_as_codons', 'MutationError', 'UnknownMutationTypeError',
]
