"""
Codec Module

Converts between 3-symbol codons and their numeric values, and holds the
fixed codon-to-opcode table that gives every codon its meaning.

Public API:
    - decode / encode: codon <-> integer in [0, 63]
    - lookup_opcode: Opcode for a codon
    - Opcode, OpcodeFamily: Enums of instructions and their families
    - CODON_TABLE: Read-only mapping of all 64 codons
"""

from .codon_codec import (
    decode,
    encode,
    normalize_codon,
    CodonRangeError,
    ALL_CODONS,
    NUCLEOTIDES,
)
from .opcode_table import (
    Opcode,
    OpcodeFamily,
    CODON_TABLE,
    OPCODE_FAMILY,
    OPCODE_STACK_REQUIREMENTS,
    START_CODON,
    STOP_CODONS,
    lookup_opcode,
    family_of,
    synonymous_codons,
    codons_for_opcode,
    is_degenerate,
    translate_genome,
)

__all__ = [
    'decode', 'encode', 'normalize_codon', 'CodonRangeError',
    'ALL_CODONS', 'NUCLEOTIDES',
    'Opcode', 'OpcodeFamily', 'CODON_TABLE', 'OPCODE_FAMILY',
    'OPCODE_STACK_REQUIREMENTS', 'START_CODON', 'STOP_CODONS',
    'lookup_opcode', 'family_of', 'synonymous_codons', 'codons_for_opcode',
    'is_degenerate', 'translate_genome',
]
