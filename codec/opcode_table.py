"""
Opcode Table Module

Fixed, read-only mapping from each of the 64 codons to an instruction.

Like the standard genetic code, the table is degenerate: most opcodes are
encoded by several synonymous codons, so some single-base changes leave the
program unchanged (silent mutations) while others swap the instruction
(missense) or introduce a STOP (nonsense).

Families:
    - CONTROL:   START, STOP
    - STACK:     PUSH (takes next codon as literal), DUP, POP, SWAP
    - DRAWING:   CIRCLE, RECT, LINE, TRIANGLE, ELLIPSE, NOISE
    - TRANSFORM: TRANSLATE, ROTATE, SCALE, SETPOSITION, SETROTATION,
                 SETSCALE, SAVE_STATE, RESTORE_STATE
    - COLOR:     COLOR

Public API:
    lookup_opcode(codon) -> Opcode
    synonymous_codons(codon) -> List[str]
    translate_genome(genome) -> List[Opcode]
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping

from .codon_codec import ALL_CODONS, COMMENT_CHAR, NUCLEOTIDES, normalize_codon


class OpcodeFamily(Enum):
    """Functional grouping of opcodes."""
    CONTROL = "control"
    STACK = "stack"
    DRAWING = "drawing"
    TRANSFORM = "transform"
    COLOR = "color"


class Opcode(Enum):
    """Closed set of VM instructions."""
    START = "START"
    STOP = "STOP"
    PUSH = "PUSH"
    DUP = "DUP"
    POP = "POP"
    SWAP = "SWAP"
    CIRCLE = "CIRCLE"
    RECT = "RECT"
    LINE = "LINE"
    TRIANGLE = "TRIANGLE"
    ELLIPSE = "ELLIPSE"
    NOISE = "NOISE"
    TRANSLATE = "TRANSLATE"
    ROTATE = "ROTATE"
    SCALE = "SCALE"
    SETPOSITION = "SETPOSITION"
    SETROTATION = "SETROTATION"
    SETSCALE = "SETSCALE"
    SAVE_STATE = "SAVE_STATE"
    RESTORE_STATE = "RESTORE_STATE"
    COLOR = "COLOR"


OPCODE_FAMILY: Mapping[Opcode, OpcodeFamily] = MappingProxyType({
    Opcode.START: OpcodeFamily.CONTROL,
    Opcode.STOP: OpcodeFamily.CONTROL,
    Opcode.PUSH: OpcodeFamily.STACK,
    Opcode.DUP: OpcodeFamily.STACK,
    Opcode.POP: OpcodeFamily.STACK,
    Opcode.SWAP: OpcodeFamily.STACK,
    Opcode.CIRCLE: OpcodeFamily.DRAWING,
    Opcode.RECT: OpcodeFamily.DRAWING,
    Opcode.LINE: OpcodeFamily.DRAWING,
    Opcode.TRIANGLE: OpcodeFamily.DRAWING,
    Opcode.ELLIPSE: OpcodeFamily.DRAWING,
    Opcode.NOISE: OpcodeFamily.DRAWING,
    Opcode.TRANSLATE: OpcodeFamily.TRANSFORM,
    Opcode.ROTATE: OpcodeFamily.TRANSFORM,
    Opcode.SCALE: OpcodeFamily.TRANSFORM,
    Opcode.SETPOSITION: OpcodeFamily.TRANSFORM,
    Opcode.SETROTATION: OpcodeFamily.TRANSFORM,
    Opcode.SETSCALE: OpcodeFamily.TRANSFORM,
    Opcode.SAVE_STATE: OpcodeFamily.TRANSFORM,
    Opcode.RESTORE_STATE: OpcodeFamily.TRANSFORM,
    Opcode.COLOR: OpcodeFamily.COLOR,
})

# Number of stack operands each opcode consumes
OPCODE_STACK_REQUIREMENTS: Mapping[Opcode, int] = MappingProxyType({
    Opcode.START: 0,
    Opcode.STOP: 0,
    Opcode.PUSH: 0,
    Opcode.DUP: 1,
    Opcode.POP: 1,
    Opcode.SWAP: 2,
    Opcode.CIRCLE: 1,
    Opcode.RECT: 2,
    Opcode.LINE: 1,
    Opcode.TRIANGLE: 1,
    Opcode.ELLIPSE: 2,
    Opcode.NOISE: 2,
    Opcode.TRANSLATE: 2,
    Opcode.ROTATE: 1,
    Opcode.SCALE: 1,
    Opcode.SETPOSITION: 2,
    Opcode.SETROTATION: 1,
    Opcode.SETSCALE: 1,
    Opcode.SAVE_STATE: 0,
    Opcode.RESTORE_STATE: 0,
    Opcode.COLOR: 3,
})

START_CODON = 'ATG'
STOP_CODONS = frozenset({'TAA', 'TAG', 'TGA'})


def _family_box(prefix: str) -> List[str]:
    """All four codons sharing a 2-base prefix (e.g. 'GG' -> GGA..GGT)."""
    return [prefix + base for base in NUCLEOTIDES]


# Opcode -> codons. Four-fold boxes first, then split boxes.
_OPCODE_CODONS: Dict[Opcode, List[str]] = {
    Opcode.START: [START_CODON],
    Opcode.STOP: sorted(STOP_CODONS),
    Opcode.PUSH: _family_box('GA'),
    Opcode.DUP: ['ATA', 'ATC', 'ATT'],
    Opcode.POP: ['TAC', 'TAT', 'TGC'],
    Opcode.SWAP: ['TGG', 'TGT'],
    Opcode.CIRCLE: _family_box('GG'),
    Opcode.RECT: _family_box('CC'),
    Opcode.LINE: _family_box('AA'),
    Opcode.TRIANGLE: _family_box('GC'),
    Opcode.ELLIPSE: _family_box('GT'),
    Opcode.NOISE: ['CTA', 'CTC'],
    Opcode.TRANSLATE: _family_box('AC'),
    Opcode.ROTATE: _family_box('AG'),
    Opcode.SCALE: _family_box('CG'),
    Opcode.SETPOSITION: ['CAA', 'CAC'],
    Opcode.SETROTATION: ['CAG', 'CAT'],
    Opcode.SETSCALE: ['CTG', 'CTT'],
    Opcode.SAVE_STATE: ['TCA', 'TCC'],
    Opcode.RESTORE_STATE: ['TCG', 'TCT'],
    Opcode.COLOR: _family_box('TT'),
}

# Invert to codon -> opcode
_codon_to_opcode: Dict[str, Opcode] = {}
for opcode, codons in _OPCODE_CODONS.items():
    for codon in codons:
        if codon in _codon_to_opcode:
            raise RuntimeError(
                f"Codon {codon} assigned to both "
                f"{_codon_to_opcode[codon].value} and {opcode.value}"
            )
        _codon_to_opcode[codon] = opcode

_missing = [c for c in ALL_CODONS if c not in _codon_to_opcode]
if _missing:
    raise RuntimeError(f"Opcode table incomplete, unmapped codons: {_missing}")

CODON_TABLE: Mapping[str, Opcode] = MappingProxyType(
    {codon: _codon_to_opcode[codon] for codon in ALL_CODONS}
)

OPCODE_TO_CODONS: Mapping[Opcode, tuple] = MappingProxyType(
    {op: tuple(codons) for op, codons in _OPCODE_CODONS.items()}
)

del _codon_to_opcode, _missing


def lookup_opcode(codon: str) -> Opcode:
    """
    Return the opcode encoded by a codon.

    Args:
        codon: 3-symbol codon (DNA or RNA, any case)

    Raises:
        CodonRangeError: If the codon is malformed
    """
    return CODON_TABLE[normalize_codon(codon)]


def family_of(opcode: Opcode) -> OpcodeFamily:
    """Return the family an opcode belongs to."""
    return OPCODE_FAMILY[opcode]


def codons_for_opcode(opcode: Opcode) -> List[str]:
    """Return every codon that encodes the given opcode."""
    return list(OPCODE_TO_CODONS[opcode])


def synonymous_codons(codon: str) -> List[str]:
    """
    Return the other codons that encode the same opcode.

    Example:
        >>> synonymous_codons("GGA")
        ['GGC', 'GGG', 'GGT']
    """
    codon = normalize_codon(codon)
    return [c for c in OPCODE_TO_CODONS[CODON_TABLE[codon]] if c != codon]


def is_degenerate(codon: str) -> bool:
    """True if at least one synonymous codon exists."""
    return len(synonymous_codons(codon)) > 0


def translate_genome(genome: str) -> List[Opcode]:
    """
    Translate a codon string into its opcode sequence.

    ';' comments and whitespace are ignored; the remaining bases are read
    in frame from the first base. Trailing bases that do not form a full
    codon are dropped.

    Example:
        >>> translate_genome("ATG ; start\\nGGA TAA")
        [<Opcode.START: 'START'>, <Opcode.CIRCLE: 'CIRCLE'>, <Opcode.STOP: 'STOP'>]
    """
    code = ''.join(line.split(COMMENT_CHAR, 1)[0] for line in genome.splitlines())
    bases = ''.join(code.split()).upper().replace('U', 'T')
    return [
        lookup_opcode(bases[i:i + 3])
        for i in range(0, len(bases) - len(bases) % 3, 3)
    ]
