"""
Codon Codec Module

Bijective mapping between codons and integers in [0, 63].

A codon is read as a 3-digit base-4 number with A=0, C=1, G=2, T=3,
most significant symbol first:

    AAA -> 0, AAC -> 1, ..., GGA -> 40, ..., TTT -> 63

RNA input (U) and lowercase letters are accepted and normalized to
uppercase DNA before decoding.

Public API:
    decode(codon) -> int
    encode(value) -> str
"""

from typing import List


# Alphabet in digit order
NUCLEOTIDES = ['A', 'C', 'G', 'T']

BASE_TO_DIGIT = {base: digit for digit, base in enumerate(NUCLEOTIDES)}

CODON_LENGTH = 3
MAX_CODON_VALUE = 4 ** CODON_LENGTH - 1

# Starts a comment running to end of line in genome text
COMMENT_CHAR = ';'


class CodonRangeError(ValueError):
    """Raised for malformed codons or values outside [0, 63]."""


def normalize_codon(codon: str) -> str:
    """
    Return the canonical uppercase DNA form of a codon.

    Raises:
        CodonRangeError: If the codon is not 3 symbols from {A, C, G, T, U}
    """
    if not isinstance(codon, str):
        raise CodonRangeError(f"Codon must be a string, got {type(codon).__name__}")

    normalized = codon.strip().upper().replace('U', 'T')
    if len(normalized) != CODON_LENGTH:
        raise CodonRangeError(
            f"Codon must have exactly {CODON_LENGTH} bases, got '{codon}'"
        )
    for base in normalized:
        if base not in BASE_TO_DIGIT:
            raise CodonRangeError(f"Invalid base '{base}' in codon '{codon}'")
    return normalized


def decode(codon: str) -> int:
    """
    Decode a codon into its numeric value.

    Args:
        codon: 3-symbol codon (DNA or RNA, any case)

    Returns:
        Integer in [0, 63]

    Example:
        >>> decode("GGA")
        40
        >>> decode("uuu")
        63
    """
    value = 0
    for base in normalize_codon(codon):
        value = value * 4 + BASE_TO_DIGIT[base]
    return value


def encode(value: int) -> str:
    """
    Encode an integer in [0, 63] as a DNA codon.

    Raises:
        CodonRangeError: If value is not an integer in range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise CodonRangeError(f"Codon value must be an integer, got {value!r}")
    if value < 0 or value > MAX_CODON_VALUE:
        raise CodonRangeError(
            f"Codon value must be in [0, {MAX_CODON_VALUE}], got {value}"
        )

    bases = []
    for _ in range(CODON_LENGTH):
        bases.append(NUCLEOTIDES[value % 4])
        value //= 4
    return ''.join(reversed(bases))


# All 64 codons in value order
ALL_CODONS: List[str] = [encode(v) for v in range(MAX_CODON_VALUE + 1)]
