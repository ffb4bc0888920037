"""
Tokenizer Module

Turns genome source text into an ordered list of codon tokens.

Source format:
    - Bases A, C, G, T (U accepted as T), any case
    - ';' starts a comment running to end of line
    - Whitespace is insignificant to tokenization
    - Optional directive line: '; @mode: forward-only'

Public API:
    tokenize(source) -> List[CodonToken]
    parse(source) -> ParseResult
"""

import re
import warnings
from dataclasses import dataclass, field
from typing import List, Tuple

from codec.codon_codec import COMMENT_CHAR


VALID_BASES = set('ACGT')

# Directive values -> canonical value mode used by the VM
MODE_ALIASES = {
    'centered': 'centered',
    'bidirectional': 'centered',
    'forward': 'forward',
    'forward-only': 'forward',
}
DEFAULT_MODE = 'centered'

_MODE_DIRECTIVE = re.compile(r'^\s*;\s*@mode\s*:\s*(\S+)', re.IGNORECASE)


class GenomeSyntaxError(ValueError):
    """
    Raised when genome source cannot be tokenized.

    Attributes:
        line: 1-based source line of the problem (None for whole-genome errors)
        column: 1-based column within that line
    """

    def __init__(self, message: str, line: int = None, column: int = None):
        super().__init__(message)
        self.line = line
        self.column = column


@dataclass(frozen=True)
class CodonToken:
    """
    A single codon read from the source.

    Attributes:
        text: Canonical uppercase DNA codon (e.g. "ATG")
        position: Offset of the first base in the comment- and
                  whitespace-stripped stream
        line: 1-based source line of the first base
    """
    text: str
    position: int
    line: int


@dataclass
class GenomeMetadata:
    """Directives found in genome comments."""
    mode: str = DEFAULT_MODE


@dataclass
class ParseResult:
    """Tokens plus directive metadata."""
    tokens: List[CodonToken] = field(default_factory=list)
    metadata: GenomeMetadata = field(default_factory=GenomeMetadata)


def strip_comment(line: str) -> str:
    """Remove a trailing ';' comment from a single source line."""
    idx = line.find(COMMENT_CHAR)
    return line if idx < 0 else line[:idx]


def _clean_bases(source: str) -> List[Tuple[str, int]]:
    """
    Collect (base, line) pairs from source, dropping comments and whitespace.

    Raises:
        GenomeSyntaxError: On any character outside the nucleotide alphabet
    """
    bases = []
    for line_no, raw_line in enumerate(source.splitlines(), start=1):
        code = strip_comment(raw_line)
        for col, char in enumerate(code, start=1):
            if char.isspace():
                continue
            base = char.upper()
            if base == 'U':
                base = 'T'
            if base not in VALID_BASES:
                raise GenomeSyntaxError(
                    f"Invalid character '{char}' at line {line_no}, column {col}. "
                    f"Only A, C, G, T (or U) are allowed.",
                    line=line_no,
                    column=col,
                )
            bases.append((base, line_no))
    return bases


def clean_genome(source: str) -> str:
    """Return the bare uppercase DNA base string of a genome."""
    return ''.join(base for base, _ in _clean_bases(source))


def tokenize(source: str) -> List[CodonToken]:
    """
    Split genome source into codon tokens.

    Args:
        source: Genome text

    Returns:
        Tokens in reading order

    Raises:
        GenomeSyntaxError: If the source contains invalid characters or the
                           number of bases is not a multiple of 3

    Example:
        >>> [t.text for t in tokenize("ATG GAA AGG ; draw\\nGGA TAA")]
        ['ATG', 'GAA', 'AGG', 'GGA', 'TAA']
    """
    bases = _clean_bases(source)

    remainder = len(bases) % 3
    if remainder != 0:
        missing = 3 - remainder
        raise GenomeSyntaxError(
            f"Source length {len(bases)} is not divisible by 3 "
            f"({missing} base{'s' if missing > 1 else ''} missing to complete "
            f"the last codon)"
        )

    tokens = []
    for offset in range(0, len(bases), 3):
        triplet = bases[offset:offset + 3]
        tokens.append(CodonToken(
            text=''.join(b for b, _ in triplet),
            position=offset,
            line=triplet[0][1],
        ))
    return tokens


def _read_metadata(source: str) -> GenomeMetadata:
    """Extract directive values from comment lines."""
    metadata = GenomeMetadata()
    for line in source.splitlines():
        match = _MODE_DIRECTIVE.match(line)
        if not match:
            continue
        value = match.group(1).lower()
        if value in MODE_ALIASES:
            metadata.mode = MODE_ALIASES[value]
        else:
            warnings.warn(
                f"Unknown @mode value '{value}', using '{DEFAULT_MODE}'"
            )
    return metadata


def parse(source: str) -> ParseResult:
    """
    Tokenize source and read its directives.

    Raises:
        GenomeSyntaxError: Same conditions as tokenize()
    """
    return ParseResult(tokens=tokenize(source), metadata=_read_metadata(source))
