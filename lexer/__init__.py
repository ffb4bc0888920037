"""
Lexer Module

Reads genome source text into codon tokens and checks it for frame and
structure problems before execution.

Public API:
    - tokenize: Source text -> List[CodonToken]
    - parse: Tokens plus '; @mode:' directive metadata
    - validate_frame: Warnings for whitespace inside codons
    - validate_structure: START/STOP/PUSH structure diagnostics
"""

from .tokenizer import (
    CodonToken,
    GenomeSyntaxError,
    GenomeMetadata,
    ParseResult,
    tokenize,
    parse,
    clean_genome,
)
from .validation import (
    Diagnostic,
    Severity,
    validate_frame,
    validate_structure,
    has_errors,
)

__all__ = [
    'CodonToken', 'GenomeSyntaxError', 'GenomeMetadata', 'ParseResult',
    'tokenize', 'parse', 'clean_genome',
    'Diagnostic', 'Severity', 'validate_frame', 'validate_structure',
    'has_errors',
]
