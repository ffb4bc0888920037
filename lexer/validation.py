"""
Genome Validation Module

Non-fatal checks that report problems as diagnostics instead of raising.

Two passes are provided:
    - Frame check on raw source: whitespace that splits a codon across
      groups usually means the author lost track of the reading frame.
    - Structure check on tokens: START first, a reachable STOP, nothing
      dead after STOP, and every PUSH followed by its literal.

Public API:
    validate_frame(source) -> List[Diagnostic]
    validate_structure(tokens) -> List[Diagnostic]
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from codec import CODON_TABLE, Opcode, START_CODON

from .tokenizer import CodonToken, VALID_BASES, strip_comment


class Severity(Enum):
    """Diagnostic severity levels."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single validation finding.

    Attributes:
        message: Human-readable description
        position: Offset in the stripped base stream
        severity: ERROR, WARNING or INFO
        line: 1-based source line when known
        fix: Suggested correction
    """
    message: str
    position: int
    severity: Severity
    line: Optional[int] = None
    fix: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'message': self.message,
            'position': self.position,
            'severity': self.severity.value,
            'line': self.line,
            'fix': self.fix,
        }


def has_errors(diagnostics: Sequence[Diagnostic]) -> bool:
    """True if any diagnostic is an ERROR."""
    return any(d.severity == Severity.ERROR for d in diagnostics)


def validate_frame(source: str) -> List[Diagnostic]:
    """
    Warn about whitespace falling inside a codon.

    Comments are ignored. One warning is emitted per whitespace run that
    interrupts an incomplete triplet and is followed by more bases.

    Example:
        >>> [d.message for d in validate_frame("AT G")]
        ['Mid-triplet break: whitespace splits a codon after 2 of 3 bases']
    """
    diagnostics = []
    base_count = 0
    pending = None  # (line, bases_in_group) of the open break

    for line_no, raw_line in enumerate(source.splitlines(), start=1):
        # End of line counts as whitespace
        for char in strip_comment(raw_line) + '\n':
            upper = char.upper()
            if upper in VALID_BASES or upper == 'U':
                if pending is not None:
                    break_line, in_group = pending
                    diagnostics.append(Diagnostic(
                        message=(
                            f"Mid-triplet break: whitespace splits a codon "
                            f"after {in_group} of 3 bases"
                        ),
                        position=base_count,
                        severity=Severity.WARNING,
                        line=break_line,
                        fix="Keep the three bases of each codon together",
                    ))
                    pending = None
                base_count += 1
            elif char.isspace():
                if base_count % 3 != 0 and pending is None:
                    pending = (line_no, base_count % 3)

    return diagnostics


def validate_structure(tokens: Sequence[CodonToken]) -> List[Diagnostic]:
    """
    Check program structure.

    Rules:
        - Genome must not be empty
        - First codon must be START (ATG)
        - A STOP codon must be reachable; PUSH literals are skipped so a
          literal that happens to read TAA is not mistaken for STOP
        - Codons after the first STOP are unreachable (warning)
        - Every PUSH must be followed by a literal codon

    Returns:
        List of diagnostics, empty if the structure is valid
    """
    if not tokens:
        return [Diagnostic(
            message="Genome is empty",
            position=0,
            severity=Severity.ERROR,
            fix=f"Start with {START_CODON} and end with a STOP codon",
        )]

    diagnostics = []

    for token in tokens:
        if token.text not in CODON_TABLE:
            diagnostics.append(Diagnostic(
                message=f"Unknown codon '{token.text}'",
                position=token.position,
                severity=Severity.ERROR,
                line=token.line,
            ))
    if diagnostics:
        return diagnostics

    first = tokens[0]
    if CODON_TABLE[first.text] != Opcode.START:
        diagnostics.append(Diagnostic(
            message=f"Program should begin with START codon ({START_CODON})",
            position=first.position,
            severity=Severity.ERROR,
            line=first.line,
            fix=f"Add {START_CODON} at the beginning",
        ))

    stop_index = None
    i = 0
    while i < len(tokens):
        opcode = CODON_TABLE[tokens[i].text]
        if opcode == Opcode.PUSH:
            if i + 1 >= len(tokens):
                diagnostics.append(Diagnostic(
                    message="PUSH has no literal codon after it",
                    position=tokens[i].position,
                    severity=Severity.ERROR,
                    line=tokens[i].line,
                    fix="Follow PUSH with the codon to push",
                ))
            i += 2
            continue
        if opcode == Opcode.STOP:
            stop_index = i
            break
        i += 1

    if stop_index is None:
        last = tokens[-1]
        diagnostics.append(Diagnostic(
            message="Program should end with a STOP codon (TAA, TAG, or TGA)",
            position=last.position,
            severity=Severity.ERROR,
            line=last.line,
            fix="Add TAA at the end",
        ))
    elif stop_index < len(tokens) - 1:
        dead = tokens[stop_index + 1]
        n_dead = len(tokens) - stop_index - 1
        diagnostics.append(Diagnostic(
            message=(
                f"{n_dead} codon{'s' if n_dead > 1 else ''} after STOP "
                f"will never execute (unreachable)"
            ),
            position=dead.position,
            severity=Severity.WARNING,
            line=dead.line,
            fix="Remove the codons after STOP",
        ))

    return diagnostics
