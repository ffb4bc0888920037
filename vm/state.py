"""
VM State Module

Immutable records describing the virtual machine at one instant.

Every executed instruction produces a new VMState through
dataclasses.replace, so a list of snapshots is a faithful, unaliased
history of a run that can be replayed or resumed from any point.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple


DEFAULT_SEED = 12345


@dataclass(frozen=True)
class Position:
    """Pen position in canvas pixels."""
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class HSLColor:
    """
    Fill color in HSL space.

    Attributes:
        h: Hue in degrees [0, 360]
        s: Saturation percent [0, 100]
        l: Lightness percent [0, 100]
    """
    h: float = 0.0
    s: float = 0.0
    l: float = 0.0


@dataclass(frozen=True)
class SavedScope:
    """Transform and color captured by SAVE_STATE."""
    position: Position
    rotation: float
    scale: float
    color: HSLColor


@dataclass(frozen=True)
class VMState:
    """
    Complete machine state.

    Attributes:
        stack: Operand stack, top is the last element; values in [0, 63]
        position: Current pen position
        rotation: Heading in degrees, kept in [0, 360)
        scale: Drawing scale, always > 0
        color: Current fill color
        instruction_pointer: Index of the next token to execute
        instruction_count: Number of instruction steps executed so far
        scope_stack: Scopes pushed by SAVE_STATE
        seed: Seed for the NOISE generator
        awaiting_literal: True between a PUSH codon and its literal
    """
    stack: Tuple[int, ...] = ()
    position: Position = Position()
    rotation: float = 0.0
    scale: float = 1.0
    color: HSLColor = HSLColor()
    instruction_pointer: int = 0
    instruction_count: int = 0
    scope_stack: Tuple[SavedScope, ...] = ()
    seed: int = DEFAULT_SEED
    awaiting_literal: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dicts/lists for JSON serialization."""
        data = asdict(self)
        data['stack'] = list(self.stack)
        data['scope_stack'] = [asdict(scope) for scope in self.scope_stack]
        return data


# A snapshot is just the state recorded after a step
VMSnapshot = VMState
