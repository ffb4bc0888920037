"""
Virtual Machine Module

Stack-based interpreter for codon programs.

Public API:
    - CodonVM: Executes tokens against a Renderer, returning snapshots
    - execute_genome: Parse + run convenience wrapper
    - Renderer, RecordingRenderer: Drawing capability and a headless backend
    - VMState / VMSnapshot: Immutable machine state
    - VMError and subclasses: Fatal execution errors
"""

from .state import VMState, VMSnapshot, Position, HSLColor, SavedScope, DEFAULT_SEED
from .renderer import Renderer, RecordingRenderer, TransformState
from .machine import (
    CodonVM,
    VMStatus,
    VMError,
    StackUnderflowError,
    ScopeUnderflowError,
    MissingLiteralError,
    InstructionLimitExceeded,
    execute_genome,
    DEFAULT_MAX_INSTRUCTIONS,
    MIN_SCALE,
)

__all__ = [
    'VMState', 'VMSnapshot', 'Position', 'HSLColor', 'SavedScope', 'DEFAULT_SEED',
    'Renderer', 'RecordingRenderer', 'TransformState',
    'CodonVM', 'VMStatus', 'VMError', 'StackUnderflowError',
    'ScopeUnderflowError', 'MissingLiteralError', 'InstructionLimitExceeded',
    'execute_genome', 'DEFAULT_MAX_INSTRUCTIONS', 'MIN_SCALE',
]
