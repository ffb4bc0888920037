"""
Codon Virtual Machine Module

Stack machine that executes codon tokens against a Renderer.

Execution model:
    - Tokens run strictly in order; each consumed token is one step and
      yields one snapshot.
    - PUSH spans two steps: the PUSH codon itself, then the following
      codon, which is decoded to a value in [0, 63] and pushed.
    - STOP halts; anything after it is ignored. Running off the end of the
      token list is an implicit halt.
    - Stack underflow, RESTORE_STATE with no saved scope, a PUSH with no
      literal, and exceeding the instruction ceiling are fatal.

Public API:
    CodonVM(renderer).run(tokens) -> List[VMSnapshot]
    execute_genome(source, renderer) -> List[VMSnapshot]
"""

from dataclasses import replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from codec import Opcode, decode, lookup_opcode
from codec.opcode_table import OPCODE_STACK_REQUIREMENTS
from lexer import CodonToken, parse

from .renderer import Renderer
from .state import DEFAULT_SEED, HSLColor, Position, SavedScope, VMSnapshot, VMState


DEFAULT_MAX_INSTRUCTIONS = 10000

# Smallest scale a SCALE/SETSCALE may produce
MIN_SCALE = 0.01

# Codon value that means "unit" for scale and "zero" for centered translation
SCALE_UNIT = 32
CENTER_OFFSET = 32

# Absolute setters map 0..63 onto the full range
VALUE_RANGE = 64
COLOR_MAX = 63

VALUE_MODES = ('centered', 'forward')

# NOISE seed sequence (31-bit LCG)
_LCG_MULTIPLIER = 1103515245
_LCG_INCREMENT = 12345
_SEED_MASK = 0x7FFFFFFF


class VMStatus(Enum):
    """Lifecycle of a single run."""
    IDLE = "idle"
    RUNNING = "running"
    HALTED = "halted"
    ERRORED = "errored"


class VMError(RuntimeError):
    """
    Base class for fatal execution errors.

    Attributes:
        snapshots: Snapshots recorded before the failure
    """

    def __init__(self, message: str, snapshots: Optional[List[VMSnapshot]] = None):
        super().__init__(message)
        self.snapshots = list(snapshots or [])


class StackUnderflowError(VMError):
    """An opcode needed more operands than the stack held."""

    def __init__(self, opcode: Opcode, required: int, available: int,
                 message: Optional[str] = None):
        if message is None:
            message = (
                f"Stack underflow: {opcode.value} requires {required} "
                f"value{'s' if required != 1 else ''}, stack has {available}"
            )
        super().__init__(message)
        self.opcode = opcode
        self.required = required
        self.available = available


class ScopeUnderflowError(StackUnderflowError):
    """RESTORE_STATE ran with no scope saved."""

    def __init__(self):
        super().__init__(
            Opcode.RESTORE_STATE, 1, 0,
            message="RESTORE_STATE with no saved state (missing SAVE_STATE)",
        )


class MissingLiteralError(VMError):
    """PUSH was the last token, so it has no value to push."""


class InstructionLimitExceeded(VMError):
    """The run reached the instruction ceiling."""

    def __init__(self, limit: int):
        super().__init__(f"Instruction limit exceeded ({limit} instructions)")
        self.limit = limit


def next_seed(seed: int) -> int:
    """Advance the NOISE seed by one LCG step."""
    return (seed * _LCG_MULTIPLIER + _LCG_INCREMENT) & _SEED_MASK


class CodonVM:
    """
    Executes codon tokens and drives a Renderer.

    Args:
        renderer: Drawing surface to call for every drawing/transform opcode
        max_instructions: Instruction ceiling per run (default: 10000)
        value_mode: 'centered' (TRANSLATE operands offset by -32 so 32 means
                    no movement) or 'forward' (operands used as-is)
        seed: Initial NOISE seed

    Example:
        >>> from vm import RecordingRenderer
        >>> from lexer import tokenize
        >>> r = RecordingRenderer()
        >>> snaps = CodonVM(r).run(tokenize("ATG GAA AGG GGA TAA"))
        >>> len(snaps), r.drawing_calls
        (5, [('circle', (10,))])
    """

    def __init__(
        self,
        renderer: Renderer,
        max_instructions: int = DEFAULT_MAX_INSTRUCTIONS,
        value_mode: str = 'centered',
        seed: int = DEFAULT_SEED
    ):
        if max_instructions <= 0:
            raise ValueError(f"max_instructions must be > 0, got {max_instructions}")
        if value_mode not in VALUE_MODES:
            raise ValueError(
                f"value_mode must be one of {VALUE_MODES}, got '{value_mode}'"
            )

        self.renderer = renderer
        self.max_instructions = max_instructions
        self.value_mode = value_mode
        self.initial_seed = seed
        self.status = VMStatus.IDLE
        self.state = self._initial_state()

        self._handlers: Dict[Opcode, Callable[[VMState], VMState]] = {
            Opcode.START: lambda s: s,
            Opcode.STOP: lambda s: s,
            Opcode.PUSH: self._op_push,
            Opcode.DUP: self._op_dup,
            Opcode.POP: self._op_pop,
            Opcode.SWAP: self._op_swap,
            Opcode.CIRCLE: self._op_circle,
            Opcode.RECT: self._op_rect,
            Opcode.LINE: self._op_line,
            Opcode.TRIANGLE: self._op_triangle,
            Opcode.ELLIPSE: self._op_ellipse,
            Opcode.NOISE: self._op_noise,
            Opcode.TRANSLATE: self._op_translate,
            Opcode.ROTATE: self._op_rotate,
            Opcode.SCALE: self._op_scale,
            Opcode.SETPOSITION: self._op_set_position,
            Opcode.SETROTATION: self._op_set_rotation,
            Opcode.SETSCALE: self._op_set_scale,
            Opcode.SAVE_STATE: self._op_save_state,
            Opcode.RESTORE_STATE: self._op_restore_state,
            Opcode.COLOR: self._op_color,
        }

    def _initial_state(self) -> VMState:
        return VMState(
            position=Position(self.renderer.width / 2, self.renderer.height / 2),
            seed=self.initial_seed,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self):
        """Return to a fresh IDLE state and clear the canvas."""
        self.renderer.clear()
        self.state = self._initial_state()
        self.status = VMStatus.IDLE

    def snapshot(self) -> VMSnapshot:
        """Current state. Safe to keep: states are immutable."""
        return self.state

    def restore(self, state: VMState):
        """
        Overwrite the machine state with a previous snapshot.

        The renderer's transform and color are re-synchronized, but marks
        already drawn on the canvas are left as they are.
        """
        if not isinstance(state, VMState):
            raise TypeError(f"Expected VMState, got {type(state).__name__}")
        self.state = state
        self.renderer.set_position(state.position.x, state.position.y)
        self.renderer.set_rotation(state.rotation)
        self.renderer.set_scale(state.scale)
        self.renderer.set_color(state.color.h, state.color.s, state.color.l)

    def run(
        self,
        tokens: Sequence[CodonToken],
        initial_state: Optional[VMState] = None
    ) -> List[VMSnapshot]:
        """
        Execute tokens until STOP, end of input, or a fatal error.

        Args:
            tokens: Codon tokens, typically from lexer.tokenize()
            initial_state: Resume from this state (starting at its
                           instruction_pointer) instead of resetting

        Returns:
            One snapshot per executed step, in order

        Raises:
            VMError: On a fatal error; the exception's `snapshots` holds
                     everything recorded before the failure
        """
        if initial_state is None:
            self.reset()
        else:
            self.restore(initial_state)

        self.status = VMStatus.RUNNING
        snapshots: List[VMSnapshot] = []

        try:
            while self.state.instruction_pointer < len(tokens):
                if self.state.instruction_count >= self.max_instructions:
                    raise InstructionLimitExceeded(self.max_instructions)
                halted = self._step(tokens)
                snapshots.append(self.state)
                if halted:
                    break
        except VMError as err:
            self.status = VMStatus.ERRORED
            err.snapshots = snapshots
            raise
        except Exception:
            # Renderer failures propagate unchanged
            self.status = VMStatus.ERRORED
            raise

        self.status = VMStatus.HALTED
        return snapshots

    def _step(self, tokens: Sequence[CodonToken]) -> bool:
        """Execute the token at the instruction pointer. Returns True on STOP."""
        state = self.state
        token = tokens[state.instruction_pointer]
        halted = False

        if state.awaiting_literal:
            state = replace(
                state,
                stack=state.stack + (decode(token.text),),
                awaiting_literal=False,
            )
        else:
            opcode = lookup_opcode(token.text)
            if opcode == Opcode.PUSH and state.instruction_pointer + 1 >= len(tokens):
                raise MissingLiteralError(
                    f"PUSH at position {token.position} has no literal codon"
                )
            state = self._handlers[opcode](state)
            halted = opcode == Opcode.STOP

        self.state = replace(
            state,
            instruction_pointer=state.instruction_pointer + 1,
            instruction_count=state.instruction_count + 1,
        )
        return halted

    # ------------------------------------------------------------------
    # Stack helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _pop(state: VMState, opcode: Opcode) -> Tuple[List[int], VMState]:
        """
        Pop the operands an opcode requires.

        Returns values top-of-stack first, plus the state with them removed.
        """
        n = OPCODE_STACK_REQUIREMENTS[opcode]
        if len(state.stack) < n:
            raise StackUnderflowError(opcode, n, len(state.stack))
        values = list(reversed(state.stack[len(state.stack) - n:]))
        return values, replace(state, stack=state.stack[:len(state.stack) - n])

    # ------------------------------------------------------------------
    # Stack opcodes
    # ------------------------------------------------------------------

    def _op_push(self, state: VMState) -> VMState:
        return replace(state, awaiting_literal=True)

    def _op_dup(self, state: VMState) -> VMState:
        (top,), state = self._pop(state, Opcode.DUP)
        return replace(state, stack=state.stack + (top, top))

    def _op_pop(self, state: VMState) -> VMState:
        _, state = self._pop(state, Opcode.POP)
        return state

    def _op_swap(self, state: VMState) -> VMState:
        (top, below), state = self._pop(state, Opcode.SWAP)
        return replace(state, stack=state.stack + (top, below))

    # ------------------------------------------------------------------
    # Drawing opcodes
    # ------------------------------------------------------------------

    def _op_circle(self, state: VMState) -> VMState:
        (radius,), state = self._pop(state, Opcode.CIRCLE)
        self.renderer.circle(radius)
        return state

    def _op_rect(self, state: VMState) -> VMState:
        (height, width), state = self._pop(state, Opcode.RECT)
        self.renderer.rect(width, height)
        return state

    def _op_line(self, state: VMState) -> VMState:
        (length,), state = self._pop(state, Opcode.LINE)
        self.renderer.line(length)
        return state

    def _op_triangle(self, state: VMState) -> VMState:
        (size,), state = self._pop(state, Opcode.TRIANGLE)
        self.renderer.triangle(size)
        return state

    def _op_ellipse(self, state: VMState) -> VMState:
        (ry, rx), state = self._pop(state, Opcode.ELLIPSE)
        self.renderer.ellipse(rx, ry)
        return state

    def _op_noise(self, state: VMState) -> VMState:
        (intensity, seed), state = self._pop(state, Opcode.NOISE)
        self.renderer.noise((state.seed + seed) & _SEED_MASK, intensity)
        return replace(state, seed=next_seed(state.seed))

    # ------------------------------------------------------------------
    # Transform opcodes
    # ------------------------------------------------------------------

    def _op_translate(self, state: VMState) -> VMState:
        (dy, dx), state = self._pop(state, Opcode.TRANSLATE)
        if self.value_mode == 'centered':
            dx -= CENTER_OFFSET
            dy -= CENTER_OFFSET
        self.renderer.translate(dx, dy)
        position = Position(state.position.x + dx, state.position.y + dy)
        return replace(state, position=position)

    def _op_rotate(self, state: VMState) -> VMState:
        (degrees,), state = self._pop(state, Opcode.ROTATE)
        self.renderer.rotate(degrees)
        return replace(state, rotation=(state.rotation + degrees) % 360)

    def _op_scale(self, state: VMState) -> VMState:
        (value,), state = self._pop(state, Opcode.SCALE)
        new_scale = max(state.scale * value / SCALE_UNIT, MIN_SCALE)
        self.renderer.scale(new_scale / state.scale)
        return replace(state, scale=new_scale)

    def _op_set_position(self, state: VMState) -> VMState:
        (y_value, x_value), state = self._pop(state, Opcode.SETPOSITION)
        x = x_value * self.renderer.width / VALUE_RANGE
        y = y_value * self.renderer.height / VALUE_RANGE
        self.renderer.set_position(x, y)
        return replace(state, position=Position(x, y))

    def _op_set_rotation(self, state: VMState) -> VMState:
        (value,), state = self._pop(state, Opcode.SETROTATION)
        degrees = value * 360 / VALUE_RANGE
        self.renderer.set_rotation(degrees)
        return replace(state, rotation=degrees)

    def _op_set_scale(self, state: VMState) -> VMState:
        (value,), state = self._pop(state, Opcode.SETSCALE)
        scale = max(value / SCALE_UNIT, MIN_SCALE)
        self.renderer.set_scale(scale)
        return replace(state, scale=scale)

    def _op_save_state(self, state: VMState) -> VMState:
        scope = SavedScope(
            position=state.position,
            rotation=state.rotation,
            scale=state.scale,
            color=state.color,
        )
        return replace(state, scope_stack=state.scope_stack + (scope,))

    def _op_restore_state(self, state: VMState) -> VMState:
        if not state.scope_stack:
            raise ScopeUnderflowError()
        scope = state.scope_stack[-1]
        self.renderer.set_position(scope.position.x, scope.position.y)
        self.renderer.set_rotation(scope.rotation)
        self.renderer.set_scale(scope.scale)
        self.renderer.set_color(scope.color.h, scope.color.s, scope.color.l)
        return replace(
            state,
            position=scope.position,
            rotation=scope.rotation,
            scale=scope.scale,
            color=scope.color,
            scope_stack=state.scope_stack[:-1],
        )

    # ------------------------------------------------------------------
    # Color
    # ------------------------------------------------------------------

    def _op_color(self, state: VMState) -> VMState:
        (l_value, s_value, h_value), state = self._pop(state, Opcode.COLOR)
        color = HSLColor(
            h=h_value * 360 / COLOR_MAX,
            s=s_value * 100 / COLOR_MAX,
            l=l_value * 100 / COLOR_MAX,
        )
        self.renderer.set_color(color.h, color.s, color.l)
        return replace(state, color=color)


def execute_genome(
    source: str,
    renderer: Renderer,
    max_instructions: int = DEFAULT_MAX_INSTRUCTIONS,
    seed: int = DEFAULT_SEED
) -> List[VMSnapshot]:
    """
    Parse and run genome source in one call.

    The '; @mode:' directive in the source selects the value mode.

    Raises:
        GenomeSyntaxError: If the source cannot be tokenized
        VMError: On a fatal execution error
    """
    parsed = parse(source)
    vm = CodonVM(
        renderer,
        max_instructions=max_instructions,
        value_mode=parsed.metadata.mode,
        seed=seed,
    )
    return vm.run(parsed.tokens)
