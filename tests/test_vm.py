"""
Tests for the codon virtual machine.
"""

import sys
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lexer import tokenize
from vm import (
    CodonVM,
    VMStatus,
    RecordingRenderer,
    StackUnderflowError,
    ScopeUnderflowError,
    MissingLiteralError,
    InstructionLimitExceeded,
    execute_genome,
    MIN_SCALE,
    DEFAULT_SEED,
)
from vm.machine import next_seed


def run(source, **kwargs):
    renderer = RecordingRenderer()
    vm = CodonVM(renderer, **kwargs)
    snapshots = vm.run(tokenize(source))
    return vm, renderer, snapshots


class TestExecution(unittest.TestCase):
    """Basic execution and snapshots."""

    def test_push_and_circle(self):
        """PUSH 10, CIRCLE draws one circle of radius 10."""
        vm, renderer, snapshots = run("ATG GAA AGG GGA TAA")

        self.assertEqual(len(snapshots), 5)
        self.assertEqual(renderer.drawing_calls, [('circle', (10,))])
        self.assertEqual(vm.status, VMStatus.HALTED)
        self.assertEqual(snapshots[-1].instruction_count, 5)
        self.assertEqual(snapshots[-1].stack, ())

    def test_snapshots_are_independent(self):
        _, _, snapshots = run("ATG GAA AGG GGA TAA")
        self.assertEqual(snapshots[1].stack, ())
        self.assertTrue(snapshots[1].awaiting_literal)
        self.assertEqual(snapshots[2].stack, (10,))
        self.assertEqual(snapshots[3].stack, ())
        self.assertEqual(snapshots[2].to_dict()['stack'], [10])

    def test_stop_halts(self):
        _, renderer, snapshots = run("ATG TAA GAA AGG GGA")
        self.assertEqual(len(snapshots), 2)
        self.assertEqual(renderer.drawing_calls, [])

    def test_end_of_input_halts(self):
        vm, _, snapshots = run("ATG GAA AGG")
        self.assertEqual(vm.status, VMStatus.HALTED)
        self.assertEqual(snapshots[-1].stack, (10,))

    def test_invalid_constructor_args(self):
        with self.assertRaises(ValueError):
            CodonVM(RecordingRenderer(), value_mode='sideways')
        with self.assertRaises(ValueError):
            CodonVM(RecordingRenderer(), max_instructions=0)


class TestFatalErrors(unittest.TestCase):
    """Errors that stop execution."""

    def test_stack_underflow(self):
        renderer = RecordingRenderer()
        vm = CodonVM(renderer)
        with self.assertRaises(StackUnderflowError) as ctx:
            vm.run(tokenize("GGA TAA"))
        self.assertEqual(ctx.exception.required, 1)
        self.assertEqual(ctx.exception.available, 0)
        self.assertEqual(ctx.exception.snapshots, [])
        self.assertEqual(vm.status, VMStatus.ERRORED)
        self.assertEqual(renderer.drawing_calls, [])

    def test_snapshots_kept_on_error(self):
        with self.assertRaises(StackUnderflowError) as ctx:
            run("ATG GAA AGG GGA GGA TAA")
        self.assertEqual(len(ctx.exception.snapshots), 4)

    def test_restore_without_save(self):
        with self.assertRaises(ScopeUnderflowError) as ctx:
            run("ATG TCG TAA")
        self.assertIsInstance(ctx.exception, StackUnderflowError)

    def test_push_without_literal(self):
        with self.assertRaises(MissingLiteralError) as ctx:
            run("ATG GAA")
        self.assertEqual(len(ctx.exception.snapshots), 1)

    def test_instruction_limit(self):
        with self.assertRaises(InstructionLimitExceeded) as ctx:
            run("ATG GAA AGG GGA TAA", max_instructions=3)
        self.assertEqual(ctx.exception.limit, 3)
        self.assertEqual(len(ctx.exception.snapshots), 3)

    def test_renderer_failure_marks_errored(self):
        class BrokenRenderer(RecordingRenderer):
            def circle(self, radius):
                raise RuntimeError("canvas lost")

        vm = CodonVM(BrokenRenderer())
        with self.assertRaises(RuntimeError):
            vm.run(tokenize("ATG GAA AGG GGA TAA"))
        self.assertEqual(vm.status, VMStatus.ERRORED)


class TestStackOpcodes(unittest.TestCase):

    def test_dup(self):
        _, _, snapshots = run("ATG GAA ACC ATA TAA")
        self.assertEqual(snapshots[-1].stack, (5, 5))

    def test_swap(self):
        _, _, snapshots = run("ATG GAA AAC GAA AAG TGG TAA")
        self.assertEqual(snapshots[-1].stack, (2, 1))

    def test_pop(self):
        _, _, snapshots = run("ATG GAA AAC GAA AAG TAC TAA")
        self.assertEqual(snapshots[-1].stack, (1,))


class TestTransformOpcodes(unittest.TestCase):

    def test_translate_centered(self):
        # PUSH 40, PUSH 32, TRANSLATE -> dx=8, dy=0
        _, renderer, snapshots = run("ATG GAA GGA GAA GAA ACA TAA")
        self.assertEqual(snapshots[-1].position.x, 208)
        self.assertEqual(snapshots[-1].position.y, 200)
        self.assertIn(('translate', (8, 0)), renderer.calls)

    def test_translate_forward(self):
        _, _, snapshots = run("ATG GAA GGA GAA GAA ACA TAA", value_mode='forward')
        self.assertEqual(snapshots[-1].position.x, 240)
        self.assertEqual(snapshots[-1].position.y, 232)

    def test_set_rotation(self):
        _, _, snapshots = run("ATG GAA CAA CAG TAA")
        self.assertAlmostEqual(snapshots[-1].rotation, 90.0)

    def test_rotate_wraps(self):
        # ROTATE 63 six times = 378 degrees
        source = "ATG " + "GAA TTT AGA " * 6 + "TAA"
        _, _, snapshots = run(source)
        self.assertAlmostEqual(snapshots[-1].rotation, 18.0)

    def test_scale(self):
        _, _, snapshots = run("ATG GAA CAA CGA TAA")
        self.assertAlmostEqual(snapshots[-1].scale, 0.5)

    def test_scale_never_zero(self):
        _, _, snapshots = run("ATG GAA AAA CGA TAA")
        self.assertAlmostEqual(snapshots[-1].scale, MIN_SCALE)

    def test_save_restore(self):
        _, _, snapshots = run("ATG TCA GAA CAA CAG TCG TAA")
        self.assertAlmostEqual(snapshots[4].rotation, 90.0)
        self.assertAlmostEqual(snapshots[-1].rotation, 0.0)
        self.assertEqual(snapshots[-1].scope_stack, ())


class TestColorAndNoise(unittest.TestCase):

    def test_color(self):
        # PUSH 21 (hue), PUSH 63 (sat), PUSH 0 (light), COLOR
        _, renderer, snapshots = run("ATG GAA CCC GAA TTT GAA AAA TTA TAA")
        color = snapshots[-1].color
        self.assertAlmostEqual(color.h, 120.0)
        self.assertAlmostEqual(color.s, 100.0)
        self.assertAlmostEqual(color.l, 0.0)
        self.assertEqual(renderer.calls[-1][0], 'set_color')

    def test_noise_advances_seed(self):
        # PUSH 1 (seed), PUSH 2 (intensity), NOISE
        _, renderer, snapshots = run("ATG GAA AAC GAA AAG CTA TAA")
        self.assertEqual(renderer.drawing_calls, [('noise', (DEFAULT_SEED + 1, 2))])
        self.assertEqual(snapshots[-1].seed, next_seed(DEFAULT_SEED))


class TestResume(unittest.TestCase):

    def test_resume_from_snapshot(self):
        tokens = tokenize("ATG GAA AGG GGA TAA")
        _, _, snapshots = run("ATG GAA AGG GGA TAA")

        renderer = RecordingRenderer()
        vm = CodonVM(renderer)
        resumed = vm.run(tokens, initial_state=snapshots[2])

        self.assertEqual(len(resumed), 2)
        self.assertEqual(renderer.drawing_calls, [('circle', (10,))])
        self.assertEqual(resumed[-1].instruction_count, 5)

    def test_reset_clears_canvas(self):
        renderer = RecordingRenderer()
        vm = CodonVM(renderer)
        vm.run(tokenize("ATG GAA AGG GGA TAA"))
        vm.reset()
        self.assertEqual(renderer.calls, [])
        self.assertEqual(vm.status, VMStatus.IDLE)
        self.assertEqual(vm.snapshot().instruction_pointer, 0)


class TestExecuteGenome(unittest.TestCase):

    def test_mode_directive(self):
        renderer = RecordingRenderer()
        snapshots = execute_genome(
            "; @mode: forward\nATG GAA GGA GAA GAA ACA TAA", renderer
        )
        self.assertEqual(snapshots[-1].position.x, 240)


if __name__ == '__main__':
    unittest.main(verbosity=2)
