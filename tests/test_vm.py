import pytest

from codoncanvas.core.codons import Opcode
from codoncanvas.core.lexer import tokenize
from codoncanvas.core.vm import CodonVM, HSLColor, Point, assemble
from codoncanvas.renderers.base import MIN_SCALE, RecordingRenderer


def run(source: str, **kwargs):
    renderer = RecordingRenderer()
    vm = CodonVM(renderer, **kwargs)
    states = vm.run(tokenize(source))
    return vm, renderer, states


def test_hello_circle_draws_once(hello_circle):
    _, renderer, states = run(hello_circle)
    assert renderer.draw_calls() == [("circle", (21,))]
    # START, PUSH, CIRCLE, STOP
    assert len(states) == 4
    assert [s.last_opcode for s in states] == [Opcode.START, Opcode.PUSH, Opcode.CIRCLE, Opcode.STOP]


def test_start_stop_only():
    _, renderer, states = run("ATG TAA")
    assert len(states) == 2
    assert renderer.draw_calls() == []


def test_snapshots_are_independent_copies():
    _, _, states = run("ATG GAA AAT GAA ACA TAA")
    assert states[1].stack == (3,)
    assert states[2].stack == (3, 4)
    assert states[0].stack == ()
    assert [s.instruction_count for s in states] == [1, 2, 3, 4]


def test_instruction_pointer_tracks_token_index():
    _, _, states = run("ATG GAA CCC GGA TAA")
    assert [s.instruction_pointer for s in states] == [0, 1, 3, 4]


def test_execution_starts_at_first_start():
    _, renderer, _ = run("GGA ATG GAA ACA GGA TAA")
    assert renderer.draw_calls() == [("circle", (4,))]


def test_missing_start_runs_from_the_beginning():
    _, renderer, _ = run("GAA CCC GGA TAA")
    assert renderer.draw_calls() == [("circle", (21,))]


def test_stop_halts_execution():
    _, renderer, states = run("ATG TAA GAA ACA GGA")
    assert renderer.draw_calls() == []
    assert states[-1].last_opcode is Opcode.STOP


def test_missing_stop_runs_to_the_end():
    _, renderer, states = run("ATG GAA ACA GGA")
    assert renderer.draw_calls() == [("circle", (4,))]
    assert len(states) == 3


def test_unknown_codons_are_skipped():
    _, renderer, states = run("ATG XYZ GAA ACA GGA TAA")
    assert renderer.draw_calls() == [("circle", (4,))]
    assert len(states) == 4


def test_push_without_operand_pushes_zero():
    _, _, states = run("ATG GAA")
    assert states[-1].stack == (0,)


@pytest.mark.parametrize(
    "source, expected",
    [
        ("ATG GAA ACA GAA AAC CTG TAA", 5),  # 4 + 1
        ("ATG GAA ACA GAA AAC CAG TAA", 3),  # 4 - 1
        ("ATG GAA ACA GAA AAG CTT TAA", 8),  # 4 * 2
        ("ATG GAA AGC GAA AAG CAT TAA", 4),  # 9 // 2
        ("ATG GAA ACA GAA AAA CAT TAA", 0),  # division by zero
        ("ATG GAA AAC GAA AAG CTC TAA", 1),  # 1 < 2
        ("ATG GAA AAG GAA AAC CTC TAA", 0),  # 2 < 1
        ("ATG GAA AAG GAA AAG CTA TAA", 1),  # 2 == 2
    ],
)
def test_arithmetic_and_comparison(source, expected):
    _, _, states = run(source)
    assert states[-1].stack == (expected,)


def test_stack_operations():
    _, _, states = run("ATG GAA ACC ATA TAA")
    assert states[-2].stack == (5, 5)
    _, _, states = run("ATG GAA AAC GAA AAG TGG TAA")
    assert states[-2].stack == (2, 1)
    _, _, states = run("ATG GAA AAC GAA AAG TAC TAA")
    assert states[-2].stack == (1,)


def test_stack_underflow_yields_zero():
    _, renderer, states = run("ATG GGA TGG CTG TAA")
    assert renderer.draw_calls() == [("circle", (0,))]
    assert states[-1].stack == (0,)


def test_repeated_multiplication_stays_finite():
    body = " ".join(["ATA CTT"] * 40)
    _, _, states = run(f"ATG GAA TTT {body} TAA")
    top = states[-1].stack[-1]
    assert top == top * 1  # not NaN
    assert abs(float(top)) != float("inf")


def test_shape_operand_order():
    _, renderer, _ = run("ATG GAA AGA GAA ACA CCA GAA AGA GAA ACA GTA TAA")
    assert renderer.draw_calls() == [("rect", (8, 4)), ("ellipse", (8, 4))]
    _, renderer, _ = run("ATG GAA ATA AAA GAA ACA GCA TAA")
    assert renderer.draw_calls() == [("line", (12,)), ("triangle", (4,))]


def test_transforms_update_state_and_renderer():
    _, renderer, states = run("ATG GAA AAT GAA ACA ACA GAA CTG AGA GAA AAG CGA TAA")
    final = states[-1]
    assert final.position == Point(3, 4)
    assert final.rotation == 30
    assert final.scale == 2
    assert ("translate", (3, 4)) in renderer.calls
    assert ("rotate", (30,)) in renderer.calls
    assert ("scale", (2,)) in renderer.calls


def test_scale_by_zero_is_floored_to_min_scale():
    # PUSH 0, SCALE, SAVE, RESTORE
    _, renderer, states = run("ATG GAA AAA CGA TCA TCG TAA")
    assert states[-1].scale == MIN_SCALE
    assert renderer.get_current_transform().scale == MIN_SCALE
    assert ("set_scale", (MIN_SCALE,)) in renderer.calls


def test_color_sets_hsl():
    _, renderer, states = run("ATG GAA GGA GAA TAA GAA GAA TTA TAA")
    assert states[-1].color == HSLColor(40, 48, 32)
    assert ("set_color", (40, 48, 32)) in renderer.calls


def test_save_and_restore_state():
    _, renderer, states = run("ATG TCA GAA AAT GAA ACA ACA TCG TAA")
    assert states[1].state_depth == 1
    assert states[4].position == Point(3, 4)
    # The saved copy inside the trace is not affected by the later translate.
    assert states[4].state_stack[0].position == Point(0, 0)
    assert states[-1].position == Point(0, 0)
    assert states[-1].state_depth == 0
    assert ("set_position", (0.0, 0.0)) in renderer.calls


def test_restore_on_empty_state_stack_is_a_noop():
    _, renderer, states = run("ATG TCG TAA")
    assert states[-1].state_depth == 0
    assert not any(name == "set_position" for name, _ in renderer.calls)


def test_loop_repeats_window():
    # PUSH 2 (window), PUSH 3 (count), LOOP, [PUSH 4, CIRCLE]
    _, renderer, states = run("ATG GAA AAG GAA AAT CAA GAA ACA GGA TAA")
    assert renderer.draw_calls() == [("circle", (4,))] * 3
    assert states[-1].last_opcode is Opcode.STOP


def test_loop_with_zero_count_skips_window():
    _, renderer, _ = run("ATG GAA AAG GAA AAA CAA GAA ACA GGA TAA")
    assert renderer.draw_calls() == []


def test_instruction_budget_truncates_runaway_loop():
    vm, _, states = run("ATG GAA AAC GAA TTT CAA CAC TAA", max_instructions=20)
    assert vm.truncated
    assert len(states) == 20
    assert states[-1].instruction_count == 20


def test_nested_loops_are_bounded_by_default_budget():
    source = "ATG GAA ACT GAA TTT CAA GAA ACA GAA TTT CAA GAA AAC GAA TTT CAA CAC TAA"
    vm, _, states = run(source)
    assert vm.truncated
    assert len(states) == 10_000


def test_runs_are_deterministic(hello_circle):
    _, first_renderer, first = run(hello_circle, seed=7)
    _, second_renderer, second = run(hello_circle, seed=7)
    assert [s.as_dict() for s in first] == [s.as_dict() for s in second]
    assert first_renderer.calls == second_renderer.calls
    assert first[0].seed == 7


def test_vm_can_be_reused():
    renderer = RecordingRenderer()
    vm = CodonVM(renderer)
    vm.run(tokenize("ATG GAA ACA GGA TAA"))
    states = vm.run(tokenize("ATG TAA"))
    assert len(states) == 2
    assert renderer.draw_calls() == []


@pytest.mark.parametrize("budget", [0, -5, 2.5, True])
def test_invalid_budget_is_rejected(budget):
    with pytest.raises(ValueError):
        CodonVM(RecordingRenderer(), max_instructions=budget)


def test_assemble_folds_push_operands():
    program = assemble(tokenize("ATG GAA CCC GGA TAA"))
    assert [(i.opcode, i.operand) for i in program] == [
        (Opcode.START, 0),
        (Opcode.PUSH, 21),
        (Opcode.CIRCLE, 0),
        (Opcode.STOP, 0),
    ]
