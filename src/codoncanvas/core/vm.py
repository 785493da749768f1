"""Stack-based VM that executes codon tokens against a renderer."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Sequence

from codoncanvas.renderers.base import MIN_SCALE, Renderer
from .codons import Opcode
from .lexer import Token
from .units import sanitize_number

logger = logging.getLogger(__name__)

DEFAULT_MAX_INSTRUCTIONS = 10_000


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class HSLColor:
    h: float
    s: float
    l: float


@dataclass
class TransformState:
    position: Point = Point(0.0, 0.0)
    rotation: float = 0.0
    scale: float = 1.0
    color: HSLColor = HSLColor(0.0, 0.0, 0.0)

    def copy(self) -> "TransformState":
        return replace(self)

    def as_dict(self) -> dict:
        return {
            "position": {"x": self.position.x, "y": self.position.y},
            "rotation": self.rotation,
            "scale": self.scale,
            "color": {"h": self.color.h, "s": self.color.s, "l": self.color.l},
        }


@dataclass(frozen=True)
class VMState:
    """One snapshot of the interpreter, taken after an executed instruction."""

    position: Point
    rotation: float
    scale: float
    color: HSLColor
    stack: tuple
    instruction_pointer: int
    state_stack: tuple
    instruction_count: int
    seed: int
    last_opcode: Opcode | None = None

    @property
    def state_depth(self) -> int:
        return len(self.state_stack)

    def as_dict(self) -> dict:
        return {
            "position": {"x": self.position.x, "y": self.position.y},
            "rotation": self.rotation,
            "scale": self.scale,
            "color": {"h": self.color.h, "s": self.color.s, "l": self.color.l},
            "stack": list(self.stack),
            "instruction_pointer": self.instruction_pointer,
            "state_stack": [s.as_dict() for s in self.state_stack],
            "instruction_count": self.instruction_count,
            "seed": self.seed,
            "last_opcode": self.last_opcode.value if self.last_opcode is not None else None,
        }


@dataclass(frozen=True)
class Instruction:
    pointer: int
    opcode: Opcode | None
    codon: str
    operand: int = 0


def assemble(tokens: Sequence[Token]) -> list[Instruction]:
    """Fold PUSH operands into their instruction; one entry per executable token."""
    program: list[Instruction] = []
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        has_operand = idx + 1 < len(tokens) and tokens[idx + 1].is_literal
        if token.opcode is Opcode.PUSH and has_operand:
            program.append(Instruction(idx, Opcode.PUSH, token.codon, tokens[idx + 1].value))
            idx += 2
            continue
        # A PUSH without an operand pushes 0.
        program.append(Instruction(idx, token.opcode, token.codon))
        idx += 1
    return program


class _Halt(Exception):
    pass


class CodonVM:
    """Execute a token stream, returning one :class:`VMState` per instruction.

    Numeric problems (underflow, division by zero, non-finite values) never
    raise; they are mapped to 0. ``max_instructions`` bounds the total work of
    a run including loop repetitions; hitting it ends the run early and sets
    ``truncated``.
    """

    def __init__(self, renderer: Renderer, max_instructions: int = DEFAULT_MAX_INSTRUCTIONS, seed: int = 0):
        if isinstance(max_instructions, bool) or not isinstance(max_instructions, int) or max_instructions < 1:
            raise ValueError(f"max_instructions must be a positive integer, got: {max_instructions!r}")
        self.renderer = renderer
        self.max_instructions = max_instructions
        self.seed = seed
        self.reset()

    def reset(self):
        self.stack: List[float] = []
        self.state = TransformState()
        self.state_stack: List[TransformState] = []
        self.instruction_pointer = 0
        self.instruction_count = 0
        self.last_opcode: Opcode | None = None
        self.truncated = False
        self.trace: List[VMState] = []

    def snapshot(self) -> VMState:
        return VMState(
            position=self.state.position,
            rotation=self.state.rotation,
            scale=self.state.scale,
            color=self.state.color,
            stack=tuple(self.stack),
            instruction_pointer=self.instruction_pointer,
            state_stack=tuple(s.copy() for s in self.state_stack),
            instruction_count=self.instruction_count,
            seed=self.seed,
            last_opcode=self.last_opcode,
        )

    def pop(self) -> float:
        if not self.stack:
            return 0
        return sanitize_number(self.stack.pop())

    def push(self, value) -> None:
        self.stack.append(sanitize_number(value))

    def run(self, tokens: Sequence[Token]) -> list[VMState]:
        self.reset()
        self.renderer.clear()
        origin = self.renderer.get_current_transform()
        self.state = TransformState(position=Point(origin.x, origin.y), rotation=origin.rotation, scale=origin.scale)
        program = assemble(tokens)
        start = next((i for i, ins in enumerate(program) if ins.opcode is Opcode.START), 0)
        try:
            self._execute_block(program[start:])
        except _Halt:
            pass
        return list(self.trace)

    def _execute_block(self, block: Sequence[Instruction]) -> None:
        pos = 0
        while pos < len(block):
            ins = block[pos]
            if ins.opcode is None:
                logger.debug("Skipping unknown codon %s at token %d", ins.codon, ins.pointer)
                pos += 1
                continue
            self._tick(ins)
            if ins.opcode is Opcode.STOP:
                self.trace.append(self.snapshot())
                raise _Halt()
            if ins.opcode is Opcode.LOOP:
                count = int(self.pop())
                n = max(0, min(int(self.pop()), len(block) - pos - 1))
                self.trace.append(self.snapshot())
                window = block[pos + 1 : pos + 1 + n]
                if any(w.opcode is not None for w in window):
                    for _ in range(max(0, count)):
                        self._execute_block(window)
                pos += 1 + n
                continue
            self.step(ins)
            self.trace.append(self.snapshot())
            pos += 1

    def _tick(self, ins: Instruction) -> None:
        if self.instruction_count >= self.max_instructions:
            self.truncated = True
            logger.warning("Instruction limit reached (max %d); returning partial trace", self.max_instructions)
            raise _Halt()
        self.instruction_count += 1
        self.instruction_pointer = ins.pointer
        self.last_opcode = ins.opcode

    def step(self, ins: Instruction) -> None:
        op = ins.opcode
        r = self.renderer
        if op in (Opcode.START, Opcode.NOP, Opcode.STOP, Opcode.LOOP):
            return
        elif op is Opcode.PUSH:
            self.push(ins.operand)
        elif op is Opcode.DUP:
            value = self.pop()
            self.push(value)
            self.push(value)
        elif op is Opcode.POP:
            self.pop()
        elif op is Opcode.SWAP:
            b, a = self.pop(), self.pop()
            self.push(b)
            self.push(a)
        elif op in (Opcode.ADD, Opcode.SUB, Opcode.MUL, Opcode.DIV, Opcode.EQ, Opcode.LT):
            b, a = self.pop(), self.pop()
            self.push(self._binary(op, a, b))
        elif op is Opcode.CIRCLE:
            r.circle(self.pop())
        elif op is Opcode.RECT:
            height, width = self.pop(), self.pop()
            r.rect(width, height)
        elif op is Opcode.LINE:
            r.line(self.pop())
        elif op is Opcode.TRIANGLE:
            r.triangle(self.pop())
        elif op is Opcode.ELLIPSE:
            ry, rx = self.pop(), self.pop()
            r.ellipse(rx, ry)
        elif op is Opcode.TRANSLATE:
            dy, dx = self.pop(), self.pop()
            pos = self.state.position
            self.state.position = Point(sanitize_number(pos.x + dx), sanitize_number(pos.y + dy))
            r.translate(dx, dy)
        elif op is Opcode.ROTATE:
            degrees = self.pop()
            self.state.rotation = sanitize_number(self.state.rotation + degrees)
            r.rotate(degrees)
        elif op is Opcode.SCALE:
            factor = self.pop()
            self.state.scale = max(sanitize_number(self.state.scale * factor), MIN_SCALE)
            r.scale(factor)
        elif op is Opcode.COLOR:
            l, s, h = self.pop(), self.pop(), self.pop()
            self.state.color = HSLColor(h, s, l)
            r.set_color(h, s, l)
        elif op is Opcode.SAVE_STATE:
            self.state_stack.append(self.state.copy())
        elif op is Opcode.RESTORE_STATE:
            if not self.state_stack:
                return
            saved = self.state_stack.pop()
            self.state = saved
            r.set_position(saved.position.x, saved.position.y)
            r.set_rotation(saved.rotation)
            r.set_scale(saved.scale)
            r.set_color(saved.color.h, saved.color.s, saved.color.l)
        else:  # pragma: no cover - Opcode is closed
            raise ValueError(f"Unhandled opcode {op}")

    @staticmethod
    def _binary(op: Opcode, a, b):
        if op is Opcode.ADD:
            return a + b
        if op is Opcode.SUB:
            return a - b
        if op is Opcode.MUL:
            return a * b
        if op is Opcode.DIV:
            return 0 if b == 0 else a // b
        if op is Opcode.EQ:
            return 1 if a == b else 0
        return 1 if a < b else 0
