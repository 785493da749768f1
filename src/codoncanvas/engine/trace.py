"""Execution trace aggregation and output."""
from __future__ import annotations
from pathlib import Path
from typing import Sequence
import pandas as pd

from codoncanvas.core.vm import VMState

TRACE_COLUMNS = [
    "step",
    "instruction_pointer",
    "opcode",
    "x",
    "y",
    "rotation",
    "scale",
    "h",
    "s",
    "l",
    "stack_depth",
    "stack_top",
    "state_depth",
]


def _record(step: int, state: VMState) -> dict:
    return {
        "step": step,
        "instruction_pointer": state.instruction_pointer,
        "opcode": state.last_opcode.value if state.last_opcode is not None else None,
        "x": state.position.x,
        "y": state.position.y,
        "rotation": state.rotation,
        "scale": state.scale,
        "h": state.color.h,
        "s": state.color.s,
        "l": state.color.l,
        "stack_depth": len(state.stack),
        "stack_top": state.stack[-1] if state.stack else None,
        "state_depth": state.state_depth,
    }


def trace_frame(states: Sequence[VMState]) -> pd.DataFrame:
    return pd.DataFrame([_record(i, s) for i, s in enumerate(states)], columns=TRACE_COLUMNS)


def save_trace(states: Sequence[VMState], path: Path) -> pd.DataFrame:
    df = trace_frame(states)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return df
