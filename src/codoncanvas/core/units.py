"""Numeric guards shared by the VM and renderers."""
import math
import numpy as np


def clamp(value: float, min_v: float, max_v: float) -> float:
    return float(np.clip(value, min_v, max_v))


def sanitize_number(value) -> float | int:
    """Map NaN, infinities and values too large for a float to 0."""
    try:
        as_float = float(value)
    except (OverflowError, TypeError, ValueError):
        return 0
    if not math.isfinite(as_float):
        return 0
    return value
