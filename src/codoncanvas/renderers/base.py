"""Renderer capability consumed by the VM, plus an in-memory recording backend."""
from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, List, Protocol, Tuple, runtime_checkable

import numpy as np

from codoncanvas.core.rng import make_rng
from codoncanvas.core.units import clamp, sanitize_number

MAX_NOISE_INTENSITY = 64
MIN_NOISE_DOTS = 10
MIN_SCALE = 0.001
DOTS_PER_INTENSITY = 5


@dataclass(frozen=True)
class Transform:
    x: float
    y: float
    rotation: float
    scale: float


@runtime_checkable
class Renderer(Protocol):
    def clear(self) -> None: ...

    def circle(self, radius: float) -> None: ...

    def rect(self, width: float, height: float) -> None: ...

    def line(self, length: float) -> None: ...

    def triangle(self, size: float) -> None: ...

    def ellipse(self, rx: float, ry: float) -> None: ...

    def noise(self, seed: int, intensity: float) -> None: ...

    def translate(self, dx: float, dy: float) -> None: ...

    def rotate(self, degrees: float) -> None: ...

    def scale(self, factor: float) -> None: ...

    def set_color(self, h: float, s: float, l: float) -> None: ...

    def set_position(self, x: float, y: float) -> None: ...

    def set_rotation(self, degrees: float) -> None: ...

    def set_scale(self, scale: float) -> None: ...

    def get_current_transform(self) -> Transform: ...

    def to_data_url(self) -> str: ...


def noise_params(intensity: float, width: float) -> tuple[float, int]:
    """Radius and dot count for a noise patch of the given intensity."""
    safe = clamp(sanitize_number(intensity), 0, MAX_NOISE_INTENSITY)
    radius = safe / MAX_NOISE_INTENSITY * width
    return radius, int(safe * DOTS_PER_INTENSITY) + MIN_NOISE_DOTS


def noise_points(seed: int, intensity: float, width: float) -> np.ndarray:
    """Reproducible dot offsets inside a disc; same seed gives the same points."""
    radius, count = noise_params(intensity, width)
    rng = make_rng(int(abs(sanitize_number(seed))))
    angles = rng.uniform(0.0, 2 * np.pi, size=count)
    radii = radius * np.sqrt(rng.uniform(0.0, 1.0, size=count))
    return np.column_stack((radii * np.cos(angles), radii * np.sin(angles)))


@dataclass
class RecordingRenderer:
    """Backend that records every call; useful for tests and headless tracing."""

    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    scale_factor: float = 1.0
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    calls: List[Tuple[str, Tuple[Any, ...]]] = field(default_factory=list)

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))

    def draw_calls(self) -> list[tuple[str, tuple]]:
        shapes = {"circle", "rect", "line", "triangle", "ellipse", "noise"}
        return [call for call in self.calls if call[0] in shapes]

    def clear(self) -> None:
        self.calls.clear()
        self.x, self.y, self.rotation, self.scale_factor = 0.0, 0.0, 0.0, 1.0
        self.color = (0.0, 0.0, 0.0)

    def circle(self, radius: float) -> None:
        self._record("circle", radius)

    def rect(self, width: float, height: float) -> None:
        self._record("rect", width, height)

    def line(self, length: float) -> None:
        self._record("line", length)

    def triangle(self, size: float) -> None:
        self._record("triangle", size)

    def ellipse(self, rx: float, ry: float) -> None:
        self._record("ellipse", rx, ry)

    def noise(self, seed: int, intensity: float) -> None:
        self._record("noise", seed, intensity)

    def translate(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy
        self._record("translate", dx, dy)

    def rotate(self, degrees: float) -> None:
        self.rotation += degrees
        self._record("rotate", degrees)

    def scale(self, factor: float) -> None:
        self.scale_factor = max(sanitize_number(self.scale_factor * factor), MIN_SCALE)
        self._record("scale", factor)

    def set_color(self, h: float, s: float, l: float) -> None:
        self.color = (h, s, l)
        self._record("set_color", h, s, l)

    def set_position(self, x: float, y: float) -> None:
        self.x, self.y = x, y
        self._record("set_position", x, y)

    def set_rotation(self, degrees: float) -> None:
        self.rotation = degrees
        self._record("set_rotation", degrees)

    def set_scale(self, scale: float) -> None:
        self.scale_factor = max(sanitize_number(scale), MIN_SCALE)
        self._record("set_scale", scale)

    def get_current_transform(self) -> Transform:
        return Transform(self.x, self.y, self.rotation, self.scale_factor)

    def to_data_url(self) -> str:
        payload = json.dumps([[name, list(args)] for name, args in self.calls], default=float)
        encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")
        return f"data:application/json;base64,{encoded}"
