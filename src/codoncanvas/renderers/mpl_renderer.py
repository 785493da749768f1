"""Matplotlib drawing backend."""
from __future__ import annotations

import base64
import colorsys
from io import BytesIO
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt
from matplotlib import patches
from matplotlib.transforms import Affine2D

from codoncanvas.core.units import clamp, sanitize_number
from .base import MIN_SCALE, Transform, noise_points



class MatplotlibRenderer:
    """Draw VM output onto a matplotlib figure.

    All incoming values are in the VM's 6-bit value space (``value_range``
    units across the canvas). Lengths and positions are mapped to pixels at
    draw time, and colors are mapped to hue degrees and saturation/lightness
    percentages before conversion to RGB.
    """

    def __init__(self, width: int = 400, height: int = 400, *, dpi: int = 100, background: str = "white", value_range: int = 64):
        self.width = width
        self.height = height
        self.dpi = dpi
        self.background = background
        self.value_range = value_range
        self.fig, self.ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.fig.subplots_adjust(left=0, right=1, bottom=0, top=1)
        self.clear()

    @property
    def unit(self) -> float:
        return self.width / self.value_range

    def clear(self) -> None:
        self.ax.clear()
        self.ax.set_axis_off()
        self.ax.set_xlim(0, self.width)
        self.ax.set_ylim(self.height, 0)
        self.ax.set_aspect("equal")
        self.fig.patch.set_facecolor(self.background)
        self._x = self.value_range / 2
        self._y = self.value_range / 2 * self.height / self.width
        self._rotation = 0.0
        self._scale = 1.0
        self._rgb = (0.0, 0.0, 0.0)

    def _transform(self):
        return (
            Affine2D().scale(self._scale).rotate_deg(self._rotation).translate(self._x, self._y).scale(self.unit)
            + self.ax.transData
        )

    def _add(self, patch) -> None:
        patch.set_transform(self._transform())
        self.ax.add_patch(patch)

    def circle(self, radius: float) -> None:
        self._add(patches.Circle((0, 0), radius, facecolor=self._rgb, edgecolor=self._rgb))

    def rect(self, width: float, height: float) -> None:
        self._add(patches.Rectangle((-width / 2, -height / 2), width, height, facecolor=self._rgb, edgecolor=self._rgb))

    def line(self, length: float) -> None:
        path = patches.Polygon([(-length / 2, 0), (length / 2, 0)], closed=False, fill=False, edgecolor=self._rgb)
        self._add(path)

    def triangle(self, size: float) -> None:
        h = size * np.sqrt(3) / 2
        points = [(0, -h / 2), (-size / 2, h / 2), (size / 2, h / 2)]
        self._add(patches.Polygon(points, closed=True, facecolor=self._rgb, edgecolor=self._rgb))

    def ellipse(self, rx: float, ry: float) -> None:
        self._add(patches.Ellipse((0, 0), 2 * rx, 2 * ry, facecolor=self._rgb, edgecolor=self._rgb))

    def noise(self, seed: int, intensity: float) -> None:
        points = noise_points(seed, intensity, self.value_range)
        if len(points) == 0:
            return
        self.ax.scatter(points[:, 0], points[:, 1], s=0.5, color=[self._rgb], transform=self._transform())

    def translate(self, dx: float, dy: float) -> None:
        self._x += sanitize_number(dx)
        self._y += sanitize_number(dy)

    def set_position(self, x: float, y: float) -> None:
        self._x = sanitize_number(x)
        self._y = sanitize_number(y)

    def rotate(self, degrees: float) -> None:
        self._rotation += sanitize_number(degrees)

    def set_rotation(self, degrees: float) -> None:
        self._rotation = sanitize_number(degrees)

    def scale(self, factor: float) -> None:
        self._scale = max(self._scale * sanitize_number(factor), MIN_SCALE)

    def set_scale(self, scale: float) -> None:
        self._scale = max(sanitize_number(scale), MIN_SCALE)

    def set_color(self, h: float, s: float, l: float) -> None:
        hue = (sanitize_number(h) / self.value_range) % 1.0
        sat = clamp(sanitize_number(s) / self.value_range, 0.0, 1.0)
        light = clamp(sanitize_number(l) / self.value_range, 0.0, 1.0)
        self._rgb = colorsys.hls_to_rgb(hue, light, sat)

    def get_current_transform(self) -> Transform:
        return Transform(self._x, self._y, self._rotation, self._scale)

    def to_png_bytes(self) -> bytes:
        buf = BytesIO()
        self.fig.savefig(buf, format="png", facecolor=self.background)
        return buf.getvalue()

    def to_data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.to_png_bytes()).decode("ascii")

    def save(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.fig.savefig(path, facecolor=self.background)
        return path

    def close(self) -> None:
        plt.close(self.fig)
