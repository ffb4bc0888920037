"""
Canvas Renderer Module

Concrete Renderer that draws genome output onto an off-screen matplotlib
figure, so genomes can be rendered to PNG files and pixel arrays without a
display.

Coordinates follow the usual canvas convention: origin at the top-left,
y growing downward, rotation in degrees clockwise on screen.

Public API:
    MatplotlibRenderer(width, height) -> Renderer
"""

import base64
import colorsys
import io
import math
from typing import Tuple

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib import patches
from matplotlib.transforms import Affine2D

from vm.renderer import Renderer


BACKGROUND = '#FFFFFF'
LINE_WIDTH = 2.0
DPI = 100

# Dots per unit of NOISE intensity, and spread radius per unit
NOISE_DENSITY = 4
NOISE_SPREAD = 2.0


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[float, float, float]:
    """Convert HSL (degrees, percent, percent) to an RGB tuple in [0, 1]."""
    return colorsys.hls_to_rgb((h % 360) / 360.0, l / 100.0, s / 100.0)


class MatplotlibRenderer(Renderer):
    """
    Off-screen raster renderer backed by matplotlib's Agg canvas.

    Args:
        width: Canvas width in pixels
        height: Canvas height in pixels

    Example:
        >>> r = MatplotlibRenderer(100, 100)
        >>> r.circle(10)
        >>> r.to_array().shape
        (100, 100, 3)
    """

    def __init__(self, width: int = 400, height: int = 400):
        super().__init__(width, height)
        self.figure = Figure(figsize=(width / DPI, height / DPI), dpi=DPI)
        self.canvas = FigureCanvasAgg(self.figure)
        self.ax = self.figure.add_axes([0, 0, 1, 1])
        self.draw_count = 0
        self.clear()

    def clear(self):
        self._reset_transform()
        self.draw_count = 0
        self.ax.cla()
        self.ax.set_xlim(0, self.width)
        self.ax.set_ylim(self.height, 0)
        self.ax.set_aspect('equal', adjustable='box')
        self.ax.set_facecolor(BACKGROUND)
        self.figure.set_facecolor(BACKGROUND)
        self.ax.axis('off')

    def _transform(self):
        """Local shape coordinates -> display coordinates."""
        local = (
            Affine2D()
            .scale(self._scale)
            .rotate_deg(self._rotation)
            .translate(self._x, self._y)
        )
        return local + self.ax.transData

    @property
    def _rgb(self) -> Tuple[float, float, float]:
        return hsl_to_rgb(*self._color)

    def _add_patch(self, patch):
        patch.set_transform(self._transform())
        self.ax.add_patch(patch)
        self.draw_count += 1

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def circle(self, radius):
        self._add_patch(patches.Circle((0, 0), radius, facecolor=self._rgb,
                                       edgecolor='none'))

    def rect(self, width, height):
        self._add_patch(patches.Rectangle((-width / 2, -height / 2), width, height,
                                          facecolor=self._rgb, edgecolor='none'))

    def line(self, length):
        line = Line2D([0, length], [0, 0], color=self._rgb, linewidth=LINE_WIDTH,
                      transform=self._transform())
        self.ax.add_line(line)
        self.draw_count += 1

    def triangle(self, size):
        vertices = [
            (size * math.cos(math.radians(a)), size * math.sin(math.radians(a)))
            for a in (-90, 30, 150)
        ]
        self._add_patch(patches.Polygon(vertices, closed=True, facecolor=self._rgb,
                                        edgecolor='none'))

    def ellipse(self, rx, ry):
        self._add_patch(patches.Ellipse((0, 0), 2 * rx, 2 * ry, facecolor=self._rgb,
                                        edgecolor='none'))

    def noise(self, seed, intensity):
        n_points = int(intensity) * NOISE_DENSITY
        if n_points <= 0:
            return
        rng = np.random.default_rng(seed)
        spread = max(intensity * NOISE_SPREAD, 1.0)
        points = rng.uniform(-spread, spread, size=(n_points, 2))
        self.ax.scatter(points[:, 0], points[:, 1], s=1, color=self._rgb,
                        transform=self._transform())
        self.draw_count += 1

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_array(self) -> np.ndarray:
        """Rasterize the canvas to a (height, width, 3) uint8 RGB array."""
        self.canvas.draw()
        rgba = np.asarray(self.canvas.buffer_rgba())
        return rgba[..., :3].copy()

    def to_png_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.figure.savefig(buf, format='png', dpi=DPI, facecolor=BACKGROUND)
        return buf.getvalue()

    def save(self, outpath):
        """Write the canvas to a PNG file."""
        with open(outpath, 'wb') as f:
            f.write(self.to_png_bytes())

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.to_png_bytes()).decode('ascii')
        return f"data:image/png;base64,{encoded}"
