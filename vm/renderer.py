"""
Renderer Module

The drawing capability the VM depends on.

The VM only ever talks to the abstract Renderer below; concrete backends
(an in-memory recorder for tests, a matplotlib canvas for images) live
elsewhere and are injected at construction time.

Public API:
    Renderer: Abstract drawing surface
    RecordingRenderer: Headless renderer that logs every call
    TransformState: Snapshot of a renderer's current transform
"""

import base64
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Tuple


@dataclass(frozen=True)
class TransformState:
    """Current renderer transform."""
    x: float
    y: float
    rotation: float
    scale: float


class Renderer(ABC):
    """
    Abstract drawing surface.

    Transform bookkeeping is shared by all backends; subclasses supply the
    primitives and the image export. Transform operations are relative
    (translate/rotate/scale) or absolute (set_position/set_rotation/
    set_scale). Drawing happens at the current position, rotated and
    scaled by the current transform.
    """

    def __init__(self, width: int = 400, height: int = 400):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._reset_transform()

    def _reset_transform(self):
        self._x = self.width / 2
        self._y = self.height / 2
        self._rotation = 0.0
        self._scale = 1.0
        self._color = (0.0, 0.0, 0.0)

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def clear(self):
        """Erase the canvas and reset the transform."""

    @abstractmethod
    def circle(self, radius: float):
        """Draw a circle centered on the current position."""

    @abstractmethod
    def rect(self, width: float, height: float):
        """Draw a rectangle centered on the current position."""

    @abstractmethod
    def line(self, length: float):
        """Draw a line from the current position along the heading."""

    @abstractmethod
    def triangle(self, size: float):
        """Draw an equilateral triangle centered on the current position."""

    @abstractmethod
    def ellipse(self, rx: float, ry: float):
        """Draw an ellipse centered on the current position."""

    @abstractmethod
    def noise(self, seed: int, intensity: float):
        """Scatter seeded random dots around the current position."""

    @abstractmethod
    def to_data_url(self) -> str:
        """Export the canvas as a data URL."""

    # ------------------------------------------------------------------
    # Transform
    # ------------------------------------------------------------------

    def translate(self, dx: float, dy: float):
        self._x += dx
        self._y += dy

    def rotate(self, degrees: float):
        self._rotation = (self._rotation + degrees) % 360

    def scale(self, factor: float):
        self._scale *= factor

    def set_position(self, x: float, y: float):
        self._x = x
        self._y = y

    def set_rotation(self, degrees: float):
        self._rotation = degrees % 360

    def set_scale(self, scale: float):
        self._scale = scale

    def set_color(self, h: float, s: float, l: float):
        self._color = (h, s, l)

    def get_current_transform(self) -> TransformState:
        return TransformState(
            x=self._x, y=self._y, rotation=self._rotation, scale=self._scale
        )


class RecordingRenderer(Renderer):
    """
    Renderer that records calls instead of drawing.

    Each call is appended to `calls` as a (name, args) tuple, which makes
    it convenient for asserting exactly what a program asked to draw.

    Example:
        >>> r = RecordingRenderer()
        >>> r.circle(10)
        >>> r.calls
        [('circle', (10,))]
    """

    DRAWING_CALLS = ('circle', 'rect', 'line', 'triangle', 'ellipse', 'noise')

    def __init__(self, width: int = 400, height: int = 400):
        super().__init__(width, height)
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def _record(self, name: str, *args):
        self.calls.append((name, args))

    def clear(self):
        self._reset_transform()
        self.calls = []

    def circle(self, radius):
        self._record('circle', radius)

    def rect(self, width, height):
        self._record('rect', width, height)

    def line(self, length):
        self._record('line', length)

    def triangle(self, size):
        self._record('triangle', size)

    def ellipse(self, rx, ry):
        self._record('ellipse', rx, ry)

    def noise(self, seed, intensity):
        self._record('noise', seed, intensity)

    def translate(self, dx, dy):
        super().translate(dx, dy)
        self._record('translate', dx, dy)

    def rotate(self, degrees):
        super().rotate(degrees)
        self._record('rotate', degrees)

    def scale(self, factor):
        super().scale(factor)
        self._record('scale', factor)

    def set_position(self, x, y):
        super().set_position(x, y)
        self._record('set_position', x, y)

    def set_rotation(self, degrees):
        super().set_rotation(degrees)
        self._record('set_rotation', degrees)

    def set_scale(self, scale):
        super().set_scale(scale)
        self._record('set_scale', scale)

    def set_color(self, h, s, l):
        super().set_color(h, s, l)
        self._record('set_color', h, s, l)

    @property
    def drawing_calls(self) -> List[Tuple[str, Tuple[Any, ...]]]:
        """Only the calls that put marks on the canvas."""
        return [c for c in self.calls if c[0] in self.DRAWING_CALLS]

    def to_data_url(self) -> str:
        payload = json.dumps([[name, list(args)] for name, args in self.calls])
        encoded = base64.b64encode(payload.encode('utf-8')).decode('ascii')
        return f"data:application/json;base64,{encoded}"
