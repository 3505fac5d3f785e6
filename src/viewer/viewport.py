"""Pan/zoom state machine for the rendered mind-map surface.

The controller owns a uniform scale and a pan offset expressed in
unscaled diagram units. The surface is drawn with the CSS-style matrix
``matrix(s, 0, 0, s, pan_x * s, pan_y * s)``, so a diagram point ``p``
appears on screen at ``s * (p + pan)``.

There are two zoom entry points with different behaviour:

- ``zoom_at_point`` (wheel / pinch): clamped to ``[0.1, 3]`` and anchored so
  the diagram point under the pointer stays under the pointer.
- ``zoom_step`` (toolbar buttons): ``±0.1`` clamped to ``[0.5, 2]``, scaled
  about the surface centre with no pointer anchor.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)

POINTER_ZOOM_MIN = 0.1
POINTER_ZOOM_MAX = 3.0
STEP_ZOOM = 0.1
STEP_ZOOM_MIN = 0.5
STEP_ZOOM_MAX = 2.0
WHEEL_ZOOM_FACTOR = -0.01


class PanState(StrEnum):
    IDLE = "idle"
    PANNING = "panning"


class TransformOrigin(StrEnum):
    TOP_LEFT = "0 0"
    CENTER = "center center"


class Cursor(StrEnum):
    DEFAULT = "default"
    GRAB = "grab"
    GRABBING = "grabbing"


@dataclass(frozen=True)
class Transform:
    """Affine transform pushed to the surface."""

    scale: float
    translate_x: float
    translate_y: float
    origin: TransformOrigin = TransformOrigin.TOP_LEFT

    def css(self) -> str:
        return (
            f"matrix({self.scale}, 0, 0, {self.scale}, "
            f"{self.translate_x}, {self.translate_y})"
        )


@dataclass
class ViewportState:
    scale: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0


@dataclass
class DragSession:
    """Pointer registration for one drag gesture.

    ``origin_x/origin_y`` is the screen position the pan offset is measured
    from. ``active`` is cleared when the gesture ends.
    """

    origin_x: float
    origin_y: float
    active: bool = True


class Surface(ABC):
    """The rendered diagram the controller transforms."""

    @abstractmethod
    def set_transform(self, transform: Transform) -> None:
        """Apply *transform* to the diagram container."""

    @abstractmethod
    def set_cursor(self, cursor: Cursor) -> None:
        """Show *cursor* over the container."""

    @abstractmethod
    def container_size(self) -> tuple[float, float] | None:
        """Pixel size of the viewport container, or None if not laid out."""

    @abstractmethod
    def content_size(self) -> tuple[float, float] | None:
        """Pixel size of the rendered diagram, or None if not laid out."""


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class ViewportController:
    def __init__(self, surface: Surface | None = None) -> None:
        self._surface = surface
        self.state = ViewportState()
        self.pan_mode = False
        self.pan_state = PanState.IDLE
        self._drag: DragSession | None = None

    @property
    def drag(self) -> DragSession | None:
        return self._drag

    # --------------------
    # Pan mode
    # --------------------

    def set_pan_mode(self, enabled: bool) -> None:
        self.pan_mode = enabled
        if self.pan_state is PanState.IDLE:
            self._set_cursor(Cursor.GRAB if enabled else Cursor.DEFAULT)

    def toggle_pan_mode(self) -> bool:
        self.set_pan_mode(not self.pan_mode)
        return self.pan_mode

    # --------------------
    # Zoom
    # --------------------

    def zoom_at_point(self, pointer_x: float, pointer_y: float, delta_scale: float) -> None:
        """Zoom by *delta_scale* keeping the diagram point under the pointer fixed.

        Pointer coordinates are relative to the container's top-left corner.
        """
        scale = self.state.scale
        new_scale = _clamp(scale + delta_scale, POINTER_ZOOM_MIN, POINTER_ZOOM_MAX)
        ratio = new_scale / scale

        # Screen-space translation, anchored at the pointer, then back to diagram units
        tx = pointer_x - (pointer_x - self.state.pan_x * scale) * ratio
        ty = pointer_y - (pointer_y - self.state.pan_y * scale) * ratio
        self.state.pan_x = tx / new_scale
        self.state.pan_y = ty / new_scale
        self.state.scale = new_scale
        self._apply()

    def wheel(self, pointer_x: float, pointer_y: float, delta_y: float, ctrl_key: bool) -> bool:
        """Handle a wheel event; only ctrl+wheel (or a pinch) zooms.

        Returns True if the event was consumed.
        """
        if not ctrl_key:
            return False
        self.zoom_at_point(pointer_x, pointer_y, delta_y * WHEEL_ZOOM_FACTOR)
        return True

    def zoom_step(self, direction: int) -> None:
        """Toolbar zoom: ``direction > 0`` zooms in, otherwise out.

        Each direction clamps only on its own side, so a scale reached by
        pointer zoom outside [0.5, 2] still moves by one step toward it.
        """
        if direction > 0:
            self.state.scale = min(self.state.scale + STEP_ZOOM, STEP_ZOOM_MAX)
        else:
            self.state.scale = max(self.state.scale - STEP_ZOOM, STEP_ZOOM_MIN)
        self._apply(origin=TransformOrigin.CENTER)

    def zoom_in(self) -> None:
        self.zoom_step(1)

    def zoom_out(self) -> None:
        self.zoom_step(-1)

    # --------------------
    # Drag panning
    # --------------------

    def begin_pan(self, pointer_x: float, pointer_y: float) -> bool:
        """Start a drag if pan mode is on. Returns True if panning started."""
        if not self.pan_mode:
            return False
        if self._drag is not None:
            self.end_pan()

        scale = self.state.scale
        self._drag = DragSession(
            origin_x=pointer_x - self.state.pan_x * scale,
            origin_y=pointer_y - self.state.pan_y * scale,
        )
        self.pan_state = PanState.PANNING
        self._set_cursor(Cursor.GRABBING)
        return True

    def update_pan(self, pointer_x: float, pointer_y: float) -> None:
        if self._drag is None or not self.pan_mode:
            return
        scale = self.state.scale
        self.state.pan_x = (pointer_x - self._drag.origin_x) / scale
        self.state.pan_y = (pointer_y - self._drag.origin_y) / scale
        self._apply()

    def end_pan(self) -> None:
        if self._drag is not None:
            self._drag.active = False
            self._drag = None
        self.pan_state = PanState.IDLE
        self._set_cursor(Cursor.GRAB if self.pan_mode else Cursor.DEFAULT)

    # --------------------
    # Reset
    # --------------------

    def reset(self) -> None:
        """Return to scale 1, pan mode off, and centre the diagram if it has a size."""
        self.end_pan()
        self.state = ViewportState()
        self.pan_mode = False
        self._set_cursor(Cursor.DEFAULT)
        self._apply()

        if self._surface is None:
            return
        container = self._surface.container_size()
        content = self._surface.content_size()
        if container and content:
            self.state.pan_x = (container[0] - content[0]) / 2
            self.state.pan_y = (container[1] - content[1]) / 2
            self._apply()

    # --------------------
    # Surface output
    # --------------------

    def transform(self, origin: TransformOrigin = TransformOrigin.TOP_LEFT) -> Transform:
        s = self.state.scale
        return Transform(
            scale=s,
            translate_x=self.state.pan_x * s,
            translate_y=self.state.pan_y * s,
            origin=origin,
        )

    def _apply(self, origin: TransformOrigin = TransformOrigin.TOP_LEFT) -> None:
        if self._surface is not None:
            self._surface.set_transform(self.transform(origin))

    def _set_cursor(self, cursor: Cursor) -> None:
        if self._surface is not None:
            self._surface.set_cursor(cursor)
