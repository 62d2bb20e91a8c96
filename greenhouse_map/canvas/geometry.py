"""
Canvas Geometry
===============

Pure coordinate math for the map canvas: screen <-> canvas transforms,
clamping, zoom and pan.
"""

from typing import Tuple
from pydantic import BaseModel, Field

# Canvas extent in canvas units
CANVAS_WIDTH = 1000.0
CANVAS_HEIGHT = 1000.0

MIN_SCALE = 0.1
EDITOR_MAX_SCALE = 5.0
VIEWER_MAX_SCALE = 3.0
ZOOM_OUT_FACTOR = 0.9
ZOOM_IN_FACTOR = 1.1
FIT_PADDING = 0.9

Point = Tuple[float, float]


def clamp_position(x: float, y: float, width: float = 0.0, height: float = 0.0) -> Point:
    """Clamp a top-left position so a component of the given size stays on the canvas."""
    return (
        max(0.0, min(x, CANVAS_WIDTH - width)),
        max(0.0, min(y, CANVAS_HEIGHT - height)),
    )


class ViewTransform(BaseModel):
    """
    Scale and pan applied to the canvas when drawn on screen.

    Screen points are measured from the top-left of the canvas container.
    `units_per_pixel` is the canvas-units-per-pixel ratio at scale 1.
    """
    scale: float = Field(default=1.0, gt=0)
    pan_x: float = 0.0
    pan_y: float = 0.0
    units_per_pixel: float = Field(default=1.0, gt=0)

    def screen_to_canvas(self, screen_x: float, screen_y: float) -> Point:
        return (
            (screen_x - self.pan_x) / self.scale * self.units_per_pixel,
            (screen_y - self.pan_y) / self.scale * self.units_per_pixel,
        )

    def canvas_to_screen(self, canvas_x: float, canvas_y: float) -> Point:
        return (
            canvas_x / self.units_per_pixel * self.scale + self.pan_x,
            canvas_y / self.units_per_pixel * self.scale + self.pan_y,
        )

    def zoom(self, delta_y: float, max_scale: float = EDITOR_MAX_SCALE) -> float:
        """Apply one wheel step: scrolling down zooms out, up zooms in."""
        factor = ZOOM_OUT_FACTOR if delta_y > 0 else ZOOM_IN_FACTOR
        self.scale = max(MIN_SCALE, min(max_scale, self.scale * factor))
        return self.scale

    def reset(self) -> None:
        self.scale = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    def fit(
        self,
        container_width: float,
        container_height: float,
        canvas_width: float = CANVAS_WIDTH,
        canvas_height: float = CANVAS_HEIGHT
    ) -> float:
        """Scale so the whole canvas fits the container with some padding."""
        scale_x = container_width / canvas_width
        scale_y = container_height / canvas_height
        self.scale = min(scale_x, scale_y) * FIT_PADDING
        self.pan_x = 0.0
        self.pan_y = 0.0
        return self.scale


class PanGesture(BaseModel):
    """Background drag that moves the view."""
    origin_x: float
    origin_y: float

    @classmethod
    def start(cls, view: ViewTransform, screen_x: float, screen_y: float) -> "PanGesture":
        return cls(origin_x=screen_x - view.pan_x, origin_y=screen_y - view.pan_y)

    def move(self, view: ViewTransform, screen_x: float, screen_y: float) -> None:
        view.pan_x = screen_x - self.origin_x
        view.pan_y = screen_y - self.origin_y
