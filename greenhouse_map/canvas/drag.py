"""
Drag Controller
===============

Pointer state machine for the map editor: component drags and view pans.

States:
    idle -> dragging -> idle   (pointer-down on a component shape)
    idle -> panning  -> idle   (pointer-down on the canvas background)
"""

import logging
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel

from .geometry import PanGesture, Point, ViewTransform, clamp_position
from ..models.layout_models import LayoutComponent

logger = logging.getLogger(__name__)


class PointerTarget(str, Enum):
    """Element under the pointer."""
    SHAPE = "shape"          # component rect (circle for fish tanks)
    ICON = "icon"
    LABEL = "label"
    STATUS_DOT = "status_dot"
    BACKGROUND = "background"


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PANNING = "panning"


class DragRelease(BaseModel):
    """A finished component drag."""
    component_id: Union[int, str]
    start_position: Tuple[float, float]


class DragController:
    """Tracks a single active pointer gesture."""

    def __init__(self, view: Optional[ViewTransform] = None):
        self.view = view or ViewTransform()
        self.state = DragState.IDLE
        self.dragged_id: Optional[Union[int, str]] = None
        self.offset: Point = (0.0, 0.0)
        self._start_position: Optional[Point] = None
        self._size: Point = (0.0, 0.0)
        self._pan: Optional[PanGesture] = None

    @property
    def editing(self) -> bool:
        """True while a component drag is in progress."""
        return self.state == DragState.DRAGGING

    @property
    def busy(self) -> bool:
        """True while any gesture is in progress (suppresses selection)."""
        return self.state != DragState.IDLE

    def pointer_down(
        self,
        screen_x: float,
        screen_y: float,
        target: PointerTarget,
        component: Optional[LayoutComponent] = None
    ) -> DragState:
        """Start a drag on a component shape, or a pan on the background."""
        if self.state != DragState.IDLE:
            # one gesture at a time
            return self.state

        if component is not None:
            if target != PointerTarget.SHAPE:
                return self.state
            pointer_x, pointer_y = self.view.screen_to_canvas(screen_x, screen_y)
            self.offset = (pointer_x - component.x_position, pointer_y - component.y_position)
            self.dragged_id = component.id
            self._start_position = (component.x_position, component.y_position)
            self._size = (component.width, component.height)
            self.state = DragState.DRAGGING
            logger.debug(f"[DRAG] Start component={component.id} offset={self.offset}")
        elif target == PointerTarget.BACKGROUND:
            self._pan = PanGesture.start(self.view, screen_x, screen_y)
            self.state = DragState.PANNING
        return self.state

    def pointer_move(self, screen_x: float, screen_y: float) -> Optional[Point]:
        """
        Follow the pointer.

        While dragging, returns the dragged component's new clamped top-left
        position; while panning, moves the view and returns None.
        """
        if self.state == DragState.DRAGGING:
            pointer_x, pointer_y = self.view.screen_to_canvas(screen_x, screen_y)
            return clamp_position(
                pointer_x - self.offset[0], pointer_y - self.offset[1], *self._size
            )
        if self.state == DragState.PANNING and self._pan is not None:
            self._pan.move(self.view, screen_x, screen_y)
        return None

    def pointer_up(self) -> Optional[DragRelease]:
        """End the gesture. Returns the finished drag, if one was active."""
        release = None
        if self.state == DragState.DRAGGING and self.dragged_id is not None:
            release = DragRelease(component_id=self.dragged_id, start_position=self._start_position)
        self.state = DragState.IDLE
        self.dragged_id = None
        self.offset = (0.0, 0.0)
        self._start_position = None
        self._size = (0.0, 0.0)
        self._pan = None
        return release
