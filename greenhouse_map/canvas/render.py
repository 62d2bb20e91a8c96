"""
Map Rendering
=============

Turns layout components into drawable shapes and an SVG document.
"""

import html
from typing import List, Optional, Union

from pydantic import BaseModel

from .geometry import CANVAS_HEIGHT, CANVAS_WIDTH
from ..models.layout_models import ComponentType, LayoutComponent

GRID_STEP = 50.0
LABEL_GAP = 16.0
ICON_FONT_SIZE = 24.0
LABEL_FONT_SIZE = 12.0
STATUS_DOT_RADIUS = 5.0


class RenderedComponent(BaseModel):
    """Drawable description of one component."""
    id: Union[int, str]
    shape: str  # "rect" or "circle"
    x: float
    y: float
    width: float
    height: float
    center_x: float
    center_y: float
    radius: Optional[float] = None
    fill: str
    icon: str
    label: str
    label_x: float
    label_y: float
    status_color: str
    status_dot_x: float
    status_dot_y: float


def render_component(component: LayoutComponent) -> RenderedComponent:
    center_x = component.x_position + component.width / 2
    center_y = component.y_position + component.height / 2
    is_tank = component.component_type == ComponentType.FISHTANK.value
    return RenderedComponent(
        id=component.id,
        shape="circle" if is_tank else "rect",
        x=component.x_position,
        y=component.y_position,
        width=component.width,
        height=component.height,
        center_x=center_x,
        center_y=center_y,
        radius=min(component.width, component.height) / 2 if is_tank else None,
        fill=component.fill,
        icon=component.icon,
        label=component.name,
        label_x=center_x,
        label_y=component.y_position + component.height + LABEL_GAP,
        status_color=component.status_color,
        status_dot_x=component.x_position + component.width - STATUS_DOT_RADIUS,
        status_dot_y=component.y_position + STATUS_DOT_RADIUS,
    )


def render_components(components: List[LayoutComponent]) -> List[RenderedComponent]:
    """Render in paint order: later entries are drawn on top."""
    ordered = sorted(components, key=lambda c: c.layer_order)
    return [render_component(c) for c in ordered]


def _shape_svg(item: RenderedComponent) -> str:
    if item.shape == "circle":
        return (
            f'<circle class="component-shape" data-id="{html.escape(str(item.id))}" '
            f'cx="{item.center_x:g}" cy="{item.center_y:g}" r="{item.radius:g}" '
            f'fill="{html.escape(item.fill)}" stroke="{item.status_color}" stroke-width="2"/>'
        )
    return (
        f'<rect class="component-shape" data-id="{html.escape(str(item.id))}" '
        f'x="{item.x:g}" y="{item.y:g}" width="{item.width:g}" height="{item.height:g}" '
        f'rx="4" ry="4" fill="{html.escape(item.fill)}" stroke="{item.status_color}" stroke-width="2"/>'
    )


def render_svg(
    components: List[LayoutComponent],
    width: float = CANVAS_WIDTH,
    height: float = CANVAS_HEIGHT
) -> str:
    """Standalone SVG of the map: grid, outline and every component."""
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width:g} {height:g}" '
        f'width="{width:g}" height="{height:g}">',
        "<defs>",
        f'<pattern id="grid" width="{GRID_STEP:g}" height="{GRID_STEP:g}" patternUnits="userSpaceOnUse">',
        f'<path d="M {GRID_STEP:g} 0 L 0 0 0 {GRID_STEP:g}" fill="none" stroke="#E5E7EB" stroke-width="1"/>',
        "</pattern>",
        "</defs>",
        '<rect width="100%" height="100%" fill="url(#grid)"/>',
        f'<rect x="0" y="0" width="{width:g}" height="{height:g}" fill="none" '
        f'stroke="#9CA3AF" stroke-width="2" stroke-dasharray="8,8"/>',
    ]
    for item in render_components(components):
        parts.append(f'<g class="component" data-id="{html.escape(str(item.id))}">')
        parts.append(_shape_svg(item))
        parts.append(
            f'<text class="component-icon" x="{item.center_x:g}" y="{item.center_y:g}" '
            f'text-anchor="middle" dominant-baseline="middle" font-size="{ICON_FONT_SIZE:g}">{item.icon}</text>'
        )
        parts.append(
            f'<text class="component-label" x="{item.label_x:g}" y="{item.label_y:g}" '
            f'text-anchor="middle" font-size="{LABEL_FONT_SIZE:g}" fill="#374151" '
            f'font-weight="500">{html.escape(item.label)}</text>'
        )
        parts.append(
            f'<circle class="status-dot" cx="{item.status_dot_x:g}" cy="{item.status_dot_y:g}" '
            f'r="{STATUS_DOT_RADIUS:g}" fill="{item.status_color}"/>'
        )
        parts.append("</g>")
    parts.append("</svg>")
    return "\n".join(parts)
