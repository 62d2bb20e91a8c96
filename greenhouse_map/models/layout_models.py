"""
Layout Models for Greenhouse Map
================================

Models for greenhouse layout components, form drafts and the detail panel.
"""

import copy
import math
import re
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union
from pydantic import BaseModel, Field


class ComponentType(str, Enum):
    """Kind of greenhouse fixture placed on the map."""
    GROWBED = "growbed"
    FISHTANK = "fishtank"
    PUMP = "pump"
    SENSOR = "sensor"
    PIPE = "pipe"
    VALVE = "valve"
    FILTER = "filter"


class ComponentStatus(str, Enum):
    """Operational status shown by the status dot."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    ERROR = "error"


# Default fill per component type (the color is freely editable afterwards)
DEFAULT_COLORS: Dict[str, str] = {
    ComponentType.GROWBED.value: "#4CAF50",
    ComponentType.FISHTANK.value: "#2196F3",
    ComponentType.PUMP.value: "#FF9800",
    ComponentType.SENSOR.value: "#9C27B0",
    ComponentType.PIPE.value: "#795548",
    ComponentType.VALVE.value: "#000000",
    ComponentType.FILTER.value: "#6B7280",
}
FALLBACK_COLOR = "#4CAF50"

COMPONENT_LABELS: Dict[str, str] = {
    ComponentType.GROWBED.value: "Growbed",
    ComponentType.FISHTANK.value: "Fish Tank",
    ComponentType.PUMP.value: "Pump",
    ComponentType.SENSOR.value: "Sensor",
    ComponentType.PIPE.value: "Pipe",
    ComponentType.VALVE.value: "Valve",
    ComponentType.FILTER.value: "Filter",
}

COMPONENT_ICONS: Dict[str, str] = {
    ComponentType.GROWBED.value: "🟢",
    ComponentType.FISHTANK.value: "🔵",
    ComponentType.PUMP.value: "🟠",
    ComponentType.SENSOR.value: "🟣",
    ComponentType.PIPE.value: "🟤",
    ComponentType.VALVE.value: "⚫",
    ComponentType.FILTER.value: "⚪",
}
UNKNOWN_ICON = "⬜"

STATUS_COLORS: Dict[str, str] = {
    ComponentStatus.ACTIVE.value: "#10B981",
    ComponentStatus.INACTIVE.value: "#EF4444",
    ComponentStatus.MAINTENANCE.value: "#F59E0B",
    ComponentStatus.ERROR.value: "#DC2626",
}
UNKNOWN_STATUS_COLOR = "#6B7280"

DEFAULT_SIZE = 100.0
# Form fallback when a size input is empty or not a number
SIZE_FALLBACK = 1.0

# Fields the edit form writes back to the store
EDITABLE_FIELDS = (
    "name",
    "component_type",
    "x_position",
    "y_position",
    "width",
    "height",
    "color",
    "status",
    "metadata",
    "layer_order",
)

_LEADING_FLOAT = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")


def default_color(component_type: str) -> str:
    """Default fill for a component type."""
    return DEFAULT_COLORS.get(str(getattr(component_type, "value", component_type)), FALLBACK_COLOR)


def component_icon(component_type: str) -> str:
    return COMPONENT_ICONS.get(str(getattr(component_type, "value", component_type)), UNKNOWN_ICON)


def status_color(status: Optional[str]) -> str:
    """Status dot color; unknown statuses render gray."""
    return STATUS_COLORS.get(str(getattr(status, "value", status)), UNKNOWN_STATUS_COLOR)


def coerce_float(value: Any, default: float) -> float:
    """
    Parse a form value as a float, falling back to a default.

    Follows the form behaviour of "leading number, else default": text such
    as "12.5m" reads as 12.5, while empty, non-numeric, NaN and zero values
    all fall back to the default.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_FLOAT.match(str(value)) if value is not None else None
        if not match:
            return default
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number) or number == 0:
        return default
    return number


class LayoutComponent(BaseModel):
    """
    One greenhouse fixture row from the layout store.

    Columns the editor does not know about (rotation, parent_id, timestamps)
    are kept as extra fields and passed through untouched.
    """
    id: Union[int, str]
    name: str = ""
    component_type: str = ComponentType.GROWBED.value
    x_position: float = 0.0
    y_position: float = 0.0
    width: float = DEFAULT_SIZE
    height: float = DEFAULT_SIZE
    color: Optional[str] = None
    status: Optional[str] = ComponentStatus.ACTIVE.value
    metadata: Optional[Dict[str, Any]] = Field(default_factory=dict)
    layer_order: int = 0

    class Config:
        extra = "allow"

    @property
    def fill(self) -> str:
        return self.color or default_color(self.component_type)

    @property
    def status_color(self) -> str:
        return status_color(self.status)

    @property
    def icon(self) -> str:
        return component_icon(self.component_type)

    def moved_to(self, x: float, y: float) -> "LayoutComponent":
        """Copy of this component at a new position."""
        return self.model_copy(update={"x_position": x, "y_position": y})


class ComponentDraft(BaseModel):
    """
    Add/edit form state.

    A draft is always a copy: editing a draft never touches the component it
    was taken from, so discarding the form discards the changes.
    """
    id: Optional[Union[int, str]] = None
    name: str = ""
    component_type: ComponentType = ComponentType.GROWBED
    x_position: float = 0.0
    y_position: float = 0.0
    width: float = DEFAULT_SIZE
    height: float = DEFAULT_SIZE
    color: str = DEFAULT_COLORS[ComponentType.GROWBED.value]
    status: ComponentStatus = ComponentStatus.ACTIVE
    metadata: Dict[str, Any] = Field(default_factory=dict)
    layer_order: int = 0

    class Config:
        use_enum_values = True
        validate_assignment = True
        validate_default = True

    @classmethod
    def for_new_component(cls) -> "ComponentDraft":
        """Add-form defaults: a 100x100 active growbed."""
        return cls()

    @classmethod
    def from_component(cls, component: LayoutComponent) -> "ComponentDraft":
        return cls(
            id=component.id,
            name=component.name,
            component_type=component.component_type,
            x_position=component.x_position,
            y_position=component.y_position,
            width=component.width,
            height=component.height,
            color=component.fill,
            status=component.status or ComponentStatus.ACTIVE.value,
            metadata=copy.deepcopy(component.metadata or {}),
            layer_order=component.layer_order,
        )

    @property
    def is_submittable(self) -> bool:
        """Submit stays disabled until the draft has a name."""
        return bool(self.name.strip())

    def change_type(self, component_type: Union[ComponentType, str]) -> None:
        """Switch type and reset the fill to that type's default."""
        self.component_type = component_type
        self.color = default_color(self.component_type)

    def apply_fields(self, fields: Dict[str, Any]) -> None:
        """Apply form field changes the way the form inputs do."""
        for key, value in fields.items():
            if key == "component_type":
                self.change_type(value)
            elif key in ("x_position", "y_position"):
                setattr(self, key, coerce_float(value, 0.0))
            elif key in ("width", "height"):
                setattr(self, key, coerce_float(value, SIZE_FALLBACK))
            elif key == "id":
                raise ValueError("id cannot be edited")
            elif key in EDITABLE_FIELDS:
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown field: {key}")

    def to_row(self) -> Dict[str, Any]:
        """Editable columns as a store row (without id)."""
        return self.model_dump(include=set(EDITABLE_FIELDS))


class ComponentDetail(BaseModel):
    """Read-only detail panel for a selected component."""
    id: Union[int, str]
    name: str
    component_type: str
    icon: str
    status: Optional[str]
    status_color: str
    position: Tuple[float, float]
    size: Tuple[float, float]
    size_label: str

    @classmethod
    def from_component(cls, component: LayoutComponent) -> "ComponentDetail":
        x, y = round(component.x_position, 1), round(component.y_position, 1)
        width, height = round(component.width, 1), round(component.height, 1)
        if component.component_type == ComponentType.FISHTANK.value:
            size_label = f"{width:.1f} diameter"
        else:
            size_label = f"{width:.1f} × {height:.1f}"
        return cls(
            id=component.id,
            name=component.name,
            component_type=component.component_type,
            icon=component.icon,
            status=component.status,
            status_color=component.status_color,
            position=(x, y),
            size=(width, height),
            size_label=size_label,
        )
