"""
Layout Routes
=============

REST routes over the greenhouse layout table, plus the read-only map view.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, Field

from ..canvas.render import render_svg
from ..models.layout_models import (
    DEFAULT_SIZE, ComponentStatus, ComponentType, LayoutComponent, default_color
)
from ..services.layout_store import LayoutStore, LayoutStoreError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/layout", tags=["layout"])

# Injected by server
layout_store: Optional[LayoutStore] = None


def get_layout_store() -> LayoutStore:
    """Dependency to get the layout store."""
    if layout_store is None:
        raise HTTPException(500, "Layout store not initialized")
    return layout_store


class ComponentWrite(BaseModel):
    """Request to add or replace a component."""
    name: str = Field(min_length=1)
    component_type: ComponentType = ComponentType.GROWBED
    x_position: float = Field(default=0.0, ge=0)
    y_position: float = Field(default=0.0, ge=0)
    width: float = Field(default=DEFAULT_SIZE, gt=0)
    height: float = Field(default=DEFAULT_SIZE, gt=0)
    color: Optional[str] = None
    status: ComponentStatus = ComponentStatus.ACTIVE
    metadata: Dict[str, Any] = Field(default_factory=dict)
    layer_order: int = 0

    class Config:
        use_enum_values = True
        validate_default = True

    def to_row(self) -> Dict[str, Any]:
        row = self.model_dump()
        if not row["color"]:
            row["color"] = default_color(self.component_type)
        return row


def _store_failure(action: str, error: LayoutStoreError) -> HTTPException:
    logger.error(f"[LAYOUT-API] Error {action}: {error}")
    if error.status_code == 404:
        return HTTPException(status_code=404, detail="Component not found")
    return HTTPException(status_code=502, detail=f"Layout store error: {error}")


@router.get("/components")
async def list_components() -> List[LayoutComponent]:
    """All components ordered by layer."""
    store = get_layout_store()
    try:
        return await store.list_components()
    except LayoutStoreError as e:
        raise _store_failure("fetching layout data", e)


@router.post("/components", status_code=201)
async def add_component(request: ComponentWrite) -> LayoutComponent:
    """Insert a component; the store assigns its id."""
    store = get_layout_store()
    try:
        return await store.insert_component(request.to_row())
    except LayoutStoreError as e:
        raise _store_failure("adding component", e)


@router.put("/components/{component_id}")
async def update_component(component_id: str, request: ComponentWrite) -> LayoutComponent:
    """Replace every editable field of a component."""
    store = get_layout_store()
    try:
        return await store.update_component(component_id, request.to_row())
    except LayoutStoreError as e:
        raise _store_failure(f"updating component {component_id}", e)


@router.delete("/components/{component_id}")
async def delete_component(component_id: str):
    """Delete a component by id."""
    store = get_layout_store()
    try:
        deleted = await store.delete_component(component_id)
    except LayoutStoreError as e:
        raise _store_failure(f"deleting component {component_id}", e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Component not found")
    return {"message": "Component deleted", "component_id": component_id}


@router.get("/map.svg")
async def map_svg():
    """Read-only map view. An unreachable store renders an empty map."""
    store = get_layout_store()
    try:
        components = await store.list_components()
    except LayoutStoreError as e:
        logger.error(f"[LAYOUT-API] Error fetching layout data: {e}")
        components = []
    return Response(content=render_svg(components), media_type="image/svg+xml")
