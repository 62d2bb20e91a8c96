"""
Editor Routes
=============

API routes that drive an interactive map editor session: pointer events,
selection, edit/add/delete forms and the save/cancel session boundary.
"""

import logging
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from .catalog_routes import fetch_fixtures
from ..canvas.drag import PointerTarget
from ..canvas.editor import EditorSnapshot, LayoutEditor
from ..canvas.fixture_linking import FixtureAlreadyPlacedError
from ..canvas.session_manager import EditorSessionManager
from ..models.catalog_models import FixtureKind

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/editor", tags=["editor"])

# Injected by server
session_manager: Optional[EditorSessionManager] = None


def get_session_manager() -> EditorSessionManager:
    """Dependency to get session manager."""
    if session_manager is None:
        raise HTTPException(500, "Session manager not initialized")
    return session_manager


def get_editor(session_id: str) -> LayoutEditor:
    editor = get_session_manager().get_session(session_id)
    if editor is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return editor


class PointerRequest(BaseModel):
    """Pointer event in screen coordinates relative to the canvas container."""
    x: float
    y: float
    target: PointerTarget = PointerTarget.SHAPE
    component_id: Optional[Union[int, str]] = None


class WheelRequest(BaseModel):
    delta_y: float


class ComponentRequest(BaseModel):
    component_id: Union[int, str]


class FieldsRequest(BaseModel):
    """Form field changes, keyed by field name."""
    fields: Dict[str, Any] = Field(default_factory=dict)


class LinkRequest(BaseModel):
    kind: FixtureKind
    fixture_id: Union[int, str]


class DeleteRequest(BaseModel):
    component_id: Union[int, str]
    confirmed: bool = False


class SessionResponse(BaseModel):
    session_id: str
    snapshot: EditorSnapshot


class SessionClosedResponse(BaseModel):
    session_id: str
    message: str


def _apply_fields(apply, fields: Dict[str, Any]):
    try:
        return apply(fields)
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/session")
async def open_session() -> SessionResponse:
    """Mount an editor and load the layout."""
    manager = get_session_manager()
    session_id = await manager.open_session()
    return SessionResponse(session_id=session_id, snapshot=manager.get_session(session_id).snapshot())


@router.get("/session/{session_id}")
async def get_session(session_id: str) -> EditorSnapshot:
    return get_editor(session_id).snapshot()


@router.post("/session/{session_id}/save")
async def save_session(session_id: str) -> SessionClosedResponse:
    """Close the editor; committed changes are already stored."""
    get_editor(session_id).save()
    return SessionClosedResponse(session_id=session_id, message="Layout saved")


@router.delete("/session/{session_id}")
async def cancel_session(session_id: str) -> SessionClosedResponse:
    get_editor(session_id).cancel()
    return SessionClosedResponse(session_id=session_id, message="Editor closed")


# Pointer and view

@router.post("/session/{session_id}/pointer/down")
async def pointer_down(session_id: str, request: PointerRequest) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.pointer_down(request.x, request.y, request.target, request.component_id)
    return editor.snapshot()


@router.post("/session/{session_id}/pointer/move")
async def pointer_move(session_id: str, request: PointerRequest) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.pointer_move(request.x, request.y)
    return editor.snapshot()


@router.post("/session/{session_id}/pointer/up")
async def pointer_up(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    await editor.pointer_up()
    return editor.snapshot()


@router.post("/session/{session_id}/wheel")
async def wheel(session_id: str, request: WheelRequest) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.wheel(request.delta_y)
    return editor.snapshot()


@router.post("/session/{session_id}/view/reset")
async def reset_view(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.reset_view()
    return editor.snapshot()


@router.post("/session/{session_id}/view/fit")
async def fit_view(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.fit_to_view()
    return editor.snapshot()


# Selection

@router.post("/session/{session_id}/select")
async def select_component(session_id: str, request: ComponentRequest) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.click(request.component_id)
    return editor.snapshot()


@router.post("/session/{session_id}/detail/close")
async def close_detail(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.close_detail()
    return editor.snapshot()


# Edit form

@router.post("/session/{session_id}/edit")
async def begin_edit(session_id: str, request: Optional[ComponentRequest] = None) -> EditorSnapshot:
    editor = get_editor(session_id)
    draft = editor.begin_edit(request.component_id if request else None)
    if draft is None:
        raise HTTPException(status_code=404, detail="Component not found")
    return editor.snapshot()


@router.post("/session/{session_id}/edit/fields")
async def update_edit_fields(session_id: str, request: FieldsRequest) -> EditorSnapshot:
    editor = get_editor(session_id)
    if editor.edit_form is None:
        raise HTTPException(status_code=409, detail="Edit form is not open")
    _apply_fields(editor.update_edit_fields, request.fields)
    return editor.snapshot()


@router.post("/session/{session_id}/edit/submit")
async def submit_edit(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    if editor.edit_form is None:
        raise HTTPException(status_code=409, detail="Edit form is not open")
    await editor.submit_edit()
    return editor.snapshot()


@router.post("/session/{session_id}/edit/cancel")
async def cancel_edit(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.cancel_edit()
    return editor.snapshot()


# Add form

@router.post("/session/{session_id}/add")
async def open_add_form(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.open_add_form()
    return editor.snapshot()


@router.post("/session/{session_id}/add/fields")
async def update_add_fields(session_id: str, request: FieldsRequest) -> EditorSnapshot:
    editor = get_editor(session_id)
    _apply_fields(editor.update_add_fields, request.fields)
    return editor.snapshot()


@router.post("/session/{session_id}/add/link")
async def link_add_form(session_id: str, request: LinkRequest) -> EditorSnapshot:
    """Fill the add form from an existing growbed or fish tank."""
    editor = get_editor(session_id)
    fixtures = await fetch_fixtures(request.kind)
    fixture = next((f for f in fixtures if str(f.id) == str(request.fixture_id)), None)
    if fixture is None:
        raise HTTPException(status_code=404, detail=f"{request.kind.value} not found")
    try:
        editor.link_add_form(fixture)
    except FixtureAlreadyPlacedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return editor.snapshot()


@router.post("/session/{session_id}/add/submit")
async def submit_add(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    if editor.add_form is None or not editor.add_form.is_submittable:
        raise HTTPException(status_code=422, detail="Name is required")
    await editor.submit_add()
    return editor.snapshot()


@router.post("/session/{session_id}/add/close")
async def close_add_form(session_id: str) -> EditorSnapshot:
    editor = get_editor(session_id)
    editor.close_add_form()
    return editor.snapshot()


# Delete

@router.post("/session/{session_id}/delete")
async def delete_component(session_id: str, request: DeleteRequest) -> EditorSnapshot:
    """Delete a component; the client answers the confirmation prompt in `confirmed`."""
    editor = get_editor(session_id)
    if editor.get(request.component_id) is None:
        raise HTTPException(status_code=404, detail="Component not found")
    await editor.delete(request.component_id, confirm=lambda _prompt: request.confirmed)
    return editor.snapshot()
