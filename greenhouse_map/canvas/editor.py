"""
Layout Editor
=============

Interactive editor over the greenhouse layout.

The editor holds the working set (every component, loaded in full and
ordered by layer) and keeps it in step with the store one committed action
at a time: edit, add, delete and drag release each write a single row.
Pointer moves only touch the working set.

Store failures are logged and swallowed at the call site; the working set
only changes once the store has accepted a write.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from .drag import DragController, DragRelease, DragState, PointerTarget
from .fixture_linking import available_fixtures, link_fixture
from .geometry import EDITOR_MAX_SCALE, ViewTransform
from .render import RenderedComponent, render_components
from ..models.catalog_models import CatalogFixture
from ..models.layout_models import ComponentDetail, ComponentDraft, LayoutComponent
from ..services.layout_store import LayoutStore, LayoutStoreError

logger = logging.getLogger(__name__)

ComponentId = Union[int, str]
DELETE_PROMPT = "Are you sure you want to delete this component?"


class EditorSnapshot(BaseModel):
    """Everything a client needs to draw the editor."""
    loaded: bool
    closed: bool
    components: List[LayoutComponent] = Field(default_factory=list)
    rendered: List[RenderedComponent] = Field(default_factory=list)
    drag_state: DragState = DragState.IDLE
    dragged_id: Optional[ComponentId] = None
    view: ViewTransform
    selected: Optional[ComponentDetail] = None
    edit_form: Optional[ComponentDraft] = None
    add_form: Optional[ComponentDraft] = None
    add_form_submittable: bool = False


class LayoutEditor:
    """
    Map editor session.

    Usage:
        editor = LayoutEditor(store, on_save=close_editor, on_cancel=close_editor)
        await editor.load()
        editor.pointer_down(120, 80, PointerTarget.SHAPE, component_id=1)
        editor.pointer_move(200, 140)
        await editor.pointer_up()
    """

    def __init__(
        self,
        store: LayoutStore,
        on_save: Optional[Callable[[], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        persist_on_drop: bool = True,
        view: Optional[ViewTransform] = None,
        container_width: float = 800.0,
        container_height: float = 600.0
    ):
        self.store = store
        self.on_save = on_save
        self.on_cancel = on_cancel
        self.persist_on_drop = persist_on_drop
        self.container_width = container_width
        self.container_height = container_height
        self.drag = DragController(view)
        self.components: List[LayoutComponent] = []
        self.selected_id: Optional[ComponentId] = None
        self.edit_form: Optional[ComponentDraft] = None
        self.add_form: Optional[ComponentDraft] = None
        self.loaded = False
        self.closed = False

    @property
    def view(self) -> ViewTransform:
        return self.drag.view

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Fetch every component ordered by layer. On failure the canvas stays empty."""
        try:
            self.components = await self.store.list_components()
        except LayoutStoreError as e:
            logger.error(f"[MAP-EDITOR] Error fetching layout data: {e}")
            self.components = []
            return False
        self.loaded = True
        logger.info(f"[MAP-EDITOR] Loaded {len(self.components)} components")
        return True

    def get(self, component_id: ComponentId) -> Optional[LayoutComponent]:
        for component in self.components:
            if str(component.id) == str(component_id):
                return component
        return None

    def _replace(self, component: LayoutComponent) -> None:
        self.components = [
            component if str(c.id) == str(component.id) else c
            for c in self.components
        ]

    # ------------------------------------------------------------------
    # Pointer interaction
    # ------------------------------------------------------------------

    def pointer_down(
        self,
        screen_x: float,
        screen_y: float,
        target: PointerTarget,
        component_id: Optional[ComponentId] = None
    ) -> DragState:
        component = self.get(component_id) if component_id is not None else None
        if component_id is not None and component is None:
            logger.warning(f"[MAP-EDITOR] Pointer down on unknown component {component_id}")
            return self.drag.state
        return self.drag.pointer_down(screen_x, screen_y, target, component)

    def pointer_move(self, screen_x: float, screen_y: float) -> Optional[LayoutComponent]:
        """Move the dragged component in the working set only."""
        position = self.drag.pointer_move(screen_x, screen_y)
        if position is None:
            return None
        component = self.get(self.drag.dragged_id)
        if component is None:
            return None
        moved = component.moved_to(*position)
        self._replace(moved)
        return moved

    async def pointer_up(self) -> Optional[LayoutComponent]:
        """Finish the gesture; a finished drag is written back when it moved."""
        release = self.drag.pointer_up()
        if release is None:
            return None
        component = self.get(release.component_id)
        if component is None:
            return None
        if self.persist_on_drop and (component.x_position, component.y_position) != release.start_position:
            return await self._persist_drop(component, release)
        return component

    async def _persist_drop(self, component: LayoutComponent, release: DragRelease) -> LayoutComponent:
        fields = {"x_position": component.x_position, "y_position": component.y_position}
        try:
            await self.store.update_component(component.id, fields)
        except LayoutStoreError as e:
            logger.error(f"[MAP-EDITOR] Error saving position of component {component.id}: {e}")
            restored = component.moved_to(*release.start_position)
            self._replace(restored)
            return restored
        return component

    def wheel(self, delta_y: float) -> float:
        return self.view.zoom(delta_y, max_scale=EDITOR_MAX_SCALE)

    def reset_view(self) -> None:
        self.view.reset()

    def fit_to_view(self) -> float:
        return self.view.fit(self.container_width, self.container_height)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def click(self, component_id: ComponentId) -> Optional[ComponentDetail]:
        """Open the detail panel, unless a drag or pan is in progress."""
        if self.drag.busy:
            return None
        component = self.get(component_id)
        if component is None:
            return None
        self.selected_id = component.id
        return ComponentDetail.from_component(component)

    @property
    def selected(self) -> Optional[ComponentDetail]:
        component = self.get(self.selected_id) if self.selected_id is not None else None
        return ComponentDetail.from_component(component) if component else None

    def close_detail(self) -> None:
        self.selected_id = None

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    def begin_edit(self, component_id: Optional[ComponentId] = None) -> Optional[ComponentDraft]:
        """Open the edit form with a copy of the component (the selected one by default)."""
        component_id = self.selected_id if component_id is None else component_id
        component = self.get(component_id) if component_id is not None else None
        if component is None:
            return None
        self.edit_form = ComponentDraft.from_component(component)
        self.selected_id = None
        return self.edit_form

    def update_edit_fields(self, fields: Dict[str, Any]) -> Optional[ComponentDraft]:
        if self.edit_form is None:
            return None
        self.edit_form.apply_fields(fields)
        return self.edit_form

    async def submit_edit(self) -> Optional[LayoutComponent]:
        """Write every editable field by id, then replace the component locally."""
        draft = self.edit_form
        if draft is None or draft.id is None:
            return None
        component = self.get(draft.id)
        if component is None:
            logger.warning(f"[MAP-EDITOR] Component {draft.id} is no longer on the canvas")
            self.edit_form = None
            return None

        row = draft.to_row()
        try:
            await self.store.update_component(draft.id, row)
        except LayoutStoreError as e:
            logger.error(f"[MAP-EDITOR] Error updating component {draft.id}: {e}")
            return None

        updated = component.model_copy(update=row)
        self._replace(updated)
        self.edit_form = None
        return updated

    def cancel_edit(self) -> None:
        self.edit_form = None

    # ------------------------------------------------------------------
    # Add
    # ------------------------------------------------------------------

    def open_add_form(self) -> ComponentDraft:
        if self.add_form is None:
            self.add_form = ComponentDraft.for_new_component()
        return self.add_form

    def update_add_fields(self, fields: Dict[str, Any]) -> ComponentDraft:
        draft = self.open_add_form()
        draft.apply_fields(fields)
        return draft

    def link_add_form(self, fixture: CatalogFixture) -> ComponentDraft:
        """Fill the add form from an existing growbed or fish tank."""
        return link_fixture(self.open_add_form(), fixture, self.components)

    def available_fixtures(self, fixtures: Iterable[CatalogFixture]) -> List[CatalogFixture]:
        return available_fixtures(fixtures, self.components)

    async def submit_add(self) -> Optional[LayoutComponent]:
        """Insert the add form as a new row and append the stored result."""
        draft = self.open_add_form()
        if not draft.is_submittable:
            logger.info("[MAP-EDITOR] Add form submitted without a name; ignored")
            return None

        try:
            created = await self.store.insert_component(draft.to_row())
        except LayoutStoreError as e:
            logger.error(f"[MAP-EDITOR] Error adding component: {e}")
            return None

        self.components = self.components + [created]
        self.add_form = None
        logger.info(f"[MAP-EDITOR] Added component {created.id} ({created.component_type})")
        return created

    def close_add_form(self) -> None:
        self.add_form = None

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, component_id: ComponentId, confirm: Callable[[str], bool]) -> bool:
        """Delete after confirmation; closes the detail panel of that component."""
        if not confirm(DELETE_PROMPT):
            return False
        try:
            await self.store.delete_component(component_id)
        except LayoutStoreError as e:
            logger.error(f"[MAP-EDITOR] Error deleting component {component_id}: {e}")
            return False

        self.components = [c for c in self.components if str(c.id) != str(component_id)]
        if self.selected_id is not None and str(self.selected_id) == str(component_id):
            self.selected_id = None
        return True

    # ------------------------------------------------------------------
    # Session boundary
    # ------------------------------------------------------------------

    def save(self) -> None:
        """Hand control back to the caller; every committed change is already stored."""
        self.closed = True
        if self.on_save:
            self.on_save()

    def cancel(self) -> None:
        self.closed = True
        if self.on_cancel:
            self.on_cancel()

    def snapshot(self) -> EditorSnapshot:
        return EditorSnapshot(
            loaded=self.loaded,
            closed=self.closed,
            components=list(self.components),
            rendered=render_components(self.components),
            drag_state=self.drag.state,
            dragged_id=self.drag.dragged_id,
            view=self.view.model_copy(),
            selected=self.selected,
            edit_form=self.edit_form,
            add_form=self.add_form,
            add_form_submittable=bool(self.add_form and self.add_form.is_submittable),
        )
