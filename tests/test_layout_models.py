"""
Layout model tests: defaults, form coercion, detail panel.
"""

import pytest
from pydantic import ValidationError

from greenhouse_map.models.layout_models import (
    DEFAULT_COLORS, ComponentDetail, ComponentDraft, LayoutComponent,
    coerce_float, default_color, status_color
)


@pytest.mark.parametrize("component_type,color", [
    ("growbed", "#4CAF50"),
    ("fishtank", "#2196F3"),
    ("pump", "#FF9800"),
    ("sensor", "#9C27B0"),
    ("pipe", "#795548"),
    ("valve", "#000000"),
    ("filter", "#6B7280"),
])
def test_type_change_sets_default_color(component_type, color):
    draft = ComponentDraft(name="Thing", color="#123456")
    draft.apply_fields({"component_type": component_type})
    assert draft.component_type == component_type
    assert draft.color == color


def test_every_type_change_reassigns_default_color():
    draft = ComponentDraft(name="Thing")
    draft.apply_fields({"component_type": "pump"})
    draft.apply_fields({"color": "#ABCDEF"})
    draft.apply_fields({"component_type": "valve"})
    assert draft.color == DEFAULT_COLORS["valve"]


def test_color_is_editable_independently_of_type():
    draft = ComponentDraft(name="Thing", component_type="pump")
    draft.apply_fields({"color": "#112233"})
    assert draft.component_type == "pump"
    assert draft.color == "#112233"


def test_status_colors():
    assert status_color("active") == "#10B981"
    assert status_color("inactive") == "#EF4444"
    assert status_color("maintenance") == "#F59E0B"
    assert status_color("error") == "#DC2626"
    assert status_color("retired") == "#6B7280"
    assert status_color(None) == "#6B7280"


def test_unknown_type_falls_back_to_green():
    assert default_color("windmill") == "#4CAF50"


@pytest.mark.parametrize("value,default,expected", [
    ("12.5", 0.0, 12.5),
    ("12.5m", 0.0, 12.5),
    ("", 0.0, 0.0),
    ("abc", 100.0, 100.0),
    ("0", 100.0, 100.0),
    (None, 100.0, 100.0),
    (42, 100.0, 42.0),
    ("nan", 1.0, 1.0),
])
def test_coerce_float(value, default, expected):
    assert coerce_float(value, default) == expected


def test_bad_size_falls_back_to_one():
    draft = ComponentDraft.for_new_component()
    draft.apply_fields({"width": "wide", "height": "", "x_position": "oops"})
    assert draft.width == 1.0
    assert draft.height == 1.0
    assert draft.x_position == 0.0


def test_cleared_width_input_gives_unit_size():
    draft = ComponentDraft(name="x", width=40)
    draft.apply_fields({"width": ""})
    assert draft.width == 1.0
    assert draft.height == 100.0


def test_add_form_defaults():
    draft = ComponentDraft.for_new_component()
    assert draft.component_type == "growbed"
    assert draft.color == "#4CAF50"
    assert (draft.width, draft.height) == (100.0, 100.0)
    assert draft.status == "active"
    assert draft.metadata == {}
    assert not draft.is_submittable


def test_whitespace_name_is_not_submittable():
    draft = ComponentDraft(name="   ")
    assert not draft.is_submittable


def test_invalid_status_is_rejected():
    draft = ComponentDraft(name="Thing")
    with pytest.raises(ValidationError):
        draft.apply_fields({"status": "exploded"})


def test_id_and_unknown_fields_cannot_be_edited():
    draft = ComponentDraft(id=3, name="Thing")
    with pytest.raises(ValueError):
        draft.apply_fields({"id": 4})
    with pytest.raises(ValueError):
        draft.apply_fields({"rotation": 90})


def test_draft_is_a_copy():
    component = LayoutComponent(id=1, name="Bed", metadata={"note": "north"})
    draft = ComponentDraft.from_component(component)
    draft.apply_fields({"name": "Renamed"})
    draft.metadata["note"] = "south"
    assert component.name == "Bed"
    assert component.metadata == {"note": "north"}


def test_to_row_excludes_id():
    draft = ComponentDraft(id=9, name="Pump", component_type="pump")
    row = draft.to_row()
    assert "id" not in row
    assert row["component_type"] == "pump"


def test_unknown_columns_are_kept():
    component = LayoutComponent(id=1, name="Bed", rotation=45, parent_id=None)
    assert component.model_dump()["rotation"] == 45


def test_detail_rounds_position_and_size():
    component = LayoutComponent(
        id=1, name="Bed", x_position=10.26, y_position=3.14159, width=99.96, height=50.04
    )
    detail = ComponentDetail.from_component(component)
    assert detail.position == (10.3, 3.1)
    assert detail.size == (100.0, 50.0)
    assert detail.status_color == "#10B981"


def test_fishtank_detail_reports_diameter():
    component = LayoutComponent(id=2, name="Tank", component_type="fishtank", width=80)
    detail = ComponentDetail.from_component(component)
    assert detail.size_label == "80.0 diameter"
