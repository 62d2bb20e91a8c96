"""
Layout store tests: hosted REST backend (mocked transport) and JSON file backend.
"""

import json

import httpx
import pytest

from greenhouse_map.config import StoreConfig
from greenhouse_map.services.layout_store import (
    JsonLayoutStore, LayoutStoreError, SupabaseLayoutStore, create_layout_store
)

from conftest import make_row, run


def supabase_store(handler) -> SupabaseLayoutStore:
    config = StoreConfig(supabase_url="https://example.supabase.co", supabase_key="anon-key", backend="supabase")
    return SupabaseLayoutStore(config, transport=httpx.MockTransport(handler))


def test_supabase_list_orders_by_layer():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["headers"] = request.headers
        return httpx.Response(200, json=[make_row(1), make_row(2)])

    store = supabase_store(handler)
    components = run(store.list_components())
    assert [c.id for c in components] == [1, 2]
    assert seen["url"].path == "/rest/v1/greenhouse_layout"
    assert seen["url"].params["order"] == "layer_order.asc"
    assert seen["headers"]["apikey"] == "anon-key"
    assert seen["headers"]["authorization"] == "Bearer anon-key"


def test_supabase_update_by_id_never_sends_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["params"] = request.url.params
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[make_row(5, name="Renamed")])

    store = supabase_store(handler)
    updated = run(store.update_component(5, {"id": 99, "name": "Renamed"}))
    assert updated.id == 5
    assert seen["method"] == "PATCH"
    assert seen["params"]["id"] == "eq.5"
    assert seen["body"] == {"name": "Renamed"}


def test_supabase_update_missing_row_is_not_found():
    store = supabase_store(lambda request: httpx.Response(200, json=[]))
    with pytest.raises(LayoutStoreError) as excinfo:
        run(store.update_component(5, {"name": "x"}))
    assert excinfo.value.status_code == 404


def test_supabase_insert_returns_assigned_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["prefer"] = request.headers.get("prefer")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=[{**seen["body"][0], "id": 42}])

    store = supabase_store(handler)
    created = run(store.insert_component({"name": "Valve", "component_type": "valve"}))
    assert created.id == 42
    assert seen["prefer"] == "return=representation"
    assert seen["body"] == [{"name": "Valve", "component_type": "valve"}]


def test_supabase_delete():
    store = supabase_store(lambda request: httpx.Response(200, json=[make_row(3)]))
    assert run(store.delete_component(3)) is True


def test_supabase_error_status_raises():
    store = supabase_store(lambda request: httpx.Response(409, text="duplicate key"))
    with pytest.raises(LayoutStoreError) as excinfo:
        run(store.insert_component({"name": "x"}))
    assert excinfo.value.status_code == 409


def test_supabase_connection_error_raises():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    store = supabase_store(handler)
    with pytest.raises(LayoutStoreError):
        run(store.list_components())


def test_supabase_null_columns_take_defaults():
    store = supabase_store(lambda request: httpx.Response(200, json=[make_row(1, layer_order=None, name=None)]))
    [component] = run(store.list_components())
    assert component.layer_order == 0
    assert component.name == ""


def test_supabase_non_json_body_raises():
    store = supabase_store(lambda request: httpx.Response(200, text="<html>gateway</html>"))
    with pytest.raises(LayoutStoreError):
        run(store.list_components())


@pytest.mark.parametrize("body", [
    [{"name": "no id"}],
    [make_row(1, width="wide")],
    {"message": "not a list"},
    ["row"],
])
def test_supabase_malformed_rows_raise(body):
    store = supabase_store(lambda request: httpx.Response(200, json=body))
    with pytest.raises(LayoutStoreError):
        run(store.list_components())


def test_supabase_malformed_update_result_raises():
    store = supabase_store(lambda request: httpx.Response(200, json=[{"name": "no id"}]))
    with pytest.raises(LayoutStoreError):
        run(store.update_component(1, {"name": "x"}))


def test_json_store_round_trip(tmp_path):
    store = JsonLayoutStore(data_dir=tmp_path)
    first = run(store.insert_component({"name": "Top", "layer_order": 5}))
    second = run(store.insert_component({"name": "Bottom", "layer_order": 1}))
    assert (first.id, second.id) == (1, 2)
    assert [c.name for c in run(store.list_components())] == ["Bottom", "Top"]

    run(store.update_component("1", {"x_position": 12.5}))
    reopened = JsonLayoutStore(data_dir=tmp_path)
    components = {c.id: c for c in run(reopened.list_components())}
    assert components[1].x_position == 12.5

    assert run(reopened.delete_component(2)) is True
    assert run(reopened.delete_component(2)) is False


def test_json_store_update_unknown_id(tmp_path):
    store = JsonLayoutStore(data_dir=tmp_path)
    with pytest.raises(LayoutStoreError):
        run(store.update_component(1, {"name": "ghost"}))


def test_json_store_failed_save_leaves_table_unchanged(tmp_path, monkeypatch):
    store = JsonLayoutStore(data_dir=tmp_path)
    run(store.insert_component({"name": "Bed"}))

    def failing_save(table):
        raise LayoutStoreError("disk full")

    monkeypatch.setattr(store, "_save", failing_save)
    with pytest.raises(LayoutStoreError):
        run(store.insert_component({"name": "Pump"}))
    with pytest.raises(LayoutStoreError):
        run(store.update_component(1, {"name": "Renamed"}))
    with pytest.raises(LayoutStoreError):
        run(store.delete_component(1))

    [component] = run(store.list_components())
    assert (component.id, component.name) == (1, "Bed")

    monkeypatch.undo()
    assert run(store.insert_component({"name": "Pump"})).id == 2


def test_json_store_null_layer_order_loads(tmp_path):
    (tmp_path / "greenhouse_layout.json").write_text(json.dumps({"next_id": 2, "rows": [make_row(1, layer_order=None)]}))
    [component] = run(JsonLayoutStore(data_dir=tmp_path).list_components())
    assert component.layer_order == 0


def test_create_layout_store_picks_backend(tmp_path):
    store = create_layout_store(StoreConfig(backend="json", data_dir=tmp_path))
    assert isinstance(store, JsonLayoutStore)
