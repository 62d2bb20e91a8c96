"""
Shared fixtures for the greenhouse map tests.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from greenhouse_map.models.layout_models import LayoutComponent
from greenhouse_map.services.layout_store import LayoutStore, LayoutStoreError


def run(coro):
    """Drive a coroutine to completion."""
    return asyncio.run(coro)


class MemoryLayoutStore(LayoutStore):
    """In-memory layout store that records writes and can be told to fail."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows = [dict(r) for r in rows or []]
        self.next_id = max([r["id"] for r in self.rows], default=0) + 1
        self.writes: List[tuple] = []
        self.fail_reads = False
        self.fail_writes = False

    async def list_components(self) -> List[LayoutComponent]:
        if self.fail_reads:
            raise LayoutStoreError("store unreachable")
        return [LayoutComponent(**r) for r in sorted(self.rows, key=lambda r: r.get("layer_order", 0))]

    async def update_component(self, component_id, fields):
        self.writes.append(("update", component_id, dict(fields)))
        if self.fail_writes:
            raise LayoutStoreError("write rejected", status_code=500)
        for row in self.rows:
            if row["id"] == component_id:
                row.update(fields)
                return LayoutComponent(**row)
        raise LayoutStoreError("not found", status_code=404)

    async def insert_component(self, row):
        self.writes.append(("insert", None, dict(row)))
        if self.fail_writes:
            raise LayoutStoreError("write rejected", status_code=500)
        stored = {"id": self.next_id, **row}
        self.next_id += 1
        self.rows.append(stored)
        return LayoutComponent(**stored)

    async def delete_component(self, component_id):
        self.writes.append(("delete", component_id, None))
        if self.fail_writes:
            raise LayoutStoreError("write rejected", status_code=500)
        before = len(self.rows)
        self.rows = [r for r in self.rows if r["id"] != component_id]
        return len(self.rows) < before


def make_row(component_id, **overrides) -> Dict[str, Any]:
    row = {
        "id": component_id,
        "name": f"Component {component_id}",
        "component_type": "growbed",
        "x_position": 10.0,
        "y_position": 10.0,
        "width": 100.0,
        "height": 100.0,
        "color": "#4CAF50",
        "status": "active",
        "metadata": {},
        "layer_order": component_id,
    }
    row.update(overrides)
    return row


@pytest.fixture
def store():
    return MemoryLayoutStore([
        make_row(1, name="Bed A"),
        make_row(2, name="Tank 1", component_type="fishtank", color="#2196F3",
                 status="inactive", x_position=300.0, y_position=40.0, layer_order=0),
    ])
