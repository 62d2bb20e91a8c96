"""
Layout Store
============

Row-level access to the greenhouse layout table.

Two backends share one interface:
- SupabaseLayoutStore: the hosted backend's REST API over httpx
- JsonLayoutStore: a local JSON file, for development and tests
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from ..config import StoreConfig
from ..models.layout_models import LayoutComponent

logger = logging.getLogger(__name__)

ComponentId = Union[int, str]


class LayoutStoreError(Exception):
    """A layout store read or write was rejected or could not be sent."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LayoutStore:
    """Interface of the layout table: read all, update, insert, delete."""

    async def list_components(self) -> List[LayoutComponent]:
        """All rows, ascending by layer_order."""
        raise NotImplementedError

    async def update_component(self, component_id: ComponentId, fields: Dict[str, Any]) -> LayoutComponent:
        """Update one row by id and return it."""
        raise NotImplementedError

    async def insert_component(self, row: Dict[str, Any]) -> LayoutComponent:
        """Insert one row and return it with its store-assigned id."""
        raise NotImplementedError

    async def delete_component(self, component_id: ComponentId) -> bool:
        """Delete one row by id. Returns False if no row matched."""
        raise NotImplementedError

    async def close(self):
        pass


def _writable(fields: Dict[str, Any]) -> Dict[str, Any]:
    # ids are assigned by the store and never rewritten
    return {k: v for k, v in fields.items() if k != "id"}


# Columns a row may hold as null; the component default applies instead
_DEFAULTED_COLUMNS = (
    "name", "component_type", "x_position", "y_position", "width", "height", "layer_order"
)


def _to_component(row: Any) -> LayoutComponent:
    """Build a component from a stored row, or raise LayoutStoreError."""
    if not isinstance(row, dict):
        raise LayoutStoreError(f"Malformed layout row: {row!r:.200}")
    values = {k: v for k, v in row.items() if not (v is None and k in _DEFAULTED_COLUMNS)}
    try:
        return LayoutComponent(**values)
    except ValidationError as e:
        raise LayoutStoreError(f"Malformed layout row id={row.get('id')}: {e}") from e


def _to_components(rows: Any) -> List[LayoutComponent]:
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise LayoutStoreError(f"Expected a list of layout rows, got {type(rows).__name__}")
    return [_to_component(row) for row in rows]


class SupabaseLayoutStore(LayoutStore):
    """
    Layout store backed by the hosted Postgres REST API.

    Usage:
        store = SupabaseLayoutStore(config)
        components = await store.list_components()
    """

    def __init__(self, config: StoreConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not config.supabase_url:
            raise ValueError("SupabaseLayoutStore requires a Supabase URL")
        self.config = config
        self.table = config.layout_table
        self.base_url = f"{config.supabase_url.rstrip('/')}/rest/v1"
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        logger.info(f"[LAYOUT-STORE] Supabase store for table={self.table}")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            key = self.config.supabase_key or ""
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
                headers={
                    "apikey": key,
                    "Authorization": f"Bearer {key}",
                    "Content-Type": "application/json",
                }
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, params: Dict[str, str], **kwargs) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, f"/{self.table}", params=params, **kwargs)
        except httpx.HTTPError as e:
            raise LayoutStoreError(f"Connection error: {e}") from e

        if response.status_code >= 400:
            raise LayoutStoreError(
                f"Store error {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise LayoutStoreError(f"Store sent a non-JSON body: {response.text[:200]}") from e

    async def list_components(self) -> List[LayoutComponent]:
        rows = await self._request("GET", {"select": "*", "order": "layer_order.asc"})
        return _to_components(rows)

    async def update_component(self, component_id: ComponentId, fields: Dict[str, Any]) -> LayoutComponent:
        rows = await self._request(
            "PATCH",
            {"id": f"eq.{component_id}"},
            json=_writable(fields),
            headers={"Prefer": "return=representation"}
        )
        if not rows:
            raise LayoutStoreError(f"Component {component_id} not found", status_code=404)
        return _to_component(rows[0])

    async def insert_component(self, row: Dict[str, Any]) -> LayoutComponent:
        rows = await self._request(
            "POST",
            {"select": "*"},
            json=[_writable(row)],
            headers={"Prefer": "return=representation"}
        )
        if not rows:
            raise LayoutStoreError("Insert returned no row")
        return _to_component(rows[0])

    async def delete_component(self, component_id: ComponentId) -> bool:
        rows = await self._request(
            "DELETE",
            {"id": f"eq.{component_id}"},
            headers={"Prefer": "return=representation"}
        )
        return bool(rows)


class JsonLayoutStore(LayoutStore):
    """
    Layout store kept in a local JSON file with integer ids.

    Writes are made on a copy of the table, which replaces the cached table
    only once the file has been written.
    """

    def __init__(self, data_dir: Optional[Path] = None, table: str = "greenhouse_layout"):
        self.data_dir = Path(data_dir or "data")
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.data_dir / f"{table}.json"
        self._table: Optional[Dict[str, Any]] = None
        logger.info(f"[LAYOUT-STORE] JSON store at {self.path}")

    def _load(self) -> Dict[str, Any]:
        if self._table is None:
            if self.path.exists():
                try:
                    with open(self.path) as f:
                        self._table = json.load(f)
                except (OSError, ValueError) as e:
                    raise LayoutStoreError(f"Cannot read {self.path}: {e}") from e
            else:
                self._table = {"next_id": 1, "rows": []}
        return self._table

    def _draft(self) -> Dict[str, Any]:
        return copy.deepcopy(self._load())

    def _save(self, table: Dict[str, Any]):
        try:
            with open(self.path, "w") as f:
                json.dump(table, f, indent=2)
        except OSError as e:
            raise LayoutStoreError(f"Cannot write {self.path}: {e}") from e
        self._table = table

    @staticmethod
    def _find(table: Dict[str, Any], component_id: ComponentId) -> Optional[Dict[str, Any]]:
        for row in table["rows"]:
            if str(row.get("id")) == str(component_id):
                return row
        return None

    async def list_components(self) -> List[LayoutComponent]:
        rows = sorted(self._load()["rows"], key=lambda r: r.get("layer_order") or 0)
        return _to_components(rows)

    async def update_component(self, component_id: ComponentId, fields: Dict[str, Any]) -> LayoutComponent:
        table = self._draft()
        row = self._find(table, component_id)
        if row is None:
            raise LayoutStoreError(f"Component {component_id} not found", status_code=404)
        row.update(_writable(fields))
        component = _to_component(row)
        self._save(table)
        return component

    async def insert_component(self, row: Dict[str, Any]) -> LayoutComponent:
        table = self._draft()
        stored = {"id": table["next_id"], **_writable(row)}
        component = _to_component(stored)
        table["next_id"] += 1
        table["rows"].append(stored)
        self._save(table)
        return component

    async def delete_component(self, component_id: ComponentId) -> bool:
        table = self._draft()
        initial_len = len(table["rows"])
        table["rows"] = [r for r in table["rows"] if str(r.get("id")) != str(component_id)]
        if len(table["rows"]) == initial_len:
            return False
        self._save(table)
        return True


def create_layout_store(config: StoreConfig) -> LayoutStore:
    """Build the store backend named in the configuration."""
    if config.backend == "supabase":
        return SupabaseLayoutStore(config)
    return JsonLayoutStore(data_dir=config.data_dir, table=config.layout_table)
