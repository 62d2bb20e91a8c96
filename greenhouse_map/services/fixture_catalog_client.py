"""
Fixture Catalog Client
======================

Reads the greenhouse register of existing growbeds and fish tanks, so map
components can be linked to the fixtures they represent.
"""

import json
import logging
import ssl
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp
import certifi
from pydantic import BaseModel, Field

from ..config import StoreConfig
from ..models.catalog_models import CatalogFixture, FixtureKind

logger = logging.getLogger(__name__)


class CatalogResponse(BaseModel):
    """Response from a catalog listing."""
    success: bool
    fixtures: List[CatalogFixture] = Field(default_factory=list)
    error: Optional[str] = None


def _to_fixtures(rows: List[Dict[str, Any]], kind: FixtureKind) -> List[CatalogFixture]:
    fixtures = []
    for row in rows:
        if row.get("id") is None:
            continue
        fixtures.append(CatalogFixture(
            id=row["id"],
            name=row.get("name") or "",
            kind=kind,
            type=row.get("type"),
            status=row.get("status")
        ))
    return sorted(fixtures, key=lambda f: f.name)


class FixtureCatalog:
    """Interface for listing existing growbeds and fish tanks."""

    async def list_growbeds(self) -> CatalogResponse:
        raise NotImplementedError

    async def list_fishtanks(self) -> CatalogResponse:
        raise NotImplementedError

    async def close(self):
        pass


class FixtureCatalogClient(FixtureCatalog):
    """Client for the growbeds and fishtanks tables of the hosted backend."""

    def __init__(self, config: StoreConfig):
        self.config = config
        self.timeout = config.timeout
        self.base_url = f"{(config.supabase_url or '').rstrip('/')}/rest/v1"
        self._session: Optional[aiohttp.ClientSession] = None
        logger.info(f"[CATALOG-CLIENT] Initialized with timeout={self.timeout}, url={self.base_url}")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            key = self.config.supabase_key or ""
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                connector=connector,
                headers={"apikey": key, "Authorization": f"Bearer {key}"}
            )
        return self._session

    async def close(self):
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _fetch(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        session = await self._get_session()
        async with session.get(f"{self.base_url}/{table}", params=params) as resp:
            if resp.status != 200:
                error_text = await resp.text()
                raise aiohttp.ClientResponseError(
                    resp.request_info,
                    resp.history,
                    status=resp.status,
                    message=error_text[:200]
                )
            return await resp.json()

    async def list_growbeds(self) -> CatalogResponse:
        """Existing growbeds ordered by name."""
        try:
            rows = await self._fetch(
                self.config.growbeds_table,
                {"select": "id,name,type,status", "order": "name.asc"}
            )
            return CatalogResponse(success=True, fixtures=_to_fixtures(rows, FixtureKind.GROWBED))
        except aiohttp.ClientError as e:
            logger.error(f"[CATALOG-CLIENT] Error fetching growbeds: {e}")
            return CatalogResponse(success=False, error=f"Connection error: {str(e)}")
        except Exception as e:
            logger.error(f"[CATALOG-CLIENT] Unexpected error fetching growbeds: {e}")
            return CatalogResponse(success=False, error=f"Unexpected error: {str(e)}")

    async def list_fishtanks(self) -> CatalogResponse:
        """
        Existing fish tanks ordered by name.

        The fishtanks table differs between deployments, so all columns are
        read and a missing or unreadable table yields an empty list.
        """
        try:
            rows = await self._fetch(self.config.fishtanks_table, {"select": "*", "order": "name.asc"})
            return CatalogResponse(success=True, fixtures=_to_fixtures(rows, FixtureKind.FISHTANK))
        except aiohttp.ClientError as e:
            logger.warning(f"[CATALOG-CLIENT] Fishtanks table unavailable: {e}")
            return CatalogResponse(success=True, fixtures=[])
        except Exception as e:
            logger.error(f"[CATALOG-CLIENT] Unexpected error fetching fishtanks: {e}")
            return CatalogResponse(success=False, error=f"Unexpected error: {str(e)}")


class JsonFixtureCatalog(FixtureCatalog):
    """Catalog read from growbeds.json / fishtanks.json in the data directory."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir or "data")

    def _read(self, name: str) -> List[Dict[str, Any]]:
        path = self.data_dir / f"{name}.json"
        if not path.exists():
            return []
        with open(path) as f:
            return json.load(f)

    async def list_growbeds(self) -> CatalogResponse:
        try:
            rows = self._read("growbeds")
        except (OSError, ValueError) as e:
            logger.error(f"[CATALOG] Error reading growbeds: {e}")
            return CatalogResponse(success=False, error=str(e))
        return CatalogResponse(success=True, fixtures=_to_fixtures(rows, FixtureKind.GROWBED))

    async def list_fishtanks(self) -> CatalogResponse:
        try:
            rows = self._read("fishtanks")
        except (OSError, ValueError) as e:
            logger.warning(f"[CATALOG] Fishtanks unavailable: {e}")
            rows = []
        return CatalogResponse(success=True, fixtures=_to_fixtures(rows, FixtureKind.FISHTANK))


def create_fixture_catalog(config: StoreConfig) -> FixtureCatalog:
    if config.backend == "supabase":
        return FixtureCatalogClient(config)
    return JsonFixtureCatalog(data_dir=config.data_dir)
