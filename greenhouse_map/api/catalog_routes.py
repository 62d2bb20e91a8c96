"""
Catalog Routes
==============

Existing growbeds and fish tanks that can be linked to map components.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..canvas.fixture_linking import available_fixtures
from ..models.catalog_models import CatalogFixture, FixtureKind
from ..services.fixture_catalog_client import CatalogResponse, FixtureCatalog
from ..services.layout_store import LayoutStore, LayoutStoreError

router = APIRouter(prefix="/api/catalog", tags=["catalog"])

# Injected by server
fixture_catalog: Optional[FixtureCatalog] = None
layout_store: Optional[LayoutStore] = None


def get_fixture_catalog() -> FixtureCatalog:
    """Dependency to get the fixture catalog."""
    if fixture_catalog is None:
        raise HTTPException(500, "Fixture catalog not initialized")
    return fixture_catalog


class CatalogListResponse(BaseModel):
    kind: FixtureKind
    fixtures: List[CatalogFixture]


async def fetch_fixtures(kind: FixtureKind) -> List[CatalogFixture]:
    """Catalog fixtures of one kind; raises 502 if the catalog is unreachable."""
    catalog = get_fixture_catalog()
    if kind == FixtureKind.GROWBED:
        result: CatalogResponse = await catalog.list_growbeds()
    else:
        result = await catalog.list_fishtanks()
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error or "Catalog unavailable")
    return result.fixtures


async def _list(kind: FixtureKind, available_only: bool) -> CatalogListResponse:
    fixtures = await fetch_fixtures(kind)
    if available_only:
        if layout_store is None:
            raise HTTPException(500, "Layout store not initialized")
        try:
            components = await layout_store.list_components()
        except LayoutStoreError as e:
            raise HTTPException(status_code=502, detail=f"Layout store error: {e}")
        fixtures = available_fixtures(fixtures, components)
    return CatalogListResponse(kind=kind, fixtures=fixtures)


@router.get("/growbeds")
async def list_growbeds(available_only: bool = False) -> CatalogListResponse:
    """Existing growbeds, optionally only those not yet on the map."""
    return await _list(FixtureKind.GROWBED, available_only)


@router.get("/fishtanks")
async def list_fishtanks(available_only: bool = False) -> CatalogListResponse:
    """Existing fish tanks, optionally only those not yet on the map."""
    return await _list(FixtureKind.FISHTANK, available_only)
