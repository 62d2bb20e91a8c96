"""
Greenhouse Map Server
=====================

FastAPI server for the greenhouse layout map and its editor.

Features:
- Interactive editor sessions (drag, select, edit, add, delete)
- REST access to the greenhouse layout table
- Read-only SVG map view
- Catalog of existing growbeds and fish tanks for linking
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

from .config import load_settings
from .canvas.session_manager import EditorSessionManager
from .models.layout_models import (
    COMPONENT_ICONS, COMPONENT_LABELS, DEFAULT_COLORS, DEFAULT_SIZE, STATUS_COLORS,
    UNKNOWN_STATUS_COLOR, ComponentType
)
from .services.fixture_catalog_client import FixtureCatalog, create_fixture_catalog
from .services.layout_store import LayoutStore, create_layout_store

# Import API routers
from .api import catalog_routes, editor_routes, layout_routes


# Shared service instances
layout_store: LayoutStore = None
fixture_catalog: FixtureCatalog = None
session_manager: EditorSessionManager = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global layout_store, fixture_catalog, session_manager

    logger.info("[GREENHOUSE-MAP] Starting up...")
    settings = load_settings()

    layout_store = create_layout_store(settings.store)
    fixture_catalog = create_fixture_catalog(settings.store)
    session_manager = EditorSessionManager(layout_store, settings.editor)

    # Inject into route modules
    layout_routes.layout_store = layout_store
    catalog_routes.layout_store = layout_store
    catalog_routes.fixture_catalog = fixture_catalog
    editor_routes.session_manager = session_manager

    logger.info(f"[GREENHOUSE-MAP] Services initialized (store={settings.store.backend})")

    yield

    # Cleanup
    logger.info("[GREENHOUSE-MAP] Shutting down...")
    if layout_store:
        await layout_store.close()
    if fixture_catalog:
        await fixture_catalog.close()


# Create FastAPI app
app = FastAPI(
    title="Greenhouse Map",
    description="Greenhouse layout map and editor",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(layout_routes.router)
app.include_router(editor_routes.router)
app.include_router(catalog_routes.router)


@app.get("/")
async def root():
    """Return API info."""
    return {
        "service": "Greenhouse Map",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "components": "/api/layout/components",
            "map": "/api/layout/map.svg",
            "editor": "/api/editor/session",
            "catalog": "/api/catalog/growbeds"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "greenhouse-map",
        "editor_sessions": session_manager.session_count() if session_manager else 0
    }


@app.get("/api/info")
async def api_info():
    """Component types with their defaults, and the status color mapping."""
    return {
        "service": "Greenhouse Map",
        "version": "1.0.0",
        "component_types": [
            {
                "type": component_type.value,
                "label": COMPONENT_LABELS[component_type.value],
                "icon": COMPONENT_ICONS[component_type.value],
                "default_color": DEFAULT_COLORS[component_type.value],
                "default_size": {"width": DEFAULT_SIZE, "height": DEFAULT_SIZE}
            }
            for component_type in ComponentType
        ],
        "status_colors": {**STATUS_COLORS, "unknown": UNKNOWN_STATUS_COLOR}
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "greenhouse_map.server:app",
        host="0.0.0.0",
        port=8080,
        reload=True
    )
