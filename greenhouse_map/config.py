"""
Greenhouse Map Configuration
============================

Settings read from the environment at start-up.
"""

import os
import logging
from pathlib import Path
from typing import Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the environment holds an unusable setting."""


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class StoreConfig(BaseModel):
    """Configuration for the hosted layout store."""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    layout_table: str = "greenhouse_layout"
    growbeds_table: str = "growbeds"
    fishtanks_table: str = "fishtanks"
    backend: str = "json"
    data_dir: Path = Path("data")
    timeout: float = 30.0


class EditorConfig(BaseModel):
    """Behaviour of the interactive layout editor."""
    persist_on_drop: bool = True
    container_width: float = 800.0
    container_height: float = 600.0
    # idle editor sessions are dropped after this long; 0 keeps them forever
    session_ttl_minutes: float = 60.0


class Settings(BaseModel):
    store: StoreConfig
    editor: EditorConfig


def load_settings() -> Settings:
    """Build settings from environment variables."""
    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_ANON_KEY")

    if supabase_url and not supabase_url.startswith("https://"):
        raise ConfigurationError("Invalid Supabase URL format. URL must start with https://")

    backend = os.getenv("GREENHOUSE_STORE", "supabase" if supabase_url else "json").lower()
    if backend not in ("supabase", "json"):
        raise ConfigurationError(f"Unknown GREENHOUSE_STORE backend: {backend}")

    if backend == "supabase" and not (supabase_url and supabase_key):
        logger.error(
            "[CONFIG] Missing Supabase environment variables: url=%s key=%s",
            "Present" if supabase_url else "Missing",
            "Present" if supabase_key else "Missing",
        )

    store = StoreConfig(
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        layout_table=os.getenv("GREENHOUSE_LAYOUT_TABLE", "greenhouse_layout"),
        backend=backend,
        data_dir=Path(os.getenv("GREENHOUSE_DATA_DIR", "data")),
        timeout=float(os.getenv("GREENHOUSE_STORE_TIMEOUT", "30")),
    )
    editor = EditorConfig(
        persist_on_drop=_env_flag("GREENHOUSE_PERSIST_ON_DROP", True),
        session_ttl_minutes=float(os.getenv("GREENHOUSE_SESSION_TTL_MINUTES", "60")),
    )
    return Settings(store=store, editor=editor)
