"""
Editor Session Manager
======================

Keeps one LayoutEditor per open editor session. Sessions that are neither
saved nor cancelled are dropped once they have been idle for the configured
time.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, Optional

from .editor import LayoutEditor
from ..config import EditorConfig
from ..services.layout_store import LayoutStore

logger = logging.getLogger(__name__)


class EditorSessionManager:
    """Opens, looks up and closes editor sessions."""

    def __init__(self, store: LayoutStore, config: Optional[EditorConfig] = None):
        self.store = store
        self.config = config or EditorConfig()
        self._sessions: Dict[str, LayoutEditor] = {}
        self._opened_at: Dict[str, datetime] = {}
        self._last_seen: Dict[str, datetime] = {}
        logger.info(
            f"[SESSION-MANAGER] Initialized (persist_on_drop={self.config.persist_on_drop}, "
            f"ttl={self.config.session_ttl_minutes}m)"
        )

    async def open_session(self, session_id: Optional[str] = None) -> str:
        """Mount a new editor: build it and load the layout."""
        self.evict_idle()
        if session_id is None:
            session_id = str(uuid.uuid4())

        editor = LayoutEditor(
            self.store,
            on_save=lambda: self.close_session(session_id),
            on_cancel=lambda: self.close_session(session_id),
            persist_on_drop=self.config.persist_on_drop,
            container_width=self.config.container_width,
            container_height=self.config.container_height
        )
        now = datetime.now()
        self._sessions[session_id] = editor
        self._opened_at[session_id] = now
        self._last_seen[session_id] = now
        await editor.load()
        logger.info(f"[SESSION-MANAGER] Opened session {session_id}")
        return session_id

    def get_session(self, session_id: str) -> Optional[LayoutEditor]:
        """Look up a live session and mark it as used."""
        self.evict_idle()
        editor = self._sessions.get(session_id)
        if editor is not None:
            self._last_seen[session_id] = datetime.now()
        return editor

    def close_session(self, session_id: str) -> bool:
        editor = self._sessions.pop(session_id, None)
        self._opened_at.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if editor is None:
            return False
        logger.info(f"[SESSION-MANAGER] Closed session {session_id}")
        return True

    def evict_idle(self, now: Optional[datetime] = None) -> int:
        """Close sessions idle for longer than the TTL. Returns how many were closed."""
        if self.config.session_ttl_minutes <= 0:
            return 0
        cutoff = (now or datetime.now()) - timedelta(minutes=self.config.session_ttl_minutes)
        expired = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for session_id in expired:
            self.close_session(session_id)
        if expired:
            logger.info(f"[SESSION-MANAGER] Evicted {len(expired)} idle session(s)")
        return len(expired)

    def session_count(self) -> int:
        return len(self._sessions)

    def opened_at(self, session_id: str) -> Optional[datetime]:
        return self._opened_at.get(session_id)
