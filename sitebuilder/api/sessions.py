"""
In-memory registry of editing sessions.

Each session owns one ElementTreeStore and the entitlement it reads. The
registry is bounded: opening a session past the limit evicts the least
recently used one.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass

from sitebuilder.kernel.store import ElementTreeStore

logger = logging.getLogger(__name__)


@dataclass
class Entitlement:
    """Entitlement provider handed to the store; the session can change the tier."""

    tier: str

    def __call__(self) -> str:
        return self.tier


@dataclass
class EditingSession:
    id: str
    store: ElementTreeStore
    entitlement: Entitlement
    site_id: str | None = None

    @property
    def tier(self) -> str:
        return self.entitlement.tier


class SessionRegistry:
    def __init__(self, max_sessions: int) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, EditingSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def open(
        self,
        store: ElementTreeStore,
        entitlement: Entitlement,
        site_id: str | None = None,
    ) -> EditingSession:
        session = EditingSession(id=uuid.uuid4().hex, store=store, entitlement=entitlement, site_id=site_id)
        self._sessions[session.id] = session
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("sessions: evicted %s (limit %d)", evicted_id, self.max_sessions)
        return session

    def get(self, session_id: str) -> EditingSession | None:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def close(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None
