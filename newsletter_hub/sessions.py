"""
Bearer-token sessions with a fixed lifetime.

Expiry is lazy: an expired session is removed the next time someone tries to
use it; nothing sweeps the store in the background.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Optional

from newsletter_hub.db import SessionRecord, UserRecord
from newsletter_hub.entity_store import EntityStore

logger = logging.getLogger(__name__)

SESSION_TTL_SECONDS = 60 * 60 * 24 * 7


class SessionStore:
    def __init__(
        self,
        store: EntityStore,
        *,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.ttl_ms = int(ttl_seconds * 1000)
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def create(self, user_id: str) -> str:
        token = str(uuid.uuid4())
        self.store.add_session(
            SessionRecord(token=token, user_id=user_id, created_at=self._now_ms())
        )
        return token

    def resolve(self, token: str) -> Optional[UserRecord]:
        """Return the session's user, or None if unknown, expired, or orphaned."""
        if not token:
            return None
        session = self.store.get_session(token)
        if session is None:
            return None
        if self._now_ms() - session.created_at > self.ttl_ms:
            self.store.remove_session(token)
            logger.info("Session for user %s expired", session.user_id)
            return None
        # Orphaned sessions are left in place.
        return self.store.get_user(session.user_id)

    def destroy(self, token: str) -> None:
        self.store.remove_session(token)
