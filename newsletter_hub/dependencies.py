"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from newsletter_hub.config import get_settings
from newsletter_hub.db import (
    DocumentStore,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    SqlDocumentStore,
    UserRecord,
)
from newsletter_hub.entity_store import EntityStore
from newsletter_hub.errors import AuthenticationError
from newsletter_hub.sessions import SessionStore
from newsletter_hub.suggestions import StaticSuggestionSource, SuggestionSource

logger = logging.getLogger(__name__)

_entity_store: EntityStore | None = None
_suggestion_source: SuggestionSource | None = None
# Sync dependencies run on the threadpool; singletons must be built once.
_init_lock = threading.Lock()


def _build_document_store() -> DocumentStore:
    settings = get_settings()
    if settings.use_in_memory_backends:
        logger.info("Using in-memory document store")
        return InMemoryDocumentStore()
    if settings.database_url:
        logger.info("Using SQL document store")
        return SqlDocumentStore(settings.database_url)
    logger.info("Using JSON document store at %s", settings.data_path)
    return JsonFileDocumentStore(settings.data_path)


def get_entity_store() -> EntityStore:
    """
    Return a singleton entity store so its lock is shared by every request.
    """
    global _entity_store
    if _entity_store is not None:
        return _entity_store
    with _init_lock:
        if _entity_store is None:
            _entity_store = EntityStore(_build_document_store())
    return _entity_store


def get_session_store(store: EntityStore = Depends(get_entity_store)) -> SessionStore:
    return SessionStore(store)


def get_suggestion_source() -> SuggestionSource:
    global _suggestion_source
    if _suggestion_source is not None:
        return _suggestion_source
    with _init_lock:
        if _suggestion_source is None:
            _suggestion_source = StaticSuggestionSource()
    return _suggestion_source


@dataclass
class AuthContext:
    user: UserRecord
    token: str


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):] or None


def get_auth_context(
    authorization: Optional[str] = Header(default=None),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthContext:
    """Resolve the caller from its bearer token or reject with 401."""
    token = bearer_token(authorization)
    if not token:
        raise AuthenticationError()
    user = sessions.resolve(token)
    if user is None:
        raise AuthenticationError()
    return AuthContext(user=user, token=token)
