"""
Entity access over a single persisted document.

Each operation loads the document, works on it in memory, and saves it back
while holding one process-wide lock, so read-modify-write cycles from
concurrent requests never interleave.
"""

from __future__ import annotations

import contextlib
import logging
import threading
import uuid
from typing import Iterator, Optional

from newsletter_hub.db import (
    DocumentStore,
    FeedRecord,
    SessionRecord,
    SourceRecord,
    UserRecord,
)
from newsletter_hub.errors import (
    AuthorizationError,
    ConflictError,
    HubError,
    NotFoundError,
    StorageError,
)
from newsletter_hub.policy import authorize

logger = logging.getLogger(__name__)


class EntityStore:
    def __init__(self, documents: DocumentStore):
        self.documents = documents
        self._lock = threading.RLock()

    def _load(self) -> dict:
        try:
            return self.documents.load()
        except HubError:
            raise
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read data store: {exc}") from exc

    def _save(self, document: dict) -> None:
        try:
            self.documents.save(document)
        except HubError:
            raise
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"Could not write data store: {exc}") from exc

    @contextlib.contextmanager
    def transaction(self) -> Iterator[dict]:
        """Yield the document for mutation; saved only if the block succeeds."""
        with self._lock:
            document = self._load()
            yield document
            self._save(document)

    @contextlib.contextmanager
    def snapshot(self) -> Iterator[dict]:
        with self._lock:
            yield self._load()

    # Users
    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.snapshot() as doc:
            return _find_user(doc, lambda u: u.get("id") == user_id)

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.snapshot() as doc:
            return _find_user(doc, lambda u: u.get("email") == email)

    def add_user(
        self, *, email: str, name: str, avatar_url: str, password_hash: str
    ) -> UserRecord:
        with self.transaction() as doc:
            if any(u.get("email") == email for u in doc["users"]):
                raise ConflictError("Email already registered.")
            user = UserRecord(
                id=str(uuid.uuid4()),
                email=email,
                name=name,
                avatar_url=avatar_url,
                password_hash=password_hash,
            )
            doc["users"].append(user.as_dict())
        return user

    # Sources
    def list_sources(self, user_id: str) -> list[SourceRecord]:
        with self.snapshot() as doc:
            return [
                SourceRecord.from_dict(s)
                for s in doc["sources"]
                if s.get("userId") == user_id
            ]

    def get_sources(self, source_ids: list[str]) -> list[SourceRecord]:
        """Sources with the given ids, in stored order."""
        wanted = set(source_ids)
        with self.snapshot() as doc:
            return [
                SourceRecord.from_dict(s) for s in doc["sources"] if s.get("id") in wanted
            ]

    def create_source(self, *, user_id: str, name: str, email_address: str) -> SourceRecord:
        source = SourceRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            email_address=email_address,
        )
        with self.transaction() as doc:
            doc["sources"].append(source.as_dict())
        return source

    # Feeds
    def list_feeds(self, user_id: str) -> list[FeedRecord]:
        with self.snapshot() as doc:
            return [
                FeedRecord.from_dict(f) for f in doc["feeds"] if f.get("userId") == user_id
            ]

    def get_feed(self, feed_id: str) -> Optional[FeedRecord]:
        with self.snapshot() as doc:
            for f in doc["feeds"]:
                if f.get("id") == feed_id:
                    return FeedRecord.from_dict(f)
        return None

    def create_feed(
        self, *, user: UserRecord, name: str, keywords: str, source_ids: list[str]
    ) -> FeedRecord:
        with self.transaction() as doc:
            _check_sources_owned(doc, user, source_ids)
            feed = FeedRecord(
                id=str(uuid.uuid4()),
                user_id=user.id,
                name=name,
                keywords=keywords,
                source_ids=list(source_ids),
            )
            doc["feeds"].append(feed.as_dict())
        return feed

    def update_feed(
        self,
        feed_id: str,
        *,
        user: UserRecord,
        name: Optional[str] = None,
        keywords: Optional[str] = None,
        source_ids: Optional[list[str]] = None,
    ) -> FeedRecord:
        """
        Apply a partial update. Empty or missing fields keep their stored value.
        """
        with self.transaction() as doc:
            index = _owned_feed_index(doc, user, feed_id)
            feed = FeedRecord.from_dict(doc["feeds"][index])
            if name:
                feed.name = name
            if keywords:
                feed.keywords = keywords
            if source_ids:
                _check_sources_owned(doc, user, source_ids)
                feed.source_ids = list(source_ids)
            doc["feeds"][index] = feed.as_dict()
        return feed

    def delete_feed(self, feed_id: str, *, user: UserRecord) -> None:
        with self.transaction() as doc:
            index = _owned_feed_index(doc, user, feed_id)
            del doc["feeds"][index]

    # Sessions
    def add_session(self, session: SessionRecord) -> None:
        with self.transaction() as doc:
            doc["sessions"][session.token] = session.as_dict()

    def get_session(self, token: str) -> Optional[SessionRecord]:
        with self.snapshot() as doc:
            data = doc["sessions"].get(token)
            if data is None:
                return None
            return SessionRecord.from_dict(token, data)

    def remove_session(self, token: str) -> bool:
        """Delete a session; returns False (and writes nothing) if absent."""
        with self._lock:
            doc = self._load()
            if token not in doc["sessions"]:
                return False
            del doc["sessions"][token]
            self._save(doc)
            return True


def _find_user(doc: dict, predicate) -> Optional[UserRecord]:
    for u in doc["users"]:
        if predicate(u):
            return UserRecord.from_dict(u)
    return None


def _check_sources_owned(doc: dict, user: UserRecord, source_ids: list[str]) -> None:
    sources = {s.get("id"): SourceRecord.from_dict(s) for s in doc["sources"]}
    for source_id in source_ids:
        if not authorize(user, "source", sources.get(source_id)):
            logger.info("Rejected feed write by user %s: foreign source %s", user.id, source_id)
            raise AuthorizationError("One or more sources are invalid.")


def _owned_feed_index(doc: dict, user: UserRecord, feed_id: str) -> int:
    for index, f in enumerate(doc["feeds"]):
        if f.get("id") == feed_id:
            if authorize(user, "feed", FeedRecord.from_dict(f)):
                return index
            break
    raise NotFoundError("Feed not found.")
