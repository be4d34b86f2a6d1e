"""
Document persistence for the JSON store, plus an in-memory and a SQL variant.

All backends hold the same single document::

    {"users": [...], "sources": [...], "feeds": [...], "sessions": {token: {...}}}
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy import JSON, Column, Float, String, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

COLLECTIONS = ("users", "sources", "feeds")


def empty_document() -> dict:
    return {"users": [], "sources": [], "feeds": [], "sessions": {}}


def normalize_document(document: Optional[dict]) -> dict:
    """Fill in any collection missing from an older or hand-edited document."""
    document = dict(document or {})
    for key in COLLECTIONS:
        if not isinstance(document.get(key), list):
            document[key] = []
    if not isinstance(document.get("sessions"), dict):
        document["sessions"] = {}
    return document


class DocumentStore(Protocol):
    """Interface for loading and replacing the whole persisted document."""

    def load(self) -> dict:
        ...

    def save(self, document: dict) -> None:
        ...


@dataclass
class UserRecord:
    id: str
    email: str
    name: str
    avatar_url: str
    password_hash: str

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "avatarUrl": self.avatar_url,
            "passwordHash": self.password_hash,
        }

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "avatarUrl": self.avatar_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserRecord":
        return cls(
            id=data["id"],
            email=data["email"],
            name=data.get("name", ""),
            avatar_url=data.get("avatarUrl", ""),
            password_hash=data.get("passwordHash", ""),
        )


@dataclass
class SourceRecord:
    id: str
    user_id: str
    name: str
    email_address: str

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "emailAddress": self.email_address,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SourceRecord":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            name=data.get("name", ""),
            email_address=data.get("emailAddress", ""),
        )


@dataclass
class FeedRecord:
    id: str
    user_id: str
    name: str
    keywords: str
    source_ids: list[str]

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "keywords": self.keywords,
            "sourceIds": list(self.source_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeedRecord":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            name=data.get("name", ""),
            keywords=data.get("keywords", ""),
            source_ids=list(data.get("sourceIds") or []),
        )


@dataclass
class SessionRecord:
    token: str
    user_id: str
    created_at: int  # epoch milliseconds

    def as_dict(self) -> dict:
        return {"userId": self.user_id, "createdAt": self.created_at}

    @classmethod
    def from_dict(cls, token: str, data: dict) -> "SessionRecord":
        return cls(
            token=token,
            user_id=data["userId"],
            created_at=int(data.get("createdAt", 0)),
        )


class InMemoryDocumentStore:
    """Simple in-memory document for development and tests."""

    def __init__(self, document: Optional[dict] = None):
        self.document = normalize_document(copy.deepcopy(document))
        self.save_count = 0

    def load(self) -> dict:
        return copy.deepcopy(self.document)

    def save(self, document: dict) -> None:
        self.document = copy.deepcopy(document)
        self.save_count += 1

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.document = empty_document()
        self.save_count = 0


class JsonFileDocumentStore:
    """
    Keeps the document in a single JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a reader sees either the old or the new document.
    """

    def __init__(self, path: str):
        if not path:
            raise ValueError("A data path is required for JsonFileDocumentStore")
        self.path = path

    def _ensure_file(self) -> None:
        if not os.path.exists(self.path):
            self.save(empty_document())

    def load(self) -> dict:
        self._ensure_file()
        with open(self.path, "r", encoding="utf-8") as f:
            return normalize_document(json.load(f))

    def save(self, document: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=".db-", suffix=".json.tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class SqlDocumentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    The document is stored whole in a single JSON row.
    """

    def __init__(self, database_url: str, key: str = "default"):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentStore")
        self.key = key
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def load(self) -> dict:
        with self.Session() as session:
            row = session.get(DocumentRow, self.key)
            if row:
                return normalize_document(copy.deepcopy(row.data))
        document = empty_document()
        self.save(document)
        return document

    def save(self, document: dict) -> None:
        with self.Session() as session:
            row = session.get(DocumentRow, self.key)
            if row:
                # Assign a fresh object so the JSON column registers the change.
                row.data = copy.deepcopy(document)
                row.updated_at = time.time()
            else:
                session.add(
                    DocumentRow(
                        key=self.key,
                        data=copy.deepcopy(document),
                        updated_at=time.time(),
                    )
                )
            session.commit()


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    key = Column(String, primary_key=True)
    data = Column("document", JSON, nullable=False)
    updated_at = Column(Float, nullable=False)
