"""
Ownership policy shared by every route and the entity store.
"""

from __future__ import annotations

from typing import Optional, Union

from newsletter_hub.db import FeedRecord, SourceRecord, UserRecord

RESOURCE_KINDS = ("source", "feed")

OwnedRecord = Union[SourceRecord, FeedRecord]


def authorize(
    user: Optional[UserRecord], resource_kind: str, resource: Optional[OwnedRecord]
) -> bool:
    """Return True when ``user`` may read or change ``resource``."""
    if resource_kind not in RESOURCE_KINDS:
        raise ValueError(f"Unknown resource kind: {resource_kind}")
    if user is None or resource is None:
        return False
    return resource.user_id == user.id
