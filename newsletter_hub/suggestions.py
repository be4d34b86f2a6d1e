"""
Newsletter suggestions offered by the "scan email" action.

A real implementation would query the user's mailbox provider; the static
source returns a fixed list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from newsletter_hub.db import UserRecord


@dataclass(frozen=True)
class Suggestion:
    name: str
    email_address: str

    def as_dict(self) -> dict:
        return {"name": self.name, "emailAddress": self.email_address}


class SuggestionSource(Protocol):
    def suggest(self, user: UserRecord) -> list[Suggestion]:
        ...


DEFAULT_SUGGESTIONS = (
    Suggestion(name="AI Weekly", email_address="updates@aiweekly.co"),
    Suggestion(name="Startup Digest", email_address="digest@startup.com"),
    Suggestion(name="Morning Finance", email_address="newsletter@finance.io"),
)


class StaticSuggestionSource:
    def __init__(self, suggestions=DEFAULT_SUGGESTIONS):
        self.suggestions = list(suggestions)

    def suggest(self, user: UserRecord) -> list[Suggestion]:
        return list(self.suggestions)
