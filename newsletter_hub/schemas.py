"""
Pydantic schemas for the Newsletter Hub API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request payloads. Presence is checked by the handlers so that missing
# fields produce the same messages as empty ones.


class RegisterPayload(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginPayload(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None


class CreateSourcePayload(ApiModel):
    name: Optional[str] = None
    email_address: Optional[str] = None


class FeedPayload(ApiModel):
    name: Optional[str] = None
    keywords: Optional[str] = None
    source_ids: Optional[list[str]] = None


# Responses


class UserResponse(ApiModel):
    id: str
    email: str
    name: str
    avatar_url: str


class AuthResponse(ApiModel):
    token: str
    user: UserResponse


class MessageResponse(ApiModel):
    message: str


class SourceResponse(ApiModel):
    id: str
    user_id: str
    name: str
    email_address: str


class SourceEnvelope(ApiModel):
    source: SourceResponse


class SourceListResponse(ApiModel):
    sources: list[SourceResponse]


class FeedResponse(ApiModel):
    id: str
    user_id: str
    name: str
    keywords: str
    source_ids: list[str]


class FeedEnvelope(ApiModel):
    feed: FeedResponse


class FeedListResponse(ApiModel):
    feeds: list[FeedResponse]


class ArticleResponse(ApiModel):
    title: str
    summary: str
    link: str
    source: str


class ArticleListResponse(ApiModel):
    articles: list[ArticleResponse]


class SuggestionResponse(ApiModel):
    name: str
    email_address: str


class SuggestionListResponse(ApiModel):
    suggestions: list[SuggestionResponse]
