"""
HTTP routes for the Newsletter Hub API.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends

from newsletter_hub.articles import generate_articles
from newsletter_hub.db import FeedRecord, SourceRecord, UserRecord
from newsletter_hub.dependencies import (
    AuthContext,
    get_auth_context,
    get_entity_store,
    get_session_store,
    get_suggestion_source,
)
from newsletter_hub.entity_store import EntityStore
from newsletter_hub.errors import AuthenticationError, NotFoundError, ValidationError
from newsletter_hub.passwords import hash_password, verify_password
from newsletter_hub.policy import authorize
from newsletter_hub.schemas import (
    ArticleListResponse,
    AuthResponse,
    CreateSourcePayload,
    FeedEnvelope,
    FeedListResponse,
    FeedPayload,
    FeedResponse,
    LoginPayload,
    MessageResponse,
    RegisterPayload,
    SourceEnvelope,
    SourceListResponse,
    SourceResponse,
    SuggestionListResponse,
    UserResponse,
)
from newsletter_hub.sessions import SessionStore
from newsletter_hub.suggestions import SuggestionSource

logger = logging.getLogger(__name__)

router = APIRouter()

AVATAR_URL_TEMPLATE = "https://api.dicebear.com/7.x/initials/svg?seed={seed}"


def avatar_url_for(name: str) -> str:
    return AVATAR_URL_TEMPLATE.format(seed=quote(name, safe="!*'()"))


def _auth_response(token: str, user: UserRecord) -> AuthResponse:
    return AuthResponse(token=token, user=UserResponse(**user.public_dict()))


def _source_response(source: SourceRecord) -> SourceResponse:
    return SourceResponse.model_validate(source.as_dict())


def _feed_response(feed: FeedRecord) -> FeedResponse:
    return FeedResponse.model_validate(feed.as_dict())


def _get_owned_feed(store: EntityStore, user: UserRecord, feed_id: str) -> FeedRecord:
    feed = store.get_feed(feed_id)
    if not authorize(user, "feed", feed):
        raise NotFoundError("Feed not found.")
    return feed


# Accounts


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    payload: Optional[RegisterPayload] = None,
    store: EntityStore = Depends(get_entity_store),
    sessions: SessionStore = Depends(get_session_store),
):
    payload = payload or RegisterPayload()
    if not payload.email or not payload.password or not payload.name:
        raise ValidationError("Name, email, and password are required.")
    try:
        password_hash = hash_password(payload.password)
    except ValueError as exc:
        raise ValidationError("Password contains invalid characters.") from exc
    user = store.add_user(
        email=payload.email,
        name=payload.name,
        avatar_url=avatar_url_for(payload.name),
        password_hash=password_hash,
    )
    token = sessions.create(user.id)
    logger.info("Registered user %s", user.id)
    return _auth_response(token, user)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: Optional[LoginPayload] = None,
    store: EntityStore = Depends(get_entity_store),
    sessions: SessionStore = Depends(get_session_store),
):
    payload = payload or LoginPayload()
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required.")
    user = store.find_user_by_email(payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login attempt")
        raise AuthenticationError("Invalid credentials.")
    token = sessions.create(user.id)
    logger.info("User %s logged in", user.id)
    return _auth_response(token, user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    auth: AuthContext = Depends(get_auth_context),
    sessions: SessionStore = Depends(get_session_store),
):
    sessions.destroy(auth.token)
    logger.info("User %s logged out", auth.user.id)
    return MessageResponse(message="Logged out")


# Sources


@router.get("/sources", response_model=SourceListResponse)
def list_sources(
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_entity_store),
):
    sources = store.list_sources(auth.user.id)
    return SourceListResponse(
        sources=[
            _source_response(s) for s in sources if authorize(auth.user, "source", s)
        ]
    )


@router.post("/sources", response_model=SourceEnvelope, status_code=201)
def create_source(
    payload: Optional[CreateSourcePayload] = None,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_entity_store),
):
    payload = payload or CreateSourcePayload()
    if not payload.name or not payload.email_address:
        raise ValidationError("Name and email address are required.")
    source = store.create_source(
        user_id=auth.user.id, name=payload.name, email_address=payload.email_address
    )
    return SourceEnvelope(source=_source_response(source))


# Feeds


@router.get("/feeds", response_model=FeedListResponse)
def list_feeds(
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_entity_store),
):
    feeds = store.list_feeds(auth.user.id)
    return FeedListResponse(
        feeds=[_feed_response(f) for f in feeds if authorize(auth.user, "feed", f)]
    )


@router.post("/feeds", response_model=FeedEnvelope, status_code=201)
def create_feed(
    payload: Optional[FeedPayload] = None,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_entity_store),
):
    payload = payload or FeedPayload()
    if not payload.name or not payload.keywords or not payload.source_ids:
        raise ValidationError("Name, keywords, and at least one source are required.")
    feed = store.create_feed(
        user=auth.user,
        name=payload.name,
        keywords=payload.keywords,
        source_ids=payload.source_ids,
    )
    logger.info("User %s created feed %s", auth.user.id, feed.id)
    return FeedEnvelope(feed=_feed_response(feed))


@router.put("/feeds/{feed_id}", response_model=FeedEnvelope)
def update_feed(
    feed_id: str,
    payload: Optional[FeedPayload] = None,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_entity_store),
):
    payload = payload or FeedPayload()
    feed = store.update_feed(
        feed_id,
        user=auth.user,
        name=payload.name,
        keywords=payload.keywords,
        source_ids=payload.source_ids,
    )
    logger.info("User %s updated feed %s", auth.user.id, feed.id)
    return FeedEnvelope(feed=_feed_response(feed))


@router.delete("/feeds/{feed_id}", response_model=MessageResponse)
def delete_feed(
    feed_id: str,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_entity_store),
):
    store.delete_feed(feed_id, user=auth.user)
    logger.info("User %s deleted feed %s", auth.user.id, feed_id)
    return MessageResponse(message="Feed deleted")


@router.get("/feeds/{feed_id}/articles", response_model=ArticleListResponse)
def list_feed_articles(
    feed_id: str,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_entity_store),
):
    feed = _get_owned_feed(store, auth.user, feed_id)
    sources = [
        s for s in store.get_sources(feed.source_ids) if authorize(auth.user, "source", s)
    ]
    return ArticleListResponse(articles=generate_articles(feed, sources))


# Suggestions


@router.post("/scan-email", response_model=SuggestionListResponse)
def scan_email(
    auth: AuthContext = Depends(get_auth_context),
    suggestions: SuggestionSource = Depends(get_suggestion_source),
):
    return SuggestionListResponse(
        suggestions=[s.as_dict() for s in suggestions.suggest(auth.user)]
    )
