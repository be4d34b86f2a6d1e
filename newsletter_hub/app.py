"""
FastAPI application entry point for the Newsletter Hub backend.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from newsletter_hub.config import get_settings
from newsletter_hub.errors import install_error_handlers
from newsletter_hub.routes import router

logger = logging.getLogger(__name__)


class ClientFiles(StaticFiles):
    """
    Serves the browser client. Unknown paths outside the API fall back to
    index.html so client-side routes survive a reload.
    """

    def __init__(self, *, api_prefix: str, **kwargs):
        super().__init__(**kwargs)
        self.api_prefix = api_prefix.rstrip("/")

    def _is_api_path(self, path: str) -> bool:
        return path == self.api_prefix or path.startswith(self.api_prefix + "/")

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404 or self._is_api_path(scope.get("path", "")):
                raise
            return await super().get_response("index.html", scope)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Newsletter Hub API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    install_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)

    if settings.static_dir:
        if os.path.isdir(settings.static_dir):
            app.mount(
                "/",
                ClientFiles(
                    directory=settings.static_dir,
                    html=True,
                    api_prefix=settings.api_prefix,
                ),
                name="client",
            )
        else:
            logger.warning("Static directory %s not found; client not served", settings.static_dir)
    return app


app = create_app()
