"""
Run the Newsletter Hub API server.

Usage:
    python -m newsletter_hub [--host HOST] [--port PORT] [--data-path PATH]
"""

from __future__ import annotations

import argparse
import logging
import os

import uvicorn

from newsletter_hub.config import get_settings


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Newsletter Hub API server")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument(
        "--data-path",
        default=None,
        help="JSON data file (overrides NEWSLETTER_HUB_DATA_PATH)",
    )
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    if args.data_path:
        os.environ["NEWSLETTER_HUB_DATA_PATH"] = args.data_path
        get_settings.cache_clear()

    logging.getLogger("newsletter_hub").info(
        "Newsletter Hub API running on port %s", args.port
    )
    uvicorn.run(
        "newsletter_hub.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
