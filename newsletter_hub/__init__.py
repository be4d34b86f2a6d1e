"""
Newsletter Hub backend package.

Provides a FastAPI application for registering newsletter sources, grouping
them into keyword feeds, and serving placeholder article summaries, backed by
a single persisted JSON document.
"""
