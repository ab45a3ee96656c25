"""
Test Fixtures Package

Provides centralized fixtures for test isolation and setup:
- Database fixtures (test_db, db_session)
- Report fixtures (identity_source, fake_redis, render_cache, renderer, shortcodes)
- API client fixtures (test_client)
"""

from .api import test_client, viewer_headers
from .database import DatabaseSeeder, db_session, test_db
from .report import (
    counting_token_factory,
    fake_redis,
    identity_source,
    render_cache,
    renderer,
    row_store,
    shortcodes,
    student,
    template_engine,
)

__all__ = [
    # Database
    "DatabaseSeeder",
    "test_db",
    "db_session",
    # Report
    "counting_token_factory",
    "identity_source",
    "template_engine",
    "fake_redis",
    "render_cache",
    "row_store",
    "renderer",
    "student",
    "shortcodes",
    # API
    "test_client",
    "viewer_headers",
]
