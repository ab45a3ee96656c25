"""
Root conftest.py for all tests
Provides common fixtures and configuration
"""
import os
import sys

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Settings are read at import time, so the test environment goes first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("PROMETHEUS_ENABLED", "true")

import pytest  # noqa: E402

from core.config import Settings  # noqa: E402

# Import all centralized fixtures
from tests.fixtures import *  # noqa: F401,F403,E402
from tests.fixtures.api import TEST_BASE_URL  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Settings with the philosophy instance (cmid 42) as default"""
    return Settings(
        environment="test",
        testing=True,
        base_url=TEST_BASE_URL,
        shortcodes_default_instance=42,
        enable_render_cache=True,
        cache_ttl=600,
    )

@pytest.fixture
def settings_without_default() -> Settings:
    return Settings(environment="test", testing=True, base_url=TEST_BASE_URL, shortcodes_default_instance=None)
