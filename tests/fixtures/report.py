"""
Report rendering fixtures.

Provides deterministic identity sources, a fake Redis backed render cache
and a renderer wired to the seeded database.
"""
import itertools

import fakeredis
import pytest

from core.viewer import Viewer
from report_table.cache import RenderCache
from report_table.identity import TableIdentitySource
from report_table.query import RowStore
from report_table.renderer import ReportRenderer
from report_table.template_engine import TemplateEngine
from shortcodes.handlers import Shortcodes

from .database import STUDENT_ID


def counting_token_factory():
    """Token factory returning 000...1, 000...2, ..."""
    counter = itertools.count(1)
    return lambda: f"{next(counter):024x}"


@pytest.fixture
def identity_source() -> TableIdentitySource:
    return TableIdentitySource(token_factory=counting_token_factory())


@pytest.fixture(scope="session")
def template_engine() -> TemplateEngine:
    return TemplateEngine()


@pytest.fixture
def fake_redis():
    """In-memory Redis replacement"""
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def render_cache(fake_redis) -> RenderCache:
    return RenderCache(fake_redis, ttl=600)


@pytest.fixture
def row_store(db_session) -> RowStore:
    return RowStore(db_session)


@pytest.fixture
def renderer(row_store, template_engine, identity_source) -> ReportRenderer:
    return ReportRenderer(row_store, template_engine, identity_source)


@pytest.fixture
def student() -> Viewer:
    return Viewer(user_id=STUDENT_ID)


@pytest.fixture
def shortcodes(db_session, settings, renderer, render_cache, student) -> Shortcodes:
    return Shortcodes(db_session, settings, renderer, render_cache, student)
