"""
API dependencies
"""

from functools import lru_cache
from typing import Optional

import redis
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from core.config import Settings, get_settings
from core.logging import get_logger
from core.viewer import Viewer
from database.session import get_db
from report_table.cache import RenderCache
from report_table.identity import TableIdentitySource
from report_table.query import RowStore
from report_table.renderer import ReportRenderer
from report_table.template_engine import TemplateEngine
from shortcodes.handlers import Shortcodes

logger = get_logger(__name__)

# Redis client singleton
_redis_client: Optional[redis.Redis] = None

__all__ = [
    "get_db",
    "get_redis",
    "get_render_cache",
    "get_template_engine",
    "get_viewer",
    "get_shortcodes",
    "close_redis",
]


def get_redis() -> redis.Redis:
    """Get Redis client (singleton pattern)"""
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.from_url(get_settings().redis_url, decode_responses=True, encoding="utf-8")

    return _redis_client


def get_render_cache(
    client: redis.Redis = Depends(get_redis), settings: Settings = Depends(get_settings)
) -> RenderCache:
    return RenderCache(client, ttl=settings.cache_ttl, enabled=settings.enable_render_cache)


@lru_cache()
def get_template_engine() -> TemplateEngine:
    """Template environment shared by all requests"""
    return TemplateEngine()


def get_viewer(
    x_user_id: Optional[str] = Header(default=None),
    x_user_capabilities: Optional[str] = Header(default=None),
) -> Viewer:
    """Current viewer as resolved by the host application's authentication"""
    user_id = None
    if x_user_id and x_user_id.strip().isdigit():
        user_id = int(x_user_id.strip())
    elif x_user_id:
        logger.warning(f"Ignoring malformed X-User-ID header: {x_user_id!r}")

    capabilities = frozenset(
        capability.strip() for capability in (x_user_capabilities or "").split(",") if capability.strip()
    )
    return Viewer(user_id=user_id, capabilities=capabilities)


def get_shortcodes(
    db: Session = Depends(get_db),
    cache: RenderCache = Depends(get_render_cache),
    engine: TemplateEngine = Depends(get_template_engine),
    viewer: Viewer = Depends(get_viewer),
    settings: Settings = Depends(get_settings),
) -> Shortcodes:
    """Shortcodes of one page view, with their own identity source"""
    renderer = ReportRenderer(RowStore(db), engine, TableIdentitySource())
    return Shortcodes(db, settings, renderer, cache, viewer)


def close_redis():
    """Close Redis connection (for app shutdown)"""
    global _redis_client

    if _redis_client:
        _redis_client.close()
        _redis_client = None
