"""
Rendered report caching with Redis backing
"""
import hashlib
import json
from typing import Any, Callable, Dict, Optional

import redis

from core.logging import get_logger
from core.metrics import metrics

from .columns import ColumnRegistry
from .query import QueryDescriptor
from .renderer import RenderedReport

NOCACHE_SCOPE = "nocache"


def fingerprint(query: QueryDescriptor, registry: ColumnRegistry, **extra: Any) -> str:
    """
    Derive a cache fingerprint from everything that shapes a report

    Args:
        query: Query descriptor of the report
        registry: Column configuration of the report
        **extra: Further render inputs (template, per_page, paging)

    Returns:
        SHA-256 hex digest
    """
    payload = {
        "query": query.to_dict(),
        "columns": registry.describe(),
        "extra": extra,
    }
    content = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(content.encode()).hexdigest()


class RenderCache:
    """Memoizes rendered reports per cache scope and fingerprint"""

    def __init__(self, client: Optional[redis.Redis], ttl: int = 3600, enabled: bool = True):
        self.client = client
        self.ttl = ttl
        self.enabled = enabled and client is not None
        self.logger = get_logger("cache.render", domain="report_table")

        # Hit/miss tracking
        self._hits = 0
        self._misses = 0

    @staticmethod
    def generate_key(scope_key: str, fingerprint: str) -> str:
        return f"report_cache:{scope_key}:{fingerprint}"

    def render_cached(
        self,
        scope_key: str,
        fingerprint: str,
        producer: Callable[[], RenderedReport],
    ) -> RenderedReport:
        """
        Return the cached report for (scope, fingerprint) or produce and store it

        The "nocache" scope, and a disabled cache, always call the producer.
        """
        if scope_key == NOCACHE_SCOPE or not self.enabled:
            return producer()

        cache_key = self.generate_key(scope_key, fingerprint)
        cached = self.get(cache_key)
        if cached is not None:
            self._hits += 1
            metrics.track_cache_hit(scope_key)
            self.logger.debug(f"Cache hit for key: {cache_key[:48]}...", extra={"scope": scope_key})
            return cached

        self._misses += 1
        metrics.track_cache_miss(scope_key)
        self.logger.debug(f"Cache miss for key: {cache_key[:48]}...", extra={"scope": scope_key})

        report = producer()
        self.set(cache_key, report)
        return report

    def get(self, cache_key: str) -> Optional[RenderedReport]:
        """Stored report, or None on a miss or a backend error"""
        try:
            cached_data = self.client.get(cache_key)
        except redis.RedisError as e:
            self.logger.error(f"Cache get error: {e}")
            return None

        if not cached_data:
            return None
        try:
            return RenderedReport.from_dict(json.loads(cached_data))
        except (ValueError, TypeError, KeyError) as e:
            self.logger.warning(f"Discarding unreadable cache entry {cache_key[:48]}: {e}")
            return None

    def set(self, cache_key: str, report: RenderedReport, ttl: Optional[int] = None) -> None:
        try:
            self.client.setex(cache_key, ttl or self.ttl, json.dumps(report.to_dict(), separators=(",", ":")))
        except redis.RedisError as e:
            self.logger.error(f"Cache set error: {e}")

    def get_cache_stats(self) -> Dict[str, Any]:
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests) if total_requests > 0 else 0
        return {
            "enabled": self.enabled,
            "ttl_seconds": self.ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 3),
        }
