"""
Read-through caching for dashboard aggregates.

Entries live under a prefix so a whole family can be dropped when the
underlying rows change. django-redis exposes ``delete_pattern``; the local
memory backend used in development and tests does not, so it is cleared.
"""
import hashlib
import logging
from functools import wraps

from django.core.cache import cache

logger = logging.getLogger(__name__)

ORDER_STATS_CACHE_TTL = 60
ORDER_STATS_PREFIX = 'order_stats'


def make_cache_key(prefix, *args, **kwargs):
    digest = hashlib.md5(repr((args, sorted(kwargs.items()))).encode()).hexdigest()
    return f"{prefix}:{digest}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """Cache the decorated function's return value for ``cache_ttl`` seconds."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            key = make_cache_key(key_prefix, *args, **kwargs)
            value = cache.get(key)
            if value is None:
                value = func(*args, **kwargs)
                cache.set(key, value, cache_ttl)
                logger.debug(f"Computed and stored {key}")
            return value
        return wrapper
    return decorator


def invalidate_cache_pattern(prefix):
    """Drop every entry stored under ``prefix``. Cache failures are logged, never raised."""
    delete_pattern = getattr(cache, 'delete_pattern', None)
    try:
        if delete_pattern is None:
            cache.clear()
            logger.debug(f"Local cache cleared for {prefix}")
            return
        removed = delete_pattern(f"{prefix}:*")
        logger.info(f"Dropped {removed} cached entries under {prefix}")
    except Exception as e:
        logger.warning(f"Cache invalidation failed for {prefix}: {str(e)}")


def invalidate_order_stats_cache():
    invalidate_cache_pattern(ORDER_STATS_PREFIX)
