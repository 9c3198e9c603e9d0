"""
Module for caching the public product listing.
The storefront lists products far more often than employees change them.
"""
import json
import os
from typing import Any, Optional, Dict

import redis

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
# Cache TTL in seconds (default: 10 minutes)
DEFAULT_CACHE_TTL = int(os.environ.get("CACHE_TTL", 600))
PRODUCT_LIST_PREFIX = "products"

# Global Redis client
redis_client = None


def get_redis_client():
    """
    Get or create a Redis client instance.
    Returns None when Redis is unreachable, which disables caching.
    """
    global redis_client
    if redis_client is None:
        try:
            redis_client = redis.Redis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True
            )
            redis_client.ping()
        except redis.exceptions.ConnectionError as e:
            print(f"Warning: Redis connection failed: {e}. Caching disabled.")
            redis_client = None
        except Exception as e:
            print(f"Warning: Redis initialization error: {e}. Caching disabled.")
            redis_client = None

    return redis_client


async def get_cache(key: str) -> Optional[Any]:
    """
    Get a value from cache by key.

    Returns:
        The cached value if found, otherwise None
    """
    client = get_redis_client()
    if not client:
        return None

    try:
        data = client.get(key)
        if data:
            return json.loads(data)
        return None
    except Exception as e:
        print(f"Cache get error: {e}")
        return None


async def set_cache(key: str, value: Any, ttl: int = DEFAULT_CACHE_TTL) -> bool:
    """
    Set a value in cache with a TTL. The value must be JSON serializable.
    """
    client = get_redis_client()
    if not client:
        return False

    try:
        return bool(client.set(key, json.dumps(value), ex=ttl))
    except Exception as e:
        print(f"Cache set error: {e}")
        return False


async def delete_pattern(pattern: str) -> int:
    """
    Delete all keys matching a pattern (e.g. "products:*").

    Returns:
        Number of keys deleted
    """
    client = get_redis_client()
    if not client:
        return 0

    try:
        keys = client.keys(pattern)
        if keys:
            return client.delete(*keys)
        return 0
    except Exception as e:
        print(f"Cache delete pattern error: {e}")
        return 0


def generate_cache_key(prefix: str, params: Dict[str, Any]) -> str:
    """
    Generate a cache key from a prefix and parameters.
    Parameters are sorted so equal filters always produce the same key.
    """
    sorted_params = sorted((k, str(v)) for k, v in params.items() if v is not None)
    param_str = ":".join(f"{k}={v}" for k, v in sorted_params)
    return f"{prefix}:{param_str}" if param_str else prefix


async def invalidate_product_listings() -> int:
    """Drop every cached product listing after a catalogue write."""
    deleted = await delete_pattern(f"{PRODUCT_LIST_PREFIX}*")
    if deleted:
        print(f"DEBUG: Invalidated {deleted} cached product listings")
    return deleted
