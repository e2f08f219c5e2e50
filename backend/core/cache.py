"""
In-memory TTL cache for reducing redundant booking API calls.

Uses cachetools.TTLCache with separate pools for different data types,
each with a TTL based on how often the data changes upstream.

Tenant data (organization, catalog, reports, context) is cached per
caller: keys start with the organization id followed by a fingerprint of
the bearer token, so an entry is only ever served to the token the
booking API already answered for. The organization prefix lets a change
drop every caller's copy at once.
"""
import hashlib
import threading
from typing import Iterable, Optional
from cachetools import TTLCache


# Thread-safe lock for cache operations
_lock = threading.Lock()

# ─────────────────────────────────────────────────────────────────────────────
# CACHE POOLS
# ─────────────────────────────────────────────────────────────────────────────

_POOLS = {
    "org":       {"maxsize": 256, "ttl": 120},      # Organization by id / by tenant domain
    "plans":     {"maxsize": 32,  "ttl": 600},      # Subscription plans (public, rarely change)
    "catalog":   {"maxsize": 256, "ttl": 120},      # Services and employees per organization
    "analytics": {"maxsize": 256, "ttl": 30},       # Dashboard reports
    "context":   {"maxsize": 256, "ttl": 3600},     # Organization context per session
}

# Pools whose keys start with an organization id
TENANT_POOLS = ("org", "catalog", "analytics", "context")

_pools: dict[str, TTLCache] = {name: TTLCache(**config) for name, config in _POOLS.items()}


def token_fingerprint(token: Optional[str]) -> str:
    """Short hash of a bearer token; the token itself never becomes a key."""
    if not token:
        return "anonymous"
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]


def tenant_key(organization_id: str, token: Optional[str], *parts) -> str:
    """'<org>:<token fingerprint>:<parts...>'"""
    return ":".join([organization_id, token_fingerprint(token), *(str(p) for p in parts)])


# ─────────────────────────────────────────────────────────────────────────────
# PUBLIC API
# ─────────────────────────────────────────────────────────────────────────────

def cache_get(pool: str, key: str):
    """
    Get a value from a cache pool.
    Returns None if pool doesn't exist, key not found, or expired.
    """
    cache = _pools.get(pool)
    if cache is None:
        return None
    with _lock:
        return cache.get(key)


def cache_set(pool: str, key: str, value):
    """Store a value in a cache pool."""
    cache = _pools.get(pool)
    if cache is None:
        return
    with _lock:
        cache[key] = value


def cache_delete(pool: str, key: str):
    """Delete a specific key from a cache pool."""
    cache = _pools.get(pool)
    if cache is None:
        return
    with _lock:
        cache.pop(key, None)


def cache_invalidate(pool: str, prefix: str = ""):
    """
    Invalidate cache entries in a pool.
    If prefix is given, only keys starting with that prefix are removed.
    If no prefix, the entire pool is cleared.
    """
    cache = _pools.get(pool)
    if cache is None:
        return
    with _lock:
        if not prefix:
            cache.clear()
        else:
            for key in [k for k in cache if k.startswith(prefix)]:
                cache.pop(key, None)


def cache_invalidate_multi(pools: Iterable[str], prefix: str = ""):
    """Invalidate entries across multiple pools at once."""
    for pool in pools:
        cache_invalidate(pool, prefix)


def invalidate_organization(organization_id: str, pools: Iterable[str] = TENANT_POOLS):
    """Drop every caller's cached copy of an organization's data in the given pools."""
    cache_invalidate_multi(pools, f"{organization_id}:")
