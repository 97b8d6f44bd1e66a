"""
cache.py — Disk cache for raw GitHub fetch results.

Two layers:
  1. In-memory: st.cache_data around the network fetch (per Streamlit session, TTL=1hr)
  2. Disk:      joblib dump/load per handle (persists across restarts, TTL=24hr)

Only raw profile / repos / events are cached. Derived statistics are always
recomputed from them.

Usage:
    from core.cache import get_cached_data, set_cached_data
"""

import hashlib
import logging
import os
import time

import joblib

from config import DISK_CACHE_DIR, DISK_CACHE_TTL

logger = logging.getLogger(__name__)


def _cache_file(username: str, cache_dir: str) -> str:
    key = hashlib.md5(username.lower().encode()).hexdigest()
    return os.path.join(cache_dir, f"{key}.joblib")


def get_cached_data(
    username: str,
    cache_dir: str = DISK_CACHE_DIR,
    ttl: float = DISK_CACHE_TTL,
) -> dict | None:
    """
    Return the cached fetch result for `username` if it is still fresh, else None.
    Expired entries are removed on read.
    """
    cache_file = _cache_file(username, cache_dir)
    if not os.path.exists(cache_file):
        return None
    try:
        cached = joblib.load(cache_file)
    except Exception as exc:
        logger.warning(f"Disk cache read error for {username}: {exc}")
        return None

    age = time.time() - cached.get("_cached_at", 0)
    if age < ttl:
        logger.info(f"Disk cache hit for {username} (age: {age:.0f}s)")
        return cached.get("data")

    logger.info(f"Disk cache expired for {username}")
    os.remove(cache_file)
    return None


def set_cached_data(username: str, data: dict, cache_dir: str = DISK_CACHE_DIR) -> None:
    """Write a raw fetch result to the disk cache."""
    os.makedirs(cache_dir, exist_ok=True)
    cache_file = _cache_file(username, cache_dir)
    try:
        joblib.dump({"data": data, "_cached_at": time.time()}, cache_file)
        logger.info(f"Disk cache written for {username}")
    except Exception as exc:
        logger.warning(f"Disk cache write error for {username}: {exc}")


def clear_cache(username: str, cache_dir: str = DISK_CACHE_DIR) -> bool:
    """Remove disk cache entry for a username. Returns True if removed."""
    cache_file = _cache_file(username, cache_dir)
    if os.path.exists(cache_file):
        os.remove(cache_file)
        logger.info(f"Disk cache cleared for {username}")
        return True
    return False
