"""Environment-driven configuration helpers for interval tree tooling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

_TRUTHY = {"1", "true", "yes", "on"}


@lru_cache(maxsize=None)
def get_log_verbosity() -> str:
    """Return the configured log verbosity (``debug``/``info``/``warning``/...)."""

    return os.getenv("INTERVAL_RBTREE_LOG_VERBOSITY", "info").lower()


@lru_cache(maxsize=None)
def profiling_requested() -> bool:
    return os.getenv("INTERVAL_RBTREE_PROFILE", "0").lower() in _TRUTHY


@lru_cache(maxsize=None)
def get_profile_dir() -> Path:
    return Path(os.getenv("INTERVAL_RBTREE_PROFILE_DIR", ".profile"))


@lru_cache(maxsize=None)
def get_seed() -> Optional[int]:
    """Return the seed for randomized tooling, or ``None`` when unset.

    A value that is not an integer is rejected so that a typo does not silently
    turn a reproducible run into a random one.
    """

    raw = os.getenv("INTERVAL_RBTREE_SEED")
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"INTERVAL_RBTREE_SEED must be an integer, got {raw!r}") from exc


def clear_settings_cache() -> None:
    """Forget memoized values so changed environment variables are re-read."""

    for getter in (get_log_verbosity, profiling_requested, get_profile_dir, get_seed):
        getter.cache_clear()


__all__ = [
    "get_log_verbosity",
    "profiling_requested",
    "get_profile_dir",
    "get_seed",
    "clear_settings_cache",
]
