import random

import pytest
from rich.console import Console

from interval_rbtree.common.console import get_console
from interval_rbtree.common.profiling import Profiler
from interval_rbtree.common.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Give every test default settings and a fresh profiler."""

    for name in (
        "INTERVAL_RBTREE_LOG_VERBOSITY",
        "INTERVAL_RBTREE_PROFILE",
        "INTERVAL_RBTREE_SEED",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("INTERVAL_RBTREE_PROFILE_DIR", str(tmp_path / ".profile"))
    clear_settings_cache()
    Profiler.reset()
    yield
    Profiler.reset()
    clear_settings_cache()


@pytest.fixture
def console() -> Console:
    return get_console(record=True, width=120)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20240229)
