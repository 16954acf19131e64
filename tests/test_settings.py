import logging
from pathlib import Path

import pytest

from interval_rbtree.common import settings
from interval_rbtree.common.console import get_console, log_level


def test_defaults(tmp_path):
    assert settings.get_log_verbosity() == "info"
    assert settings.profiling_requested() is False
    assert settings.get_seed() is None
    assert settings.get_profile_dir() == tmp_path / ".profile"


@pytest.mark.parametrize("raw, expected", [("1", True), ("YES", True), ("on", True), ("0", False), ("nope", False)])
def test_profile_flag_truthiness(monkeypatch, raw, expected):
    monkeypatch.setenv("INTERVAL_RBTREE_PROFILE", raw)
    settings.clear_settings_cache()

    assert settings.profiling_requested() is expected


def test_values_are_memoized_until_cache_cleared(monkeypatch):
    assert settings.get_log_verbosity() == "info"

    monkeypatch.setenv("INTERVAL_RBTREE_LOG_VERBOSITY", "DEBUG")
    assert settings.get_log_verbosity() == "info"

    settings.clear_settings_cache()
    assert settings.get_log_verbosity() == "debug"


def test_seed_parsing(monkeypatch):
    monkeypatch.setenv("INTERVAL_RBTREE_SEED", "42")
    settings.clear_settings_cache()
    assert settings.get_seed() == 42

    monkeypatch.setenv("INTERVAL_RBTREE_SEED", "forty-two")
    settings.clear_settings_cache()
    with pytest.raises(ValueError, match="INTERVAL_RBTREE_SEED"):
        settings.get_seed()


def test_profile_dir_override(monkeypatch):
    monkeypatch.setenv("INTERVAL_RBTREE_PROFILE_DIR", "/tmp/somewhere")
    settings.clear_settings_cache()

    assert settings.get_profile_dir() == Path("/tmp/somewhere")


def test_quiet_console_suppresses_output():
    console = get_console("quiet", record=True)
    console.print("hidden")

    assert console.quiet
    assert console.export_text() == ""


def test_info_console_prints():
    console = get_console("info", record=True)
    console.print("visible")

    assert "visible" in console.export_text()


@pytest.mark.parametrize(
    "verbosity, level",
    [("debug", logging.DEBUG), ("info", logging.INFO), ("warning", logging.WARNING), ("bogus", logging.INFO)],
)
def test_log_level_mapping(verbosity, level):
    assert log_level(verbosity) == level
