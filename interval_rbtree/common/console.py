"""Helpers for constructing Rich consoles and logging with environment-driven verbosity."""

from __future__ import annotations

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

from .settings import get_log_verbosity

_SILENT_KWARGS = {
    "quiet": True,
    "highlight": False,
    "markup": False,
    "emoji": False,
    "color_system": None,
    "soft_wrap": True,
}

_VERBOSE_KWARGS = {"soft_wrap": True}

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "quiet": logging.CRITICAL,
}


def get_console(level: Optional[str] = None, **kwargs: Any) -> Console:
    """Return a Rich ``Console`` configured for the requested verbosity.

    The console respects ``INTERVAL_RBTREE_LOG_VERBOSITY`` so benchmarks and
    other non-interactive tooling can disable rich rendering when the verbosity
    is set to ``warning``/``error``/``quiet``.

    Args:
        level: Optional verbosity override (``debug``/``info``/... ). When not
            provided the value returned by :func:`get_log_verbosity` is used.
        **kwargs: Additional keyword arguments forwarded to ``Console``.
    """

    verbosity = (level or get_log_verbosity()).lower()
    base_kwargs = _VERBOSE_KWARGS if verbosity in {"debug", "info"} else _SILENT_KWARGS
    config = {**base_kwargs, **kwargs}
    return Console(**config)


def log_level(level: Optional[str] = None) -> int:
    verbosity = (level or get_log_verbosity()).lower()
    return _LOG_LEVELS.get(verbosity, logging.INFO)


def configure_logging(level: Optional[str] = None, console: Optional[Console] = None) -> None:
    """Route the root logger through a ``RichHandler`` at the configured level.

    Only entry points (CLIs, tools) call this; library modules just use
    ``logging.getLogger(__name__)``.
    """

    handler = RichHandler(
        console=console or get_console(level, stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=log_level(level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


__all__ = ["get_console", "configure_logging", "log_level"]
