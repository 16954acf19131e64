"""Runtime profiling helpers for interval tree workloads.

The profiling utilities in this module are opt-in via the
``INTERVAL_RBTREE_PROFILE`` environment variable. When profiling is disabled
the wrappers fall back to near-zero overhead passthrough implementations, so
the tree itself never pays for them.

When enabled the profiler captures wall-clock time, CPU time and traced memory
deltas for decorated functions or profiled sections. Results are written to
per-process JSONL and CSV artifacts inside the profile directory
(``INTERVAL_RBTREE_PROFILE_DIR``, ``./.profile`` by default) and can be merged
later using the ``interval_rbtree.common.profiling.merge`` CLI entry point.
"""

from __future__ import annotations

import atexit
import contextvars
import csv
import functools
import inspect
import json
import logging
import math
import os
import threading
import time
import tracemalloc
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from interval_rbtree.common.settings import get_profile_dir, profiling_requested

profile_logger = logging.getLogger("profiling")

_SUMMARY_HEADER = [
    "module",
    "name",
    "type",
    "calls",
    "wall_ms_total",
    "wall_ms_mean",
    "wall_ms_p95",
    "cpu_ms_total",
    "alloc_kb_total",
]

_correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "profile_correlation_id", default=None
)


def profile_enabled() -> bool:
    """Return True when profiling is enabled via ``INTERVAL_RBTREE_PROFILE``."""

    return profiling_requested()


def set_correlation_id(value: Optional[str]) -> contextvars.Token:
    """Assign the active correlation id for the current context."""

    return _correlation_id_var.set(value)


def reset_correlation_id(token: Optional[contextvars.Token]) -> None:
    if token is not None:
        _correlation_id_var.reset(token)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


@dataclass
class _Measurement:
    name: str
    module: str
    type: str
    start_wall: float
    start_cpu: float
    start_alloc: Optional[int]


class _NullProfiler:
    """No-op profiler used when profiling is disabled."""

    enabled: bool = False

    def before(self, *_: Any, **__: Any) -> Optional[_Measurement]:  # pragma: no cover - trivial
        return None

    def after(self, *_: Any, **__: Any) -> None:  # pragma: no cover - trivial
        return None

    def flush(self) -> None:  # pragma: no cover - trivial
        return None


class Profiler:
    """Singleton profiler used to accumulate profiling samples."""

    _instance: Optional["Profiler | _NullProfiler"] = None
    _instance_lock = threading.Lock()

    def __init__(self, profile_dir: Optional[Path] = None) -> None:
        self.enabled = True
        self.pid = os.getpid()
        self.records: List[Dict[str, Any]] = []
        self._summary: Dict[Tuple[str, str, str], Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._profile_dir = profile_dir or get_profile_dir()
        self._profile_dir.mkdir(parents=True, exist_ok=True)
        self.jsonl_path = self._profile_dir / f"profile_{self.pid}.jsonl"
        self.summary_path = self._profile_dir / f"summary_{self.pid}.csv"

        self._tracemalloc_started = False
        if not tracemalloc.is_tracing():
            tracemalloc.start()
            self._tracemalloc_started = True

        profile_logger.info(
            "Profiling enabled (pid=%s, dir=%s, profiles=%s, summary=%s)",
            self.pid,
            self._profile_dir,
            self.jsonl_path,
            self.summary_path,
        )

    @classmethod
    def instance(cls) -> "Profiler | _NullProfiler":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    if profile_enabled():
                        profiler = cls()
                        atexit.register(profiler.flush)
                        cls._instance = profiler
                    else:
                        cls._instance = _NullProfiler()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next :meth:`instance` call re-reads settings."""

        with cls._instance_lock:
            current = cls._instance
            cls._instance = None
        if isinstance(current, Profiler):
            atexit.unregister(current.flush)
            current.close()

    def close(self) -> None:
        if self._tracemalloc_started and tracemalloc.is_tracing():
            tracemalloc.stop()
            self._tracemalloc_started = False

    def before(self, name: str, module: str, typ: str) -> _Measurement:
        start_alloc: Optional[int] = None
        if tracemalloc.is_tracing():
            start_alloc = tracemalloc.get_traced_memory()[0]

        return _Measurement(
            name=name,
            module=module,
            type=typ,
            start_wall=time.perf_counter(),
            start_cpu=time.process_time(),
            start_alloc=start_alloc,
        )

    def after(self, measurement: Optional[_Measurement]) -> None:
        if measurement is None:
            return

        end_wall = time.perf_counter()
        end_cpu = time.process_time()
        alloc_kb_delta = None
        if measurement.start_alloc is not None and tracemalloc.is_tracing():
            end_alloc = tracemalloc.get_traced_memory()[0]
            alloc_kb_delta = (end_alloc - measurement.start_alloc) / 1024.0

        record: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "pid": self.pid,
            "module": measurement.module,
            "name": measurement.name,
            "type": measurement.type,
            "calls": 1,
            "wall_ms": (end_wall - measurement.start_wall) * 1000.0,
            "cpu_ms": (end_cpu - measurement.start_cpu) * 1000.0,
            "alloc_kb_delta": alloc_kb_delta,
        }

        corr_id = get_correlation_id()
        if corr_id:
            record["corr_id"] = corr_id

        with self._lock:
            self.records.append(record)
            _accumulate(self._summary, (record["module"], record["name"], record["type"]), record)

    def summary(self) -> List[Dict[str, Any]]:
        """Return per-section aggregates sorted by total wall time."""

        with self._lock:
            stats = [dict(item) for item in self._summary.values()]
        return sorted(stats, key=lambda item: item["wall_ms_total"], reverse=True)

    def flush(self) -> None:
        with self._lock:
            records_copy = list(self.records)
            summary_copy = {k: dict(v) for k, v in self._summary.items()}
        self._write_records(records_copy)
        self._write_summary(summary_copy)

    def _write_records(self, records: Iterable[Dict[str, Any]]) -> None:
        try:
            with self.jsonl_path.open("w", encoding="utf-8") as fh:
                for record in records:
                    fh.write(json.dumps(record) + "\n")
        except OSError:  # pragma: no cover - filesystem issues
            profile_logger.warning("Failed to write profiling JSONL: %s", self.jsonl_path)

    def _write_summary(self, summary: Dict[Tuple[str, str, str], Dict[str, Any]]) -> None:
        try:
            with self.summary_path.open("w", encoding="utf-8", newline="") as fh:
                writer = csv.writer(fh)
                writer.writerow(_SUMMARY_HEADER)
                for stats in summary.values():
                    writer.writerow(_summary_row(stats))
        except OSError:  # pragma: no cover - filesystem issues
            profile_logger.warning("Failed to write profiling summary CSV: %s", self.summary_path)


def _accumulate(
    summary: Dict[Any, Dict[str, Any]], key: Any, record: Dict[str, Any]
) -> None:
    stats = summary.setdefault(
        key,
        {
            "module": record.get("module"),
            "name": record.get("name"),
            "type": record.get("type"),
            "calls": 0,
            "wall_ms_total": 0.0,
            "wall_ms_values": [],
            "cpu_ms_total": 0.0,
            "alloc_kb_total": 0.0,
        },
    )
    stats["calls"] += record.get("calls", 1)
    wall_ms = record.get("wall_ms", 0.0)
    stats["wall_ms_total"] += wall_ms
    stats["wall_ms_values"].append(wall_ms)
    stats["cpu_ms_total"] += record.get("cpu_ms", 0.0)
    alloc_delta = record.get("alloc_kb_delta")
    if alloc_delta is not None:
        stats["alloc_kb_total"] += alloc_delta


def _summary_row(stats: Dict[str, Any]) -> List[Any]:
    calls = max(stats.get("calls", 0), 1)
    wall_total = stats.get("wall_ms_total", 0.0)
    return [
        stats.get("module"),
        stats.get("name"),
        stats.get("type"),
        calls,
        wall_total,
        wall_total / calls,
        _percentile(stats.get("wall_ms_values", []), 95),
        stats.get("cpu_ms_total", 0.0),
        stats.get("alloc_kb_total", 0.0),
    ]


def _percentile(values: List[float], percentile: float) -> float:
    if not values:
        return 0.0
    sorted_values = sorted(values)
    k = (len(sorted_values) - 1) * (percentile / 100.0)
    f = math.floor(k)
    c = math.ceil(k)
    if f == c:
        return sorted_values[int(k)]
    d0 = sorted_values[int(f)] * (c - k)
    d1 = sorted_values[int(c)] * (k - f)
    return d0 + d1


def profile_function(name: Optional[str] = None):
    """Decorator that profiles the wrapped function when profiling is enabled."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            profiler = Profiler.instance()
            if not profiler.enabled:
                return func(*args, **kwargs)

            measurement = profiler.before(name or func.__qualname__, func.__module__, "function")
            try:
                return func(*args, **kwargs)
            finally:
                profiler.after(measurement)

        return wrapper

    return decorator


class _ProfileSectionContext:
    def __init__(self, profiler: Profiler, name: str, module: str):
        self._profiler = profiler
        self._name = name
        self._module = module
        self._measurement: Optional[_Measurement] = None

    def __enter__(self):
        self._measurement = self._profiler.before(self._name, self._module, "section")
        return self

    def __exit__(self, exc_type, exc, tb):
        self._profiler.after(self._measurement)
        return False


def profile_section(name: str):
    """Context manager to profile an arbitrary code block."""

    profiler = Profiler.instance()
    if not profiler.enabled:
        return nullcontext()

    caller_frame = inspect.currentframe().f_back
    module_name = caller_frame.f_globals.get("__name__", "__main__") if caller_frame else "__main__"
    return _ProfileSectionContext(profiler, name, module_name)


# ---------------------------------------------------------------------------
# Merge utilities
# ---------------------------------------------------------------------------


def merge_profile_records(by_corr_id: bool = False, profile_dir: Optional[Path] = None) -> Path:
    """Merge per-process profile files into a single summary CSV.

    Args:
        by_corr_id: When True, the merged output groups records by correlation id
            in addition to the module/name/type triple.
        profile_dir: Directory holding ``profile_*.jsonl`` files. Defaults to the
            configured profile directory.

    Returns:
        Path to the merged CSV file.
    """

    dir_path = profile_dir or get_profile_dir()
    dir_path.mkdir(parents=True, exist_ok=True)
    grouped: Dict[Tuple[Any, ...], Dict[str, Any]] = {}

    for jsonl_path in sorted(dir_path.glob("profile_*.jsonl")):
        try:
            with jsonl_path.open("r", encoding="utf-8") as fh:
                for line in fh:
                    if not line.strip():
                        continue
                    record = json.loads(line)
                    corr_id = record.get("corr_id") if by_corr_id else None
                    key = (record.get("module"), record.get("name"), record.get("type"), corr_id)
                    _accumulate(grouped, key, record)
                    grouped[key]["corr_id"] = corr_id
        except OSError:  # pragma: no cover - filesystem issues
            profile_logger.warning("Failed to read profiling data: %s", jsonl_path)

    merged_path = dir_path / "summary_merged.csv"
    with merged_path.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh)
        header = list(_SUMMARY_HEADER)
        if by_corr_id:
            header.insert(3, "corr_id")
        writer.writerow(header)

        for stats in grouped.values():
            row = _summary_row(stats)
            if by_corr_id:
                row.insert(3, stats.get("corr_id"))
            writer.writerow(row)

    return merged_path


__all__ = [
    "profile_enabled",
    "profile_function",
    "profile_section",
    "Profiler",
    "merge_profile_records",
    "set_correlation_id",
    "reset_correlation_id",
    "get_correlation_id",
]
