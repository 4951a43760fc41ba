"""
Profiling utilities for the record store workload.

Context manager and decorator that measure a block of store operations:
- Wall-clock time (perf_counter)
- CPU usage (psutil)
- Peak RSS via a background sampling thread (psutil)
- Peak Python allocations (tracemalloc)

Usage:
    from record_store.utils.profiler import profile_block

    with profile_block("insert") as stats:
        for i in range(n):
            store.insert(i, "value")
        stats.operations = n

    print(stats.duration_seconds, stats.throughput_ops_per_sec)
"""

from __future__ import annotations

import contextlib
import functools
import threading
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Any, Callable, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements of one labelled block.
    """

    label: str
    operations: int = field(default=0)
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    peak_rss_bytes: Optional[int] = field(default=None)
    peak_traced_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def throughput_ops_per_sec(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        return self.operations / self.duration_seconds


@contextlib.contextmanager
def profile_block(
    label: str, sample_interval_ms: int = 50, enable_tracemalloc: bool = True
) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling. Lower = more accurate but higher overhead.
    enable_tracemalloc : bool
        Whether to enable tracemalloc for tracking Python-level allocations.

    Notes
    -----
    The body may set ``stats.operations`` so that throughput can be derived
    once the block exits.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                break
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    tracemalloc_was_running = tracemalloc.is_tracing()
    if enable_tracemalloc and not tracemalloc_was_running:
        tracemalloc.start()

    # cpu_percent needs a priming call
    process.cpu_percent(interval=None)

    sampler = threading.Thread(target=_sample_memory, daemon=True)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts

        stop_sampling.set()
        sampler.join(timeout=1.0)

        stats.peak_rss_bytes = peak_rss if peak_rss > 0 else None
        stats.cpu_percent = process.cpu_percent(interval=None)

        if enable_tracemalloc and tracemalloc.is_tracing():
            _, peak_traced = tracemalloc.get_traced_memory()
            stats.peak_traced_bytes = peak_traced
            # Stop tracemalloc only if we started it
            if not tracemalloc_was_running:
                tracemalloc.stop()


def profile_function(
    label: Optional[str] = None,
    sample_interval_ms: int = 50,
    enable_tracemalloc: bool = True,
) -> Callable[[Callable[..., Any]], Callable[..., ProfileStats]]:
    """
    Decorator to profile a function call and return ProfileStats.

    If the wrapped function returns an int, it is recorded as the number of
    operations performed.

    Example
    -------
        @profile_function("bulk-insert")
        def run() -> int:
            ...
            return inserted

        stats = run()
        print(stats.throughput_ops_per_sec)
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., ProfileStats]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> ProfileStats:
            tag = label or func.__name__
            with profile_block(
                tag, sample_interval_ms=sample_interval_ms, enable_tracemalloc=enable_tracemalloc
            ) as stats:
                outcome = func(*args, **kwargs)
                if isinstance(outcome, int) and not isinstance(outcome, bool):
                    stats.operations = outcome
            return stats

        return wrapper

    return decorator


__all__ = ["ProfileStats", "profile_block", "profile_function"]
