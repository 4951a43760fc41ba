"""
CRUD workload runner for the record store.

Drives insert, read, update and delete phases over ``records`` ids in one fresh
session, profiling each phase separately.

Usage:
    from record_store.workload import run_workload
    from record_store.reporter import print_results

    results = run_workload(records=10_000)
    print_results(results)
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from record_store.config import get_settings
from record_store.store import RecordStore, store_session
from record_store.utils.logging import get_logger
from record_store.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


def _round_float(value: float, decimals: int = 2) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _insert_phase(store: RecordStore, ids: range) -> int:
    for record_id in ids:
        store.insert(record_id, f"value-{record_id}")
    return len(ids)


def _read_phase(store: RecordStore, ids: range) -> int:
    found = 0
    for record_id in ids:
        if store.read(record_id) is not None:
            found += 1
    return found


def _update_phase(store: RecordStore, ids: range) -> int:
    return sum(store.update(record_id, f"updated-{record_id}") for record_id in ids)


def _delete_phase(store: RecordStore, ids: range) -> int:
    return sum(store.delete(record_id) for record_id in ids)


def _phase_runners() -> Dict[str, Callable[[RecordStore, range], int]]:
    """Registry of workload phases, in execution order."""
    return {
        "insert": _insert_phase,
        "read": _read_phase,
        "update": _update_phase,
        "delete": _delete_phase,
    }


PHASES: Tuple[str, ...] = tuple(_phase_runners())


def _merge_result(phase: str, requested: int, stats: ProfileStats) -> dict:
    """Flatten profiler stats for a phase, rounding floats for readability."""
    return {
        "phase": phase,
        "requested": requested,
        "operations": stats.operations,
        "duration_seconds": _round_float(stats.duration_seconds, 4),
        "throughput_ops_per_sec": _round_float(stats.throughput_ops_per_sec),
        "peak_rss_bytes": stats.peak_rss_bytes,
        "cpu_percent": (
            _round_float(stats.cpu_percent, 1) if stats.cpu_percent is not None else None
        ),
    }


def run_workload(
    records: Optional[int] = None,
    path: Optional[str] = None,
    table: Optional[str] = None,
) -> List[dict]:
    """
    Run every CRUD phase once against a fresh store and return per-phase metrics.

    Parameters
    ----------
    records : int | None
        Number of ids to drive through each phase. Defaults to settings.workload_records.
    path : str | None
        Store location. Defaults to settings.store_path (``:memory:``).
    table : str | None
        Table name. Defaults to settings.store_table.

    Returns
    -------
    List[dict]
        One dict per phase with ``phase``, ``operations`` (rows actually
        affected or found), ``duration_seconds``, ``throughput_ops_per_sec``,
        ``peak_rss_bytes`` and ``cpu_percent``.
    """
    settings = get_settings()
    count = records if records is not None else settings.workload_records
    if count < 1:
        raise ValueError(f"records must be positive, got {count}")
    ids = range(1, count + 1)

    results: List[dict] = []
    with store_session(path=path, table=table) as store:
        for phase, runner in _phase_runners().items():
            log.info(f"[PHASE START] {phase}", extra={"phase": phase, "records": count})
            with profile_block(phase) as stats:
                stats.operations = runner(store, ids)
            result = _merge_result(phase, count, stats)
            results.append(result)
            log.info(
                f"[PHASE COMPLETE] {phase}",
                extra={
                    "phase": phase,
                    "operations": result["operations"],
                    "duration": result["duration_seconds"],
                    "throughput_ops": result["throughput_ops_per_sec"],
                },
            )

    return results


__all__ = ["PHASES", "run_workload"]
