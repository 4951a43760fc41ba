from __future__ import annotations

import pytest
from rich.console import Console

from record_store import workload
from record_store.reporter import build_table, print_results
from record_store.utils.profiler import ProfileStats
from record_store.workload import PHASES, _merge_result, run_workload

WORKLOAD_RECORDS = 50
EXPECTED_DURATION = 2.0
EXPECTED_THROUGHPUT = 50.0  # 100 operations / 2.0 seconds
EXPECTED_PEAK_RSS = 123
EXPECTED_CPU = 12.3


def test_phases_run_in_crud_order():
    assert PHASES == ("insert", "read", "update", "delete")


def test_run_workload_reports_every_phase():
    results = run_workload(records=WORKLOAD_RECORDS)

    assert [r["phase"] for r in results] == list(PHASES)
    for result in results:
        assert result["requested"] == WORKLOAD_RECORDS
        assert result["operations"] == WORKLOAD_RECORDS
        assert result["duration_seconds"] >= 0
        assert result["throughput_ops_per_sec"] >= 0


def test_run_workload_uses_settings_default(monkeypatch):
    monkeypatch.setenv("WORKLOAD_RECORDS", "5")

    results = run_workload()

    assert all(r["operations"] == 5 for r in results)


def test_run_workload_rejects_non_positive_count():
    with pytest.raises(ValueError):
        run_workload(records=0)


def test_run_workload_closes_store_when_phase_fails(monkeypatch):
    opened = []
    real_session = workload.store_session

    def tracking_session(*args, **kwargs):
        session = real_session(*args, **kwargs)
        opened.append(session)
        return session

    def broken_read(store, ids):
        opened.append(store)
        raise RuntimeError("phase failed")

    monkeypatch.setattr(workload, "store_session", tracking_session)
    monkeypatch.setattr(
        workload,
        "_phase_runners",
        lambda: {"insert": workload._insert_phase, "read": broken_read},
    )

    with pytest.raises(RuntimeError, match="phase failed"):
        run_workload(records=3)

    store = opened[-1]
    assert store.closed


def test_merge_result_flattens_profiler_stats():
    stats = ProfileStats(
        label="insert",
        operations=100,
        start_ts=1.0,
        end_ts=3.0,
        duration_seconds=2.0,
        peak_rss_bytes=123,
        cpu_percent=12.34,
    )

    merged = _merge_result("insert", 100, stats)

    assert merged["phase"] == "insert"
    assert merged["duration_seconds"] == EXPECTED_DURATION
    assert merged["throughput_ops_per_sec"] == EXPECTED_THROUGHPUT
    assert merged["peak_rss_bytes"] == EXPECTED_PEAK_RSS
    assert merged["cpu_percent"] == EXPECTED_CPU


def test_merge_result_keeps_zero_cpu_reading():
    stats = ProfileStats(label="read", operations=1, duration_seconds=1.0, cpu_percent=0.0)

    merged = _merge_result("read", 1, stats)

    assert merged["cpu_percent"] == 0.0
    assert _merge_result("read", 1, ProfileStats(label="read"))["cpu_percent"] is None


def test_print_results_renders_each_phase():
    console = Console(record=True, width=140)
    results = run_workload(records=WORKLOAD_RECORDS)

    print_results(results, console=console)

    text = console.export_text()
    for phase in PHASES:
        assert phase in text
    assert "Record Store Workload" in text


def test_print_results_handles_empty_results():
    console = Console(record=True, width=140)

    print_results([], console=console)

    assert "No results to display." in console.export_text()


def test_build_table_marks_missing_metrics():
    table = build_table(
        [
            {
                "phase": "read",
                "requested": 10,
                "operations": 10,
                "duration_seconds": 0.5,
                "throughput_ops_per_sec": 20.0,
                "peak_rss_bytes": None,
                "cpu_percent": None,
            }
        ]
    )
    console = Console(record=True, width=140)
    console.print(table)

    assert "N/A" in console.export_text()
    assert table.row_count == 1
