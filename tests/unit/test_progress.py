import json
from pathlib import Path

from dealer_geocode.common.models import ResolutionStats
from dealer_geocode.pipeline.progress import (
    build_progress_snapshot,
    clear_progress,
    progress_percentage,
    write_progress,
)


def test_progress_percentage_rounds_and_handles_empty_total():
    assert progress_percentage(1, 3) == 33
    assert progress_percentage(2, 3) == 67
    assert progress_percentage(10, 10) == 100
    assert progress_percentage(0, 0) == 0


def test_snapshot_reflects_cumulative_stats():
    stats = ResolutionStats(total=40, already_cached=15, completed=20, success_count=18, failure_count=2)

    snapshot = build_progress_snapshot(stats, timestamp="2026-10-19T12:00:00.000+00:00")

    assert snapshot.to_dict() == {
        "completed": 20,
        "total": 40,
        "success_count": 18,
        "failure_count": 2,
        "timestamp": "2026-10-19T12:00:00.000+00:00",
        "percentage": 50,
    }


def test_write_progress_overwrites_and_clear_removes(tmp_path: Path):
    path = tmp_path / "progress.json"
    first = build_progress_snapshot(ResolutionStats(total=20, already_cached=0, completed=10))
    second = build_progress_snapshot(ResolutionStats(total=20, already_cached=0, completed=20))

    write_progress(path, first)
    write_progress(path, second)

    assert json.loads(path.read_text(encoding="utf-8"))["completed"] == 20
    assert clear_progress(path) is True
    assert not path.exists()
    assert clear_progress(path) is False
