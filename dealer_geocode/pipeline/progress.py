"""Progress snapshots for in-flight runs."""

from __future__ import annotations

from pathlib import Path

from dealer_geocode.common.fs import remove_file, write_json
from dealer_geocode.common.models import ProgressSnapshot, ResolutionStats
from dealer_geocode.common.time_utils import utc_timestamp_iso


def progress_percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round((completed / total) * 100)


def build_progress_snapshot(stats: ResolutionStats, timestamp: str | None = None) -> ProgressSnapshot:
    return ProgressSnapshot(
        completed=stats.completed,
        total=stats.total,
        success_count=stats.success_count,
        failure_count=stats.failure_count,
        timestamp=timestamp or utc_timestamp_iso(),
        percentage=progress_percentage(stats.completed, stats.total),
    )


def write_progress(path: Path, snapshot: ProgressSnapshot) -> Path:
    write_json(path, snapshot.to_dict())
    return path


def clear_progress(path: Path) -> bool:
    """Remove the snapshot; its absence marks the last run as finished."""
    return remove_file(path)
