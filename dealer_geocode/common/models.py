"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class CoordinatePair:
    latitude: float
    longitude: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class ResolutionStats:
    total: int
    already_cached: int
    completed: int = 0
    success_count: int = 0
    failure_count: int = 0
    lookups: int = 0


@dataclass(frozen=True)
class ProgressSnapshot:
    completed: int
    total: int
    success_count: int
    failure_count: int
    timestamp: str
    percentage: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RunResult:
    run_id: str
    record_count: int
    stats: ResolutionStats
    output_paths: dict[str, Path] = field(default_factory=dict)
