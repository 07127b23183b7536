"""Persistent postal code to coordinate cache.

The cache file is the resume point for interrupted runs: a postal code that
has an entry is never looked up again. Failed lookups are not stored, so they
are attempted again on the next run.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Iterator

from dealer_geocode.common.fs import read_json, write_json
from dealer_geocode.common.logging import log_event
from dealer_geocode.common.models import CoordinatePair

# Older cache files store {"lat": .., "lon": ..}.
_LATITUDE_KEYS = ("latitude", "lat")
_LONGITUDE_KEYS = ("longitude", "lon")


def _lookup_first(mapping: dict, candidates: tuple[str, ...]) -> object | None:
    for key in candidates:
        if key in mapping and mapping[key] not in (None, ""):
            return mapping[key]
    return None


def coordinate_pair_from_entry(entry: Any) -> CoordinatePair | None:
    if not isinstance(entry, dict):
        return None
    lat = _lookup_first(entry, _LATITUDE_KEYS)
    lon = _lookup_first(entry, _LONGITUDE_KEYS)
    if lat is None or lon is None or isinstance(lat, bool) or isinstance(lon, bool):
        return None
    try:
        pair = CoordinatePair(latitude=float(lat), longitude=float(lon))
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(pair.latitude) and math.isfinite(pair.longitude)):
        return None
    return pair


class ResolutionCache:
    def __init__(self, path: Path, entries: dict[str, CoordinatePair] | None = None) -> None:
        self.path = path
        self._entries: dict[str, CoordinatePair] = dict(entries or {})

    @classmethod
    def load(cls, path: Path, logger: logging.Logger | None = None) -> "ResolutionCache":
        """Read the cache at ``path``; any failure yields an empty cache."""
        if not path.exists():
            return cls(path)

        try:
            payload = read_json(path)
        except (OSError, ValueError) as exc:
            if logger is not None:
                log_event(
                    logger,
                    f"could not read cache file {path}, starting fresh: {exc}",
                    level=logging.WARNING,
                    event="CACHE_LOAD_FAIL",
                    status="warning",
                    error_code="CACHE_UNREADABLE",
                )
            return cls(path)

        if not isinstance(payload, dict):
            if logger is not None:
                log_event(
                    logger,
                    f"cache file {path} is not a JSON object, starting fresh",
                    level=logging.WARNING,
                    event="CACHE_LOAD_FAIL",
                    status="warning",
                    error_code="CACHE_MALFORMED",
                )
            return cls(path)

        entries: dict[str, CoordinatePair] = {}
        for code, entry in payload.items():
            pair = coordinate_pair_from_entry(entry)
            if pair is None:
                if logger is not None:
                    log_event(
                        logger,
                        f"skipping malformed cache entry for {code}",
                        level=logging.WARNING,
                        postal_code=code,
                        event="CACHE_ENTRY_SKIPPED",
                        status="warning",
                        error_code="CACHE_ENTRY_MALFORMED",
                    )
                continue
            entries[str(code)] = pair
        return cls(path, entries)

    def save(self) -> None:
        write_json(self.path, self.to_dict())

    def get(self, code: str) -> CoordinatePair | None:
        return self._entries.get(code)

    def put(self, code: str, pair: CoordinatePair) -> None:
        self._entries[code] = pair

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {code: pair.to_dict() for code, pair in sorted(self._entries.items())}

    def __contains__(self, code: object) -> bool:
        return code in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
