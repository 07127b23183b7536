"""Merging coordinates into dealer records and writing final artifacts."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

from dealer_geocode.common.config_loader import OutputPaths
from dealer_geocode.common.constants import COORDINATES_FIELD, DEFAULT_POSTAL_CODE_FIELD
from dealer_geocode.common.fs import write_json
from dealer_geocode.geocode.cache import ResolutionCache
from dealer_geocode.pipeline.loader import postal_code_of


def merge_coordinates(
    records: Iterable[Mapping],
    cache: ResolutionCache,
    field: str = DEFAULT_POSTAL_CODE_FIELD,
) -> list[dict]:
    merged = []
    for record in records:
        code = postal_code_of(record, field)
        pair = cache.get(code) if code else None
        out = dict(record)
        out[COORDINATES_FIELD] = pair.to_dict() if pair is not None else None
        merged.append(out)
    return merged


def write_outputs(output_paths: OutputPaths, dealers: list[dict], cache: ResolutionCache) -> dict[str, Path]:
    # Dealer attributes keep their input order.
    write_json(output_paths.dealers, dealers, sort_keys=False)
    write_json(output_paths.coordinates, cache.to_dict())
    return {
        "dealers": output_paths.dealers,
        "coordinates": output_paths.coordinates,
    }
