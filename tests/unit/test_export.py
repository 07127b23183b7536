import json
from pathlib import Path

from dealer_geocode.common.config_loader import OutputPaths
from dealer_geocode.common.models import CoordinatePair
from dealer_geocode.geocode.cache import ResolutionCache
from dealer_geocode.pipeline.export import merge_coordinates, write_outputs


def _cache(tmp_path: Path) -> ResolutionCache:
    cache = ResolutionCache(tmp_path / "cache.json")
    cache.put("12345", CoordinatePair(latitude=40.0, longitude=-75.0))
    return cache


def test_merge_attaches_coordinates_and_preserves_attributes(tmp_path: Path):
    records = [
        {"name": "North Farm Equipment", "zip": "12345", "phone": "555-0100", "tags": ["ag", "turf"]},
        {"name": "Unresolved Tractor Co", "zip": "99999"},
        {"name": "No Zip Supply"},
    ]

    merged = merge_coordinates(records, _cache(tmp_path))

    assert merged[0] == {
        "name": "North Farm Equipment",
        "zip": "12345",
        "phone": "555-0100",
        "tags": ["ag", "turf"],
        "coordinates": {"latitude": 40.0, "longitude": -75.0},
    }
    assert merged[1]["coordinates"] is None
    assert merged[2] == {"name": "No Zip Supply", "coordinates": None}


def test_merge_does_not_mutate_input_records(tmp_path: Path):
    record = {"name": "A", "zip": "12345"}

    merge_coordinates([record], _cache(tmp_path))

    assert record == {"name": "A", "zip": "12345"}


def test_merge_shares_pair_across_records_with_same_code(tmp_path: Path):
    records = [{"id": i, "zip": "12345"} for i in range(3)]

    merged = merge_coordinates(records, _cache(tmp_path))

    assert [row["id"] for row in merged] == [0, 1, 2]
    assert all(row["coordinates"] == {"latitude": 40.0, "longitude": -75.0} for row in merged)


def test_write_outputs_keeps_attribute_order(tmp_path: Path):
    cache = _cache(tmp_path)
    paths = OutputPaths(dealers=tmp_path / "out" / "dealers.json", coordinates=tmp_path / "out" / "zips.json")
    dealers = merge_coordinates([{"zip": "12345", "name": "B", "address": "1 Main St"}], cache)

    written = write_outputs(paths, dealers, cache)

    assert written == {"dealers": paths.dealers, "coordinates": paths.coordinates}
    text = paths.dealers.read_text(encoding="utf-8")
    assert text.index('"zip"') < text.index('"name"') < text.index('"address"') < text.index('"coordinates"')
    assert json.loads(paths.coordinates.read_text(encoding="utf-8")) == {
        "12345": {"latitude": 40.0, "longitude": -75.0}
    }
