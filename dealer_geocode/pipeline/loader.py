"""Dealer input loading and postal code extraction."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Mapping

from dealer_geocode.common.constants import DEFAULT_POSTAL_CODE_FIELD
from dealer_geocode.common.errors import InputError
from dealer_geocode.common.fs import read_csv, read_json


def _load_json_records(path: Path) -> list[dict]:
    try:
        payload = read_json(path)
    except ValueError as exc:
        raise InputError(f"Dealer input {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise InputError(f"Dealer input {path} must contain a JSON array of records")
    for idx, record in enumerate(payload):
        if not isinstance(record, dict):
            raise InputError(f"Dealer record {idx} in {path} is not an object")
    return payload


def _load_csv_records(path: Path) -> list[dict]:
    try:
        return read_csv(path)
    except (csv.Error, UnicodeDecodeError) as exc:
        raise InputError(f"Dealer input {path} is not readable CSV: {exc}") from exc


def load_dealers(path: Path) -> list[dict]:
    if not path.exists():
        raise InputError(f"Dealer input not found: {path}")
    try:
        if path.suffix.lower() == ".csv":
            return _load_csv_records(path)
        return _load_json_records(path)
    except OSError as exc:
        raise InputError(f"Could not read dealer input {path}: {exc}") from exc


def postal_code_of(record: Mapping, field: str = DEFAULT_POSTAL_CODE_FIELD) -> str | None:
    value = record.get(field)
    if value is None or isinstance(value, bool):
        return None
    cleaned = str(value).strip()
    return cleaned or None


def unique_postal_codes(records: Iterable[Mapping], field: str = DEFAULT_POSTAL_CODE_FIELD) -> list[str]:
    """Distinct postal codes in first-seen order, skipping records without one."""
    codes = (postal_code_of(record, field) for record in records)
    return list(dict.fromkeys(code for code in codes if code))
