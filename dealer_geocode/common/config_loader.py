"""Configuration loading and validation."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from dealer_geocode.common.constants import (
    DEFAULT_COUNTRY,
    DEFAULT_POSTAL_CODE_FIELD,
    DEFAULT_PROVIDER_BASE_URL,
    DEFAULT_REQUEST_DELAY_MS,
    DEFAULT_SAVE_INTERVAL_COUNT,
    USER_AGENT,
)
from dealer_geocode.common.errors import ConfigError
from dealer_geocode.common.fs import read_yaml
from dealer_geocode.common.schema import validate_geocode_config

DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    "input": {
        "path": "dealers.json",
        "postal_code_field": DEFAULT_POSTAL_CODE_FIELD,
    },
    "provider": {
        "base_url": DEFAULT_PROVIDER_BASE_URL,
        "country": DEFAULT_COUNTRY,
        "user_agent": USER_AGENT,
        "request_delay_ms": DEFAULT_REQUEST_DELAY_MS,
        "connect_timeout_seconds": 10,
        "read_timeout_seconds": 30,
        "retry_attempts": 1,
    },
    "cache": {
        "path": "zip_coordinates_cache.json",
        "save_interval_count": DEFAULT_SAVE_INTERVAL_COUNT,
    },
    "progress": {
        "path": "geocoding_progress.json",
    },
    "output": {
        "dealers_path": "dealers_with_coords.json",
        "coordinates_path": "zip_coordinates.json",
    },
    "logging": {
        "dir": None,
        "level": "INFO",
    },
}


@dataclass(frozen=True)
class OutputPaths:
    dealers: Path
    coordinates: Path


@dataclass(frozen=True)
class GeocodeConfig:
    input_path: Path
    postal_code_field: str
    cache_file_path: Path
    progress_file_path: Path
    output_paths: OutputPaths
    request_delay_ms: int
    save_interval_count: int
    provider_base_url: str
    country: str
    user_agent: str
    connect_timeout_seconds: float
    read_timeout_seconds: float
    retry_attempts: int
    log_dir: Path | None
    log_level: str

    @property
    def request_delay_seconds(self) -> float:
        return self.request_delay_ms / 1000.0


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        payload = read_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return payload


def _drop_unset(overrides: dict) -> dict:
    out = {}
    for section, values in overrides.items():
        kept = {key: value for key, value in values.items() if value is not None}
        if kept:
            out[section] = kept
    return out


def build_config(cfg: dict) -> GeocodeConfig:
    provider = cfg["provider"]
    log_dir = cfg["logging"]["dir"]
    return GeocodeConfig(
        input_path=Path(cfg["input"]["path"]),
        postal_code_field=cfg["input"]["postal_code_field"],
        cache_file_path=Path(cfg["cache"]["path"]),
        progress_file_path=Path(cfg["progress"]["path"]),
        output_paths=OutputPaths(
            dealers=Path(cfg["output"]["dealers_path"]),
            coordinates=Path(cfg["output"]["coordinates_path"]),
        ),
        request_delay_ms=provider["request_delay_ms"],
        save_interval_count=cfg["cache"]["save_interval_count"],
        provider_base_url=provider["base_url"],
        country=provider["country"],
        user_agent=provider["user_agent"],
        connect_timeout_seconds=float(provider["connect_timeout_seconds"]),
        read_timeout_seconds=float(provider["read_timeout_seconds"]),
        retry_attempts=provider["retry_attempts"],
        log_dir=Path(log_dir) if log_dir else None,
        log_level=cfg["logging"]["level"].upper(),
    )


def load_config(
    config_path: Path | None = None,
    *,
    overlay_path: Path | None = None,
    overrides: dict[str, dict[str, Any]] | None = None,
    allow_unknown: bool = False,
) -> GeocodeConfig:
    """Resolve defaults, config file, overlay and overrides into a config.

    Later sources win. ``None`` values in ``overrides`` are ignored so that
    unset command-line flags do not mask file settings.
    """
    merged: Any = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is not None:
        merged = _deep_merge(merged, _read_config_file(config_path))
    if overlay_path is not None and overlay_path.exists():
        merged = _deep_merge(merged, _read_config_file(overlay_path))
    if overrides:
        merged = _deep_merge(merged, _drop_unset(overrides))

    validated = validate_geocode_config(merged, allow_unknown=allow_unknown)
    return build_config(validated)
