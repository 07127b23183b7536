"""Minimal strict schema for YAML config validation."""

from __future__ import annotations

from dealer_geocode.common.errors import ConfigError

SECTION_KEYS = {
    "input": {"path", "postal_code_field"},
    "provider": {
        "base_url",
        "country",
        "user_agent",
        "request_delay_ms",
        "connect_timeout_seconds",
        "read_timeout_seconds",
        "retry_attempts",
    },
    "cache": {"path", "save_interval_count"},
    "progress": {"path"},
    "output": {"dealers_path", "coordinates_path"},
    "logging": {"dir", "level"},
}
LOG_LEVELS = {"DEBUG", "INFO", "WARN", "WARNING", "ERROR"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_non_empty_str(value: object, ctx: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{ctx} must be a non-empty string")


def _assert_int(value: object, ctx: str, *, minimum: int) -> None:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{ctx} must be an integer")
    if value < minimum:
        raise ConfigError(f"{ctx} must be >= {minimum}")


def _assert_positive_number(value: object, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_geocode_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    if not isinstance(cfg, dict):
        raise ConfigError("geocode config must be a mapping")

    _assert_required_keys(cfg, set(SECTION_KEYS), "geocode config")
    _assert_no_unknown_keys(cfg, set(SECTION_KEYS), "geocode config", allow_unknown)
    for section, keys in SECTION_KEYS.items():
        if not isinstance(cfg[section], dict):
            raise ConfigError(f"{section} must be a mapping")
        _assert_required_keys(cfg[section], keys, section)
        _assert_no_unknown_keys(cfg[section], keys, section, allow_unknown)

    _assert_non_empty_str(cfg["input"]["path"], "input.path")
    _assert_non_empty_str(cfg["input"]["postal_code_field"], "input.postal_code_field")

    provider = cfg["provider"]
    _assert_non_empty_str(provider["base_url"], "provider.base_url")
    if not provider["base_url"].startswith(("http://", "https://")):
        raise ConfigError("provider.base_url must be an http(s) URL")
    _assert_non_empty_str(provider["country"], "provider.country")
    _assert_non_empty_str(provider["user_agent"], "provider.user_agent")
    _assert_int(provider["request_delay_ms"], "provider.request_delay_ms", minimum=0)
    _assert_int(provider["retry_attempts"], "provider.retry_attempts", minimum=1)
    _assert_positive_number(provider["connect_timeout_seconds"], "provider.connect_timeout_seconds")
    _assert_positive_number(provider["read_timeout_seconds"], "provider.read_timeout_seconds")

    _assert_non_empty_str(cfg["cache"]["path"], "cache.path")
    _assert_int(cfg["cache"]["save_interval_count"], "cache.save_interval_count", minimum=1)
    _assert_non_empty_str(cfg["progress"]["path"], "progress.path")
    _assert_non_empty_str(cfg["output"]["dealers_path"], "output.dealers_path")
    _assert_non_empty_str(cfg["output"]["coordinates_path"], "output.coordinates_path")

    log_dir = cfg["logging"]["dir"]
    if log_dir is not None:
        _assert_non_empty_str(log_dir, "logging.dir")
    level = cfg["logging"]["level"]
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(sorted(LOG_LEVELS))}")

    return cfg
