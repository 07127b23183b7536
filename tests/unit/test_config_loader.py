from pathlib import Path

import pytest

from dealer_geocode.common.config_loader import load_config
from dealer_geocode.common.errors import ConfigError


def test_load_config_defaults():
    config = load_config()

    assert config.input_path == Path("dealers.json")
    assert config.postal_code_field == "zip"
    assert config.cache_file_path == Path("zip_coordinates_cache.json")
    assert config.progress_file_path == Path("geocoding_progress.json")
    assert config.output_paths.dealers == Path("dealers_with_coords.json")
    assert config.output_paths.coordinates == Path("zip_coordinates.json")
    assert config.request_delay_ms == 1000
    assert config.request_delay_seconds == 1.0
    assert config.save_interval_count == 10
    assert config.provider_base_url == "https://nominatim.openstreetmap.org/search"
    assert config.country == "USA"
    assert config.retry_attempts == 1
    assert config.log_dir is None


def test_load_config_from_repo_config_file():
    config = load_config(Path("config/geocode.yml"))
    assert config.save_interval_count == 10
    assert config.user_agent


def test_load_config_applies_file_overlay_and_overrides(tmp_path: Path):
    base = tmp_path / "geocode.yml"
    overlay = tmp_path / "local.yml"
    base.write_text(
        """input:
  path: data/dealers.json
provider:
  request_delay_ms: 1500
cache:
  save_interval_count: 5
""",
        encoding="utf-8",
    )
    overlay.write_text(
        """provider:
  country: CAN
logging:
  dir: logs
""",
        encoding="utf-8",
    )

    config = load_config(
        base,
        overlay_path=overlay,
        overrides={"provider": {"request_delay_ms": 250, "country": None}, "output": {"dealers_path": None}},
    )

    assert config.input_path == Path("data/dealers.json")
    assert config.request_delay_ms == 250
    assert config.country == "CAN"
    assert config.save_interval_count == 5
    assert config.log_dir == Path("logs")
    assert config.output_paths.dealers == Path("dealers_with_coords.json")


def test_missing_overlay_is_ignored(tmp_path: Path):
    config = load_config(overlay_path=tmp_path / "absent.yml")
    assert config.country == "USA"


def test_missing_config_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yml")


def test_empty_config_file_uses_defaults(tmp_path: Path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")

    assert load_config(path).request_delay_ms == 1000


def test_invalid_yaml_raises_config_error(tmp_path: Path):
    path = tmp_path / "broken.yml"
    path.write_text("provider: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_unknown_keys_rejected(tmp_path: Path):
    path = tmp_path / "geocode.yml"
    path.write_text("provider:\n  api_key: secret\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Unknown keys in provider"):
        load_config(path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"provider": {"request_delay_ms": -1}},
        {"cache": {"save_interval_count": 0}},
        {"provider": {"retry_attempts": 0}},
        {"provider": {"base_url": "ftp://example.test"}},
        {"input": {"postal_code_field": "  "}},
        {"logging": {"level": "LOUD"}},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ConfigError):
        load_config(overrides=overrides)
