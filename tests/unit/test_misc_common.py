import json
import logging
from pathlib import Path

from dealer_geocode.common.fs import remove_file, write_json
from dealer_geocode.common.ids import generate_run_id
from dealer_geocode.common.logging import JsonLineFormatter, build_logger, log_event
from dealer_geocode.common.time_utils import elapsed_ms, utc_timestamp_iso


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("run-")


def test_utc_timestamp_has_milliseconds_and_offset():
    stamp = utc_timestamp_iso()
    assert stamp.endswith("+00:00")
    assert len(stamp.split(".")[1]) == len("123+00:00")


def test_elapsed_ms_rounds():
    assert elapsed_ms(2.0, 2.5) == 500
    assert elapsed_ms(2.0, 2.0) == 0


def test_write_json_replaces_existing_file(tmp_path: Path):
    path = tmp_path / "state.json"
    write_json(path, {"b": 1, "a": 2})
    write_json(path, {"c": 3})

    assert json.loads(path.read_text(encoding="utf-8")) == {"c": 3}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["state.json"]


def test_write_json_can_keep_key_order(tmp_path: Path):
    path = tmp_path / "rows.json"
    write_json(path, [{"z": 1, "a": 2}], sort_keys=False)

    assert path.read_text(encoding="utf-8").index('"z"') < path.read_text(encoding="utf-8").index('"a"')


def test_remove_file_reports_whether_anything_was_removed(tmp_path: Path):
    path = tmp_path / "x.json"
    path.write_text("{}", encoding="utf-8")

    assert remove_file(path) is True
    assert remove_file(path) is False


def test_json_line_formatter_emits_stable_schema():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.postal_code = "12345"
    record.event = "LOOKUP_OK"

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["message"] == "hello world"
    assert payload["postal_code"] == "12345"
    assert payload["event"] == "LOOKUP_OK"
    assert payload["error_code"] is None
    assert "timestamp" in payload


def test_build_logger_writes_jsonl_file(tmp_path: Path):
    logger = build_logger("run-test", log_dir=tmp_path / "logs", level="INFO")
    log_event(logger, "started", run_id="run-test", event="RUN_START", status="ok")
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "logs" / "run-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["event"] == "RUN_START"

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
