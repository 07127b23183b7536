"""CLI entrypoint for the dealer postal code geocoder."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dealer_geocode.common.config_loader import load_config
from dealer_geocode.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS, STAGE
from dealer_geocode.common.errors import PipelineError
from dealer_geocode.common.ids import generate_run_id
from dealer_geocode.common.logging import build_logger, log_event
from dealer_geocode.pipeline.runner import run_geocode

RESUME_HINT = "re-run the command to resume from the last saved cache"


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", default=None)
    parser.add_argument("--overlay-config", default=None)
    parser.add_argument("--input", default=None)
    parser.add_argument("--postal-code-field", default=None)
    parser.add_argument("--cache-file", default=None)
    parser.add_argument("--progress-file", default=None)
    parser.add_argument("--output", default=None)
    parser.add_argument("--coordinates-output", default=None)
    parser.add_argument("--request-delay-ms", type=int, default=None)
    parser.add_argument("--save-interval", type=int, default=None)
    parser.add_argument("--provider-url", default=None)
    parser.add_argument("--country", default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--run-id", default=None)
    return parser.parse_args(argv)


def config_overrides(args: argparse.Namespace) -> dict[str, dict]:
    return {
        "input": {"path": args.input, "postal_code_field": args.postal_code_field},
        "provider": {
            "base_url": args.provider_url,
            "country": args.country,
            "request_delay_ms": args.request_delay_ms,
        },
        "cache": {"path": args.cache_file, "save_interval_count": args.save_interval},
        "progress": {"path": args.progress_file},
        "output": {"dealers_path": args.output, "coordinates_path": args.coordinates_output},
        "logging": {"dir": args.log_dir, "level": args.log_level},
    }


def run_command(args: argparse.Namespace, logger: logging.Logger | None = None) -> int:
    run_id = args.run_id or generate_run_id()
    config = load_config(
        Path(args.config) if args.config else None,
        overlay_path=Path(args.overlay_config) if args.overlay_config else None,
        overrides=config_overrides(args),
    )
    logger = logger or build_logger(run_id, log_dir=config.log_dir, level=config.log_level)
    run_geocode(config, logger=logger, run_id=run_id)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    run_id = args.run_id or generate_run_id()
    args.run_id = run_id
    logger = build_logger(run_id, level=args.log_level or "INFO")
    try:
        return run_command(args)
    except PipelineError as exc:
        log_event(
            logger,
            f"geocoding failed: {exc}; {RESUME_HINT}",
            level=logging.ERROR,
            run_id=run_id,
            stage=STAGE,
            event="RUN_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    except Exception as exc:
        log_event(
            logger,
            f"geocoding failed unexpectedly: {exc!r}; {RESUME_HINT}",
            level=logging.ERROR,
            run_id=run_id,
            stage=STAGE,
            event="RUN_FAIL",
            status="error",
            error_code="UNEXPECTED_ERROR",
        )
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
