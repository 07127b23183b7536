"""End-to-end geocoding run."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from dealer_geocode.common.config_loader import GeocodeConfig
from dealer_geocode.common.constants import STAGE
from dealer_geocode.common.http import HttpClient, RetryConfig, TimeoutConfig
from dealer_geocode.common.logging import log_event
from dealer_geocode.common.models import ResolutionStats, RunResult
from dealer_geocode.geocode.cache import ResolutionCache
from dealer_geocode.geocode.provider import NominatimResolver
from dealer_geocode.pipeline.export import merge_coordinates, write_outputs
from dealer_geocode.pipeline.loader import load_dealers, unique_postal_codes
from dealer_geocode.pipeline.progress import build_progress_snapshot, clear_progress, write_progress
from dealer_geocode.pipeline.resolve import Resolve, resolve_postal_codes


def build_http_client(config: GeocodeConfig) -> HttpClient:
    return HttpClient(
        user_agent=config.user_agent,
        timeout=TimeoutConfig(connect=config.connect_timeout_seconds, read=config.read_timeout_seconds),
        retry=RetryConfig(max_attempts=config.retry_attempts),
    )


def run_geocode(
    config: GeocodeConfig,
    *,
    logger: logging.Logger,
    run_id: str,
    resolver: Resolve | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    dealers = load_dealers(config.input_path)
    postal_codes = unique_postal_codes(dealers, config.postal_code_field)
    log_event(
        logger,
        f"found {len(postal_codes)} unique postal codes from {len(dealers)} dealers",
        run_id=run_id,
        stage=STAGE,
        event="RUN_START",
        status="ok",
        total=len(postal_codes),
    )

    cache = ResolutionCache.load(config.cache_file_path, logger)
    pending = sum(1 for code in postal_codes if code not in cache)
    if pending:
        minutes = math.ceil(pending * config.request_delay_seconds / 60)
        message = f"cache holds {len(cache)} entries: {len(postal_codes) - pending} already cached, {pending} remaining (about {minutes} min)"
    else:
        message = f"cache holds {len(cache)} entries: all postal codes already cached"
    log_event(
        logger,
        message,
        run_id=run_id,
        stage=STAGE,
        event="CACHE_LOADED",
        status="ok",
        completed=len(postal_codes) - pending,
        total=len(postal_codes),
    )

    def checkpoint(stats: ResolutionStats) -> None:
        cache.save()
        snapshot = build_progress_snapshot(stats)
        write_progress(config.progress_file_path, snapshot)
        log_event(
            logger,
            f"saved progress: {snapshot.completed}/{snapshot.total} ({snapshot.percentage}%)",
            run_id=run_id,
            stage=STAGE,
            event="CHECKPOINT",
            status="ok",
            completed=snapshot.completed,
            total=snapshot.total,
        )

    owns_client = resolver is None
    client = build_http_client(config) if owns_client else None
    try:
        if client is not None:
            resolver = NominatimResolver(
                client,
                logger=logger,
                base_url=config.provider_base_url,
                country=config.country,
                run_id=run_id,
            ).resolve
        stats = resolve_postal_codes(
            postal_codes,
            cache,
            resolver,
            logger=logger,
            run_id=run_id,
            save_interval=config.save_interval_count,
            delay_seconds=config.request_delay_seconds,
            sleep=sleep,
            checkpoint=checkpoint,
        )
    finally:
        if client is not None:
            client.close()

    merged = merge_coordinates(dealers, cache, config.postal_code_field)
    output_paths = write_outputs(config.output_paths, merged, cache)
    log_event(
        logger,
        f"wrote {len(merged)} dealers to {output_paths['dealers']} and {len(cache)} postal codes to {output_paths['coordinates']}",
        run_id=run_id,
        stage=STAGE,
        event="OUTPUT_WRITTEN",
        status="ok",
    )

    clear_progress(config.progress_file_path)
    log_event(
        logger,
        f"geocoding complete: {stats.success_count} succeeded, {stats.failure_count} failed",
        run_id=run_id,
        stage=STAGE,
        event="RUN_END",
        status="ok" if stats.failure_count == 0 else "partial",
        completed=stats.completed,
        total=stats.total,
    )
    return RunResult(run_id=run_id, record_count=len(merged), stats=stats, output_paths=output_paths)
