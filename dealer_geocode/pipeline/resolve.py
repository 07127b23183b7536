"""Serialized resolution loop with periodic checkpoints."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from dealer_geocode.common.constants import DEFAULT_SAVE_INTERVAL_COUNT, STAGE
from dealer_geocode.common.logging import log_event
from dealer_geocode.common.models import CoordinatePair, ResolutionStats
from dealer_geocode.geocode.cache import ResolutionCache

Resolve = Callable[[str], CoordinatePair | None]
Checkpoint = Callable[[ResolutionStats], None]


def pending_postal_codes(postal_codes: Iterable[str], cache: ResolutionCache) -> list[str]:
    return [code for code in dict.fromkeys(postal_codes) if code not in cache]


def resolve_postal_codes(
    postal_codes: list[str],
    cache: ResolutionCache,
    resolve: Resolve,
    *,
    logger: logging.Logger,
    run_id: str | None = None,
    save_interval: int = DEFAULT_SAVE_INTERVAL_COUNT,
    delay_seconds: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    checkpoint: Checkpoint | None = None,
) -> ResolutionStats:
    """Resolve every code missing from ``cache``, one at a time.

    ``checkpoint`` runs whenever the overall completed count reaches a
    multiple of ``save_interval`` and once more after the loop. ``sleep`` is
    called with ``delay_seconds`` between consecutive lookups, never after
    the last one.
    """
    unique_codes = list(dict.fromkeys(postal_codes))
    pending = pending_postal_codes(unique_codes, cache)
    already_cached = len(unique_codes) - len(pending)
    stats = ResolutionStats(
        total=len(unique_codes),
        already_cached=already_cached,
        completed=already_cached,
        success_count=already_cached,
    )

    for idx, code in enumerate(pending):
        log_event(
            logger,
            f"geocoding {stats.completed + 1}/{stats.total}: {code}",
            level=logging.DEBUG,
            run_id=run_id,
            stage=STAGE,
            postal_code=code,
            event="LOOKUP_START",
            status="ok",
            completed=stats.completed,
            total=stats.total,
        )
        try:
            pair = resolve(code)
        except Exception as exc:
            log_event(
                logger,
                f"unexpected failure resolving {code}: {exc}",
                level=logging.ERROR,
                run_id=run_id,
                stage=STAGE,
                postal_code=code,
                event="LOOKUP_FAIL",
                status="error",
                error_code="UNEXPECTED_ERROR",
            )
            pair = None

        stats.lookups += 1
        if pair is not None:
            cache.put(code, pair)
            stats.success_count += 1
        else:
            stats.failure_count += 1
        stats.completed += 1

        if checkpoint is not None and stats.completed % save_interval == 0:
            checkpoint(stats)

        if delay_seconds > 0 and idx < len(pending) - 1:
            sleep(delay_seconds)

    if checkpoint is not None:
        checkpoint(stats)
    return stats
