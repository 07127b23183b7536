"""Postal code lookups against a Nominatim-compatible search endpoint."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any

from dealer_geocode.common.constants import DEFAULT_COUNTRY, DEFAULT_PROVIDER_BASE_URL, STAGE
from dealer_geocode.common.http import HttpClient, HttpRequestError
from dealer_geocode.common.logging import log_event
from dealer_geocode.common.models import CoordinatePair
from dealer_geocode.common.time_utils import elapsed_ms


@dataclass(frozen=True)
class LookupResult:
    coordinates: CoordinatePair | None
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.coordinates is not None


def build_search_params(postal_code: str, country: str = DEFAULT_COUNTRY) -> dict[str, str | int]:
    return {
        "postalcode": postal_code,
        "country": country,
        "format": "json",
        "limit": 1,
    }


def _safe_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def interpret_search_response(status_code: int, payload: Any) -> LookupResult:
    """Turn a search response into coordinates or a failure code.

    Only the first candidate is considered. It must carry both ``lat`` and
    ``lon``; Nominatim returns them as decimal strings.
    """
    if not 200 <= status_code < 300:
        return LookupResult(None, f"HTTP_{status_code}")
    if payload is None:
        return LookupResult(None, "INVALID_JSON")
    if not isinstance(payload, list):
        return LookupResult(None, "MALFORMED_RESPONSE")
    if not payload:
        return LookupResult(None, "NO_MATCH")

    first = payload[0]
    if not isinstance(first, dict):
        return LookupResult(None, "NO_MATCH")
    raw_lat = first.get("lat")
    raw_lon = first.get("lon")
    if raw_lat in (None, "") or raw_lon in (None, ""):
        return LookupResult(None, "NO_MATCH")

    lat = _safe_float(raw_lat)
    lon = _safe_float(raw_lon)
    if lat is None or lon is None:
        return LookupResult(None, "MALFORMED_RESPONSE")
    return LookupResult(CoordinatePair(latitude=lat, longitude=lon))


class NominatimResolver:
    """Resolves one postal code per call; failures come back as ``None``."""

    def __init__(
        self,
        client: HttpClient,
        *,
        logger: logging.Logger,
        base_url: str = DEFAULT_PROVIDER_BASE_URL,
        country: str = DEFAULT_COUNTRY,
        run_id: str | None = None,
    ) -> None:
        self.client = client
        self.logger = logger
        self.base_url = base_url
        self.country = country
        self.run_id = run_id

    def lookup(self, postal_code: str) -> LookupResult:
        try:
            response = self.client.get_json_response(
                self.base_url,
                params=build_search_params(postal_code, self.country),
            )
        except HttpRequestError:
            return LookupResult(None, "TRANSPORT_ERROR")
        return interpret_search_response(response.status_code, response.payload)

    def resolve(self, postal_code: str) -> CoordinatePair | None:
        if not postal_code:
            return None

        started = time.monotonic()
        result = self.lookup(postal_code)
        duration = elapsed_ms(started, time.monotonic())

        if result.ok:
            log_event(
                self.logger,
                f"resolved {postal_code}",
                level=logging.DEBUG,
                run_id=self.run_id,
                stage=STAGE,
                postal_code=postal_code,
                event="LOOKUP_OK",
                status="ok",
                duration_ms=duration,
            )
            return result.coordinates

        log_event(
            self.logger,
            f"no coordinates for postal code {postal_code}",
            level=logging.WARNING,
            run_id=self.run_id,
            stage=STAGE,
            postal_code=postal_code,
            event="LOOKUP_FAIL",
            status="error",
            duration_ms=duration,
            error_code=result.error_code,
        )
        return None
