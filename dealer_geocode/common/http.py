"""HTTP client with timeouts and opt-in retries."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)

from dealer_geocode.common.constants import USER_AGENT
from dealer_geocode.common.errors import StageError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}
RETRYABLE_EXCEPTIONS = (requests.ConnectionError, requests.Timeout)


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 10.0
    read: float = 30.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 1
    multiplier: float = 1.0
    max_wait: float = 30.0


@dataclass(frozen=True)
class JsonResponse:
    url: str
    status_code: int
    # None when the body could not be decoded as JSON.
    payload: Any


class HttpRequestError(StageError):
    error_code = "HTTP_ERROR"


def _is_retryable_response(response: requests.Response) -> bool:
    return response.status_code in RETRYABLE_STATUS_CODES


def _last_outcome(retry_state: RetryCallState) -> requests.Response:
    # Hand back the final response (or re-raise the final error) once attempts run out.
    return retry_state.outcome.result()


class HttpClient:
    def __init__(
        self,
        *,
        user_agent: str = USER_AGENT,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if headers:
            out.update(headers)
        return out

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
        timeout: TimeoutConfig | None,
    ) -> requests.Response:
        req_timeout = timeout or self.timeout
        return self.session.request(
            method=method,
            url=url,
            params=params,
            headers=self._headers(headers),
            timeout=(req_timeout.connect, req_timeout.read),
        )

    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> requests.Response:
        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS) | retry_if_result(_is_retryable_response),
            retry_error_callback=_last_outcome,
        )
        def _wrapped() -> requests.Response:
            return self._send(method, url, params=params, headers=headers, timeout=timeout)

        try:
            return _wrapped()
        except requests.RequestException as exc:
            raise HttpRequestError(f"{method} {url} failed: {exc}") from exc

    def get_json_response(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> JsonResponse:
        response = self.request("GET", url, params=params, headers=headers, timeout=timeout)
        try:
            payload = response.json()
        except ValueError:
            payload = None
        return JsonResponse(url=url, status_code=response.status_code, payload=payload)
