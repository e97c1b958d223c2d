from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Awaitable, Callable

import httpx

TRANSIENT_HTTP_STATUS = {408, 409, 425, 429, 500, 502, 503, 504}

NETWORK_ERRORS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass
class RetryableHttpError(Exception):
    status_code: int
    message: str
    retry_after_seconds: float | None = None


def _parse_retry_after_header(value: str | None) -> float | None:
    value = (value or "").strip()
    if not value:
        return None
    if value.isdigit():
        return float(value)
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    return max(0.0, (retry_at - datetime.now(timezone.utc)).total_seconds())


def _parse_bot_api_retry_after(response: httpx.Response) -> float | None:
    # Bot API flood control: {"ok": false, "parameters": {"retry_after": 5}}
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    retry_after = (payload.get("parameters") or {}).get("retry_after")
    if isinstance(retry_after, (int, float)) and retry_after >= 0:
        return float(retry_after)
    return None


def retry_after_seconds(response: httpx.Response) -> float | None:
    from_header = _parse_retry_after_header(response.headers.get("Retry-After"))
    if from_header is not None:
        return from_header
    return _parse_bot_api_retry_after(response)


def should_retry_http_status(status_code: int) -> bool:
    return int(status_code) in TRANSIENT_HTTP_STATUS


def should_retry_exception(exc: Exception) -> tuple[bool, float | None]:
    if isinstance(exc, RetryableHttpError):
        return True, exc.retry_after_seconds
    if isinstance(exc, NETWORK_ERRORS):
        return True, None
    return False, None


async def with_retry(
    *,
    operation: str,
    call: Callable[[], Awaitable[httpx.Response]],
    max_attempts: int,
    base_delay_seconds: float,
    max_delay_seconds: float,
    logger: logging.Logger,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """Run ``call`` until it returns a non-transient response.

    Transient statuses and network errors are retried with exponential
    backoff; a server-provided retry delay replaces the backoff but is still
    capped at ``max_delay_seconds``. Other HTTP errors raise immediately via
    ``raise_for_status``.
    """
    attempts = max(1, int(max_attempts))
    base_delay = max(0.1, float(base_delay_seconds))
    max_delay = max(base_delay, float(max_delay_seconds))

    for attempt in range(1, attempts + 1):
        try:
            response = await call()
            if should_retry_http_status(response.status_code):
                raise RetryableHttpError(
                    status_code=int(response.status_code),
                    message=f"retryable HTTP status {response.status_code}",
                    retry_after_seconds=retry_after_seconds(response),
                )
            response.raise_for_status()
            return response
        except Exception as exc:
            retryable, retry_after = should_retry_exception(exc)
            if not retryable or attempt >= attempts:
                raise
            backoff = base_delay * (2 ** (attempt - 1))
            delay = min(max_delay, retry_after if retry_after is not None else backoff)
            logger.warning(
                "Retrying API operation after transient failure",
                extra={
                    "event": "api_retry_scheduled",
                    "operation": operation,
                    "attempt": attempt,
                    "max_attempts": attempts,
                    "delay_seconds": delay,
                    "error": repr(exc),
                },
            )
            await sleep(delay)

    raise RuntimeError(f"Retry loop exhausted unexpectedly for operation '{operation}'")
