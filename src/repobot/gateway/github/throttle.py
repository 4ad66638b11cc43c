"""Retry decisions for rate-limited and abuse-flagged GitHub requests.

The policy only decides; the transport that observed the signal is
responsible for sleeping and resubmitting the request.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC
from email.utils import parsedate_to_datetime
from typing import Literal

ThrottleKind = Literal["rate-limit", "abuse"]

# Fallback when an abuse response carries no retry-after header
DEFAULT_ABUSE_RETRY_AFTER = 60.0

_THROTTLE_STATUSES = (403, 429)
_ABUSE_MARKERS = ("secondary rate limit", "abuse")


@dataclass(frozen=True)
class ThrottleSignal:
    """A throttling response observed for one logical request.

    retry_count is the number of retries already made for the request.
    """

    kind: ThrottleKind
    retry_after: float
    method: str
    url: str
    retry_count: int


@dataclass(frozen=True)
class ThrottleDecision:
    retry: bool
    delay: float


NO_RETRY = ThrottleDecision(retry=False, delay=0.0)


class ThrottlePolicy:
    """Retry a rate-limited request once; never retry an abuse-flagged one."""

    def __init__(self, logger: logging.Logger, *, max_rate_limit_retries: int = 1) -> None:
        self._logger = logger
        self._max_rate_limit_retries = max_rate_limit_retries

    def decide(self, signal: ThrottleSignal) -> ThrottleDecision:
        if signal.kind == "rate-limit":
            return self.on_rate_limit(signal)
        return self.on_abuse_limit(signal)

    def on_rate_limit(self, signal: ThrottleSignal) -> ThrottleDecision:
        self._logger.warning(
            "Request quota exhausted for request %s %s", signal.method, signal.url
        )
        if signal.retry_count < self._max_rate_limit_retries:
            self._logger.info("Retrying after %s seconds!", signal.retry_after)
            return ThrottleDecision(retry=True, delay=signal.retry_after)
        return NO_RETRY

    def on_abuse_limit(self, signal: ThrottleSignal) -> ThrottleDecision:
        self._logger.warning("Abuse detected for request %s %s", signal.method, signal.url)
        return NO_RETRY


def classify_throttle_response(
    *,
    status: int,
    headers: Mapping[str, str],
    message: str,
    method: str,
    url: str,
    retry_count: int,
    now: float,
) -> ThrottleSignal | None:
    """Turn a failed response into a throttle signal, or None if it is not throttling.

    A 403/429 with an exhausted primary quota is a rate-limit signal. A 403/429
    whose message mentions a secondary rate limit or abuse is an abuse signal.

    Args:
        status: HTTP status of the response
        headers: Response headers (case-insensitive mapping in practice)
        message: The "message" field of the error body
        method: HTTP method of the request
        url: Request URL
        retry_count: Retries already made for this logical request
        now: Current Unix timestamp, used against x-ratelimit-reset

    Returns:
        ThrottleSignal, or None for an ordinary error response
    """
    if status not in _THROTTLE_STATUSES:
        return None

    retry_after_header = parse_retry_after(headers.get("retry-after"), now=now)

    if headers.get("x-ratelimit-remaining") == "0":
        if retry_after_header is not None:
            retry_after = retry_after_header
        else:
            reset = _parse_float(headers.get("x-ratelimit-reset"))
            retry_after = max(reset - now, 0.0) if reset is not None else 0.0
        return ThrottleSignal(
            kind="rate-limit",
            retry_after=retry_after,
            method=method,
            url=url,
            retry_count=retry_count,
        )

    lowered = message.lower()
    if any(marker in lowered for marker in _ABUSE_MARKERS):
        if retry_after_header is not None:
            retry_after = retry_after_header
        else:
            retry_after = DEFAULT_ABUSE_RETRY_AFTER
        return ThrottleSignal(
            kind="abuse",
            retry_after=retry_after,
            method=method,
            url=url,
            retry_count=retry_count,
        )

    return None


def parse_retry_after(value: str | None, *, now: float) -> float | None:
    """Parse a Retry-After header given as delay-seconds or as an HTTP-date.

    Returns:
        Seconds to wait (never negative), or None when absent or unparseable
    """
    if value is None:
        return None
    seconds = _parse_float(value)
    if seconds is not None:
        return max(seconds, 0.0)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(when.timestamp() - now, 0.0)


def _parse_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
