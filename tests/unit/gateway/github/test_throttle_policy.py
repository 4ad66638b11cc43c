"""Tests for the rate-limit and abuse throttle policy."""

import logging

import pytest

from repobot.gateway.github.throttle import (
    DEFAULT_ABUSE_RETRY_AFTER,
    ThrottlePolicy,
    ThrottleSignal,
    classify_throttle_response,
    parse_retry_after,
)
from tests.test_utils.context_builders import build_test_logger

NOW = 1_700_000_000.0


def _signal(kind: str, *, retry_count: int, retry_after: float = 30.0) -> ThrottleSignal:
    return ThrottleSignal(
        kind=kind,  # type: ignore[arg-type]
        retry_after=retry_after,
        method="POST",
        url="https://api.github.com/repos/testorg/test/git/blobs",
        retry_count=retry_count,
    )


def test_rate_limit_retries_on_first_attempt() -> None:
    policy = ThrottlePolicy(build_test_logger())

    decision = policy.decide(_signal("rate-limit", retry_count=0, retry_after=12.0))

    assert decision.retry is True
    assert decision.delay == 12.0


def test_rate_limit_gives_up_on_second_attempt() -> None:
    policy = ThrottlePolicy(build_test_logger())
    signal = _signal("rate-limit", retry_count=0)

    first = policy.decide(signal)
    second = policy.decide(_signal("rate-limit", retry_count=1))

    assert first.retry is True
    assert second.retry is False


def test_abuse_is_never_retried() -> None:
    policy = ThrottlePolicy(build_test_logger())

    decision = policy.decide(_signal("abuse", retry_count=0))

    assert decision.retry is False


def test_decisions_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="tests.repobot")
    policy = ThrottlePolicy(build_test_logger())

    policy.decide(_signal("rate-limit", retry_count=0, retry_after=5.0))
    policy.decide(_signal("abuse", retry_count=0))

    assert "Request quota exhausted for request POST" in caplog.text
    assert "Retrying after 5.0 seconds!" in caplog.text
    assert "Abuse detected for request POST" in caplog.text


def test_classify_exhausted_quota_uses_reset_header() -> None:
    signal = classify_throttle_response(
        status=403,
        headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": str(int(NOW) + 42)},
        message="API rate limit exceeded",
        method="GET",
        url="https://api.github.com/orgs/testorg/repos",
        retry_count=0,
        now=NOW,
    )

    assert signal is not None
    assert signal.kind == "rate-limit"
    assert signal.retry_after == 42.0


def test_classify_exhausted_quota_prefers_retry_after() -> None:
    signal = classify_throttle_response(
        status=429,
        headers={"x-ratelimit-remaining": "0", "retry-after": "7"},
        message="API rate limit exceeded",
        method="GET",
        url="https://api.github.com/orgs/testorg/repos",
        retry_count=1,
        now=NOW,
    )

    assert signal is not None
    assert signal.retry_after == 7.0
    assert signal.retry_count == 1


def test_classify_reset_in_the_past_waits_zero() -> None:
    signal = classify_throttle_response(
        status=403,
        headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": str(int(NOW) - 10)},
        message="API rate limit exceeded",
        method="GET",
        url="u",
        retry_count=0,
        now=NOW,
    )

    assert signal is not None
    assert signal.retry_after == 0.0


def test_classify_secondary_rate_limit_is_abuse() -> None:
    signal = classify_throttle_response(
        status=403,
        headers={"x-ratelimit-remaining": "4000"},
        message="You have exceeded a secondary rate limit. Please wait a few minutes.",
        method="POST",
        url="u",
        retry_count=0,
        now=NOW,
    )

    assert signal is not None
    assert signal.kind == "abuse"
    assert signal.retry_after == DEFAULT_ABUSE_RETRY_AFTER


@pytest.mark.parametrize(
    ("status", "message"),
    [
        (403, "Resource not accessible by integration"),
        (404, "Not Found"),
        (422, "Reference already exists"),
        (500, "Server Error"),
    ],
)
def test_classify_ordinary_errors_are_not_throttling(status: int, message: str) -> None:
    signal = classify_throttle_response(
        status=status,
        headers={},
        message=message,
        method="GET",
        url="u",
        retry_count=0,
        now=NOW,
    )

    assert signal is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("12", 12.0),
        ("-3", 0.0),
        ("Tue, 14 Nov 2023 22:14:20 GMT", 60.0),
        ("Tue, 14 Nov 2023 22:00:00 GMT", 0.0),
        ("soon", None),
    ],
)
def test_parse_retry_after(value: str | None, expected: float | None) -> None:
    assert parse_retry_after(value, now=NOW) == expected


def test_classify_unparseable_headers_fall_back() -> None:
    rate_limited = classify_throttle_response(
        status=403,
        headers={"x-ratelimit-remaining": "0", "retry-after": "soon", "x-ratelimit-reset": "?"},
        message="API rate limit exceeded",
        method="GET",
        url="u",
        retry_count=0,
        now=NOW,
    )
    abuse = classify_throttle_response(
        status=403,
        headers={"retry-after": "soon"},
        message="You have exceeded a secondary rate limit.",
        method="GET",
        url="u",
        retry_count=0,
        now=NOW,
    )

    assert rate_limited is not None
    assert rate_limited.retry_after == 0.0
    assert abuse is not None
    assert abuse.retry_after == DEFAULT_ABUSE_RETRY_AFTER
