"""Tests for SPDX validation and logging setup."""

import logging

import pytest

from repobot.core.licenses import SpdxLicenseCatalog
from repobot.core.logs import configure_logging, log_remote_error, verbosity_to_level
from repobot.gateway.github.types import GitHubApiError
from tests.test_utils.context_builders import build_test_logger


@pytest.mark.parametrize("license_id", ["MIT", "mit", "Apache-2.0", "GPL-3.0-only"])
def test_shipped_spdx_list_accepts_known_ids(license_id: str) -> None:
    assert SpdxLicenseCatalog().is_valid(license_id)


@pytest.mark.parametrize("license_id", ["", "GPL", "not-a-license"])
def test_shipped_spdx_list_rejects_unknown_ids(license_id: str) -> None:
    assert not SpdxLicenseCatalog().is_valid(license_id)


def test_custom_ids_are_case_insensitive() -> None:
    catalog = SpdxLicenseCatalog(["BSD-3-Clause"])

    assert catalog.is_valid("bsd-3-clause")
    assert not catalog.is_valid("MIT")


@pytest.mark.parametrize(
    ("verbosity", "level"),
    [
        (60, logging.DEBUG),
        (50, logging.DEBUG),
        (40, logging.INFO),
        (35, logging.WARNING),
        (30, logging.WARNING),
        (0, logging.ERROR),
    ],
)
def test_verbosity_thresholds(verbosity: int, level: int) -> None:
    assert verbosity_to_level(verbosity) == level


def test_configure_logging_routes_by_level(capsys: pytest.CaptureFixture[str]) -> None:
    logger = configure_logging(40)

    logger.debug("hidden detail")
    logger.info("progress line")
    logger.warning("careful")

    captured = capsys.readouterr()
    assert "progress line" in captured.out
    assert "careful" not in captured.out
    assert "careful" in captured.err
    assert "hidden detail" not in captured.out + captured.err


def test_configure_logging_is_idempotent() -> None:
    configure_logging(40)
    logger = configure_logging(50)

    assert len(logger.handlers) == 2
    assert logger.level == logging.DEBUG


def test_log_remote_error_format(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="tests.repobot")

    log_remote_error(
        build_test_logger(), "error: createRef", GitHubApiError(422, "HttpError", "exists")
    )

    assert "error: createRef; name: HttpError, status: 422, msg: exists" in caplog.text
