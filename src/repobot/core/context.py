"""Dependency container threaded through the CLI via Click's context object."""

import logging
from dataclasses import dataclass

from repobot.core.config import RepobotConfig
from repobot.core.licenses import SpdxLicenseCatalog
from repobot.gateway.github.abc import GitHubApi
from repobot.gateway.github.real import RealGitHubApi
from repobot.gateway.github.throttle import ThrottlePolicy
from repobot.gateway.time.real import RealTime


@dataclass(frozen=True)
class RepobotContext:
    """Immutable context holding all dependencies for repobot commands.

    Created at the CLI entry point; tests build one with fakes and pass it as
    the Click context object.
    """

    config: RepobotConfig
    github: GitHubApi
    licenses: SpdxLicenseCatalog
    logger: logging.Logger


def create_context(config: RepobotConfig, logger: logging.Logger) -> RepobotContext:
    """Build the production context for a resolved configuration."""
    github = RealGitHubApi(
        token=config.token,
        time=RealTime(),
        throttle=ThrottlePolicy(logger),
        logger=logger,
        api_url=config.api_url,
        user_agent=config.user_agent,
        timeout=config.request_timeout,
    )
    return RepobotContext(
        config=config,
        github=github,
        licenses=SpdxLicenseCatalog(),
        logger=logger,
    )
