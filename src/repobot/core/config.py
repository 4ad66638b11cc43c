"""Configuration loading for repobot.

Values are resolved with the precedence: explicit options > environment >
TOML config file > defaults. At every level an organization setting wins over
an owner setting.

Example config file:
  [github]
  org = "hackforla"
  api_url = "https://api.github.com"
  timeout = 30

  [commit]
  author_name = "repobot"
  author_email = "automation@beepboop.org"
  branch = "repobot-add-file"
  max_ref_retries = 3

  [logging]
  level = 40
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from repobot.core.logs import DEFAULT_VERBOSITY
from repobot.gateway.github.real import DEFAULT_API_URL
from repobot.gateway.github.types import GitIdentity

DEFAULT_AUTHOR = GitIdentity(name="repobot", email="automation@beepboop.org")
DEFAULT_BRANCH_NAME = "repobot-add-file"
DEFAULT_MAX_REF_RETRIES = 3
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "repobot"


@dataclass(frozen=True)
class RepobotConfig:
    """Resolved settings for one process."""

    token: str | None
    owner: str | None  # Organization or user owning the target repositories
    api_url: str
    user_agent: str
    author: GitIdentity
    branch_name: str
    max_ref_retries: int
    request_timeout: float
    log_level: int


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a TOML config file if present; otherwise return an empty mapping."""
    if not path.exists():
        return {}
    return tomllib.loads(path.read_text(encoding="utf-8"))


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None and value != "":
            return value
    return None


def _parse_verbosity(level: Any) -> int:
    try:
        return int(level)
    except (TypeError, ValueError):
        raise click.UsageError(
            f"Invalid log level {level!r}: expected a number such as 50 (debug), "
            "40 (info) or 30 (warnings)"
        ) from None


def load_config(
    env: Mapping[str, str],
    *,
    token: str | None = None,
    org: str | None = None,
    owner: str | None = None,
    log_level: int | None = None,
    config_path: Path | None = None,
) -> RepobotConfig:
    """Resolve configuration from options, environment and an optional TOML file.

    Args:
        env: Environment variables (usually os.environ)
        token: GitHub token option
        org: Organization option; takes precedence over owner
        owner: Owner option
        log_level: Verbosity option
        config_path: Config file; defaults to $REPOBOT_CONFIG when set

    Returns:
        RepobotConfig with every field resolved
    """
    if config_path is None and env.get("REPOBOT_CONFIG"):
        config_path = Path(env["REPOBOT_CONFIG"])
    file_data = load_config_file(config_path) if config_path is not None else {}
    github_section = file_data.get("github", {})
    commit_section = file_data.get("commit", {})
    logging_section = file_data.get("logging", {})

    resolved_owner = _first(
        org,
        owner,
        env.get("GITHUB_ORG"),
        env.get("GITHUB_OWNER"),
        github_section.get("org"),
        github_section.get("owner"),
    )

    level = _first(
        log_level,
        env.get("REPOBOT_LOG_LEVEL"),
        env.get("LOG_LEVEL"),
        logging_section.get("level"),
    )

    return RepobotConfig(
        token=_first(token, env.get("GITHUB_TOKEN"), github_section.get("token")),
        owner=resolved_owner,
        api_url=_first(env.get("GITHUB_API_URL"), github_section.get("api_url"))
        or DEFAULT_API_URL,
        user_agent=github_section.get("user_agent", DEFAULT_USER_AGENT),
        author=GitIdentity(
            name=_first(env.get("REPOBOT_AUTHOR_NAME"), commit_section.get("author_name"))
            or DEFAULT_AUTHOR.name,
            email=_first(env.get("REPOBOT_AUTHOR_EMAIL"), commit_section.get("author_email"))
            or DEFAULT_AUTHOR.email,
        ),
        branch_name=_first(env.get("REPOBOT_BRANCH"), commit_section.get("branch"))
        or DEFAULT_BRANCH_NAME,
        max_ref_retries=int(commit_section.get("max_ref_retries", DEFAULT_MAX_REF_RETRIES)),
        request_timeout=float(github_section.get("timeout", DEFAULT_TIMEOUT)),
        log_level=_parse_verbosity(level) if level is not None else DEFAULT_VERBOSITY,
    )
