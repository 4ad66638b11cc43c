import os
from pathlib import Path

import click

from repobot.cli.commands.add_file import add_file_cmd
from repobot.cli.commands.org import org_group
from repobot.core.config import load_config
from repobot.core.context import create_context
from repobot.core.logs import VERBOSITY_DEBUG, configure_logging

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="repobot")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token (default: $GITHUB_TOKEN)")
@click.option("--org", help="GitHub organization owning the repositories (wins over --owner)")
@click.option("--owner", help="GitHub user or organization owning the repositories")
@click.option(
    "--log-level",
    type=int,
    help="Verbosity: 50 debug, 40 info (default), 30 warnings, lower for errors only",
)
@click.option("--debug", is_flag=True, help="Enable debug logging (same as --log-level=50)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="TOML config file (default: $REPOBOT_CONFIG)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    token: str | None,
    org: str | None,
    owner: str | None,
    log_level: int | None,
    debug: bool,
    config_path: Path | None,
) -> None:
    """🐦 repobot 🐦 - open pull requests that add files to GitHub repositories.

    \b
    Usage:
      repobot -h
        show this help output

    \b
      repobot add-file --license=GPL-2.0 --repo=my-repo
        opens a PR to add a GPL-2.0 license file to "my-repo"
    """
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is not None:
        return

    config = load_config(
        os.environ,
        token=token,
        org=org,
        owner=owner,
        log_level=VERBOSITY_DEBUG if debug else log_level,
        config_path=config_path,
    )
    logger = configure_logging(config.log_level)
    ctx.obj = create_context(config, logger)


cli.add_command(add_file_cmd)
cli.add_command(org_group)
