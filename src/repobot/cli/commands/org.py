"""Read-only organization reports, printed as JSON."""

import asyncio
import dataclasses
import json
from collections.abc import Awaitable, Callable
from typing import Any

import click

from repobot.cli.ensure_ideal import EnsureIdeal
from repobot.core.context import RepobotContext
from repobot.core.org_aggregator import OrgAggregator
from repobot.core.output import machine_output


def _run_report(ctx: RepobotContext, report: Callable[[OrgAggregator], Awaitable[Any]]) -> Any:
    org = EnsureIdeal.owner(ctx.config.owner)

    async def _run() -> Any:
        async with ctx.github as github:
            return await report(OrgAggregator(github, org, logger=ctx.logger))

    return asyncio.run(_run())


def _emit_json(data: Any) -> None:
    machine_output(json.dumps(data, indent=2, sort_keys=True))


@click.group("org")
def org_group() -> None:
    """Report on the configured GitHub organization."""


@org_group.command("members-missing-2fa")
@click.pass_obj
def members_missing_2fa_cmd(ctx: RepobotContext) -> None:
    """List members that have not enabled two-factor authentication."""
    members = _run_report(ctx, lambda aggregator: aggregator.members_missing_2fa())
    _emit_json([dataclasses.asdict(member) for member in members])


@org_group.command("repos")
@click.pass_obj
def repos_cmd(ctx: RepobotContext) -> None:
    """List the organization's repositories."""
    repos = _run_report(ctx, lambda aggregator: aggregator.org_repositories())
    _emit_json([dataclasses.asdict(repo) for repo in repos])


@org_group.command("collaborators")
@click.pass_obj
def collaborators_cmd(ctx: RepobotContext) -> None:
    """Map each repository to its collaborator logins."""
    _emit_json(_run_report(ctx, lambda aggregator: aggregator.org_repositories_collaborators()))


@org_group.command("member-repos")
@click.option(
    "--login",
    "logins",
    multiple=True,
    help="Only report these logins (repeatable). Reports every collaborator when omitted.",
)
@click.pass_obj
def member_repos_cmd(ctx: RepobotContext, logins: tuple[str, ...]) -> None:
    """Map each collaborator login to the repositories it belongs to."""
    selected = list(logins) if logins else None
    _emit_json(
        _run_report(ctx, lambda aggregator: aggregator.repositories_by_member(selected))
    )
