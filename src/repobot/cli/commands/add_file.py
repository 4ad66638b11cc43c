import asyncio

import click

from repobot.cli.ensure_ideal import EnsureIdeal
from repobot.core.add_file import (
    AddFileRequest,
    AddFileResult,
    MutationWorkflow,
    WorkflowSettings,
    validate_request,
)
from repobot.core.context import RepobotContext
from repobot.core.non_ideal_state import MissingArgument, ObjectGraphWriteAborted
from repobot.core.output import machine_output, user_output


async def _run_add_file(
    ctx: RepobotContext, owner: str, settings: WorkflowSettings, request: AddFileRequest
) -> AddFileResult:
    async with ctx.github as github:
        workflow = MutationWorkflow(
            github,
            owner=owner,
            licenses=ctx.licenses,
            settings=settings,
            logger=ctx.logger,
        )
        return await workflow.add_file(request)


@click.command("add-file")
@click.option("--repo", help="Name of the repository to open the pull request against")
@click.option("--license", "license_id", help="SPDX id of the license file to add (e.g. MIT)")
@click.option(
    "--branch-from-head",
    is_flag=True,
    help="Point the bot branch at the current HEAD instead of the new commit",
)
@click.option("-m", "--message", help="Commit message (default: generic bot message)")
@click.pass_obj
def add_file_cmd(
    ctx: RepobotContext,
    repo: str | None,
    license_id: str | None,
    branch_from_head: bool,
    message: str | None,
) -> None:
    """Open a pull request that adds a file to a repository.

    Only license files are supported:

      repobot add-file --repo=my-repo --license=MIT

    Prints the pull request URL on success.
    """
    request = AddFileRequest(repo=repo, license_id=license_id)
    invalid = validate_request(request)
    if isinstance(invalid, MissingArgument):
        raise click.UsageError(invalid.message)
    if invalid is not None:
        EnsureIdeal.ideal_state(invalid)

    owner = EnsureIdeal.owner(ctx.config.owner)
    settings = WorkflowSettings(
        author=ctx.config.author,
        branch_name=ctx.config.branch_name,
        max_ref_retries=ctx.config.max_ref_retries,
        branch_from_head=branch_from_head,
        commit_message=message,
    )

    try:
        result = asyncio.run(_run_add_file(ctx, owner, settings, request))
    except ObjectGraphWriteAborted as e:
        user_output(click.style("Error: ", fg="red") + e.error.message)
        raise SystemExit(1) from e

    pull_request = EnsureIdeal.ideal_state(result)
    user_output(
        f"Opened pull request #{pull_request.number}: "
        f"{pull_request.head} -> {pull_request.base}"
    )
    machine_output(pull_request.html_url)
