"""Tests for the add-file command."""

from click.testing import CliRunner

from repobot.cli.cli import cli
from repobot.gateway.github.types import GitHubApiError
from tests.test_utils.context_builders import (
    HEAD,
    build_fake_github,
    build_test_context,
)


def test_add_file_opens_pull_request() -> None:
    github = build_fake_github()
    ctx = build_test_context(github)

    result = CliRunner().invoke(cli, ["add-file", "--repo=test", "--license=MIT"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "https://github.com/testorg/test/pull/1" in result.output
    assert "Opened pull request #1: repobot-add-file -> main" in result.output
    [pull_request] = github.created_pull_requests
    assert pull_request.head == "repobot-add-file"
    assert pull_request.base == "main"


def test_add_file_without_repo_is_usage_error() -> None:
    github = build_fake_github()

    result = CliRunner().invoke(
        cli, ["add-file", "--license=MIT"], obj=build_test_context(github)
    )

    assert result.exit_code != 0
    assert "No repo name provided." in result.output
    assert github.calls == []


def test_add_file_without_license_is_not_implemented() -> None:
    github = build_fake_github()

    result = CliRunner().invoke(cli, ["add-file", "--repo=test"], obj=build_test_context(github))

    assert result.exit_code == 1
    assert "NotImplemented" in result.output
    assert github.calls == []


def test_add_file_with_unknown_license() -> None:
    github = build_fake_github()

    result = CliRunner().invoke(
        cli, ["add-file", "--repo=test", "--license=GPL"], obj=build_test_context(github)
    )

    assert result.exit_code == 1
    assert "LicenseError: GPL is not a valid SPDX license code." in result.output
    assert github.calls == []


def test_add_file_branch_from_head_and_message() -> None:
    github = build_fake_github()

    result = CliRunner().invoke(
        cli,
        ["add-file", "--repo=test", "--license=MIT", "--branch-from-head", "-m", "add MIT"],
        obj=build_test_context(github),
    )

    assert result.exit_code == 0, result.output
    assert github.create_ref_attempts == [("refs/heads/repobot-add-file", HEAD.sha)]
    assert github.created_commits[0].message == "add MIT"


def test_add_file_uses_configured_branch_name() -> None:
    github = build_fake_github()
    ctx = build_test_context(github, branch_name="bot/license")

    result = CliRunner().invoke(cli, ["add-file", "--repo=test", "--license=MIT"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert github.created_refs[0].ref == "refs/heads/bot/license"
    assert github.created_pull_requests[0].head == "bot/license"


def test_add_file_remote_failure_exits_nonzero() -> None:
    github = build_fake_github(
        failures={"create_pull_request": GitHubApiError(422, "HttpError", "Validation Failed")}
    )

    result = CliRunner().invoke(
        cli, ["add-file", "--repo=test", "--license=MIT"], obj=build_test_context(github)
    )

    assert result.exit_code == 1
    assert "Validation Failed" in result.output


def test_add_file_tree_failure_aborts_run() -> None:
    github = build_fake_github(
        failures={"create_tree": GitHubApiError(500, "HttpError", "Server Error")}
    )

    result = CliRunner().invoke(
        cli, ["add-file", "--repo=test", "--license=MIT"], obj=build_test_context(github)
    )

    assert result.exit_code == 1
    assert "Server Error" in result.output
    assert github.created_commits == []
    assert github.created_refs == []


def test_add_file_ref_conflicts_exhausted() -> None:
    github = build_fake_github(ref_conflicts=10)
    ctx = build_test_context(github, max_ref_retries=1)

    result = CliRunner().invoke(cli, ["add-file", "--repo=test", "--license=MIT"], obj=ctx)

    assert result.exit_code == 1
    assert len(github.create_ref_attempts) == 2
    assert github.created_pull_requests == []


def test_add_file_requires_owner() -> None:
    github = build_fake_github()

    result = CliRunner().invoke(
        cli,
        ["add-file", "--repo=test", "--license=MIT"],
        obj=build_test_context(github, owner=None),
    )

    assert result.exit_code == 2
    assert "No organization or owner configured" in result.output
    assert github.calls == []
