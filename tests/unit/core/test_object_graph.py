"""Tests for ObjectGraphClient over FakeGitHubApi."""

import pytest

from repobot.core.non_ideal_state import ObjectGraphWriteAborted, RemoteError
from repobot.core.object_graph import DEFAULT_COMMIT_MESSAGE, ObjectGraphClient
from repobot.gateway.github.fake import FakeGitHubApi
from repobot.gateway.github.types import CommitPointer, GitHubApiError
from tests.test_utils.context_builders import (
    BOT,
    HEAD,
    TEST_REPO,
    build_fake_github,
    build_test_logger,
)


def _client(github: FakeGitHubApi) -> ObjectGraphClient:
    return ObjectGraphClient(github, TEST_REPO, identity=BOT, logger=build_test_logger())


@pytest.mark.asyncio
async def test_latest_commit_returns_newest_entry() -> None:
    older = CommitPointer(sha="older", tree_sha="older-tree")
    github = build_fake_github(commits={TEST_REPO.full_name: [HEAD, older]})

    latest = await _client(github).latest_commit()

    assert latest == HEAD


@pytest.mark.asyncio
async def test_latest_commit_on_empty_history_is_not_found() -> None:
    github = build_fake_github(commits={TEST_REPO.full_name: []})

    latest = await _client(github).latest_commit()

    assert isinstance(latest, RemoteError)
    assert latest.status == 404
    assert latest.name == "NotFound"


@pytest.mark.asyncio
async def test_latest_commit_failure_is_returned_not_raised() -> None:
    github = build_fake_github(
        failures={"list_commits": GitHubApiError(401, "HttpError", "Bad credentials")}
    )

    latest = await _client(github).latest_commit()

    assert isinstance(latest, RemoteError)
    assert latest.status == 401
    assert latest.error_type == "remote-error"


@pytest.mark.asyncio
async def test_create_blob_uploads_content() -> None:
    github = build_fake_github()

    blob = await _client(github).create_blob("license text")

    assert not isinstance(blob, RemoteError)
    assert github.created_blobs == ["license text"]


@pytest.mark.asyncio
async def test_create_tree_reads_head_when_no_base_given() -> None:
    github = build_fake_github()

    tree = await _client(github).create_tree("LICENSE", "blob-sha")

    assert github.calls == ["list_commits", "create_tree"]
    created = github.created_trees[0]
    assert created.sha == tree.sha
    assert created.base_tree == HEAD.tree_sha
    assert [(e.path, e.blob_sha, e.mode) for e in created.entries] == [
        ("LICENSE", "blob-sha", "100644")
    ]


@pytest.mark.asyncio
async def test_create_tree_failure_aborts() -> None:
    github = build_fake_github(
        failures={"create_tree": GitHubApiError(422, "HttpError", "Invalid tree info")}
    )

    with pytest.raises(ObjectGraphWriteAborted) as exc_info:
        await _client(github).create_tree("LICENSE", "blob-sha", base=HEAD)

    assert exc_info.value.error.operation == "create-tree"


@pytest.mark.asyncio
async def test_create_tree_without_readable_head_aborts() -> None:
    github = build_fake_github(commits={TEST_REPO.full_name: []})

    with pytest.raises(ObjectGraphWriteAborted):
        await _client(github).create_tree("LICENSE", "blob-sha")

    assert "create_tree" not in github.calls


@pytest.mark.asyncio
async def test_create_commit_uses_fresh_head_and_bot_identity() -> None:
    github = build_fake_github()

    commit = await _client(github).create_commit("tree-sha")

    assert not isinstance(commit, RemoteError)
    assert github.calls == ["list_commits", "create_commit"]
    created = github.created_commits[0]
    assert created.parents == (HEAD.sha,)
    assert created.tree == "tree-sha"
    assert created.message == DEFAULT_COMMIT_MESSAGE
    assert created.author == BOT
    assert created.committer == BOT


@pytest.mark.asyncio
async def test_create_commit_with_explicit_parent_skips_head_read() -> None:
    github = build_fake_github()
    parent = CommitPointer(sha="explicit", tree_sha="explicit-tree")

    await _client(github).create_commit("tree-sha", message="Add LICENSE", parent=parent)

    assert github.calls == ["create_commit"]
    assert github.created_commits[0].parents == ("explicit",)
    assert github.created_commits[0].message == "Add LICENSE"


@pytest.mark.asyncio
async def test_create_commit_failure_is_returned() -> None:
    github = build_fake_github(
        failures={"create_commit": GitHubApiError(500, "HttpError", "Server Error")}
    )

    commit = await _client(github).create_commit("tree-sha", parent=HEAD)

    assert isinstance(commit, RemoteError)
    assert commit.operation == "create-commit"
