"""Thin operations over a repository's remote object graph.

Reads the branch tip and creates blob, tree and commit objects. Failures are
logged and returned as RemoteError, except tree creation which aborts.
"""

import logging

from repobot.core.logs import log_remote_error
from repobot.core.non_ideal_state import ObjectGraphWriteAborted, RemoteError
from repobot.gateway.github.abc import GitHubApi
from repobot.gateway.github.types import (
    BlobHandle,
    CommitHandle,
    CommitPointer,
    GitHubApiError,
    GitIdentity,
    RepositoryRef,
    TreeEntry,
    TreeHandle,
)

DEFAULT_COMMIT_MESSAGE = "bot user: automated commit"

# Only the newest commit is used
_LATEST_COMMIT_PAGE_SIZE = 3


class ObjectGraphClient:
    """Object-graph operations against one fixed repository."""

    def __init__(
        self,
        github: GitHubApi,
        repo: RepositoryRef,
        *,
        identity: GitIdentity,
        logger: logging.Logger,
    ) -> None:
        self._github = github
        self._repo = repo
        self._identity = identity
        self._logger = logger

    @property
    def repo(self) -> RepositoryRef:
        return self._repo

    async def latest_commit(self) -> CommitPointer | RemoteError:
        """Read the newest commit on the default branch.

        An empty history is reported as a 404 NotFound RemoteError.
        """
        try:
            commits = await self._github.list_commits(
                self._repo, per_page=_LATEST_COMMIT_PAGE_SIZE
            )
        except GitHubApiError as e:
            log_remote_error(self._logger, "error: latestCommit", e)
            return RemoteError.from_api_error("latest-commit", e)

        if not commits:
            error = GitHubApiError(404, "NotFound", f"{self._repo.full_name} has no commits")
            log_remote_error(self._logger, "error: latestCommit", error)
            return RemoteError.from_api_error("latest-commit", error)
        return commits[0]

    async def create_blob(self, content: str) -> BlobHandle | RemoteError:
        try:
            blob = await self._github.create_blob(self._repo, content=content, encoding="utf-8")
        except GitHubApiError as e:
            log_remote_error(self._logger, "error: createBlob", e)
            return RemoteError.from_api_error("create-blob", e)
        self._logger.debug("Created blob with sha %s", blob.sha)
        return blob

    async def create_tree(
        self, path: str, blob_sha: str, *, base: CommitPointer | None = None
    ) -> TreeHandle:
        """Create a single-entry tree layered on the base commit's tree.

        Args:
            path: Repository path of the new file
            blob_sha: Blob holding the file content
            base: Commit whose tree is the base; read fresh when omitted

        Raises:
            ObjectGraphWriteAborted: If the base cannot be read or the tree is rejected
        """
        if base is None:
            latest = await self.latest_commit()
            if isinstance(latest, RemoteError):
                raise ObjectGraphWriteAborted(latest)
            base = latest

        try:
            tree = await self._github.create_tree(
                self._repo,
                base_tree=base.tree_sha,
                entries=[TreeEntry(path=path, blob_sha=blob_sha)],
            )
        except GitHubApiError as e:
            log_remote_error(self._logger, "createTree error", e)
            raise ObjectGraphWriteAborted(RemoteError.from_api_error("create-tree", e)) from e

        self._logger.debug(
            "Created tree with sha %s, filename: %s, blob: %s", tree.sha, path, blob_sha
        )
        return tree

    async def create_commit(
        self,
        tree_sha: str,
        *,
        message: str | None = None,
        parent: CommitPointer | None = None,
    ) -> CommitHandle | RemoteError:
        """Create a commit of tree_sha on top of parent.

        Args:
            tree_sha: Tree the commit points at
            message: Commit message; defaults to a generic bot message
            parent: Parent commit; read fresh when omitted
        """
        if parent is None:
            latest = await self.latest_commit()
            if isinstance(latest, RemoteError):
                return latest
            parent = latest
        self._logger.debug("createCommit from parent commit %s", parent.sha)

        try:
            commit = await self._github.create_commit(
                self._repo,
                message=message or DEFAULT_COMMIT_MESSAGE,
                tree=tree_sha,
                parents=[parent.sha],
                author=self._identity,
                committer=self._identity,
            )
        except GitHubApiError as e:
            log_remote_error(self._logger, "Create Commit error", e)
            return RemoteError.from_api_error("create-commit", e)
        return commit
