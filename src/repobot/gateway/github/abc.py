"""Abstract base class for the GitHub REST operations repobot needs.

Covers the Git Data API (commits, blobs, trees, refs), pull requests,
license bodies and the organization listings used for reports.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from repobot.gateway.github.types import (
    BlobHandle,
    BranchRef,
    Collaborator,
    CommitHandle,
    CommitPointer,
    GitIdentity,
    OrgMember,
    OrgRepository,
    PullRequestHandle,
    RepositoryRef,
    TreeEntry,
    TreeHandle,
)


class GitHubApi(ABC):
    """Abstract interface for GitHub REST operations.

    All implementations (real and fake) must implement this interface.
    Every operation raises GitHubApiError on failure. Implementations are
    async context managers; the real one owns its HTTP session for the
    duration of the block.
    """

    async def __aenter__(self) -> GitHubApi:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        return None

    # ============================================================================
    # Git Data API
    # ============================================================================

    @abstractmethod
    async def list_commits(self, repo: RepositoryRef, *, per_page: int) -> list[CommitPointer]:
        """List the most recent commits on the default branch, newest first.

        Args:
            repo: Target repository
            per_page: Page size; only the first page is fetched

        Returns:
            CommitPointer per commit (sha and tree sha)
        """
        ...

    @abstractmethod
    async def create_blob(self, repo: RepositoryRef, *, content: str, encoding: str) -> BlobHandle:
        """Upload content as a new blob.

        Args:
            repo: Target repository
            content: Blob content
            encoding: "utf-8" or "base64"
        """
        ...

    @abstractmethod
    async def create_tree(
        self, repo: RepositoryRef, *, base_tree: str, entries: list[TreeEntry]
    ) -> TreeHandle:
        """Create a tree layering entries on top of base_tree.

        Args:
            repo: Target repository
            base_tree: Sha of the tree the new entries are layered on
            entries: Paths to add or replace
        """
        ...

    @abstractmethod
    async def create_commit(
        self,
        repo: RepositoryRef,
        *,
        message: str,
        tree: str,
        parents: list[str],
        author: GitIdentity,
        committer: GitIdentity,
    ) -> CommitHandle:
        """Create a commit object.

        Args:
            repo: Target repository
            message: Commit message
            tree: Sha of the commit's tree
            parents: Parent commit shas
            author: Author identity
            committer: Committer identity
        """
        ...

    @abstractmethod
    async def create_ref(self, repo: RepositoryRef, *, ref: str, sha: str) -> BranchRef:
        """Create a ref.

        Args:
            repo: Target repository
            ref: Fully qualified ref name (e.g. "refs/heads/my-branch")
            sha: Commit the ref points at

        Raises:
            GitHubApiError: status 422 when the ref already exists
        """
        ...

    @abstractmethod
    async def delete_ref(self, repo: RepositoryRef, *, ref: str) -> None:
        """Delete a ref.

        Args:
            repo: Target repository
            ref: Ref name without the "refs/" prefix (e.g. "heads/my-branch")
        """
        ...

    # ============================================================================
    # Repositories and pull requests
    # ============================================================================

    @abstractmethod
    async def get_default_branch(self, repo: RepositoryRef) -> str:
        """Return the repository's default branch name."""
        ...

    @abstractmethod
    async def create_pull_request(
        self, repo: RepositoryRef, *, title: str, head: str, base: str, body: str
    ) -> PullRequestHandle:
        """Open a pull request from head into base.

        Args:
            repo: Target repository
            title: PR title
            head: Source branch name
            base: Target branch name
            body: PR body (markdown)
        """
        ...

    @abstractmethod
    async def get_license_body(self, license_key: str) -> str:
        """Return the full license text for a license key (e.g. "mit")."""
        ...

    # ============================================================================
    # Organization listings (all pages)
    # ============================================================================

    @abstractmethod
    async def list_org_members(self, org: str, *, filter: str | None = None) -> list[OrgMember]:
        """List organization members across all pages.

        Args:
            org: Organization login
            filter: Optional member filter (e.g. "2fa_disabled")
        """
        ...

    @abstractmethod
    async def list_org_repositories(self, org: str) -> list[OrgRepository]:
        """List organization repositories across all pages."""
        ...

    @abstractmethod
    async def list_collaborators(self, repo: RepositoryRef) -> list[Collaborator]:
        """List repository collaborators across all pages."""
        ...
