"""Fake GitHubApi for testing."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from repobot.gateway.github.abc import GitHubApi
from repobot.gateway.github.types import (
    BlobHandle,
    BranchRef,
    Collaborator,
    CommitHandle,
    CommitPointer,
    GitHubApiError,
    GitIdentity,
    OrgMember,
    OrgRepository,
    PullRequestHandle,
    RepositoryRef,
    TreeEntry,
    TreeHandle,
)


@dataclass(frozen=True)
class CreatedTree:
    sha: str
    base_tree: str
    entries: tuple[TreeEntry, ...]


@dataclass(frozen=True)
class CreatedCommit:
    sha: str
    message: str
    tree: str
    parents: tuple[str, ...]
    author: GitIdentity
    committer: GitIdentity


@dataclass(frozen=True)
class CreatedPullRequest:
    title: str
    head: str
    base: str
    body: str


class FakeGitHubApi(GitHubApi):
    """In-memory fake implementation of GitHubApi.

    This fake accepts pre-configured state in its constructor and tracks
    mutations for test assertions.

    Constructor Injection:
    ---------------------
    - commits: Mapping of repo full name -> commits, newest first
    - default_branches: Mapping of repo full name -> default branch (default "main")
    - existing_refs: Mapping of repo full name -> set of refs that already exist
    - ref_conflicts: Number of create_ref calls answered with 422 regardless of state
    - licenses: Mapping of lowercase license key -> body
    - org_members / org_repositories: Mapping of org -> listing
    - collaborators: Mapping of repo full name -> collaborators
    - collaborator_delays: Mapping of repo name -> seconds to wait before answering,
      used to force out-of-order completion
    - failures: Mapping of operation name -> GitHubApiError raised by that operation

    Mutation Tracking:
    -----------------
    - calls: Operation names in call order
    - created_blobs, created_trees, created_commits, created_refs,
      deleted_refs, created_pull_requests
    """

    def __init__(
        self,
        *,
        commits: dict[str, list[CommitPointer]] | None = None,
        default_branches: dict[str, str] | None = None,
        existing_refs: dict[str, set[str]] | None = None,
        ref_conflicts: int = 0,
        licenses: dict[str, str] | None = None,
        org_members: dict[str, list[OrgMember]] | None = None,
        org_repositories: dict[str, list[OrgRepository]] | None = None,
        collaborators: dict[str, list[Collaborator]] | None = None,
        collaborator_delays: dict[str, float] | None = None,
        failures: dict[str, GitHubApiError] | None = None,
    ) -> None:
        self._commits = commits or {}
        self._default_branches = default_branches or {}
        self._refs = {name: set(refs) for name, refs in (existing_refs or {}).items()}
        self._ref_conflicts = ref_conflicts
        self._licenses = licenses or {}
        self._org_members = org_members or {}
        self._org_repositories = org_repositories or {}
        self._collaborators = collaborators or {}
        self._collaborator_delays = collaborator_delays or {}
        self._failures = failures or {}

        self._next_id = 0
        self._calls: list[str] = []
        self._created_blobs: list[str] = []
        self._created_trees: list[CreatedTree] = []
        self._created_commits: list[CreatedCommit] = []
        self._created_refs: list[BranchRef] = []
        self._create_ref_attempts: list[tuple[str, str]] = []
        self._deleted_refs: list[str] = []
        self._created_pull_requests: list[CreatedPullRequest] = []

    def _record(self, operation: str) -> None:
        self._calls.append(operation)
        failure = self._failures.get(operation)
        if failure is not None:
            raise failure

    def _new_sha(self, kind: str) -> str:
        self._next_id += 1
        return f"{kind}-sha-{self._next_id}"

    # ============================================================================
    # Git Data API
    # ============================================================================

    async def list_commits(self, repo: RepositoryRef, *, per_page: int) -> list[CommitPointer]:
        self._record("list_commits")
        return list(self._commits.get(repo.full_name, []))[:per_page]

    async def create_blob(self, repo: RepositoryRef, *, content: str, encoding: str) -> BlobHandle:
        self._record("create_blob")
        self._created_blobs.append(content)
        return BlobHandle(sha=self._new_sha("blob"))

    async def create_tree(
        self, repo: RepositoryRef, *, base_tree: str, entries: list[TreeEntry]
    ) -> TreeHandle:
        self._record("create_tree")
        sha = self._new_sha("tree")
        self._created_trees.append(
            CreatedTree(sha=sha, base_tree=base_tree, entries=tuple(entries))
        )
        return TreeHandle(sha=sha)

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
        self._record("create_commit")
        sha = self._new_sha("commit")
        self._created_commits.append(
            CreatedCommit(
                sha=sha,
                message=message,
                tree=tree,
                parents=tuple(parents),
                author=author,
                committer=committer,
            )
        )
        return CommitHandle(sha=sha)

    async def create_ref(self, repo: RepositoryRef, *, ref: str, sha: str) -> BranchRef:
        self._record("create_ref")
        self._create_ref_attempts.append((ref, sha))
        refs = self._refs.setdefault(repo.full_name, set())
        if self._ref_conflicts > 0:
            self._ref_conflicts -= 1
            raise GitHubApiError(422, "HttpError", "Reference already exists")
        if ref in refs:
            raise GitHubApiError(422, "HttpError", "Reference already exists")
        refs.add(ref)
        branch_ref = BranchRef(
            ref=ref,
            sha=sha,
            url=f"https://api.github.com/repos/{repo.full_name}/git/commits/{sha}",
        )
        self._created_refs.append(branch_ref)
        return branch_ref

    async def delete_ref(self, repo: RepositoryRef, *, ref: str) -> None:
        self._record("delete_ref")
        self._deleted_refs.append(ref)
        self._refs.setdefault(repo.full_name, set()).discard(f"refs/{ref}")

    # ============================================================================
    # Repositories and pull requests
    # ============================================================================

    async def get_default_branch(self, repo: RepositoryRef) -> str:
        self._record("get_default_branch")
        return self._default_branches.get(repo.full_name, "main")

    async def create_pull_request(
        self, repo: RepositoryRef, *, title: str, head: str, base: str, body: str
    ) -> PullRequestHandle:
        self._record("create_pull_request")
        self._created_pull_requests.append(
            CreatedPullRequest(title=title, head=head, base=base, body=body)
        )
        number = len(self._created_pull_requests)
        return PullRequestHandle(
            number=number,
            url=f"https://api.github.com/repos/{repo.full_name}/pulls/{number}",
            html_url=f"https://github.com/{repo.full_name}/pull/{number}",
            head=head,
            base=base,
        )

    async def get_license_body(self, license_key: str) -> str:
        self._record("get_license_body")
        body = self._licenses.get(license_key)
        if body is None:
            raise GitHubApiError(404, "HttpError", "Not Found")
        return body

    # ============================================================================
    # Organization listings
    # ============================================================================

    async def list_org_members(self, org: str, *, filter: str | None = None) -> list[OrgMember]:
        self._record("list_org_members")
        return list(self._org_members.get(org, []))

    async def list_org_repositories(self, org: str) -> list[OrgRepository]:
        self._record("list_org_repositories")
        return list(self._org_repositories.get(org, []))

    async def list_collaborators(self, repo: RepositoryRef) -> list[Collaborator]:
        self._record("list_collaborators")
        delay = self._collaborator_delays.get(repo.name)
        if delay is not None:
            await asyncio.sleep(delay)
        return list(self._collaborators.get(repo.full_name, []))

    # ============================================================================
    # Mutation Tracking Properties
    # ============================================================================

    @property
    def calls(self) -> list[str]:
        """Operation names in the order they were called."""
        return list(self._calls)

    @property
    def created_blobs(self) -> list[str]:
        """Contents of created blobs."""
        return list(self._created_blobs)

    @property
    def created_trees(self) -> list[CreatedTree]:
        return list(self._created_trees)

    @property
    def created_commits(self) -> list[CreatedCommit]:
        return list(self._created_commits)

    @property
    def created_refs(self) -> list[BranchRef]:
        """Refs that were successfully created."""
        return list(self._created_refs)

    @property
    def create_ref_attempts(self) -> list[tuple[str, str]]:
        """(ref, sha) for every create_ref call, including rejected ones."""
        return list(self._create_ref_attempts)

    @property
    def deleted_refs(self) -> list[str]:
        return list(self._deleted_refs)

    @property
    def created_pull_requests(self) -> list[CreatedPullRequest]:
        return list(self._created_pull_requests)
