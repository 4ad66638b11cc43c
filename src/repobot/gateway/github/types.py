"""Type definitions for GitHub Git Data API operations."""

from dataclasses import dataclass

BRANCH_REF_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class RepositoryRef:
    """A remote repository identified by owner and name."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class CommitPointer:
    """Tip of a branch and the tree it points to."""

    sha: str
    tree_sha: str


@dataclass(frozen=True)
class BlobHandle:
    sha: str


@dataclass(frozen=True)
class TreeHandle:
    sha: str


@dataclass(frozen=True)
class CommitHandle:
    sha: str


@dataclass(frozen=True)
class TreeEntry:
    """A single path in a tree layered on a base tree."""

    path: str
    blob_sha: str
    mode: str = "100644"
    type: str = "blob"


@dataclass(frozen=True)
class GitIdentity:
    """Author/committer identity recorded on commits."""

    name: str
    email: str


@dataclass(frozen=True)
class BranchRef:
    """A branch ref as returned by the create-ref endpoint."""

    ref: str  # Fully qualified, e.g. "refs/heads/repobot-add-file"
    sha: str
    url: str

    @property
    def branch_name(self) -> str:
        if self.ref.startswith(BRANCH_REF_PREFIX):
            return self.ref[len(BRANCH_REF_PREFIX) :]
        return self.ref


@dataclass(frozen=True)
class PullRequestHandle:
    """A pull request opened against a repository."""

    number: int
    url: str
    html_url: str
    head: str
    base: str


@dataclass(frozen=True)
class OrgMember:
    login: str
    url: str
    html_url: str


@dataclass(frozen=True)
class OrgRepository:
    name: str
    full_name: str
    issues_url: str
    default_branch: str
    collaborators_url: str


@dataclass(frozen=True)
class Collaborator:
    login: str


class GitHubApiError(Exception):
    """A failed GitHub API request.

    Network failures that never produced a response carry status 0.
    """

    def __init__(self, status: int, name: str, message: str) -> None:
        super().__init__(f"{name} ({status}): {message}")
        self.status = status
        self.name = name
        self.message = message
