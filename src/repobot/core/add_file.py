"""Open a pull request that adds a file to a repository.

The workflow reads the branch tip once and threads it through every write:

    license body -> blob -> tree (on HEAD's tree) -> commit (parent HEAD)
    -> bot branch ref -> pull request into the default branch

Each step returns its typed error on failure and the run stops there. Objects
already written are not rolled back; re-running starts from the beginning and
relies on the ref reconciler to replace the bot branch.
"""

import logging
from dataclasses import dataclass

from repobot.core.licenses import SpdxLicenseCatalog
from repobot.core.logs import log_remote_error
from repobot.core.non_ideal_state import (
    ConflictExhausted,
    FileKindNotImplemented,
    InvalidLicense,
    MissingArgument,
    RemoteError,
)
from repobot.core.object_graph import ObjectGraphClient
from repobot.core.ref_reconciler import RefReconciler
from repobot.gateway.github.abc import GitHubApi
from repobot.gateway.github.types import (
    GitHubApiError,
    GitIdentity,
    PullRequestHandle,
    RepositoryRef,
)

LICENSE_PATH = "LICENSE"

DEFAULT_PR_TITLE = "🐦 Adding a file to this repo 🐦"
DEFAULT_PR_BODY = (
    "# summary\n"
    "hello :wave:. I am opening this PR to add a file that's good to have in a repo. "
    "Please feel free to ignore this.\n"
    "I'm just a script so if I am broken please open an issue on the repobot project."
)

USAGE_HINT = "Usage:\n\trepobot add-file --repo=my-repo --license=MIT"


@dataclass(frozen=True)
class AddFileRequest:
    repo: str | None
    license_id: str | None


@dataclass(frozen=True)
class WorkflowSettings:
    """Per-process settings for the mutation workflow."""

    author: GitIdentity
    branch_name: str
    max_ref_retries: int
    # When set, the bot branch points at the HEAD read before committing
    # instead of at the new commit.
    branch_from_head: bool = False
    commit_message: str | None = None
    pr_title: str = DEFAULT_PR_TITLE
    pr_body: str = DEFAULT_PR_BODY


AddFileResult = (
    PullRequestHandle
    | MissingArgument
    | FileKindNotImplemented
    | InvalidLicense
    | RemoteError
    | ConflictExhausted
)


def validate_request(request: AddFileRequest) -> MissingArgument | FileKindNotImplemented | None:
    """Check the request inputs without touching the network."""
    if not request.repo:
        return MissingArgument(message=f"No repo name provided.\n{USAGE_HINT}")
    if request.license_id is None:
        return FileKindNotImplemented(
            message="NotImplemented: only license files can be added (pass --license)"
        )
    return None


class MutationWorkflow:
    def __init__(
        self,
        github: GitHubApi,
        *,
        owner: str,
        licenses: SpdxLicenseCatalog,
        settings: WorkflowSettings,
        logger: logging.Logger,
    ) -> None:
        self._github = github
        self._owner = owner
        self._licenses = licenses
        self._settings = settings
        self._logger = logger

    async def add_file(self, request: AddFileRequest) -> AddFileResult:
        """Validate the request and dispatch to the matching file workflow.

        Returns:
            The opened pull request, or the first error encountered

        Raises:
            ObjectGraphWriteAborted: If tree creation fails
        """
        invalid = validate_request(request)
        if invalid is not None:
            return invalid
        assert request.repo is not None and request.license_id is not None
        return await self.add_license(request.repo, request.license_id)

    async def add_license(
        self, repo_name: str, license_id: str
    ) -> PullRequestHandle | InvalidLicense | RemoteError | ConflictExhausted:
        """Add the LICENSE file for an SPDX license id to repo_name.

        Unknown license ids fail before any remote call is made.

        Raises:
            ObjectGraphWriteAborted: If tree creation fails
        """
        if not self._licenses.is_valid(license_id):
            invalid = InvalidLicense(license_id=license_id)
            self._logger.error(
                "error: addLicense; name: licenseError, status: 400, msg: %s", invalid.message
            )
            return invalid

        repo = RepositoryRef(owner=self._owner, name=repo_name)
        objects = ObjectGraphClient(
            self._github, repo, identity=self._settings.author, logger=self._logger
        )
        reconciler = RefReconciler(
            self._github,
            objects,
            branch_name=self._settings.branch_name,
            max_retries=self._settings.max_ref_retries,
            logger=self._logger,
        )

        try:
            body = await self._github.get_license_body(license_id.lower())
        except GitHubApiError as e:
            log_remote_error(self._logger, "error: getLicense", e)
            return RemoteError.from_api_error("get-license", e)

        head = await objects.latest_commit()
        if isinstance(head, RemoteError):
            return head

        blob = await objects.create_blob(body)
        if isinstance(blob, RemoteError):
            return blob

        tree = await objects.create_tree(LICENSE_PATH, blob.sha, base=head)

        commit = await objects.create_commit(
            tree.sha, message=self._settings.commit_message, parent=head
        )
        if isinstance(commit, RemoteError):
            return commit

        ref_sha = head.sha if self._settings.branch_from_head else commit.sha
        branch_ref = await reconciler.create_ref(ref_sha)
        if isinstance(branch_ref, (RemoteError, ConflictExhausted)):
            return branch_ref

        return await self._open_pull_request(repo, branch_ref.branch_name)

    async def _open_pull_request(
        self, repo: RepositoryRef, head_branch: str
    ) -> PullRequestHandle | RemoteError:
        try:
            base = await self._github.get_default_branch(repo)
            pull_request = await self._github.create_pull_request(
                repo,
                title=self._settings.pr_title,
                head=head_branch,
                base=base,
                body=self._settings.pr_body,
            )
        except GitHubApiError as e:
            log_remote_error(self._logger, "error: createPullRequest", e)
            return RemoteError.from_api_error("create-pull-request", e)

        self._logger.info("Opened pull request %s", pull_request.html_url)
        return pull_request
