"""Create the bot's branch ref, recovering from "ref already exists" conflicts.

All runs share one well-known branch name per repository, so a conflict means
an earlier or concurrent run left the ref behind. The reconciler deletes it and
tries again with the same arguments, a bounded number of times.
"""

import logging

from repobot.core.logs import log_remote_error
from repobot.core.non_ideal_state import ConflictExhausted, RemoteError
from repobot.core.object_graph import ObjectGraphClient
from repobot.gateway.github.abc import GitHubApi
from repobot.gateway.github.types import BRANCH_REF_PREFIX, BranchRef, GitHubApiError

# Status GitHub returns when creating a ref that already exists
_REF_EXISTS_STATUS = 422


class RefReconciler:
    def __init__(
        self,
        github: GitHubApi,
        objects: ObjectGraphClient,
        *,
        branch_name: str,
        max_retries: int,
        logger: logging.Logger,
    ) -> None:
        self._github = github
        self._objects = objects
        self._branch_name = branch_name
        self._max_retries = max_retries
        self._logger = logger

    @property
    def ref(self) -> str:
        return f"{BRANCH_REF_PREFIX}{self._branch_name}"

    async def create_ref(
        self, branch_sha: str | None = None
    ) -> BranchRef | ConflictExhausted | RemoteError:
        """Point the bot branch at branch_sha, or at current HEAD when omitted.

        A 422 triggers delete-then-retry up to max_retries times.
        """
        repo = self._objects.repo
        sha = branch_sha
        if sha is None:
            latest = await self._objects.latest_commit()
            if isinstance(latest, RemoteError):
                return latest
            sha = latest.sha

        attempts = self._max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                branch_ref = await self._github.create_ref(repo, ref=self.ref, sha=sha)
            except GitHubApiError as e:
                if e.status != _REF_EXISTS_STATUS:
                    log_remote_error(self._logger, "error: createRef", e)
                    return RemoteError.from_api_error("create-ref", e)
                if attempt == attempts:
                    break
                self._logger.warning(
                    "Create Ref error; status: %s, type: %s, trying again...", e.status, e.name
                )
                deleted = await self._delete_ref()
                if isinstance(deleted, RemoteError):
                    return deleted
                continue

            self._logger.info("success: createRef, ref_url: %s", branch_ref.url)
            return branch_ref

        self._logger.error(
            "error: createRef; %s still exists after %d attempts", self.ref, attempts
        )
        return ConflictExhausted(ref=self.ref, attempts=attempts)

    async def _delete_ref(self) -> None | RemoteError:
        try:
            await self._github.delete_ref(self._objects.repo, ref=f"heads/{self._branch_name}")
        except GitHubApiError as e:
            log_remote_error(self._logger, "error: deleteRef", e)
            return RemoteError.from_api_error("delete-ref", e)
        return None
