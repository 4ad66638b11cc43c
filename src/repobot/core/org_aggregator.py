"""Read-only organization reports.

Each report pages through a listing and projects it client-side. Failures are
logged and produce an empty result; reports never fail their caller.
"""

import asyncio
import logging
from collections.abc import Iterable

from repobot.core.logs import log_remote_error
from repobot.gateway.github.abc import GitHubApi
from repobot.gateway.github.types import GitHubApiError, OrgMember, OrgRepository, RepositoryRef

_TWO_FACTOR_DISABLED = "2fa_disabled"


class OrgAggregator:
    def __init__(self, github: GitHubApi, org: str, *, logger: logging.Logger) -> None:
        self._github = github
        self._org = org
        self._logger = logger

    async def members_missing_2fa(self) -> list[OrgMember]:
        try:
            members = await self._github.list_org_members(self._org, filter=_TWO_FACTOR_DISABLED)
        except GitHubApiError as e:
            log_remote_error(self._logger, "Error: membersMissing2fa", e)
            return []
        self._logger.debug("Found %d without 2fa", len(members))
        return members

    async def org_repositories(self) -> list[OrgRepository]:
        try:
            repos = await self._github.list_org_repositories(self._org)
        except GitHubApiError as e:
            log_remote_error(self._logger, "Error: orgRepositories", e)
            return []
        self._logger.debug("Found %d belonging to this github org", len(repos))
        return repos

    async def org_repositories_collaborators(self) -> dict[str, list[str]]:
        """Map each organization repository name to its collaborator logins.

        Collaborator listings run concurrently. asyncio.gather returns results
        in argument order, so result i always belongs to repository i. A single
        failed listing fails the whole report.
        """
        repos = await self.org_repositories()
        try:
            listings = await asyncio.gather(
                *(
                    self._github.list_collaborators(RepositoryRef(owner=self._org, name=r.name))
                    for r in repos
                )
            )
        except GitHubApiError as e:
            log_remote_error(self._logger, "Error: orgRepositoriesCollaborators", e)
            return {}

        return {
            repo.name: [collaborator.login for collaborator in collaborators]
            for repo, collaborators in zip(repos, listings, strict=True)
        }

    async def repositories_by_member(
        self, logins: Iterable[str] | None = None
    ) -> dict[str, list[str]]:
        """Map each collaborator login to the organization repositories it can access.

        Args:
            logins: Restrict the report to these logins; every login with at
                least one repository is reported when omitted. Requested
                logins with no repositories map to an empty list.
        """
        by_repo = await self.org_repositories_collaborators()
        by_member: dict[str, list[str]] = {}
        if logins is not None:
            for login in logins:
                by_member[login] = []
        for repo_name, collaborators in by_repo.items():
            for login in collaborators:
                if logins is not None and login not in by_member:
                    continue
                by_member.setdefault(login, []).append(repo_name)
        return by_member
