"""Production implementation of GitHubApi over the GitHub REST API.

Uses an aiohttp session opened for the duration of an ``async with`` block.
Every request passes through the throttle policy before an error is raised.
"""

from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Any

import aiohttp

from repobot.gateway.github.abc import GitHubApi
from repobot.gateway.github.throttle import ThrottlePolicy, classify_throttle_response
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
from repobot.gateway.time.abc import Time

DEFAULT_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"

# Page size for paginated listings (GitHub maximum)
_PAGE_SIZE = 100


class RealGitHubApi(GitHubApi):
    """GitHubApi backed by aiohttp.

    Usage:
        async with RealGitHubApi(token=token, time=RealTime(), ...) as github:
            await github.list_commits(repo, per_page=3)
    """

    def __init__(
        self,
        *,
        token: str | None,
        time: Time,
        throttle: ThrottlePolicy,
        logger: logging.Logger,
        api_url: str = DEFAULT_API_URL,
        user_agent: str = "repobot",
        timeout: float = 30.0,
    ) -> None:
        self._token = token
        self._time = time
        self._throttle = throttle
        self._logger = logger
        self._api_url = api_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> RealGitHubApi:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": self._user_agent,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._session = aiohttp.ClientSession(
            headers=headers, timeout=aiohttp.ClientTimeout(total=self._timeout)
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    # ============================================================================
    # Transport
    # ============================================================================

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._api_url}{path}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: dict[str, Any] | None = None,
        params: dict[str, str | int] | None = None,
    ) -> tuple[Any, str | None]:
        """Send one logical request, resubmitting it when the throttle policy says so.

        Returns:
            (decoded JSON body or None for 204, URL of the next page or None)

        Raises:
            GitHubApiError: On any error response, or status 0 for network failures
        """
        if self._session is None:
            msg = "RealGitHubApi must be used inside 'async with'"
            raise RuntimeError(msg)

        url = self._url(path)
        retry_count = 0
        while True:
            try:
                async with self._session.request(
                    method, url, json=payload, params=params
                ) as response:
                    if response.status < 400:
                        next_link = response.links.get("next")
                        next_url = str(next_link["url"]) if next_link is not None else None
                        if response.status == 204:
                            return None, next_url
                        try:
                            return await response.json(content_type=None), next_url
                        except ValueError as e:
                            raise GitHubApiError(
                                response.status, "InvalidResponseBody", str(e)
                            ) from e

                    message = await _read_error_message(response)
                    status = response.status
                    signal = classify_throttle_response(
                        status=status,
                        headers=response.headers,
                        message=message,
                        method=method,
                        url=url,
                        retry_count=retry_count,
                        now=self._time.now(),
                    )
            # A total ClientTimeout surfaces as TimeoutError, not ClientError
            except (aiohttp.ClientError, TimeoutError) as e:
                raise GitHubApiError(0, type(e).__name__, str(e) or "request timed out") from e

            if signal is None:
                raise GitHubApiError(status, "HttpError", message)
            decision = self._throttle.decide(signal)
            if not decision.retry:
                raise GitHubApiError(status, "HttpError", message)
            await self._time.sleep(decision.delay)
            retry_count += 1

    async def _paginate(self, path: str, params: dict[str, str | int]) -> list[Any]:
        items: list[Any] = []
        next_url: str | None = path
        next_params: dict[str, str | int] | None = {**params, "per_page": _PAGE_SIZE}
        while next_url is not None:
            page, next_url = await self._request("GET", next_url, params=next_params)
            items.extend(page)
            # The next link already carries the query string
            next_params = None
        self._logger.debug("Fetched %d items from %s", len(items), path)
        return items

    # ============================================================================
    # Git Data API
    # ============================================================================

    async def list_commits(self, repo: RepositoryRef, *, per_page: int) -> list[CommitPointer]:
        data, _ = await self._request(
            "GET", f"/repos/{repo.full_name}/commits", params={"per_page": per_page}
        )
        return [CommitPointer(sha=d["sha"], tree_sha=d["commit"]["tree"]["sha"]) for d in data]

    async def create_blob(self, repo: RepositoryRef, *, content: str, encoding: str) -> BlobHandle:
        data, _ = await self._request(
            "POST",
            f"/repos/{repo.full_name}/git/blobs",
            payload={"content": content, "encoding": encoding},
        )
        return BlobHandle(sha=data["sha"])

    async def create_tree(
        self, repo: RepositoryRef, *, base_tree: str, entries: list[TreeEntry]
    ) -> TreeHandle:
        data, _ = await self._request(
            "POST",
            f"/repos/{repo.full_name}/git/trees",
            payload={
                "base_tree": base_tree,
                "tree": [
                    {"path": e.path, "mode": e.mode, "type": e.type, "sha": e.blob_sha}
                    for e in entries
                ],
            },
        )
        return TreeHandle(sha=data["sha"])

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
        data, _ = await self._request(
            "POST",
            f"/repos/{repo.full_name}/git/commits",
            payload={
                "message": message,
                "tree": tree,
                "parents": parents,
                "author": {"name": author.name, "email": author.email},
                "committer": {"name": committer.name, "email": committer.email},
            },
        )
        return CommitHandle(sha=data["sha"])

    async def create_ref(self, repo: RepositoryRef, *, ref: str, sha: str) -> BranchRef:
        data, _ = await self._request(
            "POST", f"/repos/{repo.full_name}/git/refs", payload={"ref": ref, "sha": sha}
        )
        return BranchRef(ref=data["ref"], sha=data["object"]["sha"], url=data["object"]["url"])

    async def delete_ref(self, repo: RepositoryRef, *, ref: str) -> None:
        await self._request("DELETE", f"/repos/{repo.full_name}/git/refs/{ref}")

    # ============================================================================
    # Repositories and pull requests
    # ============================================================================

    async def get_default_branch(self, repo: RepositoryRef) -> str:
        data, _ = await self._request("GET", f"/repos/{repo.full_name}")
        return data["default_branch"]

    async def create_pull_request(
        self, repo: RepositoryRef, *, title: str, head: str, base: str, body: str
    ) -> PullRequestHandle:
        data, _ = await self._request(
            "POST",
            f"/repos/{repo.full_name}/pulls",
            payload={"title": title, "head": head, "base": base, "body": body},
        )
        return PullRequestHandle(
            number=data["number"],
            url=data["url"],
            html_url=data["html_url"],
            head=data["head"]["ref"],
            base=data["base"]["ref"],
        )

    async def get_license_body(self, license_key: str) -> str:
        data, _ = await self._request("GET", f"/licenses/{license_key}")
        return data["body"]

    # ============================================================================
    # Organization listings
    # ============================================================================

    async def list_org_members(self, org: str, *, filter: str | None = None) -> list[OrgMember]:
        params: dict[str, str | int] = {}
        if filter is not None:
            params["filter"] = filter
        members = await self._paginate(f"/orgs/{org}/members", params)
        return [
            OrgMember(login=m["login"], url=m["url"], html_url=m["html_url"]) for m in members
        ]

    async def list_org_repositories(self, org: str) -> list[OrgRepository]:
        repos = await self._paginate(f"/orgs/{org}/repos", {})
        return [
            OrgRepository(
                name=r["name"],
                full_name=r["full_name"],
                issues_url=r["issues_url"],
                default_branch=r["default_branch"],
                collaborators_url=r["collaborators_url"],
            )
            for r in repos
        ]

    async def list_collaborators(self, repo: RepositoryRef) -> list[Collaborator]:
        collaborators = await self._paginate(f"/repos/{repo.full_name}/collaborators", {})
        return [Collaborator(login=c["login"]) for c in collaborators]


async def _read_error_message(response: aiohttp.ClientResponse) -> str:
    """Extract the "message" field of a GitHub error body, falling back to raw text."""
    text = await response.text()
    if not text:
        return response.reason or ""
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return text
