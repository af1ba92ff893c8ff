"""
contrib_graph/ingestion/github_client.py - Async GitHub REST client.

Exposes the two paginated list endpoints the scanners need:

    GET /users/{username}/repos                 list_repositories_for_user()
    GET /repos/{owner}/{repo}/contributors      list_contributors()

Both take per_page/page and return the raw JSON payload of one page. Paging
is the caller's job (see paginator.paginate).

Failure policy:
    - Non-2xx responses raise GitHubAPIError carrying the status code and
      GitHub's message. 404 (unknown user/repo), 401/403 (bad token, rate
      limit) are not retried.
    - Transport failures (DNS, timeout, reset) raise GitHubAPIError with
      status_code=0.
    - 204 No Content (the contributors endpoint on an empty repository)
      returns None.

Reference: https://docs.github.com/en/rest/repos/repos#list-repositories-for-a-user
           https://docs.github.com/en/rest/repos/repos#list-repository-contributors
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from contrib_graph.config import DEFAULT_CONFIG, ContribGraphConfig
from contrib_graph.errors import GitHubAPIError

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubClient:
    """
    Thin async wrapper over httpx.AsyncClient for the GitHub REST API.

    One client is shared by every concurrent scan; httpx pools connections
    across the in-flight requests.

    Args:
        config:    ContribGraphConfig. Uses api_base_url, github_token,
                   user_agent and request_timeout_seconds.
        transport: Optional httpx transport. Tests pass httpx.MockTransport.
    """

    def __init__(
        self,
        config: ContribGraphConfig = DEFAULT_CONFIG,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": config.user_agent,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if config.github_token:
            headers["Authorization"] = f"Bearer {config.github_token}"
        else:
            logger.warning(
                "No GitHub token configured. Unauthenticated rate limit is 60 req/hr."
            )

        self._config = config
        self._http = httpx.AsyncClient(
            base_url=config.api_base_url.rstrip("/"),
            headers=headers,
            timeout=config.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        """
        GET *path* and return the decoded JSON body.

        Returns:
            Parsed JSON (list or dict), or None for 204 No Content.

        Raises:
            GitHubAPIError: On any non-2xx status or transport failure.
        """
        try:
            resp = await self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Network error on %s: %s", path, exc)
            raise GitHubAPIError(0, str(exc) or type(exc).__name__, path) from exc

        if resp.status_code == 204:
            return None

        if resp.status_code >= 400:
            message = _error_message(resp)
            if resp.status_code in (401, 403):
                logger.warning("Rate limited or unauthorized (HTTP %d): %s", resp.status_code, path)
            elif resp.status_code == 404:
                logger.warning("Not found: %s", path)
            else:
                logger.warning("HTTP %d error on %s: %s", resp.status_code, path, message)
            raise GitHubAPIError(resp.status_code, message, str(resp.request.url))

        try:
            return resp.json()
        except ValueError as exc:
            raise GitHubAPIError(resp.status_code, f"Invalid JSON body: {exc}", str(resp.request.url)) from exc

    async def list_repositories_for_user(self, username: str, per_page: int, page: int) -> Any:
        """One page of the public repositories owned by *username* (forks included)."""
        path = f"/users/{quote(username, safe='')}/repos"
        return await self._get(path, {"per_page": per_page, "page": page})

    async def list_contributors(self, owner: str, repo: str, per_page: int, page: int) -> Any:
        """
        One page of the contributors of *owner*/*repo*, ordered by commit count.

        Usually a list. May be None (204, empty repository) or a dict when the
        statistics are unavailable; callers treat anything but a list as the
        end of data.
        """
        path = f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/contributors"
        return await self._get(path, {"per_page": per_page, "page": page})


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason_phrase or str(body)
