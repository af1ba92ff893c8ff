"""
contrib_graph/ingestion/scan_service.py - Cached per-user scan.

scan_user() answers "which repositories did this user actually contribute
to, and who else contributed there?":

    1. Cache lookup on (username, limit_repositories). A hit returns without
       touching the network.
    2. List the user's repositories; keep the first N in API order when
       limit_repositories > 0 (0 means unlimited).
    3. Fetch every repository's contributors concurrently, one join point.
    4. Keep repositories whose contributor list includes the user's login.
       Forks without commits and repositories the user only owns drop out.
    5. Store the filtered result under the same key and return it.

Any single contributor fetch failing fails the whole scan. There is no
partial-result policy.
"""

import asyncio
import logging
import time
from typing import Any, Iterable, Optional

from contrib_graph.config import DEFAULT_CONFIG, ContribGraphConfig
from contrib_graph.ingestion.scanners import list_all_contributors, list_all_repos
from contrib_graph.models import Repository
from contrib_graph.storage.scan_cache import ScanCache, ScanResult

logger = logging.getLogger(__name__)


class UserScanService:
    """
    Orchestrates the repository and contributor scanners for one user at a time.

    Args:
        client: GitHubClient (or any object with the same two list methods).
        cache:  ScanCache shared for the lifetime of the process. A fresh one
                is created when omitted.
        config: ContribGraphConfig.
    """

    def __init__(
        self,
        client: Any,
        cache: Optional[ScanCache] = None,
        config: ContribGraphConfig = DEFAULT_CONFIG,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else ScanCache()
        self.config = config

    async def scan_user(self, username: str, limit_repositories: int = 0) -> ScanResult:
        """
        Scan *username* and return the repositories they contributed to.

        Args:
            username:           GitHub login. Matched case-sensitively against
                                contributor logins.
            limit_repositories: Consider only the first N repositories.
                                0 = all.

        Returns:
            Repositories (API order) annotated with their full contributor
            lists, filtered to those where *username* is a contributor.

        Raises:
            ValueError:     If limit_repositories < 0.
            GitHubAPIError: Propagated from any fetch.
        """
        if limit_repositories < 0:
            raise ValueError(f"limit_repositories must be >= 0, got {limit_repositories}")

        cached = self.cache.get(username, limit_repositories)
        if cached is not None:
            return cached

        t0 = time.monotonic()
        logger.info("Scanning %s (limit=%s)", username, limit_repositories or "none")

        repos = await list_all_repos(self.client, username, self.config)
        if limit_repositories > 0:
            repos = repos[:limit_repositories]

        annotated = await asyncio.gather(*(self._with_contributors(r) for r in repos))
        result = [r for r in annotated if r.has_contributor(username)]

        self.cache.set(username, limit_repositories, result)
        logger.info(
            "Scanned %s: %d/%d repositories with contributions (%.1fs)",
            username, len(result), len(repos), time.monotonic() - t0,
        )
        return list(result)

    async def scan_users(
        self,
        usernames: Iterable[str],
        limit_repositories: int = 0,
    ) -> list[ScanResult]:
        """Scan several users concurrently. Results are in input order."""
        return list(
            await asyncio.gather(*(self.scan_user(u, limit_repositories) for u in usernames))
        )

    async def _with_contributors(self, repo: Repository) -> Repository:
        contributors = await list_all_contributors(self.client, repo.full_name, self.config)
        return repo.with_contributors(contributors)
