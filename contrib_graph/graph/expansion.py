"""
contrib_graph/graph/expansion.py - Expansion controller.

Tracks the ordered list of usernames the view is showing. It starts as
[primary] and grows when the view activates a user node; it never shrinks.

Expanding marks the derived graph stale. The next graph() call rescans every
expanded user concurrently (users already scanned are served from the
ScanCache) and merges the per-user graphs in list order, primary first. The
scan cache itself is never invalidated by an expansion.

GraphQuery holds the state of the most recent rebuild so the view can show
a loading or error state without awaiting the rebuild itself.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from contrib_graph.graph.builder import create_graph
from contrib_graph.graph.merge import merge_graphs
from contrib_graph.graph.model import ContributionGraph, Node, RepoNode, UserNode
from contrib_graph.ingestion.scan_service import UserScanService
from contrib_graph.storage.scan_cache import ScanResult

logger = logging.getLogger(__name__)

QUERY_IDLE = "idle"
QUERY_LOADING = "loading"
QUERY_SUCCESS = "success"
QUERY_ERROR = "error"


@dataclass
class GraphQuery:
    """
    State of the graph query keyed by (primary username, expanded users).

    Fields:
        key:    (primary, tuple(expanded_users)) the state refers to.
        status: 'idle' | 'loading' | 'success' | 'error'
        graph:  Merged graph once status == 'success'.
        error:  Message of the failure once status == 'error'.
    """
    key: tuple[str, tuple[str, ...]]
    status: str = QUERY_IDLE
    graph: Optional[ContributionGraph] = None
    error: Optional[str] = None


class ExpansionController:
    """
    Owns the expanded-users list and the graph derived from it.

    Args:
        primary_username:   The user the view was opened for.
        scan_service:       UserScanService (its cache outlives expansions).
        limit_repositories: Per-user repository limit passed to every scan.
    """

    def __init__(
        self,
        primary_username: str,
        scan_service: UserScanService,
        limit_repositories: int = 0,
    ) -> None:
        if not primary_username:
            raise ValueError("primary_username must be non-empty")
        self.primary_username = primary_username
        self.scan_service = scan_service
        self.limit_repositories = limit_repositories
        self._expanded: list[str] = [primary_username]
        self._graph: Optional[ContributionGraph] = None
        self._scans: list[ScanResult] = []
        self.query = GraphQuery(key=self.key)

    @property
    def expanded_users(self) -> list[str]:
        return list(self._expanded)

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        return (self.primary_username, tuple(self._expanded))

    @property
    def is_stale(self) -> bool:
        return self._graph is None

    @property
    def scans(self) -> list[ScanResult]:
        """Per-user scan results behind the current graph, in expanded order."""
        return list(self._scans)

    def expand(self, login: str) -> bool:
        """
        Append *login* to the expanded users.

        Returns:
            True if the list changed (graph now stale), False if *login* was
            already expanded.
        """
        if not login:
            raise ValueError("login must be non-empty")
        if login in self._expanded:
            logger.debug("%s already expanded; ignoring.", login)
            return False
        self._expanded.append(login)
        self._graph = None
        self.query = GraphQuery(key=self.key)
        logger.info("Expanded %s (%d users).", login, len(self._expanded))
        return True

    def activate(self, node: Node) -> bool:
        """
        Handle a node-click from the view. Only user nodes expand.

        Returns:
            Whether the expanded list changed.
        """
        if isinstance(node, UserNode):
            return self.expand(node.user.login)
        if isinstance(node, RepoNode):
            return False
        raise TypeError(f"Unknown node variant: {type(node).__name__}")

    async def graph(self) -> ContributionGraph:
        """
        Return the merged graph, rebuilding it when stale.

        Raises:
            GitHubAPIError: When any user scan fails. The failure is recorded
                            on self.query and the graph stays stale.
        """
        if self._graph is not None:
            return self._graph

        key = self.key
        users = list(self._expanded)
        self.query = GraphQuery(key=key, status=QUERY_LOADING)
        try:
            scans = await self.scan_service.scan_users(users, self.limit_repositories)
        except Exception as exc:
            # Only record the failure if no expansion superseded this rebuild.
            if self.key == key:
                self.query = GraphQuery(key=key, status=QUERY_ERROR, error=str(exc))
            raise

        merged = merge_graphs(create_graph(s) for s in scans)
        if self.key == key:
            self._scans = scans
            self._graph = merged
            self.query = GraphQuery(key=key, status=QUERY_SUCCESS, graph=merged)
        logger.info(
            "Graph for %s: %d nodes, %d links.",
            ", ".join(users), len(merged.nodes), len(merged.links),
        )
        return merged
