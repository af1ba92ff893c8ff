"""
contrib_graph/api/endpoints.py - FastAPI endpoints consumed by the view layer.

The view asks for a graph keyed by (username, expanded users) and tells the
server when a user node was activated. One ScanCache is shared by every
request for the lifetime of the app, so expanding a session rescans only the
newly expanded user.

Endpoint summary:
    GET  /api/v1/health                        Liveness probe.
    GET  /api/v1/graph/{username}              Stateless query: ?expanded=..&limit=..
    GET  /api/v1/sessions/{username}           Session query state (no rebuild).
    POST /api/v1/sessions/{username}/expand    Activate a user node: {"login": ...}
    GET  /api/v1/sessions/{username}/graph     Session graph, rebuilt when stale.
    GET  /api/v1/cache/stats                   ScanCache counters.

Sessions are keyed by the primary username alone, so every client viewing
the same user shares one expanded list. GET /sessions/{username} only reads;
the first expand or graph request creates the session. Passing ?limit= to the
session graph with a new value rebuilds the session at that limit.

Errors:
    GitHub 404               -> 404 (unknown user or repository)
    Other GitHub failures    -> 502 with the underlying message
    Invalid parameters       -> 422
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from contrib_graph import __version__
from contrib_graph.config import DEFAULT_CONFIG, ContribGraphConfig
from contrib_graph.errors import ContribGraphError, GitHubAPIError
from contrib_graph.graph.builder import graph_summary, graph_to_dict
from contrib_graph.graph.expansion import QUERY_IDLE, ExpansionController
from contrib_graph.graph.model import ContributionGraph
from contrib_graph.ingestion.github_client import GitHubClient
from contrib_graph.ingestion.scan_service import UserScanService
from contrib_graph.storage.scan_cache import ScanCache

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class ExpandRequest(BaseModel):
    """Request body for POST /sessions/{username}/expand."""
    login: str


class ExpandResponse(BaseModel):
    expanded_users: list[str]
    changed: bool


class QueryStateResponse(BaseModel):
    username: str
    expanded_users: list[str]
    status: str
    error: Optional[str] = None
    summary: Optional[dict[str, int]] = None


def _http_error(exc: Exception) -> HTTPException:
    """Map a pipeline exception onto an HTTPException."""
    if isinstance(exc, GitHubAPIError):
        status = 404 if exc.is_not_found else 502
        return HTTPException(status_code=status, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, ContribGraphError):
        return HTTPException(status_code=502, detail=str(exc))
    raise exc


def _graph_response(controller: ExpansionController, graph: ContributionGraph) -> dict[str, Any]:
    return {
        "username": controller.primary_username,
        "expanded_users": controller.expanded_users,
        "summary": graph_summary(graph),
        **graph_to_dict(graph),
    }


def create_app(
    client_factory: Optional[Callable[[ContribGraphConfig], Any]] = None,
    config: ContribGraphConfig = DEFAULT_CONFIG,
) -> FastAPI:
    """
    Create and return the contrib_graph FastAPI application.

    Args:
        client_factory: Callable taking the config and returning a GitHub
                        client. Defaults to GitHubClient. Tests inject a fake.
        config:         ContribGraphConfig shared by every request.

    Returns:
        Configured FastAPI application. The scan cache, client and sessions
        live on app.state.
    """
    factory = client_factory or GitHubClient

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        client = app.state.client
        if client is not None and hasattr(client, "aclose"):
            await client.aclose()

    app = FastAPI(
        title="contrib_graph API",
        version=__version__,
        description=(
            "Contribution graph of a GitHub user's repositories and co-contributors, "
            "expandable one contributor at a time."
        ),
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.cache = ScanCache()
    app.state.client = None
    app.state.sessions = {}

    def _service() -> UserScanService:
        if app.state.client is None:
            app.state.client = factory(config)
        return UserScanService(app.state.client, cache=app.state.cache, config=config)

    def _limit(limit: Optional[int]) -> int:
        return config.default_limit_repositories if limit is None else limit

    def _session(username: str, limit: Optional[int] = None) -> ExpansionController:
        """
        Return the session for *username*, creating it on first use.

        An explicit *limit* that differs from the session's replaces the
        controller. The expanded users carry over and the shared cache serves
        any (user, limit) pair scanned before.
        """
        sessions: dict[str, ExpansionController] = app.state.sessions
        current = sessions.get(username)
        if current is not None and (limit is None or limit == current.limit_repositories):
            return current

        controller = ExpansionController(username, _service(), _limit(limit))
        if current is not None:
            logger.info(
                "Session %s: limit %d -> %d", username, current.limit_repositories, controller.limit_repositories,
            )
            for login in current.expanded_users[1:]:
                controller.expand(login)
        sessions[username] = controller
        return controller

    # ── Routes ────────────────────────────────────────────────────────────────

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["system"])
    async def health() -> dict:
        """Liveness probe; returns service status and version."""
        return {"status": "ok", "version": __version__}

    @app.get("/api/v1/graph/{username}", tags=["graph"])
    async def get_graph(
        username: str,
        expanded: list[str] = Query(default=[]),
        limit: Optional[int] = Query(default=None, ge=0),
    ) -> dict:
        """
        Return the merged graph for *username* plus each ?expanded= user.

        Stateless: the answer depends only on the query key, but scans are
        served from the shared cache.
        """
        try:
            controller = ExpansionController(username, _service(), _limit(limit))
            for login in expanded:
                controller.expand(login)
            graph = await controller.graph()
        except Exception as exc:
            raise _http_error(exc) from exc
        return _graph_response(controller, graph)

    @app.get("/api/v1/sessions/{username}", response_model=QueryStateResponse, tags=["sessions"])
    async def get_session(username: str) -> dict:
        """Return the state of the session's latest graph query without rebuilding."""
        controller = app.state.sessions.get(username)
        if controller is None:
            return {"username": username, "expanded_users": [username], "status": QUERY_IDLE}
        query = controller.query
        return {
            "username": username,
            "expanded_users": controller.expanded_users,
            "status": query.status,
            "error": query.error,
            "summary": graph_summary(query.graph) if query.graph is not None else None,
        }

    @app.post("/api/v1/sessions/{username}/expand", response_model=ExpandResponse, tags=["sessions"])
    async def expand_session(username: str, body: ExpandRequest) -> dict:
        """Activate a user node: append its login to the session's expanded users."""
        controller = _session(username)
        try:
            changed = controller.expand(body.login)
        except ValueError as exc:
            raise _http_error(exc) from exc
        return {"expanded_users": controller.expanded_users, "changed": changed}

    @app.get("/api/v1/sessions/{username}/graph", tags=["sessions"])
    async def get_session_graph(
        username: str,
        limit: Optional[int] = Query(default=None, ge=0),
    ) -> dict:
        """Return the session graph, rebuilding it if an expansion made it stale."""
        controller = _session(username, limit)
        try:
            graph = await controller.graph()
        except Exception as exc:
            raise _http_error(exc) from exc
        return _graph_response(controller, graph)

    @app.get("/api/v1/cache/stats", tags=["system"])
    async def cache_stats() -> dict:
        return app.state.cache.stats()

    return app
