"""
contrib_graph/tests/conftest.py - Shared pytest fixtures for the contrib_graph suite.

Every test is offline. FakeGitHubClient serves canned repository and
contributor payloads page by page, exactly as the GitHub endpoints do, and
records each call so tests can assert on network activity.

Fixtures:
    fake_client_cls  - The FakeGitHubClient class (for factories).
    payloads         - user_payload() / repo_payload() builders.
    alice_client     - Client for the alice/bob scenario:
                         alice owns R1 (alice, bob) and R2 (alice)
                         bob owns R3 (bob, carol) and fork R4 (carol only)
    scan_service     - UserScanService over alice_client with a fresh cache.
    github_token     - GitHub PAT from GITHUB_TOKEN env var (or None).
"""

import asyncio
import os
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from contrib_graph.config import ContribGraphConfig
from contrib_graph.errors import GitHubAPIError
from contrib_graph.ingestion.scan_service import UserScanService
from contrib_graph.storage.scan_cache import ScanCache


# ── Pytest configuration hooks ────────────────────────────────────────────────

def pytest_configure(config):
    """Register custom markers and add --run-integration CLI option support."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests that call the real GitHub API (deselected by default, "
        "pass --run-integration or -m integration to enable)",
    )


def pytest_addoption(parser):
    """Add --run-integration CLI flag to enable integration tests."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that call the real GitHub API.",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is passed or -m integration is used."""
    markexpr = config.getoption("-m", default="")
    if "integration" in markexpr:
        return

    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="Integration test -- pass --run-integration or -m integration to run"
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ── Payload builders ──────────────────────────────────────────────────────────

def user_payload(login: str, contributions: int = 1, **extra: Any) -> dict:
    payload = {
        "login": login,
        "id": abs(hash(login)) % 100_000,
        "node_id": f"U_{login}",
        "avatar_url": f"https://avatars.githubusercontent.com/{login}",
        "html_url": f"https://github.com/{login}",
        "type": "User",
        "contributions": contributions,
    }
    payload.update(extra)
    return payload


def repo_payload(full_name: str, **extra: Any) -> dict:
    owner, name = full_name.split("/", 1)
    payload = {
        "id": abs(hash(full_name)) % 100_000,
        "node_id": f"R_{full_name}",
        "name": name,
        "full_name": full_name,
        "owner": {"login": owner},
        "description": f"{name} description",
        "html_url": f"https://github.com/{full_name}",
        "fork": False,
    }
    payload.update(extra)
    return payload


# ── Fake client ───────────────────────────────────────────────────────────────

class FakeGitHubClient:
    """
    In-memory stand-in for GitHubClient.

    Args:
        repos:        {username: [repo payload, ...]}
        contributors: {full_name: [user payload, ...] or a non-list payload}
        errors:       {username or full_name: GitHubAPIError to raise}
        delay:        Seconds each call sleeps, to make concurrency observable.

    Unknown usernames raise a 404 GitHubAPIError like the real API.
    """

    def __init__(
        self,
        repos: Optional[dict[str, list[dict]]] = None,
        contributors: Optional[dict[str, Any]] = None,
        errors: Optional[dict[str, Exception]] = None,
        delay: float = 0.0,
    ) -> None:
        self.repos = repos or {}
        self.contributors = contributors or {}
        self.errors = errors or {}
        self.delay = delay
        self.repo_calls: list[tuple[str, int, int]] = []
        self.contributor_calls: list[tuple[str, int, int]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.repo_lists_in_flight = 0
        self.max_repo_lists_in_flight = 0
        # ("repos", username) when a repo listing starts,
        # ("contributors_done", full_name) when a contributor page returns.
        self.events: list[tuple[str, str]] = []
        self.closed = False

    async def _enter(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(self.delay)

    async def list_repositories_for_user(self, username: str, per_page: int, page: int):
        self.repo_calls.append((username, per_page, page))
        self.events.append(("repos", username))
        self.repo_lists_in_flight += 1
        self.max_repo_lists_in_flight = max(self.max_repo_lists_in_flight, self.repo_lists_in_flight)
        await self._enter()
        try:
            if username in self.errors:
                raise self.errors[username]
            if username not in self.repos:
                raise GitHubAPIError(404, "Not Found", f"/users/{username}/repos")
            data = self.repos[username]
            return data[(page - 1) * per_page: page * per_page]
        finally:
            self.in_flight -= 1
            self.repo_lists_in_flight -= 1

    async def list_contributors(self, owner: str, repo: str, per_page: int, page: int):
        full_name = f"{owner}/{repo}"
        self.contributor_calls.append((full_name, per_page, page))
        await self._enter()
        try:
            if full_name in self.errors:
                raise self.errors[full_name]
            data = self.contributors.get(full_name, [])
            if not isinstance(data, list):
                return data
            return data[(page - 1) * per_page: page * per_page]
        finally:
            self.in_flight -= 1
            self.events.append(("contributors_done", full_name))

    @property
    def call_count(self) -> int:
        return len(self.repo_calls) + len(self.contributor_calls)

    async def aclose(self) -> None:
        self.closed = True


def make_alice_client(**kwargs: Any) -> FakeGitHubClient:
    return FakeGitHubClient(
        repos={
            "alice": [repo_payload("alice/R1"), repo_payload("alice/R2")],
            "bob": [repo_payload("bob/R3"), repo_payload("bob/R4", fork=True)],
            "carol": [],
        },
        contributors={
            "alice/R1": [user_payload("alice", 10), user_payload("bob", 3)],
            "alice/R2": [user_payload("alice", 7)],
            "bob/R3": [user_payload("bob", 5), user_payload("carol", 2)],
            "bob/R4": [user_payload("carol", 1)],
        },
        **kwargs,
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def fake_client_cls():
    return FakeGitHubClient


@pytest.fixture
def payloads():
    return SimpleNamespace(user=user_payload, repo=repo_payload)


@pytest.fixture
def alice_client() -> FakeGitHubClient:
    return make_alice_client()


@pytest.fixture
def test_config() -> ContribGraphConfig:
    return ContribGraphConfig(github_token="test-token", default_limit_repositories=50)


@pytest.fixture
def scan_service(alice_client, test_config) -> UserScanService:
    return UserScanService(alice_client, cache=ScanCache(), config=test_config)


@pytest.fixture
def github_token() -> Optional[str]:
    """GitHub PAT from GITHUB_TOKEN env var, or None."""
    return os.environ.get("GITHUB_TOKEN") or None
