"""
Unit tests for contrib_graph.ingestion.github_client.

All tests are fully offline: requests are answered by httpx.MockTransport.
Tests cover request shape (path, per_page/page, headers), 204 handling, and
error propagation as GitHubAPIError.
"""

import httpx
import pytest

from contrib_graph.config import ContribGraphConfig
from contrib_graph.errors import GitHubAPIError
from contrib_graph.ingestion.github_client import GITHUB_API_VERSION, GitHubClient
from contrib_graph.ingestion.scanners import list_all_contributors


CONFIG = ContribGraphConfig(github_token="ghp_test", api_base_url="https://api.example.test")


def make_client(handler, config: ContribGraphConfig = CONFIG) -> GitHubClient:
    return GitHubClient(config, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_repositories_request_shape():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"node_id": "R_1", "full_name": "alice/one"}])

    async with make_client(handler) as client:
        data = await client.list_repositories_for_user("alice", 100, 2)

    assert data == [{"node_id": "R_1", "full_name": "alice/one"}]
    request = seen[0]
    assert request.url.host == "api.example.test"
    assert request.url.path == "/users/alice/repos"
    assert request.url.params["per_page"] == "100"
    assert request.url.params["page"] == "2"
    assert request.headers["Authorization"] == "Bearer ghp_test"
    assert request.headers["Accept"] == "application/vnd.github+json"
    assert request.headers["X-GitHub-Api-Version"] == GITHUB_API_VERSION
    assert request.headers["User-Agent"] == CONFIG.user_agent


@pytest.mark.asyncio
async def test_no_token_sends_no_authorization_header():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[])

    config = ContribGraphConfig(api_base_url="https://api.example.test")
    async with make_client(handler, config) as client:
        await client.list_repositories_for_user("alice", 100, 1)

    assert "Authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_list_contributors_path():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[])

    async with make_client(handler) as client:
        await client.list_contributors("octo", "hello-world", 50, 1)

    assert seen[0].url.path == "/repos/octo/hello-world/contributors"
    assert seen[0].url.params["per_page"] == "50"


@pytest.mark.asyncio
async def test_contributors_204_returns_none():
    async with make_client(lambda request: httpx.Response(204)) as client:
        assert await client.list_contributors("o", "empty", 100, 1) is None


@pytest.mark.asyncio
async def test_contributors_scan_over_http_pages_and_stops_on_204():
    def handler(request):
        page = int(request.url.params["page"])
        if page == 1:
            return httpx.Response(200, json=[
                {"login": "a", "node_id": "U_a", "contributions": 3},
                {"login": "b", "node_id": "U_b", "contributions": 1},
            ])
        return httpx.Response(204)

    config = ContribGraphConfig(github_token="t", api_base_url="https://api.example.test", page_size=2)
    async with make_client(handler, config) as client:
        users = await list_all_contributors(client, "o/r", config)

    assert [u.login for u in users] == ["a", "b"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403, 404, 500, 502])
async def test_error_status_raises_with_github_message(status):
    def handler(request):
        return httpx.Response(status, json={"message": "API rate limit exceeded"})

    async with make_client(handler) as client:
        with pytest.raises(GitHubAPIError) as exc_info:
            await client.list_repositories_for_user("alice", 100, 1)

    err = exc_info.value
    assert err.status_code == status
    assert err.message == "API rate limit exceeded"
    assert "users/alice/repos" in err.url
    assert err.is_not_found == (status == 404)


@pytest.mark.asyncio
async def test_error_without_json_body_uses_text():
    async with make_client(lambda request: httpx.Response(500, text="upstream exploded")) as client:
        with pytest.raises(GitHubAPIError, match="upstream exploded"):
            await client.list_contributors("o", "r", 100, 1)


@pytest.mark.asyncio
async def test_transport_error_raises_status_zero():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(GitHubAPIError) as exc_info:
            await client.list_repositories_for_user("alice", 100, 1)

    assert exc_info.value.status_code == 0
    assert "connection refused" in str(exc_info.value)

