"""
contrib_graph/ingestion/scanners.py - Repository and contributor scanners.

list_all_repos()        every repository owned (or forked) by a user.
list_all_contributors() every contributor of one repository.

Both walk the endpoint with paginate() at config.page_size. The client is
anything exposing the two GitHubClient list methods; tests inject a fake.
"""

import logging
from typing import Any, Optional

from contrib_graph.config import DEFAULT_CONFIG, ContribGraphConfig
from contrib_graph.errors import UnexpectedPayloadError
from contrib_graph.ingestion.paginator import paginate
from contrib_graph.models import Repository, User, split_full_name

logger = logging.getLogger(__name__)


async def list_all_repos(
    client: Any,
    username: str,
    config: ContribGraphConfig = DEFAULT_CONFIG,
) -> list[Repository]:
    """
    Fetch all repositories for *username* in the API's natural order.

    Raises:
        GitHubAPIError:         Propagated from the client (404 unknown user,
                                403 rate limit, ...). No retry.
        UnexpectedPayloadError: If a page is not a JSON list.
    """

    async def fetch_page(page: int) -> Optional[list[dict]]:
        data = await client.list_repositories_for_user(username, config.page_size, page)
        if not isinstance(data, list):
            raise UnexpectedPayloadError(
                f"Repository list for {username!r} page {page} was {type(data).__name__}, expected list"
            )
        logger.debug("Repos for %s page %d: %d items", username, page, len(data))
        return data

    payloads = await paginate(fetch_page, config.page_size, max_pages=config.max_pages)
    return [Repository.from_api(p) for p in payloads]


async def list_all_contributors(
    client: Any,
    repo_full_name: str,
    config: ContribGraphConfig = DEFAULT_CONFIG,
) -> list[User]:
    """
    Fetch all contributors of *repo_full_name* ('owner/name').

    A non-list page (204 on an empty repository, a stats object while GitHub
    is still computing contributions) ends the scan with whatever was
    accumulated, possibly nothing. That is not an error.

    Raises:
        ValueError:     If repo_full_name is not 'owner/name'.
        GitHubAPIError: Propagated from the client.
    """
    owner, repo = split_full_name(repo_full_name)

    async def fetch_page(page: int) -> Optional[list[dict]]:
        data = await client.list_contributors(owner, repo, config.page_size, page)
        if not isinstance(data, list):
            logger.debug(
                "Contributors for %s page %d returned %s; treating as end of data.",
                repo_full_name, page, type(data).__name__,
            )
            return None
        return data

    payloads = await paginate(fetch_page, config.page_size, max_pages=config.max_pages)
    # Anonymous contributors (anon=true) carry no node_id and cannot be nodes.
    return [User.from_api(p) for p in payloads if isinstance(p, dict) and p.get("node_id")]
