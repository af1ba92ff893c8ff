"""
contrib_graph/config.py - All tunable parameters for contrib_graph.

Page sizes, repository limits, and HTTP settings live here so that a change in
API behaviour or rate-limit budget is a single-file diff.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class ContribGraphConfig:
    """
    Immutable configuration for the scan and graph pipeline.

    Override by constructing a new ContribGraphConfig with the desired values,
    or by calling from_env() to pick up environment overrides.
    """

    # ── GitHub REST API ───────────────────────────────────────────────────────
    api_base_url: str = "https://api.github.com"

    github_token: Optional[str] = None
    # Static credential. Unauthenticated GitHub rate limit is 60 req/hr,
    # authenticated is 5000 req/hr.

    user_agent: str = "contrib-graph/0.1"
    # GitHub rejects requests without a User-Agent header.

    request_timeout_seconds: float = 30.0

    # ── Pagination ────────────────────────────────────────────────────────────
    page_size: int = 100
    # GitHub caps per_page at 100 for both the repos and contributors endpoints.
    # A page shorter than this ends pagination.

    max_pages: Optional[int] = None
    # None keeps pagination unbounded: an API that always returns full pages
    # loops forever. Set a ceiling to fail with PaginationLimitError instead.

    # ── Scanning ──────────────────────────────────────────────────────────────
    default_limit_repositories: int = 50
    # Repositories considered per user, in the API's natural order.
    # 0 means unlimited and is a distinct cache key.

    @classmethod
    def from_env(cls, **overrides) -> "ContribGraphConfig":
        """
        Build a config from environment variables, then apply keyword overrides.

        Variables:
            GITHUB_TOKEN              -> github_token
            CONTRIB_GRAPH_API_URL     -> api_base_url
            CONTRIB_GRAPH_PAGE_SIZE   -> page_size
            CONTRIB_GRAPH_LIMIT       -> default_limit_repositories
            CONTRIB_GRAPH_MAX_PAGES   -> max_pages
            CONTRIB_GRAPH_TIMEOUT     -> request_timeout_seconds
        """
        config = cls()
        env_values: dict = {}

        token = (os.getenv("GITHUB_TOKEN") or "").strip()
        if token:
            env_values["github_token"] = token
        if os.getenv("CONTRIB_GRAPH_API_URL"):
            env_values["api_base_url"] = os.environ["CONTRIB_GRAPH_API_URL"].rstrip("/")
        if os.getenv("CONTRIB_GRAPH_PAGE_SIZE"):
            env_values["page_size"] = int(os.environ["CONTRIB_GRAPH_PAGE_SIZE"])
        if os.getenv("CONTRIB_GRAPH_LIMIT"):
            env_values["default_limit_repositories"] = int(os.environ["CONTRIB_GRAPH_LIMIT"])
        if os.getenv("CONTRIB_GRAPH_MAX_PAGES"):
            env_values["max_pages"] = int(os.environ["CONTRIB_GRAPH_MAX_PAGES"])
        if os.getenv("CONTRIB_GRAPH_TIMEOUT"):
            env_values["request_timeout_seconds"] = float(os.environ["CONTRIB_GRAPH_TIMEOUT"])

        env_values.update({k: v for k, v in overrides.items() if v is not None})
        return replace(config, **env_values)


# Singleton default; import this everywhere instead of constructing anew.
DEFAULT_CONFIG = ContribGraphConfig()
