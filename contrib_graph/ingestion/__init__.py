"""
contrib_graph.ingestion - GitHub data retrieval.

Modules:
    github_client - Async httpx client for the repos and contributors endpoints.
    paginator     - Page-until-short-page loop shared by both scanners.
    scanners      - list_all_repos() and list_all_contributors().
    scan_service  - UserScanService: cached, concurrent per-user scan.
"""
