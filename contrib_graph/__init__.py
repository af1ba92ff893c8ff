"""
contrib_graph - Contribution graph backbone for GitHub user exploration.

Builds the node/link data behind an interactive force-directed view of a
GitHub user's repositories and the people who contribute to them. The view
expands on demand: activating a contributor node adds that contributor's own
repositories to the graph.

Subpackages:
    ingestion - GitHub client, pagination, repository/contributor scanners,
                and the cached per-user scan service.
    storage   - In-memory scan cache.
    graph     - Node/link model, graph builder, merger, expansion controller.
    api       - FastAPI endpoints consumed by the view layer.
"""

__version__ = "0.1.0"
