"""
contrib_graph/graph/merge.py - Union of per-user graphs.

When the contributor set is expanded, each expanded user has their own
scan graph. merge_graphs() concatenates them in input order and re-applies
the builder's de-duplication.

First occurrence wins. If two scans saw the same user or repository with
different payloads (a new avatar, a changed description), or the same link
with a different contribution count, the earlier graph's version survives.
Callers pass the primary user's graph first, then expanded users in
expansion order.
"""

import logging
from typing import Iterable

from contrib_graph.graph.builder import dedupe_links, dedupe_nodes
from contrib_graph.graph.model import ContributionGraph

logger = logging.getLogger(__name__)


def merge_graphs(graphs: Iterable[ContributionGraph]) -> ContributionGraph:
    graphs = list(graphs)
    merged = ContributionGraph(
        nodes=dedupe_nodes(n for g in graphs for n in g.nodes),
        links=dedupe_links(l for g in graphs for l in g.links),
    )
    logger.debug(
        "Merged %d graphs into %d nodes, %d links.",
        len(graphs), len(merged.nodes), len(merged.links),
    )
    return merged
