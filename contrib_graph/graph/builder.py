"""
contrib_graph/graph/builder.py - Contribution graph construction.

create_graph() turns one user's scan result into a ContributionGraph:

    Nodes : one UserNode per contributor, one RepoNode per repository
    Links : one contributor -> repository link per (repository, contributor)

A contributor appearing on several repositories collapses to a single node
with one link per repository.

Export helpers:
    to_networkx()   NetworkX DiGraph for analysis or an external layout engine.
    graph_to_dict() JSON-ready node/link dict, the contract with the renderer.
    graph_summary() Node/link counts for logs and the CLI.
"""

import logging
from typing import Any, Callable, Hashable, Iterable, TypeVar

import networkx as nx

from contrib_graph.graph.model import ContributionGraph, Link, Node, RepoNode, UserNode
from contrib_graph.models import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def remove_duplicates_by(items: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    """
    Drop items whose key was already seen, keeping the first occurrence.

    Order of the survivors is the input order. O(n).
    """
    seen: set = set()
    unique: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        unique.append(item)
    return unique


def dedupe_nodes(nodes: Iterable[Node]) -> list[Node]:
    return remove_duplicates_by(nodes, lambda n: n.node_id)


def dedupe_links(links: Iterable[Link]) -> list[Link]:
    return remove_duplicates_by(links, lambda l: l.key)


def create_graph(repos: Iterable[Repository]) -> ContributionGraph:
    """
    Build the node/link set for one scan result.

    Args:
        repos: Repositories annotated with contributors, as returned by
               UserScanService.scan_user().

    Returns:
        ContributionGraph with user nodes first (repository order, then
        contributor order), followed by repository nodes.

    Notes:
        - Pure: no network access, no mutation of the input.
        - A repository with no contributors still yields a RepoNode.
    """
    repos = list(repos)

    user_nodes: list[Node] = [
        UserNode(node_id=c.node_id, user=c)
        for r in repos
        for c in r.contributors
    ]
    repo_nodes: list[Node] = [RepoNode(node_id=r.node_id, repo=r) for r in repos]

    links = [
        Link(node_id=r.node_id, source=c.node_id, target=r.node_id, contributions=c.contributions)
        for r in repos
        for c in r.contributors
    ]

    graph = ContributionGraph(
        nodes=dedupe_nodes(user_nodes + repo_nodes),
        links=dedupe_links(links),
    )
    logger.debug(
        "Built graph from %d repositories: %d nodes, %d links.",
        len(repos), len(graph.nodes), len(graph.links),
    )
    return graph


def node_to_dict(node: Node) -> dict[str, Any]:
    """Serialize one node for the renderer. Every node carries id == node_id."""
    if isinstance(node, UserNode):
        return {"id": node.id, "node_id": node.node_id, "type": node.type, "user": node.user.to_dict()}
    if isinstance(node, RepoNode):
        return {"id": node.id, "node_id": node.node_id, "type": node.type, "repo": node.repo.to_dict()}
    raise TypeError(f"Unknown node variant: {type(node).__name__}")


def graph_to_dict(graph: ContributionGraph) -> dict[str, list[dict[str, Any]]]:
    """
    Serialize a graph to the renderer wire shape.

    Returns:
        {"nodes": [{id, node_id, type, user|repo}],
         "links": [{node_id, source, target, contributions}]}
    """
    return {
        "nodes": [node_to_dict(n) for n in graph.nodes],
        "links": [
            {
                "node_id": l.node_id,
                "source": l.source,
                "target": l.target,
                "contributions": l.contributions,
            }
            for l in graph.links
        ],
    }


def to_networkx(graph: ContributionGraph) -> nx.DiGraph:
    """
    Convert a ContributionGraph into a NetworkX DiGraph.

    Node attributes:
        Contributor: node_type='Contributor', label=login, avatar_url, html_url
        Repo:        node_type='Repo', label=full_name, html_url, description

    Edge attributes (contributor -> repo):
        edge_type='contributed_to', contributions

    Links whose endpoints are not nodes of *graph* are skipped with a debug
    log rather than creating attribute-less nodes.
    """
    G = nx.DiGraph()
    for node in graph.nodes:
        if isinstance(node, UserNode):
            G.add_node(
                node.node_id,
                node_type="Contributor",
                label=node.label,
                avatar_url=node.user.avatar_url,
                html_url=node.user.html_url,
            )
        elif isinstance(node, RepoNode):
            G.add_node(
                node.node_id,
                node_type="Repo",
                label=node.label,
                html_url=node.repo.html_url,
                description=node.repo.description or "",
            )
        else:
            raise TypeError(f"Unknown node variant: {type(node).__name__}")

    for link in graph.links:
        if link.source not in G or link.target not in G:
            logger.debug("Skipping dangling link %s -> %s", link.source, link.target)
            continue
        G.add_edge(
            link.source, link.target,
            edge_type="contributed_to",
            contributions=link.contributions,
        )

    G.graph["source"] = "github"
    return G


def graph_summary(graph: ContributionGraph) -> dict[str, int]:
    return {
        "user_nodes": len(graph.user_nodes),
        "repo_nodes": len(graph.repo_nodes),
        "links": len(graph.links),
    }
