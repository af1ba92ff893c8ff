"""
contrib_graph/pipeline.py - Single-call pipeline orchestrator.

run_graph_pipeline() executes the whole scan-and-merge sequence for a primary
user plus any expanded users and returns the merged graph with every
intermediate result.

Usage:
    import asyncio
    from contrib_graph.pipeline import run_graph_pipeline

    result = asyncio.run(run_graph_pipeline("alice", expanded_users=["bob"]))
    print(len(result.graph.nodes), len(result.graph.links))

write_graph_outputs() persists a result as nodes.csv / links.csv (pandas)
plus an optional JSON file in the renderer wire shape.
"""

import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

import pandas as pd

from contrib_graph.config import DEFAULT_CONFIG, ContribGraphConfig
from contrib_graph.graph.builder import graph_summary, graph_to_dict
from contrib_graph.graph.expansion import ExpansionController
from contrib_graph.graph.model import ContributionGraph, RepoNode, UserNode
from contrib_graph.ingestion.github_client import GitHubClient
from contrib_graph.ingestion.scan_service import UserScanService
from contrib_graph.storage.scan_cache import ScanCache, ScanResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """
    Complete output of a single pipeline run.

    Fields:
        graph:          Merged ContributionGraph.
        expanded_users: Users scanned, primary first.
        scans:          Per-user scan results, aligned with expanded_users.
        cache_stats:    ScanCache.stats() after the run.
        elapsed:        Wall-clock seconds.
    """
    graph: ContributionGraph
    expanded_users: list[str]
    scans: list[ScanResult] = field(default_factory=list)
    cache_stats: dict = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def summary(self) -> dict[str, int]:
        return graph_summary(self.graph)


async def run_graph_pipeline(
    username: str,
    expanded_users: Iterable[str] = (),
    limit_repositories: Optional[int] = None,
    config: ContribGraphConfig = DEFAULT_CONFIG,
    client: Any = None,
    cache: Optional[ScanCache] = None,
) -> PipelineResult:
    """
    Scan *username* and every user in *expanded_users*, then merge.

    Args:
        username:           Primary user.
        expanded_users:     Additional users, in expansion order. Duplicates
                            and the primary user are ignored.
        limit_repositories: Per-user repository limit. None uses
                            config.default_limit_repositories.
        config:             ContribGraphConfig.
        client:             Injected client. When None a GitHubClient is
                            created and closed by this call.
        cache:              Injected ScanCache to reuse across runs.

    Returns:
        PipelineResult.

    Raises:
        GitHubAPIError: If any scan fails.
    """
    limit = config.default_limit_repositories if limit_repositories is None else limit_repositories
    owns_client = client is None
    if owns_client:
        client = GitHubClient(config)

    t0 = time.monotonic()
    try:
        service = UserScanService(client, cache=cache, config=config)
        controller = ExpansionController(username, service, limit_repositories=limit)
        for login in expanded_users:
            controller.expand(login)
        graph = await controller.graph()
    finally:
        if owns_client:
            await client.aclose()

    result = PipelineResult(
        graph=graph,
        expanded_users=controller.expanded_users,
        scans=controller.scans,
        cache_stats=service.cache.stats(),
        elapsed=time.monotonic() - t0,
    )
    logger.info(
        "Pipeline complete for %s: %s in %.1fs",
        username, result.summary, result.elapsed,
    )
    return result


def graph_to_frames(graph: ContributionGraph) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Flatten a graph into node and link DataFrames.

    Node columns: node_id, type, label, html_url, avatar_url, description
    Link columns: node_id, source, target, contributions
    """
    rows = []
    for node in graph.nodes:
        if isinstance(node, UserNode):
            rows.append({
                "node_id": node.node_id,
                "type": node.type,
                "label": node.label,
                "html_url": node.user.html_url,
                "avatar_url": node.user.avatar_url,
                "description": "",
            })
        elif isinstance(node, RepoNode):
            rows.append({
                "node_id": node.node_id,
                "type": node.type,
                "label": node.label,
                "html_url": node.repo.html_url,
                "avatar_url": "",
                "description": node.repo.description or "",
            })
        else:
            raise TypeError(f"Unknown node variant: {type(node).__name__}")

    df_nodes = pd.DataFrame(
        rows, columns=["node_id", "type", "label", "html_url", "avatar_url", "description"]
    )
    df_links = pd.DataFrame(
        [
            {"node_id": l.node_id, "source": l.source, "target": l.target, "contributions": l.contributions}
            for l in graph.links
        ],
        columns=["node_id", "source", "target", "contributions"],
    )
    return df_nodes, df_links


def _atomic_write(path: str, write: Callable[[str], None]) -> None:
    """Call write(tmp) then rename tmp onto *path*. A failed write leaves no .tmp behind."""
    tmp = path + ".tmp"
    try:
        write(tmp)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def _write_csv(df: pd.DataFrame, path: str) -> None:
    _atomic_write(path, lambda tmp: df.to_csv(tmp, index=False))


def _write_json(payload: dict, path: str) -> None:
    def dump(tmp: str) -> None:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)

    _atomic_write(path, dump)


def write_graph_outputs(
    result: PipelineResult,
    out_dir: str,
    json_path: Optional[str] = None,
) -> dict[str, str]:
    """
    Write nodes.csv and links.csv to *out_dir*, and the wire JSON if asked.

    Writes go through a .tmp file and a rename so a crash never leaves a
    half-written CSV behind.

    Returns:
        Dict of output name -> absolute path written.

    Raises:
        OSError: If a directory cannot be created or a file cannot be written.
    """
    os.makedirs(out_dir, exist_ok=True)
    df_nodes, df_links = graph_to_frames(result.graph)

    paths = {
        "nodes": os.path.abspath(os.path.join(out_dir, "nodes.csv")),
        "links": os.path.abspath(os.path.join(out_dir, "links.csv")),
    }
    _write_csv(df_nodes, paths["nodes"])
    _write_csv(df_links, paths["links"])

    if json_path:
        payload = {
            "expanded_users": result.expanded_users,
            **graph_to_dict(result.graph),
        }
        json_path = os.path.abspath(json_path)
        os.makedirs(os.path.dirname(json_path), exist_ok=True)
        _write_json(payload, json_path)
        paths["json"] = json_path

    logger.info("Wrote %d nodes and %d links to %s", len(df_nodes), len(df_links), out_dir)
    return paths
