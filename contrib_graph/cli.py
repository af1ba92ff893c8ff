"""
contrib_graph/cli.py - Command-line interface for the contrib_graph pipeline.

Provides a single entry point that:
  1. Loads GITHUB_TOKEN from a .env file automatically
  2. Scans a user (plus any expanded users) and merges the graph
  3. Writes nodes.csv / links.csv and optionally the renderer JSON
  4. Serves the FastAPI endpoints for an interactive view

Usage:
    python -m contrib_graph scan esinx                   # primary user only
    python -m contrib_graph scan esinx --expand octocat  # plus an expanded user
    python -m contrib_graph serve --port 8000            # HTTP API

All commands read GITHUB_TOKEN from .env (working directory, then project
root, or the path given by --env-file). Variables already set in the
environment take precedence.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger("contrib_graph.cli")


# ── .env loader ───────────────────────────────────────────────────────────────

def _find_env_file() -> Path | None:
    """Return the first .env in the working directory or the project root."""
    for directory in (Path.cwd(), Path(__file__).resolve().parent.parent):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _parse_env_line(line: str) -> tuple[str, str] | None:
    """Parse one dotenv line into (key, value); None for blanks and comments.

    Accepts an optional ``export`` prefix. Quoted values are taken verbatim;
    unquoted values lose a trailing `` # comment``.
    """
    line = line.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, _, value = line.partition("=")
    key, value = key.strip(), value.strip()
    if not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return key, value[1:-1]
    return key, value.split(" #", 1)[0].rstrip()


def _load_dotenv(env_file: str | None = None) -> dict[str, str]:
    """Inject GITHUB_TOKEN and friends from a .env file into os.environ.

    Variables already present in the environment win. Returns only the
    variables this call added.

    Args:
        env_file: Explicit path. If None, .env is looked up in the working
                  directory, then in the project root.
    """
    path = Path(env_file) if env_file else _find_env_file()
    if path is None or not path.is_file():
        return {}

    added: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        parsed = _parse_env_line(raw_line)
        if parsed is None:
            continue
        key, value = parsed
        if key not in os.environ:
            os.environ[key] = value
            added[key] = value
    logger.debug("Loaded %d variable(s) from %s", len(added), path)
    return added


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    """Configure root logger with timestamps and level names."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s  %(levelname)-8s  %(name)s - %(message)s"
    datefmt = "%H:%M:%S"
    logging.basicConfig(level=numeric, format=fmt, datefmt=datefmt, stream=sys.stderr)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)



def _build_config(args: argparse.Namespace):
    from contrib_graph.config import ContribGraphConfig

    return ContribGraphConfig.from_env(
        github_token=args.token,
        max_pages=getattr(args, "max_pages", None),
    )


# ── Subcommand: scan ──────────────────────────────────────────────────────────

def cmd_scan(args: argparse.Namespace) -> int:
    """Scan a user and any expanded users, merge, and write the outputs."""
    _load_dotenv(args.env_file)
    _setup_logging(args.log_level)

    from contrib_graph.errors import ContribGraphError
    from contrib_graph.pipeline import run_graph_pipeline, write_graph_outputs

    config = _build_config(args)
    limit = config.default_limit_repositories if args.limit is None else args.limit

    logger.info("=" * 60)
    logger.info("contrib_graph scan")
    logger.info("  User         : %s", args.username)
    logger.info("  Expanded     : %s", ", ".join(args.expand) or "-")
    logger.info("  Repo limit   : %s", limit or "unlimited")
    logger.info("  GitHub token : %s", "present" if config.github_token else "ABSENT")
    logger.info("=" * 60)

    try:
        result = asyncio.run(
            run_graph_pipeline(
                args.username,
                expanded_users=args.expand,
                limit_repositories=limit,
                config=config,
            )
        )
    except (ContribGraphError, ValueError) as exc:
        logger.error("Scan failed: %s", exc)
        return 1

    try:
        paths = write_graph_outputs(result, args.out_dir, json_path=args.json)
    except OSError as exc:
        logger.error("Could not write outputs: %s", exc)
        return 1
    summary = result.summary

    print()
    print("=" * 60)
    print("  CONTRIB GRAPH - SCAN COMPLETE")
    print("=" * 60)
    print(f"  Elapsed          : {result.elapsed:.1f}s")
    print(f"  Users scanned    : {', '.join(result.expanded_users)}")
    print(f"  User nodes       : {summary['user_nodes']}")
    print(f"  Repo nodes       : {summary['repo_nodes']}")
    print(f"  Links            : {summary['links']}")
    for name, path in paths.items():
        print(f"  {name:<17}: {path}")
    print("=" * 60)
    return 0


# ── Subcommand: serve ─────────────────────────────────────────────────────────

def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the FastAPI endpoints with uvicorn."""
    _load_dotenv(args.env_file)
    _setup_logging(args.log_level)

    import uvicorn

    from contrib_graph.api.endpoints import create_app

    app = create_app(config=_build_config(args))
    logger.info("Serving contrib_graph API on http://%s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


# ── Argument parser ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contrib-graph",
        description=(
            "contrib_graph - GitHub repository contribution graph builder.\n"
            "Reads GITHUB_TOKEN from .env automatically."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan one user, write nodes.csv / links.csv to ./graph_out
  python -m contrib_graph scan esinx

  # Scan with two expanded contributors and export the renderer JSON
  python -m contrib_graph scan esinx --expand octocat --expand hubot --json graph.json

  # Consider every repository instead of the first 50
  python -m contrib_graph scan esinx --limit 0

  # Serve the HTTP API for the interactive view
  python -m contrib_graph serve --port 8000
        """,
    )

    # Global flags
    parser.add_argument(
        "--env-file",
        default=None,
        metavar="PATH",
        help="Path to .env file (default: .env in the working directory, then the project root)",
    )
    parser.add_argument(
        "--token",
        default=None,
        metavar="GITHUB_TOKEN",
        help="GitHub personal access token (overrides .env and environment)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        metavar="N",
        help="Fail instead of paginating past N pages (default: unbounded)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    # scan
    p_scan = subparsers.add_parser(
        "scan",
        help="Scan a user (plus expanded users) and write the merged graph",
    )
    p_scan.add_argument("username", metavar="USERNAME", help="Primary GitHub login")
    p_scan.add_argument(
        "--expand",
        action="append",
        default=[],
        metavar="LOGIN",
        help="Expand a contributor (repeatable, applied in order)",
    )
    p_scan.add_argument(
        "--limit",
        type=int,
        default=None,
        metavar="N",
        help="Repositories per user, API order; 0 = unlimited (default: 50)",
    )
    p_scan.add_argument(
        "--out-dir",
        default="graph_out",
        metavar="PATH",
        help="Directory for nodes.csv and links.csv (default: ./graph_out)",
    )
    p_scan.add_argument(
        "--json",
        default=None,
        metavar="PATH",
        help="Also write the renderer node/link JSON to PATH",
    )
    p_scan.set_defaults(func=cmd_scan)

    # serve
    p_serve = subparsers.add_parser("serve", help="Serve the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
