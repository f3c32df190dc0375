"""Command-line entry point for the pkgdocs MCP server.

Usage:
    pkgdocs                                   # stdio, local mode
    pkgdocs --mode github                     # fetch from GitHub (GITHUB_TOKEN optional)
    pkgdocs --root ~/code/react-base-core -v  # serve another checkout, INFO logging
    pkgdocs -t http -p 9000                   # streamable HTTP on port 9000
"""

import argparse
import logging
import sys
from pathlib import Path

from fastmcp.utilities.logging import configure_logging

from pkgdocs.build import build_deps
from pkgdocs.observability import init_observability
from pkgdocs.server import build_server
from pkgdocs.settings import PkgDocsSettings, general_settings, pkgdocs_settings
from pkgdocs.types import BrokenInvariant

logger = logging.getLogger("pkgdocs")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgdocs",
        description="MCP server exposing package documentation, types, and source code",
    )
    parser.add_argument(
        "-t",
        "--transport",
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for http/sse")
    parser.add_argument("-p", "--port", type=int, default=8000, help="Port for http/sse (default: 8000)")
    parser.add_argument(
        "-m",
        "--mode",
        choices=["local", "github"],
        help="Content source (overrides PKGDOCS_MODE)",
    )
    parser.add_argument("--root", type=Path, help="Local content root (overrides PKGDOCS_PACKAGES_ROOT)")
    parser.add_argument("--registry", type=Path, help="JSON registry file (overrides PKGDOCS_REGISTRY_FILE)")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    )
    return parser


def resolve_settings(args: argparse.Namespace, base: PkgDocsSettings) -> PkgDocsSettings:
    """Apply command-line overrides on top of environment settings."""
    overrides: dict[str, object] = {}
    if args.mode:
        overrides["mode"] = args.mode
    if args.root:
        overrides["packages_root"] = args.root.expanduser().resolve()
    if args.registry:
        overrides["registry_file"] = args.registry.expanduser().resolve()

    if args.verbose >= 2:
        overrides["log_level"] = "DEBUG"
    elif args.verbose == 1:
        overrides["log_level"] = "INFO"

    return base.model_copy(update=overrides)


def main(argv: list[str] | None = None) -> None:
    """Entry point for `pkgdocs` and `python -m pkgdocs`."""
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args, pkgdocs_settings)

    # Logging goes to stderr; stdout belongs to the stdio transport
    configure_logging(level=settings.log_level)  # fastmcp logger
    configure_logging(level=settings.log_level, logger=logging.getLogger("pkgdocs"))  # pkgdocs logger

    init_observability(general_settings, settings.server_name)

    try:
        deps = build_deps(settings, general_settings)
    except BrokenInvariant as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    mcp = build_server(deps, name=settings.server_name)

    location = settings.github_api_url if settings.mode == "github" else str(settings.packages_root)
    logger.info(f"{settings.server_name} running on {args.transport}")
    logger.info(f"Serving {len(deps.registry)} packages ({settings.mode} mode) from {location}")
    logger.info(f"Search: {'line-level scan' if deps.source.line_level_search else 'hosted, file-level'}")

    if args.transport == "stdio":
        mcp.run()
    else:
        mcp.run(transport=args.transport, host=args.host, port=args.port)
