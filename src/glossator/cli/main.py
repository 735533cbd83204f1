from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from glossator.cli.commands import (
    codes_cmd,
    coding_cmd,
    documents_cmd,
    init_cmd,
    projects_cmd,
    settings_cmd,
    suggest_cmd,
)
from glossator.cli.context import CLIContext
from glossator.core.config import load_paths
from glossator.core.errors import GlossatorError
from glossator.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gloss",
        description="Glossator qualitative coding CLI",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root to use for .glossator data (default: current working directory)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    init_cmd.register(subparsers)
    projects_cmd.register(subparsers)
    documents_cmd.register(subparsers)
    codes_cmd.register(subparsers)
    coding_cmd.register(subparsers)
    suggest_cmd.register(subparsers)
    settings_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None, console: Console | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = console or Console()

    paths = load_paths(args.project_root)
    ctx = CLIContext(paths=paths, console=console)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args, ctx)
    except GlossatorError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
