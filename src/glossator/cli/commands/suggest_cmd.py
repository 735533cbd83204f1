from __future__ import annotations

import argparse

from rich.markup import escape
from rich.table import Table

from glossator.cli.context import CLIContext, annotation_service, default_provider, require_initialized_project
from glossator.domain.models.suggestion import ExistingSuggestion
from glossator.infrastructure.db.repos.code_repo import CodeRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("suggest", help="Ask the suggestion provider for codes for a span")
    parser.add_argument("--document-id", required=True)
    parser.add_argument("--start", type=int, required=True)
    parser.add_argument("--end", type=int, required=True)
    parser.add_argument("--limit", type=int, help="1-5; defaults to the stored setting")
    parser.add_argument("--timeout", type=float, help="Provider timeout in seconds")
    parser.add_argument("--force", action="store_true", help="Ask even when suggestions are disabled in settings")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    service = annotation_service(ctx, provider=default_provider())
    batch = service.request_suggestions(
        args.document_id,
        args.start,
        args.end,
        limit=args.limit,
        timeout=args.timeout,
        force=args.force,
    )

    codes = CodeRepo(ctx.paths.db_path).get_many(
        [s.code_id for s in batch.suggestions if isinstance(s, ExistingSuggestion)]
    )

    out = Table(title=f"Suggestions ({len(batch.suggestions)} of at most {batch.limit})")
    out.add_column("Type")
    out.add_column("Code")
    out.add_column("Confidence", justify="right")
    out.add_column("Rationale", overflow="fold")

    for s in batch.suggestions:
        confidence = f"{s.confidence:.2f}" if s.confidence is not None else ""
        if isinstance(s, ExistingSuggestion):
            label = codes[s.code_id].name if s.code_id in codes else s.code_id
        else:
            label = s.name
            if s.flags:
                label += f" [{', '.join(s.flags)}]"
        out.add_row(s.type, escape(label), confidence, escape(s.rationale or ""))

    ctx.console.print(out)
    return 0
