from __future__ import annotations

import argparse

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from glossator.cli.context import CLIContext, annotation_service, require_initialized_project


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("coding", help="Apply codes to document spans")
    coding_subparsers = parser.add_subparsers(dest="coding_command", required=True)

    assign_parser = coding_subparsers.add_parser(
        "assign",
        help="Code a span; existing segments overlapping the span are replaced, not merged",
    )
    assign_parser.add_argument("--document-id", required=True)
    assign_parser.add_argument("--start", type=int, required=True, help="Start offset (inclusive)")
    assign_parser.add_argument("--end", type=int, required=True, help="End offset (exclusive)")
    assign_parser.add_argument("--code-id", action="append", dest="code_ids", required=True)
    assign_parser.set_defaults(handler=run_assign)

    set_parser = coding_subparsers.add_parser(
        "set", help="Replace the codes of a segment; no --code-id removes the segment"
    )
    set_parser.add_argument("--segment-id", required=True)
    set_parser.add_argument("--code-id", action="append", dest="code_ids", default=[])
    set_parser.set_defaults(handler=run_set)

    list_parser = coding_subparsers.add_parser("list", help="List coded segments of a document")
    list_parser.add_argument("--document-id", required=True)
    list_parser.set_defaults(handler=run_list)

    clear_parser = coding_subparsers.add_parser("clear", help="Remove all coding from a document")
    clear_parser.add_argument("--document-id", required=True)
    clear_parser.set_defaults(handler=run_clear)


def run_assign(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    result = annotation_service(ctx).assign_codes(args.document_id, args.start, args.end, args.code_ids)

    lines = [
        f"Segment ID: {result.segment.id}",
        f"Span: {result.segment.start_offset}-{result.segment.end_offset}",
        f"Text: {escape(result.segment.text)}",
        f"Codes: {', '.join(result.code_ids)}",
    ]
    if result.replaced_segment_ids:
        lines.append(f"Replaced overlapping segments: {', '.join(result.replaced_segment_ids)}")
    ctx.console.print(Panel.fit("\n".join(lines), title="Segment Coded"))
    return 0


def run_set(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    result = annotation_service(ctx).set_codes_on_segment(args.segment_id, args.code_ids)

    if result.removed:
        ctx.console.print(f"[yellow]Removed[/yellow] segment {result.segment.id}; the span is uncoded again")
    else:
        ctx.console.print(f"[green]Updated[/green] segment {result.segment.id}: {', '.join(result.code_ids)}")
    return 0


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    coding = annotation_service(ctx).get_coding(args.document_id)

    out = Table(title=f"Coded segments ({len(coding.segments)})")
    out.add_column("ID")
    out.add_column("Start", justify="right")
    out.add_column("End", justify="right")
    out.add_column("Text", overflow="fold")
    out.add_column("Codes", overflow="fold")

    for s in coding.segments:
        out.add_row(s.id, str(s.start_offset), str(s.end_offset), escape(s.text), ", ".join(s.code_ids))

    ctx.console.print(out)
    return 0


def run_clear(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    removed = annotation_service(ctx).clear_document(args.document_id)
    ctx.console.print(f"[green]Cleared[/green] {removed} segment(s) from document {args.document_id}")
    return 0
