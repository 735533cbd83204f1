from __future__ import annotations

import argparse
from pathlib import Path

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from glossator.application.services.document_service import DocumentService
from glossator.cli.context import CLIContext, annotation_service, require_initialized_project
from glossator.domain.models.run import CodedRun
from glossator.infrastructure.db.repos.code_repo import CodeRepo
from glossator.infrastructure.db.repos.document_repo import DocumentRepo
from glossator.infrastructure.db.repos.project_repo import ProjectRepo

CODED_STYLE = "bold black on yellow"


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("docs", help="Document management")
    docs_subparsers = parser.add_subparsers(dest="docs_command", required=True)

    add_parser = docs_subparsers.add_parser("add", help="Add a document to a project")
    add_parser.add_argument("--project-id", required=True)
    add_parser.add_argument("--name", help="Document name (defaults to the file stem)")
    source_group = add_parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--file", help="UTF-8 text file to import")
    source_group.add_argument("--text", help="Document text literal")
    add_parser.set_defaults(handler=run_add)

    list_parser = docs_subparsers.add_parser("list", help="List documents of a project")
    list_parser.add_argument("--project-id", required=True)
    list_parser.set_defaults(handler=run_list)

    show_parser = docs_subparsers.add_parser("show", help="Show a document with its coded spans highlighted")
    show_parser.add_argument("--document-id", required=True)
    show_parser.set_defaults(handler=run_show)

    delete_parser = docs_subparsers.add_parser("delete", help="Delete a document and its coding")
    delete_parser.add_argument("--project-id", required=True)
    delete_parser.add_argument("--document-id", required=True)
    delete_parser.set_defaults(handler=run_delete)


def _service(ctx: CLIContext) -> DocumentService:
    return DocumentService(ProjectRepo(ctx.paths.db_path), DocumentRepo(ctx.paths.db_path))


def run_add(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    service = _service(ctx)

    if args.file:
        document = service.add_document_from_file(args.project_id, Path(args.file), name=args.name)
    else:
        document = service.add_document(args.project_id, args.name or "", args.text)

    ctx.console.print(
        f"[green]Added[/green] document {document.name} ({document.id}, {len(document.text)} chars)"
    )
    return 0


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    documents = _service(ctx).list_documents(args.project_id)

    out = Table(title=f"Documents ({len(documents)})")
    out.add_column("ID")
    out.add_column("Name")
    out.add_column("Chars", justify="right")
    out.add_column("Created")

    for d in documents:
        out.add_row(d.id, d.name, str(len(d.text)), d.created_at)

    ctx.console.print(out)
    return 0


def run_show(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    document = _service(ctx).get_document(args.document_id)
    runs = annotation_service(ctx).decompose_runs(document.id)
    codes = {c.id: c for c in CodeRepo(ctx.paths.db_path).list_for_project(document.project_id)}

    body = Text()
    legend = Table(title="Coded segments")
    legend.add_column("#", justify="right")
    legend.add_column("Span")
    legend.add_column("Codes", overflow="fold")
    legend.add_column("Segment ID")

    marker = 0
    for run in runs:
        if isinstance(run, CodedRun):
            marker += 1
            body.append(run.text, style=CODED_STYLE)
            body.append(f"[{marker}]", style="dim")
            names = [codes[cid].name if cid in codes else cid for cid in run.segment.code_ids]
            legend.add_row(str(marker), f"{run.start}-{run.end}", ", ".join(names), run.segment.id)
        else:
            body.append(run.text)

    ctx.console.print(Panel(body, title=document.name))
    if marker:
        ctx.console.print(legend)
    return 0


def run_delete(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    _service(ctx).delete_document(args.project_id, args.document_id)
    ctx.console.print(f"[green]Deleted[/green] document {args.document_id}")
    return 0
