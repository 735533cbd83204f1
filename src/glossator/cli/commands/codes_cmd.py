from __future__ import annotations

import argparse

from rich.table import Table

from glossator.application.services.code_service import CodeService
from glossator.cli.context import CLIContext, coding_service, require_initialized_project
from glossator.infrastructure.db.repos.code_repo import CodeRepo
from glossator.infrastructure.db.repos.project_repo import ProjectRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("codes", help="Codebook management")
    codes_subparsers = parser.add_subparsers(dest="codes_command", required=True)

    add_parser = codes_subparsers.add_parser("add", help="Add a code to a project codebook")
    add_parser.add_argument("--project-id", required=True)
    add_parser.add_argument("--name", required=True)
    add_parser.add_argument("--description")
    add_parser.add_argument("--color")
    add_parser.add_argument("--flag", action="append", dest="flags", help="Repeatable free-text flag")
    add_parser.set_defaults(handler=run_add)

    list_parser = codes_subparsers.add_parser("list", help="List a project's codebook")
    list_parser.add_argument("--project-id", required=True)
    list_parser.set_defaults(handler=run_list)

    update_parser = codes_subparsers.add_parser("update", help="Update a code")
    update_parser.add_argument("--project-id", required=True)
    update_parser.add_argument("--code-id", required=True)
    update_parser.add_argument("--name")
    update_parser.add_argument("--description", help="Pass an empty string to clear")
    update_parser.add_argument("--color", help="Pass an empty string to clear")
    update_parser.add_argument("--flag", action="append", dest="flags", help="Replaces all flags; repeatable")
    update_parser.set_defaults(handler=run_update)

    delete_parser = codes_subparsers.add_parser(
        "delete", help="Delete a code and remove it from every coded segment"
    )
    delete_parser.add_argument("--project-id", required=True)
    delete_parser.add_argument("--code-id", required=True)
    delete_parser.set_defaults(handler=run_delete)


def _service(ctx: CLIContext) -> CodeService:
    return CodeService(
        project_repo=ProjectRepo(ctx.paths.db_path),
        code_repo=CodeRepo(ctx.paths.db_path),
        coding_service=coding_service(ctx),
    )


def run_add(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    code = _service(ctx).create_code(
        args.project_id,
        args.name,
        description=args.description,
        color=args.color,
        flags=args.flags,
    )
    ctx.console.print(f"[green]Added[/green] code {code.name} ({code.id})")
    return 0


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    codes = _service(ctx).list_codes(args.project_id)

    out = Table(title=f"Codebook ({len(codes)})")
    out.add_column("#", justify="right")
    out.add_column("ID")
    out.add_column("Name")
    out.add_column("Description", overflow="fold")
    out.add_column("Flags")

    for position, c in enumerate(codes, start=1):
        out.add_row(str(position), c.id, c.name, c.description or "", ", ".join(c.flags or []))

    ctx.console.print(out)
    return 0


def run_update(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    code = _service(ctx).update_code(
        args.project_id,
        args.code_id,
        name=args.name,
        description=args.description,
        color=args.color,
        flags=args.flags,
    )
    ctx.console.print(f"[green]Updated[/green] code {code.name} ({code.id})")
    return 0


def run_delete(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    emptied = _service(ctx).delete_code(args.project_id, args.code_id)
    ctx.console.print(f"[green]Deleted[/green] code {args.code_id}")
    if emptied:
        ctx.console.print(f"[yellow]Removed {len(emptied)} segment(s) that had no other codes[/yellow]")
    return 0
