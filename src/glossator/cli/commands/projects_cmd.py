from __future__ import annotations

import argparse

from rich.table import Table

from glossator.application.services.project_service import ProjectService
from glossator.cli.context import CLIContext, require_initialized_project


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("projects", help="Project management")
    projects_subparsers = parser.add_subparsers(dest="projects_command", required=True)

    create_parser = projects_subparsers.add_parser("create", help="Create a project")
    create_parser.add_argument("--name", required=True)
    create_parser.add_argument("--description")
    create_parser.set_defaults(handler=run_create)

    list_parser = projects_subparsers.add_parser("list", help="List projects")
    list_parser.add_argument("--limit", type=int, default=100)
    list_parser.set_defaults(handler=run_list)

    delete_parser = projects_subparsers.add_parser(
        "delete", help="Delete a project with its documents, codes and coding"
    )
    delete_parser.add_argument("--project-id", required=True)
    delete_parser.set_defaults(handler=run_delete)


def run_create(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    project = ProjectService(ctx.paths).create_project(args.name, args.description)
    ctx.console.print(f"[green]Created[/green] project {project.name} ({project.id})")
    return 0


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    projects = ProjectService(ctx.paths).list_projects(limit=args.limit)

    out = Table(title=f"Projects ({len(projects)})")
    out.add_column("ID")
    out.add_column("Name")
    out.add_column("Description", overflow="fold")
    out.add_column("Created")

    for p in projects:
        out.add_row(p.id, p.name, p.description or "", p.created_at)

    ctx.console.print(out)
    return 0


def run_delete(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    ProjectService(ctx.paths).delete_project(args.project_id)
    ctx.console.print(f"[green]Deleted[/green] project {args.project_id}")
    return 0
