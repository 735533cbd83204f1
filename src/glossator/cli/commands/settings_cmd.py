from __future__ import annotations

import argparse

from rich.panel import Panel

from glossator.application.services.settings_service import SettingsService
from glossator.cli.context import CLIContext, require_initialized_project
from glossator.domain.models.project import Settings
from glossator.infrastructure.db.repos.settings_repo import SettingsRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("settings", help="Show or change suggestion settings")
    settings_subparsers = parser.add_subparsers(dest="settings_command", required=True)

    show_parser = settings_subparsers.add_parser("show", help="Show current settings")
    show_parser.set_defaults(handler=run_show)

    set_parser = settings_subparsers.add_parser("set", help="Change settings")
    set_parser.add_argument("--ai-enabled", action=argparse.BooleanOptionalAction, default=None)
    set_parser.add_argument("--limit", type=float, help="Suggestions per request, 1-5")
    set_parser.set_defaults(handler=run_set)


def _service(ctx: CLIContext) -> SettingsService:
    return SettingsService(SettingsRepo(ctx.paths.db_path))


def _print(ctx: CLIContext, settings: Settings) -> None:
    lines = [
        f"AI suggestions: {'enabled' if settings.ai_enabled else 'disabled'}",
        f"Suggestions per request: {settings.ai_suggestion_limit}",
    ]
    ctx.console.print(Panel.fit("\n".join(lines), title="Settings"))


def run_show(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    _print(ctx, _service(ctx).get_settings())
    return 0


def run_set(args: argparse.Namespace, ctx: CLIContext) -> int:
    require_initialized_project(ctx)
    service = _service(ctx)
    current = service.get_settings()

    settings = service.update_settings(
        ai_enabled=current.ai_enabled if args.ai_enabled is None else args.ai_enabled,
        ai_suggestion_limit=current.ai_suggestion_limit if args.limit is None else args.limit,
    )
    _print(ctx, settings)
    return 0
