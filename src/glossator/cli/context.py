from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console

from glossator.application.services.annotation_service import AnnotationService
from glossator.application.services.coding_service import CodingService
from glossator.application.services.project_service import ProjectService
from glossator.application.services.settings_service import SettingsService
from glossator.core.config import AppPaths, load_provider_config
from glossator.core.errors import ProjectNotInitializedError
from glossator.infrastructure.db.repos.code_repo import CodeRepo
from glossator.infrastructure.db.repos.document_repo import DocumentRepo
from glossator.infrastructure.db.repos.project_repo import ProjectRepo
from glossator.infrastructure.db.repos.segment_repo import SegmentRepo
from glossator.infrastructure.db.repos.settings_repo import SettingsRepo
from glossator.infrastructure.llm.provider import ChatCompletionsClient, SuggestionProvider


@dataclass(slots=True)
class CLIContext:
    paths: AppPaths
    console: Console


def require_initialized_project(ctx: CLIContext) -> None:
    project_service = ProjectService(ctx.paths)
    if not project_service.is_initialized():
        raise ProjectNotInitializedError(
            f"Project is not initialized. Run 'gloss init' first in {ctx.paths.project_root}"
        )
    project_service.init_project()


def coding_service(ctx: CLIContext) -> CodingService:
    db_path = ctx.paths.db_path
    return CodingService(
        document_repo=DocumentRepo(db_path),
        code_repo=CodeRepo(db_path),
        segment_repo=SegmentRepo(db_path),
    )


def annotation_service(ctx: CLIContext, provider: SuggestionProvider | None = None) -> AnnotationService:
    db_path = ctx.paths.db_path
    return AnnotationService(
        coding_service=coding_service(ctx),
        project_repo=ProjectRepo(db_path),
        code_repo=CodeRepo(db_path),
        settings_service=SettingsService(SettingsRepo(db_path)),
        provider=provider,
    )


def default_provider() -> SuggestionProvider:
    return ChatCompletionsClient(load_provider_config())
