from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from glossator.core.config import AppPaths
from glossator.core.errors import NotFoundError, ValidationError
from glossator.core.stamps import new_uuid, now_utc_iso
from glossator.domain.models.project import Project
from glossator.infrastructure.db.repos.project_repo import ProjectRepo
from glossator.infrastructure.db.sqlite import initialize_schema


@dataclass(slots=True)
class InitResult:
    paths_created: list[Path]
    db_path: Path


class ProjectService:
    def __init__(self, paths: AppPaths) -> None:
        self.paths = paths
        self.project_repo = ProjectRepo(paths.db_path)

    def init_project(self) -> InitResult:
        paths_created: list[Path] = []
        if not self.paths.glossator_dir.exists():
            paths_created.append(self.paths.glossator_dir)
        self.paths.glossator_dir.mkdir(parents=True, exist_ok=True)

        initialize_schema(self.paths.db_path)
        return InitResult(paths_created=paths_created, db_path=self.paths.db_path)

    def is_initialized(self) -> bool:
        return self.paths.db_path.exists()

    def create_project(self, name: str, description: str | None = None) -> Project:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Project name is required.")

        project = Project(
            id=new_uuid(),
            name=clean_name,
            description=_opt_str(description),
            created_at=now_utc_iso(),
        )
        self.project_repo.insert(project)
        return project

    def get_project(self, project_id: str) -> Project:
        project = self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFoundError(f"Project not found: {project_id}")
        return project

    def list_projects(self, limit: int = 100) -> list[Project]:
        return self.project_repo.list_projects(limit=limit)

    def delete_project(self, project_id: str) -> None:
        if not self.project_repo.delete(project_id):
            raise NotFoundError(f"Project not found: {project_id}")


def _opt_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None
