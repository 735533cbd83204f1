from __future__ import annotations

from pathlib import Path

from glossator.domain.models.project import Project
from glossator.infrastructure.db.sqlite import get_connection


class ProjectRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def get_by_id(self, project_id: str) -> Project | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM projects WHERE id = ?",
                (project_id,),
            ).fetchone()
        return self._to_project(row) if row else None

    def insert(self, project: Project) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO projects (id, name, description, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (project.id, project.name, project.description, project.created_at),
            )
            conn.commit()

    def list_projects(self, limit: int = 100) -> list[Project]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM projects
                ORDER BY created_at DESC, name
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [self._to_project(row) for row in rows]

    def delete(self, project_id: str) -> bool:
        with get_connection(self.db_path) as conn:
            cur = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
            conn.commit()
        return cur.rowcount > 0

    @staticmethod
    def _to_project(row) -> Project:
        return Project(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            created_at=row["created_at"],
        )
