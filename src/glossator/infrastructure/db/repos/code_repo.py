from __future__ import annotations

import json
from pathlib import Path

from glossator.domain.models.code import Code
from glossator.infrastructure.db.sqlite import get_connection


class CodeRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def get_by_id(self, code_id: str) -> Code | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM codes WHERE id = ?",
                (code_id,),
            ).fetchone()
        return self._to_code(row) if row else None

    def get_many(self, code_ids: list[str]) -> dict[str, Code]:
        if not code_ids:
            return {}
        placeholders = ", ".join("?" for _ in code_ids)
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT * FROM codes WHERE id IN ({placeholders})",
                tuple(code_ids),
            ).fetchall()
        return {row["id"]: self._to_code(row) for row in rows}

    def list_for_project(self, project_id: str) -> list[Code]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM codes
                WHERE project_id = ?
                ORDER BY position, rowid
                """,
                (project_id,),
            ).fetchall()
        return [self._to_code(row) for row in rows]

    def insert(self, code: Code) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO codes (id, project_id, name, description, color, flags_json, position)
                VALUES (
                    ?, ?, ?, ?, ?, ?,
                    (SELECT COALESCE(MAX(position), 0) + 1 FROM codes WHERE project_id = ?)
                )
                """,
                (
                    code.id,
                    code.project_id,
                    code.name,
                    code.description,
                    code.color,
                    _flags_to_json(code.flags),
                    code.project_id,
                ),
            )
            conn.commit()

    def update(self, code: Code) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                UPDATE codes
                SET name = ?, description = ?, color = ?, flags_json = ?
                WHERE id = ?
                """,
                (code.name, code.description, code.color, _flags_to_json(code.flags), code.id),
            )
            conn.commit()

    @staticmethod
    def _to_code(row) -> Code:
        flags_json = row["flags_json"]
        return Code(
            id=row["id"],
            project_id=row["project_id"],
            name=row["name"],
            description=row["description"],
            color=row["color"],
            flags=json.loads(flags_json) if flags_json else None,
        )


def _flags_to_json(flags: list[str] | None) -> str | None:
    return json.dumps(flags, ensure_ascii=False) if flags else None
