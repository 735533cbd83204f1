from __future__ import annotations

from pathlib import Path

from glossator.domain.models.document import Document
from glossator.infrastructure.db.sqlite import get_connection


class DocumentRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def get_by_id(self, document_id: str) -> Document | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM documents WHERE id = ?",
                (document_id,),
            ).fetchone()
        return self._to_document(row) if row else None

    def insert(self, document: Document) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO documents (id, project_id, name, text, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (document.id, document.project_id, document.name, document.text, document.created_at),
            )
            conn.commit()

    def list_for_project(self, project_id: str) -> list[Document]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM documents
                WHERE project_id = ?
                ORDER BY created_at, name
                """,
                (project_id,),
            ).fetchall()
        return [self._to_document(row) for row in rows]

    def delete(self, document_id: str) -> bool:
        # Segments and their code links go with the document via ON DELETE CASCADE.
        with get_connection(self.db_path) as conn:
            cur = conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
            conn.commit()
        return cur.rowcount > 0

    @staticmethod
    def _to_document(row) -> Document:
        return Document(
            id=row["id"],
            project_id=row["project_id"],
            name=row["name"],
            text=row["text"],
            created_at=row["created_at"],
        )
