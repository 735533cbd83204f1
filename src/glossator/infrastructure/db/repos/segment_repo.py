from __future__ import annotations

import sqlite3
from pathlib import Path

from glossator.core.errors import InvalidReferenceError, NotFoundError
from glossator.core.stamps import new_uuid, now_utc_iso
from glossator.domain.models.segment import Segment
from glossator.infrastructure.db.sqlite import get_connection, write_transaction

_SEGMENT_WITH_CODES_SQL = """
    SELECT s.*, cs.code_id AS code_id
    FROM segments s
    LEFT JOIN coded_segments cs ON cs.segment_id = s.id
"""


class SegmentRepo:
    """Segments and their code links.

    Every method that changes more than one row runs in a single write
    transaction, so readers never see a half-applied replacement.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def get_by_id(self, segment_id: str) -> Segment | None:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                _SEGMENT_WITH_CODES_SQL
                + """
                WHERE s.id = ?
                ORDER BY cs.position
                """,
                (segment_id,),
            ).fetchall()
        segments = self._to_segments(rows)
        return segments[0] if segments else None

    def list_for_document(self, document_id: str) -> list[Segment]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                _SEGMENT_WITH_CODES_SQL
                + """
                WHERE s.document_id = ?
                ORDER BY s.start_offset, s.created_at, s.id, cs.position
                """,
                (document_id,),
            ).fetchall()
        return self._to_segments(rows)

    def count_for_document(self, document_id: str) -> int:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM segments WHERE document_id = ?",
                (document_id,),
            ).fetchone()
        return int(row["n"])

    def replace_overlapping(self, segment: Segment) -> list[str]:
        """Delete every segment of the document overlapping ``segment``, then insert it.

        Returns the ids of the deleted segments. The document and every code
        are re-checked inside the transaction, so a concurrent delete surfaces
        as NotFoundError or InvalidReferenceError and nothing is written.
        """
        with write_transaction(self.db_path) as conn:
            document = conn.execute("SELECT 1 FROM documents WHERE id = ?", (segment.document_id,)).fetchone()
            if document is None:
                raise NotFoundError(f"Document not found: {segment.document_id}")
            self._require_codes(conn, segment.code_ids)

            rows = conn.execute(
                """
                SELECT id FROM segments
                WHERE document_id = ?
                  AND NOT (end_offset <= ? OR start_offset >= ?)
                ORDER BY start_offset
                """,
                (segment.document_id, segment.start_offset, segment.end_offset),
            ).fetchall()
            replaced_ids = [row["id"] for row in rows]
            conn.executemany("DELETE FROM segments WHERE id = ?", [(sid,) for sid in replaced_ids])

            conn.execute(
                """
                INSERT INTO segments (
                    id,
                    document_id,
                    start_offset,
                    end_offset,
                    text,
                    created_by,
                    created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    segment.id,
                    segment.document_id,
                    segment.start_offset,
                    segment.end_offset,
                    segment.text,
                    segment.created_by,
                    segment.created_at,
                ),
            )
            self._insert_code_links(conn, segment.id, segment.code_ids)
        return replaced_ids

    def replace_codes(self, segment_id: str, code_ids: list[str]) -> None:
        with write_transaction(self.db_path) as conn:
            segment = conn.execute("SELECT 1 FROM segments WHERE id = ?", (segment_id,)).fetchone()
            if segment is None:
                raise NotFoundError(f"Segment not found: {segment_id}")
            self._require_codes(conn, code_ids)
            conn.execute("DELETE FROM coded_segments WHERE segment_id = ?", (segment_id,))
            self._insert_code_links(conn, segment_id, code_ids)

    def delete(self, segment_id: str) -> bool:
        with write_transaction(self.db_path) as conn:
            cur = conn.execute("DELETE FROM segments WHERE id = ?", (segment_id,))
        return cur.rowcount > 0

    def delete_for_document(self, document_id: str) -> int:
        with write_transaction(self.db_path) as conn:
            cur = conn.execute("DELETE FROM segments WHERE document_id = ?", (document_id,))
        return cur.rowcount

    def delete_code_cascade(self, code_id: str) -> list[str]:
        """Drop ``code_id`` from every segment and delete the code itself.

        Segments left without any code are deleted; their ids are returned.
        """
        with write_transaction(self.db_path) as conn:
            rows = conn.execute(
                "SELECT DISTINCT segment_id FROM coded_segments WHERE code_id = ?",
                (code_id,),
            ).fetchall()
            touched_ids = [row["segment_id"] for row in rows]

            conn.execute("DELETE FROM coded_segments WHERE code_id = ?", (code_id,))

            emptied_ids: list[str] = []
            for segment_id in touched_ids:
                remaining = conn.execute(
                    "SELECT 1 FROM coded_segments WHERE segment_id = ? LIMIT 1",
                    (segment_id,),
                ).fetchone()
                if remaining is None:
                    emptied_ids.append(segment_id)
            conn.executemany("DELETE FROM segments WHERE id = ?", [(sid,) for sid in emptied_ids])

            conn.execute("DELETE FROM codes WHERE id = ?", (code_id,))
        return emptied_ids

    @staticmethod
    def _require_codes(conn: sqlite3.Connection, code_ids: list[str]) -> None:
        if not code_ids:
            return
        placeholders = ", ".join("?" for _ in code_ids)
        rows = conn.execute(f"SELECT id FROM codes WHERE id IN ({placeholders})", code_ids).fetchall()
        found = {row["id"] for row in rows}
        for code_id in code_ids:
            if code_id not in found:
                raise InvalidReferenceError(f"Code not found: {code_id}")

    @staticmethod
    def _insert_code_links(conn: sqlite3.Connection, segment_id: str, code_ids: list[str]) -> None:
        created_at = now_utc_iso()
        conn.executemany(
            """
            INSERT INTO coded_segments (id, segment_id, code_id, position, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            [(new_uuid(), segment_id, code_id, position, created_at) for position, code_id in enumerate(code_ids)],
        )

    @staticmethod
    def _to_segments(rows) -> list[Segment]:
        by_id: dict[str, Segment] = {}
        for row in rows:
            segment = by_id.get(row["id"])
            if segment is None:
                segment = Segment(
                    id=row["id"],
                    document_id=row["document_id"],
                    start_offset=row["start_offset"],
                    end_offset=row["end_offset"],
                    text=row["text"],
                    created_by=row["created_by"],
                    created_at=row["created_at"],
                )
                by_id[segment.id] = segment
            if row["code_id"] is not None:
                segment.code_ids.append(row["code_id"])
        return list(by_id.values())
