from __future__ import annotations

from pathlib import Path

from glossator.domain.models.project import Settings
from glossator.infrastructure.db.sqlite import get_connection

DEFAULT_SETTINGS_ID = "default"


class SettingsRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def get(self, settings_id: str = DEFAULT_SETTINGS_ID) -> Settings | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM settings WHERE id = ?",
                (settings_id,),
            ).fetchone()
        return self._to_settings(row) if row else None

    def upsert(self, settings: Settings) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO settings (id, ai_enabled, ai_suggestion_limit)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    ai_enabled = excluded.ai_enabled,
                    ai_suggestion_limit = excluded.ai_suggestion_limit
                """,
                (settings.id, int(settings.ai_enabled), settings.ai_suggestion_limit),
            )
            conn.commit()

    @staticmethod
    def _to_settings(row) -> Settings:
        return Settings(
            id=row["id"],
            ai_enabled=bool(row["ai_enabled"]),
            ai_suggestion_limit=int(row["ai_suggestion_limit"]),
        )
