from __future__ import annotations

import math

from glossator.core.errors import ValidationError
from glossator.domain.models.project import Settings
from glossator.domain.suggestion_decoder import MAX_SUGGESTION_LIMIT, MIN_SUGGESTION_LIMIT
from glossator.infrastructure.db.repos.settings_repo import DEFAULT_SETTINGS_ID, SettingsRepo

DEFAULT_SUGGESTION_LIMIT = 2


class SettingsService:
    def __init__(self, settings_repo: SettingsRepo) -> None:
        self.settings_repo = settings_repo

    def get_settings(self) -> Settings:
        settings = self.settings_repo.get(DEFAULT_SETTINGS_ID)
        if settings is None:
            settings = Settings(
                id=DEFAULT_SETTINGS_ID,
                ai_enabled=False,
                ai_suggestion_limit=DEFAULT_SUGGESTION_LIMIT,
            )
            self.settings_repo.upsert(settings)
        return settings

    def update_settings(self, ai_enabled: object, ai_suggestion_limit: object) -> Settings:
        if not isinstance(ai_enabled, bool):
            raise ValidationError("ai_enabled must be a boolean.")
        if (
            isinstance(ai_suggestion_limit, bool)
            or not isinstance(ai_suggestion_limit, (int, float))
            or not math.isfinite(ai_suggestion_limit)
        ):
            raise ValidationError(
                f"ai_suggestion_limit must be a number between {MIN_SUGGESTION_LIMIT} and {MAX_SUGGESTION_LIMIT}."
            )

        # Half-up rounding, so 2.5 becomes 3.
        limit = math.floor(ai_suggestion_limit + 0.5)
        if not MIN_SUGGESTION_LIMIT <= limit <= MAX_SUGGESTION_LIMIT:
            raise ValidationError(
                f"ai_suggestion_limit must be between {MIN_SUGGESTION_LIMIT} and {MAX_SUGGESTION_LIMIT}."
            )

        settings = Settings(id=DEFAULT_SETTINGS_ID, ai_enabled=ai_enabled, ai_suggestion_limit=limit)
        self.settings_repo.upsert(settings)
        return settings
