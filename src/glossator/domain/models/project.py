from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Project:
    id: str
    name: str
    description: str | None
    created_at: str


@dataclass(slots=True)
class Settings:
    id: str
    ai_enabled: bool
    ai_suggestion_limit: int
