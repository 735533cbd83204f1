from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Document:
    id: str
    project_id: str
    name: str
    text: str
    created_at: str
