from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Code:
    id: str
    project_id: str
    name: str
    description: str | None = None
    color: str | None = None
    flags: list[str] | None = field(default=None)
