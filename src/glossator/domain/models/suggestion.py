from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union


@dataclass(frozen=True, slots=True)
class IndexedCode:
    """A codebook entry as offered to the suggestion provider.

    The provider only ever sees ``index``; ``code_id`` stays on our side.
    """

    index: int
    code_id: str
    name: str
    description: str | None = None
    flags: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ExistingSuggestion:
    type: ClassVar[str] = "existing"

    code_id: str
    rationale: str | None = None
    confidence: float | None = None


@dataclass(frozen=True, slots=True)
class NewSuggestion:
    type: ClassVar[str] = "new"

    name: str
    description: str | None = None
    flags: tuple[str, ...] | None = None
    rationale: str | None = None
    confidence: float | None = None


Suggestion = Union[ExistingSuggestion, NewSuggestion]


@dataclass(slots=True)
class SuggestionBatch:
    document_id: str
    start_offset: int
    end_offset: int
    limit: int
    suggestions: list[Suggestion] = field(default_factory=list)
