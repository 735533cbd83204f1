from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Segment:
    """A coded span ``[start_offset, end_offset)`` of one document's text.

    ``code_ids`` holds each code once, in the order it was first applied.
    """

    id: str
    document_id: str
    start_offset: int
    end_offset: int
    text: str
    created_by: str
    created_at: str
    code_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CodingResult:
    segment: Segment
    code_ids: list[str]
    replaced_segment_ids: list[str] = field(default_factory=list)
    removed: bool = False


@dataclass(slots=True)
class DocumentCoding:
    document_id: str
    segments: list[Segment]
