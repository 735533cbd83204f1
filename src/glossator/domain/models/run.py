from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from glossator.domain.models.segment import Segment


@dataclass(frozen=True, slots=True)
class PlainRun:
    kind: ClassVar[str] = "plain"

    start: int
    end: int
    text: str


@dataclass(frozen=True, slots=True)
class CodedRun:
    kind: ClassVar[str] = "coded"

    segment: Segment

    @property
    def start(self) -> int:
        return self.segment.start_offset

    @property
    def end(self) -> int:
        return self.segment.end_offset

    @property
    def text(self) -> str:
        return self.segment.text


Run = Union[PlainRun, CodedRun]
