from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from glossator.domain.models.run import CodedRun, PlainRun, Run
from glossator.domain.models.segment import Segment


def iter_runs(text: str, segments: Iterable[Segment]) -> Iterator[Run]:
    """Yield plain and coded runs that partition ``text`` from left to right.

    Segments are expected not to overlap. Equal start offsets keep their input
    order.
    """
    ordered = sorted(segments, key=lambda s: s.start_offset)
    cursor = 0
    for segment in ordered:
        if segment.start_offset > cursor:
            yield PlainRun(start=cursor, end=segment.start_offset, text=text[cursor : segment.start_offset])
        yield CodedRun(segment=segment)
        cursor = segment.end_offset

    if cursor < len(text):
        yield PlainRun(start=cursor, end=len(text), text=text[cursor:])


class DocumentRuns:
    """Restartable view over the runs of one document."""

    def __init__(self, text: str, segments: Sequence[Segment]) -> None:
        self.text = text
        self.segments = tuple(segments)

    def __iter__(self) -> Iterator[Run]:
        return iter_runs(self.text, self.segments)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def coded(self) -> list[CodedRun]:
        return [run for run in self if isinstance(run, CodedRun)]


def decompose_runs(text: str, segments: Sequence[Segment]) -> DocumentRuns:
    return DocumentRuns(text, segments)
