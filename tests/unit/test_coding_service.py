import threading
from pathlib import Path

import pytest

from glossator.application.services.code_service import CodeService
from glossator.application.services.coding_service import CodingService, DocumentLocks
from glossator.application.services.document_service import DocumentService
from glossator.application.services.project_service import ProjectService
from glossator.core.config import AppPaths
from glossator.core.errors import InvalidRangeError, InvalidReferenceError, NotFoundError
from glossator.domain.models.run import PlainRun
from glossator.domain.runs import iter_runs
from glossator.infrastructure.db.repos.code_repo import CodeRepo
from glossator.infrastructure.db.repos.document_repo import DocumentRepo
from glossator.infrastructure.db.repos.project_repo import ProjectRepo
from glossator.infrastructure.db.repos.segment_repo import SegmentRepo

TEXT = "This is some example text."


def _bootstrap(tmp_path: Path, text: str = TEXT):
    paths = AppPaths(
        project_root=tmp_path,
        glossator_dir=tmp_path / ".glossator",
        db_path=tmp_path / ".glossator" / "glossator.db",
    )
    project_service = ProjectService(paths)
    project_service.init_project()
    project = project_service.create_project("Project A")

    db_path = paths.db_path
    document_repo = DocumentRepo(db_path)
    code_repo = CodeRepo(db_path)
    segment_repo = SegmentRepo(db_path)
    coding = CodingService(document_repo=document_repo, code_repo=code_repo, segment_repo=segment_repo)
    codes = CodeService(ProjectRepo(db_path), code_repo, coding)
    document = DocumentService(ProjectRepo(db_path), document_repo).add_document(project.id, "Doc 1", text)

    return coding, codes, project, document


def test_assign_codes_creates_segment_with_cached_text(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "Code A")
    b = codes.create_code(project.id, "Code B")

    start = TEXT.index("some example")
    end = start + len("some example")
    result = coding.assign_codes(document.id, start, end, [a.id, b.id, a.id])

    assert result.segment.text == "some example"
    assert result.code_ids == [a.id, b.id]
    assert result.replaced_segment_ids == []

    segments = coding.list_coding(document.id).segments
    assert len(segments) == 1
    assert segments[0].text == TEXT[start:end]
    assert set(segments[0].code_ids) == {a.id, b.id}


def test_disjoint_ranges_create_independent_segments(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    code = codes.create_code(project.id, "Code A")

    coding.assign_codes(document.id, 0, 4, [code.id])
    coding.assign_codes(document.id, 4, 7, [code.id])

    segments = coding.list_coding(document.id).segments
    assert [(s.start_offset, s.end_offset) for s in segments] == [(0, 4), (4, 7)]


def test_overlapping_assignment_replaces_prior_segments(tmp_path: Path) -> None:
    text = "First sentence.\nSecond sentence."
    coding, codes, project, document = _bootstrap(tmp_path, text)
    a = codes.create_code(project.id, "Code A")
    b = codes.create_code(project.id, "Code B")

    first = coding.assign_codes(document.id, 0, 15, [a.id])
    second = coding.assign_codes(document.id, 16, len(text), [a.id])
    result = coding.assign_codes(document.id, 6, 22, [b.id])

    assert set(result.replaced_segment_ids) == {first.segment.id, second.segment.id}
    segments = coding.list_coding(document.id).segments
    assert len(segments) == 1
    assert (segments[0].start_offset, segments[0].end_offset) == (6, 22)
    assert segments[0].code_ids == [b.id]


@pytest.mark.parametrize("start,end", [(-1, 3), (3, 3), (5, 2), (0, len(TEXT) + 1)])
def test_invalid_offsets_are_rejected(tmp_path: Path, start: int, end: int) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    code = codes.create_code(project.id, "Code A")

    with pytest.raises(InvalidRangeError):
        coding.assign_codes(document.id, start, end, [code.id])
    assert coding.list_coding(document.id).segments == []


def test_codes_from_another_project_are_rejected_without_mutation(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    code = codes.create_code(project.id, "Code A")
    other_project = ProjectService(
        AppPaths(tmp_path, tmp_path / ".glossator", tmp_path / ".glossator" / "glossator.db")
    ).create_project("Project B")
    foreign = codes.create_code(other_project.id, "Foreign")

    existing = coding.assign_codes(document.id, 0, 4, [code.id])

    with pytest.raises(InvalidReferenceError):
        coding.assign_codes(document.id, 0, 7, [code.id, foreign.id])
    with pytest.raises(InvalidReferenceError):
        coding.assign_codes(document.id, 0, 7, ["missing"])

    segments = coding.list_coding(document.id).segments
    assert [s.id for s in segments] == [existing.segment.id]


def test_unknown_document_is_not_found(tmp_path: Path) -> None:
    coding, _, _, _ = _bootstrap(tmp_path)
    with pytest.raises(NotFoundError):
        coding.assign_codes("nope", 0, 1, ["x"])
    with pytest.raises(NotFoundError):
        coding.clear_document("nope")


def test_set_codes_replaces_code_set(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a, b, c = (codes.create_code(project.id, name) for name in ("A", "B", "C"))
    start = TEXT.index("example")
    created = coding.assign_codes(document.id, start, start + len("example"), [a.id, b.id])

    result = coding.set_codes_on_segment(created.segment.id, [b.id, c.id, c.id])

    assert result.removed is False
    assert sorted(result.code_ids) == sorted([b.id, c.id])
    segment = coding.list_coding(document.id).segments[0]
    assert segment.id == created.segment.id
    assert (segment.start_offset, segment.end_offset) == (start, start + len("example"))
    assert sorted(segment.code_ids) == sorted([b.id, c.id])


def test_set_codes_with_invalid_id_leaves_segment_unchanged(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")
    created = coding.assign_codes(document.id, 0, 4, [a.id])

    with pytest.raises(InvalidReferenceError):
        coding.set_codes_on_segment(created.segment.id, ["missing"])

    assert coding.list_coding(document.id).segments[0].code_ids == [a.id]


def test_set_codes_to_empty_removes_segment_and_reverts_to_plain(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")
    start = TEXT.index("example")
    created = coding.assign_codes(document.id, start, start + len("example"), [a.id])

    result = coding.set_codes_on_segment(created.segment.id, [])

    assert result.removed is True
    segments = coding.list_coding(document.id).segments
    assert segments == []
    runs = list(iter_runs(TEXT, segments))
    assert runs == [PlainRun(start=0, end=len(TEXT), text=TEXT)]


def test_set_codes_on_missing_segment(tmp_path: Path) -> None:
    coding, _, _, _ = _bootstrap(tmp_path)
    with pytest.raises(NotFoundError):
        coding.set_codes_on_segment("missing", [])


def test_clear_document_is_idempotent(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")

    assert coding.clear_document(document.id) == 0

    coding.assign_codes(document.id, 0, 4, [a.id])
    coding.assign_codes(document.id, 5, 7, [a.id])
    assert coding.clear_document(document.id) == 2
    assert coding.clear_document(document.id) == 0
    assert coding.list_coding(document.id).segments == []


def test_delete_code_cascades_to_segments(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")
    b = codes.create_code(project.id, "B")
    only_a = coding.assign_codes(document.id, 0, 4, [a.id])
    both = coding.assign_codes(document.id, 5, 7, [a.id, b.id])

    emptied = codes.delete_code(project.id, a.id)

    assert emptied == [only_a.segment.id]
    segments = coding.list_coding(document.id).segments
    assert [s.id for s in segments] == [both.segment.id]
    assert segments[0].code_ids == [b.id]
    assert codes.list_codes(project.id) == [b]


def test_concurrent_overlapping_assignments_leave_one_segment(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")
    errors: list[BaseException] = []

    def _assign(start: int, end: int) -> None:
        try:
            coding.assign_codes(document.id, start, end, [a.id])
        except BaseException as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    threads = [threading.Thread(target=_assign, args=(i, i + 6)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    segments = coding.list_coding(document.id).segments
    for left, right in zip(segments, segments[1:]):
        assert left.end_offset <= right.start_offset


class _CodeRepoWithHook(CodeRepo):
    """Runs ``hook`` once, right after the first code lookup."""

    def __init__(self, db_path: Path, hook) -> None:
        super().__init__(db_path)
        self.hook = hook

    def get_many(self, code_ids):
        codes = super().get_many(code_ids)
        hook, self.hook = self.hook, None
        if hook is not None:
            hook()
        return codes


class _SegmentRepoWithHook(SegmentRepo):
    """Runs ``hook`` once, after the ``on_read``-th segment lookup."""

    def __init__(self, db_path: Path, hook, on_read: int) -> None:
        super().__init__(db_path)
        self.hook = hook
        self.on_read = on_read
        self.reads = 0

    def get_by_id(self, segment_id):
        segment = super().get_by_id(segment_id)
        self.reads += 1
        if self.reads == self.on_read and self.hook is not None:
            self.hook()
        return segment


def _other_writer(db_path: Path) -> CodingService:
    # Separate lock registry, as another process would have.
    return CodingService(DocumentRepo(db_path), CodeRepo(db_path), SegmentRepo(db_path), locks=DocumentLocks())


def _db_path(tmp_path: Path) -> Path:
    return tmp_path / ".glossator" / "glossator.db"


def test_set_codes_on_segment_replaced_mid_update_is_not_found(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")
    b = codes.create_code(project.id, "B")
    original = coding.assign_codes(document.id, 0, 4, [a.id])
    db_path = _db_path(tmp_path)
    other = _other_writer(db_path)

    racing = CodingService(
        DocumentRepo(db_path),
        _CodeRepoWithHook(db_path, lambda: other.assign_codes(document.id, 2, 6, [a.id])),
        SegmentRepo(db_path),
    )

    with pytest.raises(NotFoundError):
        racing.set_codes_on_segment(original.segment.id, [b.id])

    segments = coding.list_coding(document.id).segments
    assert [(s.start_offset, s.end_offset, s.code_ids) for s in segments] == [(2, 6, [a.id])]


def test_set_codes_with_code_deleted_mid_update_is_invalid_reference(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")
    b = codes.create_code(project.id, "B")
    created = coding.assign_codes(document.id, 0, 4, [a.id])
    db_path = _db_path(tmp_path)
    other = _other_writer(db_path)

    racing = CodingService(
        DocumentRepo(db_path),
        _CodeRepoWithHook(db_path, lambda: other.delete_code(b.id)),
        SegmentRepo(db_path),
    )

    with pytest.raises(InvalidReferenceError):
        racing.set_codes_on_segment(created.segment.id, [a.id, b.id])

    assert coding.list_coding(document.id).segments[0].code_ids == [a.id]


def test_assign_codes_with_code_deleted_mid_update_writes_nothing(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")
    b = codes.create_code(project.id, "B")
    existing = coding.assign_codes(document.id, 0, 4, [a.id])
    db_path = _db_path(tmp_path)
    other = _other_writer(db_path)

    racing = CodingService(
        DocumentRepo(db_path),
        _CodeRepoWithHook(db_path, lambda: other.delete_code(b.id)),
        SegmentRepo(db_path),
    )

    with pytest.raises(InvalidReferenceError):
        racing.assign_codes(document.id, 0, 7, [a.id, b.id])

    assert [s.id for s in coding.list_coding(document.id).segments] == [existing.segment.id]


def test_removing_last_code_of_vanished_segment_is_not_found(tmp_path: Path) -> None:
    coding, codes, project, document = _bootstrap(tmp_path)
    a = codes.create_code(project.id, "A")
    created = coding.assign_codes(document.id, 0, 4, [a.id])
    db_path = _db_path(tmp_path)
    other = _other_writer(db_path)

    racing = CodingService(
        DocumentRepo(db_path),
        CodeRepo(db_path),
        _SegmentRepoWithHook(db_path, lambda: other.clear_document(document.id), on_read=2),
    )

    with pytest.raises(NotFoundError):
        racing.set_codes_on_segment(created.segment.id, [])


def test_document_locks_are_released_after_use() -> None:
    locks = DocumentLocks()
    with locks.hold("doc-1"):
        assert len(locks) == 1
    assert len(locks) == 0
