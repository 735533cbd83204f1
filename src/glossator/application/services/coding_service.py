from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from glossator.core.errors import InvalidRangeError, InvalidReferenceError, NotFoundError
from glossator.core.stamps import new_uuid, now_utc_iso
from glossator.domain.models.document import Document
from glossator.domain.models.segment import CodingResult, DocumentCoding, Segment
from glossator.infrastructure.db.repos.code_repo import CodeRepo
from glossator.infrastructure.db.repos.document_repo import DocumentRepo
from glossator.infrastructure.db.repos.segment_repo import SegmentRepo

logger = logging.getLogger(__name__)

DEFAULT_CREATED_BY = "default-user"


class DocumentLocks:
    """One lock per document id, created on demand.

    Locks are held weakly and disappear once no caller is holding or waiting
    on them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._locks)

    @contextmanager
    def hold(self, document_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(document_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[document_id] = lock
        with lock:
            yield


_PROCESS_LOCKS = DocumentLocks()


def unique_code_ids(code_ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(code_ids))


def validate_offsets(document: Document, start_offset: int, end_offset: int) -> None:
    if isinstance(start_offset, bool) or isinstance(end_offset, bool):
        raise InvalidRangeError("Segment offsets must be integers")
    if not isinstance(start_offset, int) or not isinstance(end_offset, int):
        raise InvalidRangeError("Segment offsets must be integers")
    if start_offset < 0 or end_offset <= start_offset or end_offset > len(document.text):
        raise InvalidRangeError(
            f"Invalid segment offsets [{start_offset}, {end_offset}) "
            f"for document {document.id} of length {len(document.text)}"
        )


class CodingService:
    """Keeps each document's coded segments disjoint.

    Assigning codes to a range that overlaps existing segments replaces those
    segments outright; their codes are not merged into the new one.
    """

    def __init__(
        self,
        document_repo: DocumentRepo,
        code_repo: CodeRepo,
        segment_repo: SegmentRepo,
        locks: DocumentLocks | None = None,
    ) -> None:
        self.document_repo = document_repo
        self.code_repo = code_repo
        self.segment_repo = segment_repo
        self.locks = locks or _PROCESS_LOCKS

    def get_document(self, document_id: str) -> Document:
        document = self.document_repo.get_by_id(document_id)
        if document is None:
            raise NotFoundError(f"Document not found: {document_id}")
        return document

    def list_coding(self, document_id: str) -> DocumentCoding:
        document = self.get_document(document_id)
        return DocumentCoding(document_id=document.id, segments=self.segment_repo.list_for_document(document.id))

    def assign_codes(
        self,
        document_id: str,
        start_offset: int,
        end_offset: int,
        code_ids: Iterable[str],
        created_by: str = DEFAULT_CREATED_BY,
    ) -> CodingResult:
        unique_ids = unique_code_ids(code_ids)
        with self.locks.hold(document_id):
            document = self.get_document(document_id)
            validate_offsets(document, start_offset, end_offset)
            if not unique_ids:
                raise InvalidReferenceError("At least one code id is required to code a segment")
            self._validate_code_ids(unique_ids, document.project_id)

            segment = Segment(
                id=new_uuid(),
                document_id=document.id,
                start_offset=start_offset,
                end_offset=end_offset,
                text=document.text[start_offset:end_offset],
                created_by=created_by,
                created_at=now_utc_iso(),
                code_ids=unique_ids,
            )
            replaced_ids = self.segment_repo.replace_overlapping(segment)

        if replaced_ids:
            logger.info(
                "Segment %s on document %s replaced %d overlapping segment(s)",
                segment.id,
                document.id,
                len(replaced_ids),
            )
        return CodingResult(segment=segment, code_ids=list(unique_ids), replaced_segment_ids=replaced_ids)

    def set_codes_on_segment(self, segment_id: str, code_ids: Iterable[str]) -> CodingResult:
        unique_ids = unique_code_ids(code_ids)
        document_id = self._get_segment(segment_id).document_id

        with self.locks.hold(document_id):
            # Re-read under the lock; another writer may have replaced the segment.
            segment = self._get_segment(segment_id)
            document = self.get_document(segment.document_id)

            if not unique_ids:
                if not self.segment_repo.delete(segment.id):
                    raise NotFoundError(f"Segment not found: {segment_id}")
                logger.info("Segment %s lost its last code and was removed", segment.id)
                return CodingResult(segment=segment, code_ids=[], removed=True)

            self._validate_code_ids(unique_ids, document.project_id)
            self.segment_repo.replace_codes(segment.id, unique_ids)

        segment.code_ids = list(unique_ids)
        return CodingResult(segment=segment, code_ids=list(unique_ids))

    def clear_document(self, document_id: str) -> int:
        document = self.get_document(document_id)
        with self.locks.hold(document.id):
            removed = self.segment_repo.delete_for_document(document.id)
        logger.info("Cleared %d segment(s) from document %s", removed, document.id)
        return removed

    def delete_code(self, code_id: str) -> list[str]:
        code = self.code_repo.get_by_id(code_id)
        if code is None:
            raise NotFoundError(f"Code not found: {code_id}")
        emptied_ids = self.segment_repo.delete_code_cascade(code.id)
        logger.info("Deleted code %s; %d segment(s) left uncoded were removed", code.id, len(emptied_ids))
        return emptied_ids

    def _validate_code_ids(self, code_ids: list[str], project_id: str) -> None:
        codes = self.code_repo.get_many(code_ids)
        for code_id in code_ids:
            code = codes.get(code_id)
            if code is None:
                raise InvalidReferenceError(f"Code not found: {code_id}")
            if code.project_id != project_id:
                raise InvalidReferenceError(f"Code {code_id} does not belong to project {project_id}")

    def _get_segment(self, segment_id: str) -> Segment:
        segment = self.segment_repo.get_by_id(segment_id)
        if segment is None:
            raise NotFoundError(f"Segment not found: {segment_id}")
        return segment
