from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from glossator.application.services.coding_service import CodingService, validate_offsets
from glossator.application.services.settings_service import SettingsService
from glossator.core.errors import ConfigurationError, SuggestionsDisabledError
from glossator.domain.models.code import Code
from glossator.domain.models.document import Document
from glossator.domain.models.segment import CodingResult, DocumentCoding, Segment
from glossator.domain.models.suggestion import IndexedCode, SuggestionBatch
from glossator.domain.runs import DocumentRuns, decompose_runs
from glossator.domain.suggestion_decoder import decode_suggestions, validate_limit
from glossator.infrastructure.db.repos.code_repo import CodeRepo
from glossator.infrastructure.db.repos.project_repo import ProjectRepo
from glossator.infrastructure.llm.prompt import SYSTEM_PROMPT, render_user_prompt
from glossator.infrastructure.llm.provider import SuggestionProvider

logger = logging.getLogger(__name__)


def build_indexed_codebook(codes: Iterable[Code]) -> list[IndexedCode]:
    return [
        IndexedCode(
            index=position,
            code_id=code.id,
            name=code.name,
            description=code.description,
            flags=tuple(code.flags or ()),
        )
        for position, code in enumerate(codes, start=1)
    ]


class AnnotationService:
    """Entry point for coding documents and asking for code suggestions."""

    def __init__(
        self,
        coding_service: CodingService,
        project_repo: ProjectRepo,
        code_repo: CodeRepo,
        settings_service: SettingsService,
        provider: SuggestionProvider | None = None,
    ) -> None:
        self.coding_service = coding_service
        self.project_repo = project_repo
        self.code_repo = code_repo
        self.settings_service = settings_service
        self.provider = provider

    def get_coding(self, document_id: str) -> DocumentCoding:
        return self.coding_service.list_coding(document_id)

    def assign_codes(
        self,
        document_id: str,
        start_offset: int,
        end_offset: int,
        code_ids: Iterable[str],
    ) -> CodingResult:
        return self.coding_service.assign_codes(document_id, start_offset, end_offset, code_ids)

    def set_codes_on_segment(self, segment_id: str, code_ids: Iterable[str]) -> CodingResult:
        return self.coding_service.set_codes_on_segment(segment_id, code_ids)

    def clear_document(self, document_id: str) -> int:
        return self.coding_service.clear_document(document_id)

    def decompose_runs(self, document_id: str) -> DocumentRuns:
        document = self.coding_service.get_document(document_id)
        segments = self.coding_service.segment_repo.list_for_document(document.id)
        return decompose_runs(document.text, segments)

    @staticmethod
    def decompose(document: Document, segments: Sequence[Segment]) -> DocumentRuns:
        return decompose_runs(document.text, segments)

    def request_suggestions(
        self,
        document_id: str,
        start_offset: int,
        end_offset: int,
        limit: int | None = None,
        timeout: float | None = None,
        force: bool = False,
    ) -> SuggestionBatch:
        document = self.coding_service.get_document(document_id)
        validate_offsets(document, start_offset, end_offset)

        settings = self.settings_service.get_settings()
        if not settings.ai_enabled and not force:
            raise SuggestionsDisabledError("AI suggestions are disabled. Enable them in settings first.")
        effective_limit = validate_limit(settings.ai_suggestion_limit if limit is None else limit)

        if self.provider is None:
            raise ConfigurationError("No suggestion provider is configured.")

        project = self.project_repo.get_by_id(document.project_id)
        indexed_codebook = build_indexed_codebook(self.code_repo.list_for_project(document.project_id))
        span_text = document.text[start_offset:end_offset]

        user_prompt = render_user_prompt(
            span_text,
            indexed_codebook,
            effective_limit,
            project_name=project.name if project else None,
            project_description=project.description if project else None,
        )
        raw_text = self.provider.complete(SYSTEM_PROMPT, user_prompt, timeout=timeout)
        suggestions = decode_suggestions(raw_text, indexed_codebook, effective_limit)

        logger.info(
            "Decoded %d suggestion(s) for document %s [%d, %d)",
            len(suggestions),
            document.id,
            start_offset,
            end_offset,
        )
        return SuggestionBatch(
            document_id=document.id,
            start_offset=start_offset,
            end_offset=end_offset,
            limit=effective_limit,
            suggestions=suggestions,
        )
