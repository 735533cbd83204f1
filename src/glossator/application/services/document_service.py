from __future__ import annotations

from pathlib import Path

from glossator.core.errors import NotFoundError, ValidationError
from glossator.core.stamps import new_uuid, now_utc_iso
from glossator.domain.models.document import Document
from glossator.infrastructure.db.repos.document_repo import DocumentRepo
from glossator.infrastructure.db.repos.project_repo import ProjectRepo


class DocumentService:
    def __init__(self, project_repo: ProjectRepo, document_repo: DocumentRepo) -> None:
        self.project_repo = project_repo
        self.document_repo = document_repo

    def add_document(self, project_id: str, name: str, text: str) -> Document:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Document name is required.")
        if not isinstance(text, str) or not text:
            raise ValidationError("Document text is required.")
        if self.project_repo.get_by_id(project_id) is None:
            raise NotFoundError(f"Project not found: {project_id}")

        document = Document(
            id=new_uuid(),
            project_id=project_id,
            name=clean_name,
            text=text,
            created_at=now_utc_iso(),
        )
        self.document_repo.insert(document)
        return document

    def add_document_from_file(self, project_id: str, file_path: Path, name: str | None = None) -> Document:
        path = file_path.expanduser().resolve()
        if not path.exists() or not path.is_file():
            raise ValidationError(f"Document file not found: {path}")
        text = path.read_text(encoding="utf-8")
        return self.add_document(project_id, name or path.stem, text)

    def get_document(self, document_id: str) -> Document:
        document = self.document_repo.get_by_id(document_id)
        if document is None:
            raise NotFoundError(f"Document not found: {document_id}")
        return document

    def list_documents(self, project_id: str) -> list[Document]:
        return self.document_repo.list_for_project(project_id)

    def delete_document(self, project_id: str, document_id: str) -> None:
        document = self.document_repo.get_by_id(document_id)
        if document is None or document.project_id != project_id:
            raise NotFoundError(f"Document not found: {document_id}")
        self.document_repo.delete(document.id)
