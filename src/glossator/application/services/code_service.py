from __future__ import annotations

from collections.abc import Iterable

from glossator.application.services.coding_service import CodingService
from glossator.core.errors import NotFoundError, ValidationError
from glossator.core.stamps import new_uuid
from glossator.domain.models.code import Code
from glossator.infrastructure.db.repos.code_repo import CodeRepo
from glossator.infrastructure.db.repos.project_repo import ProjectRepo

_UNSET = object()


class CodeService:
    def __init__(self, project_repo: ProjectRepo, code_repo: CodeRepo, coding_service: CodingService) -> None:
        self.project_repo = project_repo
        self.code_repo = code_repo
        self.coding_service = coding_service

    def create_code(
        self,
        project_id: str,
        name: str,
        description: str | None = None,
        color: str | None = None,
        flags: Iterable[object] | None = None,
    ) -> Code:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Code name is required.")
        if self.project_repo.get_by_id(project_id) is None:
            raise NotFoundError(f"Project not found: {project_id}")

        code = Code(
            id=new_uuid(),
            project_id=project_id,
            name=clean_name,
            description=_opt_str(description),
            color=_opt_str(color),
            flags=normalize_flags(flags) if flags is not None else None,
        )
        self.code_repo.insert(code)
        return code

    def list_codes(self, project_id: str) -> list[Code]:
        return self.code_repo.list_for_project(project_id)

    def update_code(
        self,
        project_id: str,
        code_id: str,
        name: object = _UNSET,
        description: object = _UNSET,
        color: object = _UNSET,
        flags: object = _UNSET,
    ) -> Code:
        """Apply a partial update.

        A blank name is ignored; a blank description or color clears the field.
        """
        code = self._get_project_code(project_id, code_id)

        if isinstance(name, str) and name.strip():
            code.name = name.strip()
        if isinstance(description, str):
            code.description = _opt_str(description)
        if isinstance(color, str):
            code.color = _opt_str(color)
        if flags is not _UNSET and flags is not None:
            if isinstance(flags, (str, bytes)) or not isinstance(flags, Iterable):
                raise ValidationError("flags must be a list of strings.")
            code.flags = normalize_flags(flags)

        self.code_repo.update(code)
        return code

    def delete_code(self, project_id: str, code_id: str) -> list[str]:
        code = self._get_project_code(project_id, code_id)
        return self.coding_service.delete_code(code.id)

    def _get_project_code(self, project_id: str, code_id: str) -> Code:
        code = self.code_repo.get_by_id(code_id)
        if code is None or code.project_id != project_id:
            raise NotFoundError(f"Code not found: {code_id}")
        return code


def normalize_flags(flags: Iterable[object]) -> list[str] | None:
    normalized = [flag.strip() for flag in flags if isinstance(flag, str) and flag.strip()]
    return normalized or None


def _opt_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None
