from __future__ import annotations

from collections.abc import Sequence

from glossator.domain.models.suggestion import IndexedCode

SYSTEM_PROMPT = """You are assisting a qualitative researcher who codes passages of text.
You will receive a project description, a numbered codebook and a selected passage.
Suggest codes for the passage. Prefer existing codes; propose a new code only when
no existing code fits.

Answer with one suggestion per line and nothing else. Use exactly one of these forms:
EXISTING | <codebook number> | <confidence 0-1> | <short rationale>
NEW | <code name> | <short description> | <comma-separated flags> | <confidence 0-1> | <short rationale>

Refer to existing codes only by their codebook number. Do not number or bullet the
lines, do not use markdown, and do not write more lines than requested."""


def render_codebook(indexed_codebook: Sequence[IndexedCode]) -> str:
    if not indexed_codebook:
        return "(the codebook is empty)"

    lines: list[str] = []
    for entry in indexed_codebook:
        line = f"{entry.index}. {entry.name}"
        if entry.description:
            line += f": {entry.description}"
        if entry.flags:
            line += f" [flags: {', '.join(entry.flags)}]"
        lines.append(line)
    return "\n".join(lines)


def render_user_prompt(
    span_text: str,
    indexed_codebook: Sequence[IndexedCode],
    limit: int,
    project_name: str | None = None,
    project_description: str | None = None,
) -> str:
    sections = [
        f"Project: {project_name or 'Untitled project'}",
    ]
    if project_description:
        sections.append(f"Project description: {project_description}")
    sections.extend(
        [
            "",
            "Codebook:",
            render_codebook(indexed_codebook),
            "",
            "Passage:",
            '"""',
            span_text,
            '"""',
            "",
            f"Return at most {limit} suggestion line{'s' if limit != 1 else ''}.",
        ]
    )
    return "\n".join(sections)
