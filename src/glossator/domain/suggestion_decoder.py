from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from glossator.core.errors import ValidationError
from glossator.domain.models.suggestion import ExistingSuggestion, IndexedCode, NewSuggestion, Suggestion

logger = logging.getLogger(__name__)

MIN_SUGGESTION_LIMIT = 1
MAX_SUGGESTION_LIMIT = 5

FIELD_DELIMITER = "|"
RATIONALE_JOINER = " | "

_ESCAPED_LINE_BREAKS = ("\\r\\n", "\\n", "\\r")


def validate_limit(limit: object) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(f"Suggestion limit must be an integer, got {limit!r}")
    if not MIN_SUGGESTION_LIMIT <= limit <= MAX_SUGGESTION_LIMIT:
        raise ValidationError(
            f"Suggestion limit must be between {MIN_SUGGESTION_LIMIT} and {MAX_SUGGESTION_LIMIT}, got {limit}"
        )
    return limit


def decode_suggestions(
    raw_text: str,
    indexed_codebook: Sequence[IndexedCode],
    limit: int,
) -> list[Suggestion]:
    """Turn a provider reply into at most ``limit`` suggestions.

    The reply is read line by line. Lines look like either::

        EXISTING | <codebook index> | <confidence> | <rationale>
        NEW | <name> | <description> | <flag, flag> | <confidence> | <rationale>

    Codebook indexes are 1-based positions in ``indexed_codebook``; internal
    code ids never travel to the provider. Lines that do not match are skipped,
    so a noisy reply yields fewer suggestions rather than an error.
    """
    limit = validate_limit(limit)
    by_index = {entry.index: entry for entry in indexed_codebook}

    out: list[Suggestion] = []
    for line in _normalized_lines(raw_text):
        if len(out) >= limit:
            break
        fields = [part.strip() for part in line.split(FIELD_DELIMITER)]
        kind = fields[0].upper()
        if kind == "EXISTING":
            suggestion = _decode_existing(fields, by_index)
        elif kind == "NEW":
            suggestion = _decode_new(fields)
        else:
            suggestion = None

        if suggestion is None:
            logger.debug("Skipping suggestion line: %r", line)
            continue
        out.append(suggestion)

    return out


def _normalized_lines(raw_text: str) -> list[str]:
    text = raw_text
    for escaped in _ESCAPED_LINE_BREAKS:
        text = text.replace(escaped, "\n")
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    lines: list[str] = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if line.startswith("\\"):
            line = line[1:].strip()
        if line:
            lines.append(line)
    return lines


def _decode_existing(fields: list[str], by_index: dict[int, IndexedCode]) -> ExistingSuggestion | None:
    if len(fields) < 4:
        return None
    index = _parse_index(fields[1])
    if index is None:
        return None
    entry = by_index.get(index)
    if entry is None:
        return None

    return ExistingSuggestion(
        code_id=entry.code_id,
        confidence=_parse_confidence(fields[2]),
        rationale=_join_rationale(fields[3:]),
    )


def _decode_new(fields: list[str]) -> NewSuggestion | None:
    if len(fields) < 2:
        return None
    name = fields[1]
    if not name:
        return None

    description = fields[2] if len(fields) > 2 and fields[2] else None
    flags = _parse_flags(fields[3]) if len(fields) > 3 else None
    confidence = _parse_confidence(fields[4]) if len(fields) > 4 else None

    return NewSuggestion(
        name=name,
        description=description,
        flags=flags,
        confidence=confidence,
        rationale=_join_rationale(fields[5:]),
    )


def _parse_index(value: str) -> int | None:
    if not (value.isascii() and value.isdecimal()):
        return None
    index = int(value)
    return index if index >= 1 else None


def _parse_confidence(value: str) -> float | None:
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    # Out-of-range values pass through unchanged; only NaN/inf are dropped.
    return parsed if math.isfinite(parsed) else None


def _parse_flags(value: str) -> tuple[str, ...] | None:
    flags = tuple(flag.strip() for flag in value.split(",") if flag.strip())
    return flags or None


def _join_rationale(parts: list[str]) -> str | None:
    rationale = RATIONALE_JOINER.join(parts).strip()
    return rationale or None
