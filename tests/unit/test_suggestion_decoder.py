import pytest

from glossator.core.errors import ValidationError
from glossator.domain.models.suggestion import ExistingSuggestion, IndexedCode, NewSuggestion
from glossator.domain.suggestion_decoder import decode_suggestions

CODEBOOK = [IndexedCode(index=1, code_id="c1", name="Trust")]


def test_existing_line_resolves_index_to_code_id() -> None:
    out = decode_suggestions("EXISTING | 1 | 0.9 | looks relevant", CODEBOOK, limit=2)
    assert out == [ExistingSuggestion(code_id="c1", confidence=0.9, rationale="looks relevant")]
    assert out[0].type == "existing"


def test_out_of_range_index_is_skipped() -> None:
    assert decode_suggestions("EXISTING | 9 | | x", CODEBOOK, limit=2) == []


@pytest.mark.parametrize("index", ["0", "-1", "one", "1.0", "", "+1", "0_1", "\u0661"])
def test_invalid_indexes_are_skipped(index: str) -> None:
    assert decode_suggestions(f"EXISTING | {index} | 0.5 | x", CODEBOOK, limit=5) == []


def test_existing_needs_four_fields() -> None:
    assert decode_suggestions("EXISTING | 1 | 0.9", CODEBOOK, limit=5) == []


def test_limit_stops_after_first_accepted() -> None:
    raw = "EXISTING | 1 | 0.9 | first\nNEW | Distrust | | | 0.4 | second"
    out = decode_suggestions(raw, CODEBOOK, limit=1)
    assert len(out) == 1
    assert out[0].rationale == "first"


def test_new_line_with_all_fields() -> None:
    raw = "new | Institutional distrust | Doubts about institutions | policy, , trust | 0.75 | mentions courts | and police"
    out = decode_suggestions(raw, CODEBOOK, limit=3)
    assert out == [
        NewSuggestion(
            name="Institutional distrust",
            description="Doubts about institutions",
            flags=("policy", "trust"),
            confidence=0.75,
            rationale="mentions courts | and police",
        )
    ]
    assert out[0].type == "new"


def test_new_line_with_only_a_name() -> None:
    out = decode_suggestions("NEW | Hope", CODEBOOK, limit=3)
    assert out == [NewSuggestion(name="Hope")]


def test_new_line_with_blank_name_is_skipped() -> None:
    assert decode_suggestions("NEW |  | description", CODEBOOK, limit=3) == []


def test_non_numeric_confidence_is_omitted() -> None:
    out = decode_suggestions("EXISTING | 1 | high | because", CODEBOOK, limit=3)
    assert out[0].confidence is None
    assert out[0].rationale == "because"


def test_confidence_is_not_clamped() -> None:
    out = decode_suggestions("EXISTING | 1 | 1.5 | over-confident", CODEBOOK, limit=3)
    assert out[0].confidence == 1.5


def test_escaped_newlines_and_noise_are_tolerated() -> None:
    codebook = CODEBOOK + [IndexedCode(index=2, code_id="c2", name="Fear")]
    raw = (
        "Here are my suggestions:\\n"
        "\\EXISTING | 2 | 0.6 | fearful tone\\r\\n"
        "\n\n   \n"
        "maybe | 1 | 0.1 | ignored\n"
        "  Existing|1|0.3|trust  "
    )
    out = decode_suggestions(raw, codebook, limit=5)
    assert [s.code_id for s in out] == ["c2", "c1"]
    assert out[0].rationale == "fearful tone"
    assert out[1].confidence == 0.3


def test_empty_reply_decodes_to_nothing() -> None:
    assert decode_suggestions("", CODEBOOK, limit=2) == []


@pytest.mark.parametrize("limit", [0, 6, True, "2"])
def test_limit_must_be_between_one_and_five(limit: object) -> None:
    with pytest.raises(ValidationError):
        decode_suggestions("NEW | x", CODEBOOK, limit=limit)  # type: ignore[arg-type]


def test_only_line_feeds_and_carriage_returns_split_lines() -> None:
    raw = "EXISTING | 1 | 0.5 | flood\x0bwater\u2028rising\rNEW | Loss | | | | home\x85gone"
    out = decode_suggestions(raw, CODEBOOK, limit=5)
    assert [s.rationale for s in out] == ["flood\x0bwater\u2028rising", "home\x85gone"]
