import math

import pytest

from app.services.response_validator import (
    ANALYSIS_SCHEMA,
    Choice,
    Number,
    StringList,
    Text,
    coerce_analysis,
    validate_analysis,
    validate_section,
)

TOP_LEVEL_FIELDS = [
    "highlights",
    "improvements",
    "technical_assessment",
    "communication_analysis",
    "entities",
    "interview_flow",
    "overall_recommendation",
    "interview_quality",
]

MALFORMED_INPUTS = [
    None,
    {},
    [],
    "just text",
    42,
    {"highlights": "not a list", "entities": ["wrong"], "overall_recommendation": 7},
    {"highlights": [None, 1, "str", {"text": ""}], "improvements": [{"priority": "URGENT"}]},
    {"technical_assessment": {"level": "guru", "skills_demonstrated": [1, "", "Go", "go"]}},
    {"overall_recommendation": {"decision": "super_hire", "confidence": "9", "key_strengths": None}},
    {"interview_flow": [{"key_moments": ["a", "b", "c", "d", 5]}] * 12},
]


def test_schema_covers_all_top_level_fields():
    assert list(ANALYSIS_SCHEMA.fields) == TOP_LEVEL_FIELDS


@pytest.mark.parametrize("parsed", MALFORMED_INPUTS)
def test_defaulting_is_idempotent(parsed):
    """Повторная валидация результата ничего не меняет"""
    once = coerce_analysis(parsed)
    twice = coerce_analysis(once)
    assert once == twice


@pytest.mark.parametrize("parsed", MALFORMED_INPUTS)
def test_validate_analysis_is_total(parsed):
    """Любой JSON превращается в полный анализ без исключений"""
    analysis = validate_analysis(parsed).model_dump()
    assert set(analysis) == set(TOP_LEVEL_FIELDS)


def test_missing_everything_gets_named_defaults():
    analysis = validate_analysis({})

    assert analysis.highlights == []
    assert analysis.improvements == []
    assert analysis.interview_flow == []
    assert analysis.technical_assessment.level == "mid"
    assert analysis.technical_assessment.problem_solving_approach == \
        "Structured problem-solving approach observed"
    assert analysis.communication_analysis.clarity == "good"
    assert analysis.entities.technologies == []
    assert analysis.overall_recommendation.decision == "maybe"
    assert analysis.overall_recommendation.confidence == 7
    assert analysis.overall_recommendation.key_strengths == ["Analysis completed"]
    assert analysis.interview_quality.questions_effectiveness == \
        "Standard interview questions covered relevant topics"


def test_highlights_truncated_to_first_six_in_order():
    highlights = [{"text": f"highlight {i}", "category": "communication"} for i in range(20)]

    result = validate_section("highlights", highlights)

    assert len(result) == 6
    assert [h["text"] for h in result] == [f"highlight {i}" for i in range(6)]


def test_short_lists_are_not_padded():
    result = validate_section("improvements", [{"text": "Be concise"}])
    assert len(result) == 1
    assert result[0] == {
        "text": "Be concise",
        "suggestion": "Recommend focused practice",
        "priority": "medium",
        "category": "general",
    }


def test_invalid_decision_becomes_maybe():
    result = validate_section("overall_recommendation", {"decision": "super_hire"})
    assert result["decision"] == "maybe"


@pytest.mark.parametrize("raw, expected", [
    (15, 10),
    (-3, 1),
    (8, 8),
    (7.6, 8),
    (True, 7),
    ("9", 7),
    (None, 7),
])
def test_recommendation_confidence_clamped(raw, expected):
    result = validate_section("overall_recommendation", {"confidence": raw})
    assert result["confidence"] == expected
    assert isinstance(result["confidence"], int)


def test_highlight_fields_coerced():
    result = validate_section("highlights", [
        {"text": "Explained caching", "category": "learning_ability", "confidence": 1.7},
        {"category": "Technical Skill", "confidence": float("nan")},
        "not an object",
    ])

    assert result[0]["category"] == "general"
    assert result[0]["confidence"] == 1.0
    assert result[0]["reasoning"] == "Identified as positive indicator"
    assert result[1]["text"] == "Analysis completed"
    assert result[1]["category"] == "technical_skill"
    assert result[1]["confidence"] == 0.7
    assert result[2]["text"] == "Analysis completed"


def test_entity_sets_are_unique_and_capped():
    technologies = ["Python", "python", "Go"] + [f"tech{i}" for i in range(20)]

    result = validate_section("entities", {"technologies": technologies, "companies": "Google"})

    assert result["technologies"][:3] == ["Python", "Go", "tech0"]
    assert len(result["technologies"]) == 10
    assert result["companies"] == []


def test_flow_key_moments_capped():
    result = validate_section("interview_flow", [{"key_moments": ["a", "b", "c", "d"]}])
    assert result[0]["key_moments"] == ["a", "b", "c"]
    assert result[0]["section"] == "discussion"
    assert result[0]["duration_estimate"] == "5-10 minutes"


def test_choice_normalizes_case_and_separators():
    rule = Choice(("strong_hire", "hire"), "hire")
    assert rule.coerce("Strong Hire") == "strong_hire"
    assert rule.coerce("strong-hire") == "strong_hire"
    assert rule.coerce(3) == "hire"


def test_text_rule_rejects_blank_and_non_strings():
    rule = Text("default")
    assert rule.coerce("   ") == "default"
    assert rule.coerce(5) == "default"
    assert rule.coerce("kept") == "kept"


def test_string_list_drops_invalid_items():
    rule = StringList(3, default=("fallback",))
    assert rule.coerce(["a", None, "", 2, "b", "c", "d"]) == ["a", "b", "c"]
    assert rule.coerce("a") == ["fallback"]
    assert rule.coerce([]) == []


def test_number_rule_handles_infinity():
    rule = Number(0.0, 1.0, 0.7)
    assert rule.coerce(math.inf) == 1.0
    assert rule.coerce(-math.inf) == 0.0
