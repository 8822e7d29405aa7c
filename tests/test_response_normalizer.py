import json

import pytest

from app.core.exceptions import MalformedResponseError
from app.services.response_normalizer import (
    ResponseNormalizer,
    create_fallback_analysis,
    extract_json_object,
    iter_object_candidates,
    repair_json_text,
    strip_code_fence,
)

TRANSCRIPT = "Interviewer: Tell me about yourself. Candidate: I build Python APIs at Google."

FULL_ANALYSIS = {
    "highlights": [{
        "text": "Designed a sharded cache",
        "category": "technical_skill",
        "confidence": 0.9,
        "reasoning": "Clear trade-off discussion",
    }],
    "improvements": [{
        "text": "Quantify impact",
        "suggestion": "Add metrics",
        "priority": "high",
        "category": "communication",
    }],
    "technical_assessment": {
        "level": "senior",
        "skills_demonstrated": ["Python", "Redis"],
        "knowledge_gaps": ["Kubernetes"],
        "problem_solving_approach": "Hypothesis driven",
    },
    "communication_analysis": {
        "clarity": "excellent",
        "structure": "STAR",
        "listening": "Attentive",
        "questioning": "Sharp",
    },
    "entities": {
        "technologies": ["Python"],
        "companies": ["Google"],
        "projects": ["Cache"],
        "methodologies": ["Scrum"],
    },
    "interview_flow": [{
        "section": "introduction",
        "summary": "Background",
        "key_moments": ["Career switch"],
        "duration_estimate": "5 minutes",
    }],
    "overall_recommendation": {
        "decision": "strong_hire",
        "confidence": 9,
        "key_strengths": ["Depth"],
        "main_concerns": [],
        "cultural_fit": "Strong",
        "next_steps": "Team match",
    },
    "interview_quality": {
        "questions_effectiveness": "Focused",
        "areas_not_explored": ["Leadership"],
        "suggested_follow_ups": ["Ask about on-call"],
    },
}


@pytest.fixture
def normalizer():
    return ResponseNormalizer()


def test_clean_json_round_trips(normalizer):
    analysis, parsed = normalizer.normalize_with_status(json.dumps(FULL_ANALYSIS), TRANSCRIPT)

    assert parsed is True
    assert analysis.model_dump() == FULL_ANALYSIS


def test_markdown_fenced_json(normalizer):
    raw = "Here is the analysis:\n```json\n" + json.dumps(FULL_ANALYSIS) + "\n```\nHope it helps!"

    analysis = normalizer.normalize(raw, TRANSCRIPT)

    assert analysis.overall_recommendation.decision == "strong_hire"


def test_untagged_fence():
    raw = '```\n{"overall_recommendation": {"decision": "hire"}}\n```'
    assert extract_json_object(raw) == {"overall_recommendation": {"decision": "hire"}}


def test_think_block_is_ignored():
    raw = '<think>Maybe output {"decision": "no_hire"}?</think>\n{"overall_recommendation": {"decision": "hire"}}'
    assert extract_json_object(raw) == {"overall_recommendation": {"decision": "hire"}}


def test_braces_inside_strings_do_not_break_extraction():
    """Жадный поиск от первой { до последней } здесь бы сломался"""
    raw = (
        'Analysis: {"highlights": [{"text": "Wrote dict {a: 1} literal", "category": "general"}]} '
        'Note: use {curly} braces carefully.'
    )

    parsed = extract_json_object(raw)

    assert parsed["highlights"][0]["text"] == "Wrote dict {a: 1} literal"


def test_first_complete_object_wins():
    raw = 'Example {not json} then {"interview_quality": {"questions_effectiveness": "ok"}} and {"x": 1}'
    assert extract_json_object(raw) == {"interview_quality": {"questions_effectiveness": "ok"}}


def test_escaped_quotes_in_strings():
    raw = '{"highlights": [{"text": "He said \\"use {braces}\\" often"}]}'
    assert extract_json_object(raw)["highlights"][0]["text"] == 'He said "use {braces}" often'


def test_trailing_commas_and_smart_quotes_are_repaired():
    raw = '{“overall_recommendation”: {"decision": "hire", "key_strengths": ["a", "b",],},}'

    parsed = extract_json_object(raw)

    assert parsed["overall_recommendation"]["key_strengths"] == ["a", "b"]


def test_unterminated_fence_is_still_read():
    raw = '```json\n{"entities": {"technologies": ["Go"]}}'
    assert extract_json_object(raw) == {"entities": {"technologies": ["Go"]}}


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    "I cannot analyze this transcript.",
    '{"highlights": [{"text": "truncated',
    "[1, 2, 3]",
])
def test_unparseable_input_raises_malformed(raw):
    with pytest.raises(MalformedResponseError):
        extract_json_object(raw)


def test_truncated_json_does_not_match_nested_object():
    """Обрезанный ответ не должен превращаться во вложенный объект"""
    raw = '{"highlights": [{"text": "good", "category": "general"}], "improvements": ['
    with pytest.raises(MalformedResponseError):
        extract_json_object(raw)


@pytest.mark.parametrize("raw", [
    json.dumps(FULL_ANALYSIS),
    "not json at all",
    "",
    "{}",
    '{"highlights": 5}',
    '{"a":' * 5000 + '1' + '}' * 5000,
])
def test_normalize_always_returns_complete_schema(normalizer, raw):
    analysis = normalizer.normalize(raw, TRANSCRIPT).model_dump()
    assert set(analysis) == set(FULL_ANALYSIS)


def test_parse_failure_returns_fallback(normalizer):
    analysis, parsed = normalizer.normalize_with_status("Sorry, I can't help with that.", TRANSCRIPT)

    assert parsed is False
    assert analysis.technical_assessment.level == "unknown"
    assert analysis.communication_analysis.clarity == "unknown"
    assert analysis.overall_recommendation.decision == "maybe"
    assert analysis.overall_recommendation.confidence == 5
    assert "Sorry, I can't help with that." in analysis.highlights[0].reasoning


def test_fallback_embeds_only_a_prefix_of_raw_text():
    raw = "x" * 1000
    analysis = create_fallback_analysis(TRANSCRIPT, raw, preview_chars=50)

    reasoning = analysis.highlights[0].reasoning
    assert "x" * 50 + "..." in reasoning
    assert "x" * 51 not in reasoning


def test_fallback_with_empty_raw_text():
    analysis = create_fallback_analysis("", "")
    assert "(empty response)" in analysis.highlights[0].reasoning


def test_strip_code_fence_without_fence():
    assert strip_code_fence("  {\"a\": 1}  ") == '{"a": 1}'


def test_iter_object_candidates_skips_nested_objects():
    candidates = list(iter_object_candidates('{"a": {"b": 1}} {"c": 2}'))
    assert candidates == ['{"a": {"b": 1}}', '{"c": 2}']


def test_repair_removes_line_comments():
    repaired = repair_json_text('{\n  "a": 1, // comment\n  "b": 2\n}')
    assert json.loads(repaired) == {"a": 1, "b": 2}


def test_deeply_nested_json_falls_back(normalizer):
    """Слишком глубокая вложенность не должна ронять нормализацию"""
    raw = '{"a":' * 5000 + '1' + '}' * 5000

    analysis, parsed = normalizer.normalize_with_status(raw, TRANSCRIPT)

    assert parsed is False
    assert analysis.technical_assessment.level == "unknown"


def test_repair_keeps_slashes_and_commas_inside_strings():
    raw = (
        '{\n'
        '  "note": "use a // b, then ]",  // comment with "quotes"\n'
        '  "url": "see http://example.com",\n'
        '  "list": ["x, }", "y",],\n'
        '}'
    )

    assert json.loads(repair_json_text(raw)) == {
        "note": "use a // b, then ]",
        "url": "see http://example.com",
        "list": ["x, }", "y"],
    }


def test_repaired_strings_survive_extraction():
    raw = 'Result: {"highlights": [{"text": "Mentioned a // b operator", "category": "general",},]}'

    parsed = extract_json_object(raw)

    assert parsed["highlights"][0]["text"] == "Mentioned a // b operator"
