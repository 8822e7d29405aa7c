"""
Валидация и восстановление ответа LLM по таблице полей.

Схема анализа описана одной декларативной таблицей ANALYSIS_SCHEMA.
Каждое правило превращает произвольное JSON-значение в значение нужного
типа: неверные или отсутствующие поля заменяются значениями по умолчанию,
списки обрезаются до лимита. Правила не бросают исключений и идемпотентны.
"""
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from app.models.interview_analysis import InterviewAnalysis

logger = logging.getLogger(__name__)

HIGHLIGHT_CATEGORIES = ("communication", "technical_skill",
                        "problem_solving", "leadership", "general")
PRIORITIES = ("high", "medium", "low")
TECHNICAL_LEVELS = ("junior", "mid", "senior", "staff", "principal")
CLARITY_LEVELS = ("poor", "fair", "good", "excellent")
DECISIONS = ("strong_hire", "hire", "maybe", "no_hire")

_CHOICE_SEPARATORS = re.compile(r"[\s\-]+")


class Rule:
    """Правило приведения одного поля"""

    def coerce(self, value: Any) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Text(Rule):
    default: str

    def coerce(self, value: Any) -> str:
        if isinstance(value, str) and value.strip():
            return value
        return self.default


@dataclass(frozen=True)
class Choice(Rule):
    """Значение из перечисления; "Strong Hire" и "strong-hire" -> "strong_hire" """
    allowed: Tuple[str, ...]
    default: str

    def coerce(self, value: Any) -> str:
        if not isinstance(value, str):
            return self.default
        key = _CHOICE_SEPARATORS.sub("_", value.strip().lower())
        return key if key in self.allowed else self.default


@dataclass(frozen=True)
class StringList(Rule):
    cap: int
    default: Tuple[str, ...] = ()
    unique: bool = False

    def coerce(self, value: Any) -> list:
        if not isinstance(value, list):
            return list(self.default)

        items = []
        seen = set()
        for item in value:
            if len(items) == self.cap:
                break
            if not isinstance(item, str) or not item.strip():
                continue
            if self.unique:
                key = item.strip().lower()
                if key in seen:
                    continue
                seen.add(key)
            items.append(item)
        return items


@dataclass(frozen=True)
class Number(Rule):
    low: float
    high: float
    default: float
    integer: bool = False

    def coerce(self, value: Any) -> float:
        # bool - подкласс int, а строки с числами LLM присылать не должна
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return self.default
        if math.isnan(value):
            return self.default

        value = min(self.high, max(self.low, value))
        return int(round(value)) if self.integer else float(value)


@dataclass(frozen=True)
class Record(Rule):
    fields: Mapping[str, Rule]

    def coerce(self, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            value = {}
        return {name: rule.coerce(value.get(name)) for name, rule in self.fields.items()}


@dataclass(frozen=True)
class RecordList(Rule):
    cap: int
    fields: Mapping[str, Rule]

    def coerce(self, value: Any) -> list:
        if not isinstance(value, list):
            return []
        record = Record(self.fields)
        return [record.coerce(item) for item in value[:self.cap]]


ANALYSIS_SCHEMA = Record({
    "highlights": RecordList(6, {
        "text": Text("Analysis completed"),
        "category": Choice(HIGHLIGHT_CATEGORIES, "general"),
        "confidence": Number(0.0, 1.0, 0.7),
        "reasoning": Text("Identified as positive indicator"),
    }),
    "improvements": RecordList(4, {
        "text": Text("Area for development identified"),
        "suggestion": Text("Recommend focused practice"),
        "priority": Choice(PRIORITIES, "medium"),
        "category": Text("general"),
    }),
    "technical_assessment": Record({
        "level": Choice(TECHNICAL_LEVELS, "mid"),
        "skills_demonstrated": StringList(8, unique=True),
        "knowledge_gaps": StringList(4, unique=True),
        "problem_solving_approach": Text("Structured problem-solving approach observed"),
    }),
    "communication_analysis": Record({
        "clarity": Choice(CLARITY_LEVELS, "good"),
        "structure": Text("Well-organized responses"),
        "listening": Text("Good comprehension of questions"),
        "questioning": Text("Asked relevant follow-up questions"),
    }),
    "entities": Record({
        "technologies": StringList(10, unique=True),
        "companies": StringList(5, unique=True),
        "projects": StringList(5, unique=True),
        "methodologies": StringList(5, unique=True),
    }),
    "interview_flow": RecordList(8, {
        "section": Text("discussion"),
        "summary": Text("Interview section covered"),
        "key_moments": StringList(3),
        "duration_estimate": Text("5-10 minutes"),
    }),
    "overall_recommendation": Record({
        "decision": Choice(DECISIONS, "maybe"),
        "confidence": Number(1, 10, 7, integer=True),
        "key_strengths": StringList(4, default=("Analysis completed",)),
        "main_concerns": StringList(3),
        "cultural_fit": Text("Positive indicators for team collaboration"),
        "next_steps": Text("Recommend technical deep-dive interview"),
    }),
    "interview_quality": Record({
        "questions_effectiveness": Text("Standard interview questions covered relevant topics"),
        "areas_not_explored": StringList(3),
        "suggested_follow_ups": StringList(4),
    }),
})


def coerce_analysis(parsed: Any) -> Dict[str, Any]:
    """Приводит распарсенный JSON к словарю со всеми полями схемы"""
    return ANALYSIS_SCHEMA.coerce(parsed)


def validate_section(name: str, value: Any) -> Any:
    """Приводит одно поле верхнего уровня (highlights, entities, ...)"""
    return ANALYSIS_SCHEMA.fields[name].coerce(value)


def validate_analysis(parsed: Any) -> InterviewAnalysis:
    """Строит InterviewAnalysis из произвольного JSON-значения"""
    if isinstance(parsed, dict):
        missing = [name for name in ANALYSIS_SCHEMA.fields if name not in parsed]
        if missing:
            logger.warning(f"Analysis response is missing fields: {missing}")

    return InterviewAnalysis.model_validate(coerce_analysis(parsed))
