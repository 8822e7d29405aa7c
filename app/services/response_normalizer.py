"""
Нормализация ответа LLM в InterviewAnalysis.

Ответ модели - недоверенный текст: JSON может быть обернут в markdown,
окружен пояснениями, содержать лишние запятые или быть обрезан.
Нормализатор извлекает первый синтаксически полный JSON-объект,
прогоняет его через таблицу правил и никогда не бросает исключений:
если JSON извлечь нельзя, возвращается запасной анализ.
"""
import json
import logging
import re
from typing import Any, Dict, Iterator, Tuple

from app.core.exceptions import MalformedResponseError
from app.models.interview_analysis import (
    CommunicationAnalysis, Entities, Highlight, Improvement,
    InterviewAnalysis, InterviewQuality, OverallRecommendation,
    TechnicalAssessment,
)
from app.services.response_validator import validate_analysis

logger = logging.getLogger(__name__)

# Reasoning-модели (DeepSeek R1) пишут рассуждения перед ответом
THINK_BLOCK_RE = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
FENCED_BLOCK_RE = re.compile(r"```[ \t]*(?:json)?[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)
OPENING_FENCE_RE = re.compile(r"```[ \t]*(?:json)?[ \t]*\r?\n?", re.IGNORECASE)

MAX_CANDIDATES = 20
RAW_PREVIEW_CHARS = 200


def strip_code_fence(text: str) -> str:
    """Возвращает содержимое первого markdown-блока или весь текст"""
    match = FENCED_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()

    # Ответ обрезан по max_tokens: закрывающего ``` нет
    opening = OPENING_FENCE_RE.search(text)
    if opening:
        return text[opening.end():].strip()

    return text.strip()


def _string_spans(text: str) -> Iterator[Tuple[int, bool]]:
    """Для каждого индекса сообщает, находится ли символ внутри JSON-строки"""
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            yield index, True
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        else:
            yield index, False
            if char == '"':
                in_string = True


def _remove_line_comments(text: str) -> str:
    # Кавычки внутри комментария не должны переключать состояние строки
    out = []
    in_string = False
    escaped = False
    index = 0
    while index < len(text):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif text.startswith("//", index):
            newline = text.find("\n", index)
            index = len(text) if newline == -1 else newline
            continue
        out.append(char)
        index += 1
    return "".join(out)


def _remove_trailing_commas(text: str) -> str:
    out = []
    for index, in_string in _string_spans(text):
        char = text[index]
        if char == "," and not in_string:
            following = index + 1
            while following < len(text) and text[following].isspace():
                following += 1
            if following < len(text) and text[following] in "}]":
                continue
        out.append(char)
    return "".join(out)


def repair_json_text(text: str) -> str:
    """Чинит типичные ошибки LLM: «умные» кавычки, комментарии, хвостовые запятые"""
    s = (text.replace("“", '"').replace("”", '"')
         .replace("‘", "'").replace("’", "'"))
    # Содержимое строк не трогаем: "a // b" и URL остаются как есть
    s = _remove_line_comments(s)
    s = _remove_trailing_commas(s)
    return s.strip()


def _find_object_end(text: str, start: int) -> int | None:
    """Индекс '}', закрывающей объект, открытый в start; скобки внутри строк не считаются"""
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index

    return None


def iter_object_candidates(text: str) -> Iterator[str]:
    """Перебирает сбалансированные {...} подстроки слева направо, не заходя внутрь"""
    start = text.find("{")
    found = 0

    while start != -1 and found < MAX_CANDIDATES:
        end = _find_object_end(text, start)
        if end is None:
            # Дальше все вложено в незакрытый объект
            return
        found += 1
        yield text[start:end + 1]
        start = text.find("{", end + 1)


def _parse_candidate(candidate: str) -> Dict[str, Any] | None:
    # RecursionError: сбалансированная, но слишком глубокая вложенность
    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError):
        try:
            parsed = json.loads(repair_json_text(candidate), strict=False)
        except (json.JSONDecodeError, RecursionError):
            return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Извлекает первый синтаксически полный JSON-объект из ответа модели.

    Raises:
        MalformedResponseError: если пригодного объекта нет
    """
    if not text or not isinstance(text, str):
        raise MalformedResponseError("Empty response")

    cleaned = THINK_BLOCK_RE.sub("", text)
    fenced = strip_code_fence(cleaned)

    # Сначала содержимое markdown-блока, затем весь текст
    sources = [fenced] if fenced == cleaned.strip() else [fenced, cleaned]
    for source in sources:
        for candidate in iter_object_candidates(source):
            parsed = _parse_candidate(candidate)
            if parsed is not None:
                return parsed

    raise MalformedResponseError("No JSON object found in response")


def _preview(raw_text: str, limit: int) -> str:
    if not raw_text or not raw_text.strip():
        return "(empty response)"
    text = " ".join(raw_text.split())
    return text[:limit] + ("..." if len(text) > limit else "")


def create_fallback_analysis(
    original_input: str,
    raw_text: str,
    preview_chars: int = RAW_PREVIEW_CHARS,
) -> InterviewAnalysis:
    """Анализ-заглушка: модель ответила, но ответ не удалось разобрать"""
    word_count = len((original_input or "").split())

    return InterviewAnalysis(
        highlights=[Highlight(
            text="AI analysis completed but response parsing failed",
            category="general",
            confidence=0.5,
            reasoning=(
                "Technical issue with response format. Raw response began with: "
                f"{_preview(raw_text, preview_chars)}"
            ),
        )],
        improvements=[Improvement(
            text="Please retry the analysis",
            suggestion="The AI provided analysis but in an unexpected format",
            priority="high",
            category="technical",
        )],
        technical_assessment=TechnicalAssessment(
            level="unknown",
            skills_demonstrated=[],
            knowledge_gaps=["Analysis incomplete"],
            problem_solving_approach="Unable to assess due to parsing error",
        ),
        communication_analysis=CommunicationAnalysis(
            clarity="unknown",
            structure="Unable to assess",
            listening="Unable to assess",
            questioning="Unable to assess",
        ),
        entities=Entities(technologies=[], companies=[], projects=[], methodologies=[]),
        interview_flow=[],
        overall_recommendation=OverallRecommendation(
            decision="maybe",
            confidence=5,
            key_strengths=["Requires manual review"],
            main_concerns=["Analysis parsing failed"],
            cultural_fit="Unable to assess",
            next_steps="Manual review recommended",
        ),
        interview_quality=InterviewQuality(
            questions_effectiveness=(
                f"Unable to assess due to technical issue ({word_count} transcript words received)"
            ),
            areas_not_explored=[],
            suggested_follow_ups=[],
        ),
    )


class ResponseNormalizer:
    """Превращает сырой ответ модели в InterviewAnalysis"""

    def __init__(self, preview_chars: int = RAW_PREVIEW_CHARS):
        self.preview_chars = preview_chars

    def normalize(self, raw_text: str, original_input: str) -> InterviewAnalysis:
        analysis, _ = self.normalize_with_status(raw_text, original_input)
        return analysis

    def normalize_with_status(
        self, raw_text: str, original_input: str
    ) -> Tuple[InterviewAnalysis, bool]:
        """
        Returns:
            (анализ, True) если JSON разобран, (запасной анализ, False) иначе
        """
        try:
            parsed = extract_json_object(raw_text)
        except MalformedResponseError as e:
            logger.warning(f"Failed to parse AI response: {e}")
            logger.debug(f"Raw response: {(raw_text or '')[:500]}")
            return create_fallback_analysis(original_input, raw_text, self.preview_chars), False

        analysis = validate_analysis(parsed)
        logger.info("Response validation successful")
        return analysis, True
