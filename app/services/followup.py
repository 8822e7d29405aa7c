"""
Генерация follow-up вопросов по ответу ментора.
"""
import logging
import re
from typing import List, Optional

from app.core.config import is_configured_key
from app.core.exceptions import MalformedResponseError, TransportError
from app.models.followup import (
    FollowupMetadata, FollowupRequest, FollowupResponse, FollowupSuggestion,
)
from app.services.openrouter import ChatCompletionClient
from app.services.prompts import build_followup_messages
from app.services.response_normalizer import extract_json_object

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3
FOLLOWUP_CATEGORIES = ("IMPLEMENTATION", "SPECIFICITY", "CHALLENGES", "DEPTH", "SCALE")
TEMPLATE_MODEL_NAME = "template-based"

LIST_ITEM_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")

TEMPLATE_SUGGESTIONS = {
    "behavioral": [
        ("Can you walk me through a specific example where this approach didn't work as expected?",
         "SPECIFICITY", "Pushes for real-world failure scenarios and learning"),
        ("How would you adapt this strategy when working with a remote or distributed team?",
         "CHALLENGES", "Tests adaptability to modern work environments"),
        ("What metrics would you track to measure the success of this approach over the first 90 days?",
         "IMPLEMENTATION", "Focuses on concrete measurement and accountability"),
    ],
    "technical": [
        ("How would this solution perform at 10x scale, and what bottlenecks would you anticipate?",
         "SCALE", "Tests understanding of scalability challenges"),
        ("What edge cases or failure scenarios should I be prepared to discuss in detail?",
         "CHALLENGES", "Identifies potential weak points in the solution"),
        ("Walk me through your testing strategy and what monitoring you'd implement.",
         "IMPLEMENTATION", "Focuses on production readiness and operational concerns"),
    ],
    "consulting": [
        ("What additional data would you need to validate this hypothesis, and how would you prioritize gathering it?",
         "SPECIFICITY", "Tests analytical rigor and data-driven thinking"),
        ("How would you communicate these findings to a skeptical C-level audience?",
         "IMPLEMENTATION", "Focuses on stakeholder management and communication"),
        ("What would your risk mitigation strategy look like if this recommendation doesn't deliver expected results?",
         "CHALLENGES", "Tests strategic thinking and contingency planning"),
    ],
    "leadership": [
        ("How would you handle pushback from a senior team member who disagrees with this direction?",
         "CHALLENGES", "Tests conflict resolution and influence without authority"),
        ("What would your first 100 days execution plan look like, including key stakeholder engagement?",
         "IMPLEMENTATION", "Focuses on practical leadership transition and execution"),
        ("How would you measure and communicate the cultural impact of this change to the broader organization?",
         "DEPTH", "Tests understanding of organizational dynamics and change management"),
    ],
}


def infer_category(question: str) -> str:
    q = question.lower()

    if any(word in q for word in ("example", "specific", "instance")):
        return "SPECIFICITY"
    if any(word in q for word in ("implement", "execute", "plan", "step")):
        return "IMPLEMENTATION"
    if any(word in q for word in ("what if", "challenge", "problem", "difficult")):
        return "CHALLENGES"
    if any(word in q for word in ("scale", "grow", "million", "enterprise")):
        return "SCALE"
    return "DEPTH"


def _coerce_suggestion(item) -> Optional[FollowupSuggestion]:
    if isinstance(item, str):
        item = {"question": item}
    if not isinstance(item, dict):
        return None

    question = item.get("question")
    if not isinstance(question, str) or not question.strip():
        return None

    category = item.get("category")
    if not isinstance(category, str) or category.upper() not in FOLLOWUP_CATEGORIES:
        category = infer_category(question)

    reasoning = item.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = "AI-generated strategic follow-up"

    return FollowupSuggestion(question=question.strip(), category=category.upper(), reasoning=reasoning)


def parse_followup_response(text: str) -> List[FollowupSuggestion]:
    """JSON {"suggestions": [...]}, иначе построчный разбор нумерованного списка"""
    try:
        parsed = extract_json_object(text)
    except MalformedResponseError:
        parsed = None

    if parsed is not None:
        raw_items = parsed.get("suggestions")
        items = raw_items if isinstance(raw_items, list) else []
        suggestions = [s for s in map(_coerce_suggestion, items) if s is not None]
        return suggestions[:MAX_SUGGESTIONS]

    suggestions: List[FollowupSuggestion] = []
    for line in (text or "").splitlines():
        if not line.strip():
            continue
        if LIST_ITEM_RE.match(line) or "question" in line.lower():
            question = LIST_ITEM_RE.sub("", line).replace('"', "").strip()
            if question:
                suggestions.append(FollowupSuggestion(
                    question=question, category=infer_category(question)))

    return suggestions[:MAX_SUGGESTIONS]


def template_followups(interview_type: Optional[str], mentor: Optional[str]) -> FollowupResponse:
    templates = TEMPLATE_SUGGESTIONS.get(interview_type or "", TEMPLATE_SUGGESTIONS["behavioral"])
    suggestions = [
        FollowupSuggestion(question=question, category=category, reasoning=reasoning)
        for question, category, reasoning in templates
    ]
    return FollowupResponse(
        success=True,
        suggestions=suggestions,
        metadata=FollowupMetadata(
            model=TEMPLATE_MODEL_NAME,
            interview_type=interview_type,
            mentor=mentor,
            suggestions_count=len(suggestions),
            fallback=True,
        ),
    )


class FollowupService:
    def __init__(
        self,
        chat_client: ChatCompletionClient,
        api_key: Optional[str],
        model: str = "deepseek/deepseek-chat",
    ):
        self.chat_client = chat_client
        self.api_key = api_key
        self.model = model

    async def generate(self, request: FollowupRequest) -> FollowupResponse:
        mentor = request.mentor or "yoda"
        interview_type = request.interview_type or "behavioral"

        logger.info(f"Generating follow-up suggestions ({mentor}, {interview_type})")

        if not is_configured_key(self.api_key):
            logger.warning("OpenRouter API key not configured, using template suggestions")
            return template_followups(interview_type, mentor)

        try:
            completion = await self.chat_client.complete(
                build_followup_messages(
                    request.original_transcript, request.mentor_response, mentor, interview_type),
                temperature=0.7,
                max_tokens=800,
                model=self.model,
            )
        except TransportError as e:
            logger.error(f"Follow-up generation failed: {e}")
            logger.warning("Falling back to template-based suggestions")
            return template_followups(interview_type, mentor)

        suggestions = parse_followup_response(completion.content)
        if not suggestions:
            logger.warning("No suggestions parsed from model response, using templates")
            return template_followups(interview_type, mentor)

        return FollowupResponse(
            success=True,
            suggestions=suggestions,
            metadata=FollowupMetadata(
                model=completion.model,
                interview_type=interview_type,
                mentor=mentor,
                suggestions_count=len(suggestions),
            ),
        )
