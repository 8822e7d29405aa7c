"""
Промпты для анализа интервью и генерации follow-up вопросов.
"""
from typing import Dict, List, Optional

WORDS_PER_MINUTE = 150

DEFAULT_MENTOR = "obiwan"

MENTOR_CONTEXTS: Dict[str, str] = {
    "yoda": (
        "Focus on wisdom, patience, and learning from mistakes. Emphasize personal growth "
        "and inner strength. Use reflective language that encourages deep thinking about "
        "the candidate's journey and potential."
    ),
    "obiwan": (
        "Provide strategic, balanced analysis with focus on technique and methodology. "
        "Be encouraging but realistic. Emphasize structured thinking, proper approach, "
        "and the importance of following proven principles."
    ),
    "vader": (
        "Give direct, powerful feedback that identifies weaknesses clearly but also "
        "recognizes strength and potential. Be authoritative and focused on results, "
        "power, and the path to mastery through discipline."
    ),
}

INTERVIEW_TYPE_CONTEXTS: Dict[str, str] = {
    "behavioral": (
        "Focus on storytelling, emotional intelligence, past experiences, and cultural fit. "
        "Analyze how the candidate handles conflict, leadership situations, team dynamics, "
        "and personal growth. Look for STAR method usage and authentic examples."
    ),
    "technical": (
        "Analyze problem-solving approach, technical knowledge, coding skills, and system "
        "design thinking. Evaluate algorithmic thinking, code quality, debugging skills, "
        "and ability to explain technical concepts clearly."
    ),
    "consulting": (
        "Evaluate structured thinking, business acumen, framework usage, and client-facing "
        "skills. Look for case interview methodology, quantitative reasoning, "
        "hypothesis-driven thinking, and ability to synthesize complex information."
    ),
    "leadership": (
        "Assess leadership style, team management, decision-making, and influence skills. "
        "Analyze examples of leading through change, handling difficult conversations, "
        "building teams, and driving results through others."
    ),
}

GENERAL_INTERVIEW_CONTEXT = (
    "Provide general interview performance analysis focusing on communication, "
    "problem-solving, and overall candidate fit."
)

ANALYSIS_SYSTEM_PROMPT = """You are an expert technical interview analyst with 10+ years of experience evaluating software engineering candidates.

Your expertise includes:
- Technical skill assessment
- Communication evaluation
- Problem-solving analysis
- Cultural fit indicators
- Behavioral pattern recognition

You provide structured, actionable feedback that helps both interviewers make decisions and candidates improve.

CRITICAL: You must ALWAYS respond with valid JSON only. No explanatory text before or after the JSON."""

ANALYSIS_JSON_SKELETON = """{
  "highlights": [
    {
      "text": "specific quote or achievement demonstrating strength",
      "category": "technical_skill|problem_solving|communication|leadership|general",
      "confidence": 0.85,
      "reasoning": "why this demonstrates the candidate's strength"
    }
  ],
  "improvements": [
    {
      "text": "specific area needing development",
      "suggestion": "actionable improvement advice",
      "priority": "high|medium|low",
      "category": "technical|communication|behavioral"
    }
  ],
  "technical_assessment": {
    "level": "junior|mid|senior|staff|principal",
    "skills_demonstrated": ["specific technical skills shown"],
    "knowledge_gaps": ["areas where knowledge seems limited"],
    "problem_solving_approach": "assessment of their methodology"
  },
  "communication_analysis": {
    "clarity": "poor|fair|good|excellent",
    "structure": "how well they organize thoughts",
    "listening": "how well they understood questions",
    "questioning": "quality of questions they asked"
  },
  "entities": {
    "technologies": ["specific tech mentioned"],
    "companies": ["organizations discussed"],
    "projects": ["notable projects mentioned"],
    "methodologies": ["processes/frameworks mentioned"]
  },
  "interview_flow": [
    {
      "section": "introduction|background|technical_questions|system_design|behavioral|candidate_questions|wrap_up",
      "summary": "what was covered in this section",
      "key_moments": ["notable responses or insights"],
      "duration_estimate": "estimated minutes for this section"
    }
  ],
  "overall_recommendation": {
    "decision": "strong_hire|hire|maybe|no_hire",
    "confidence": 8,
    "key_strengths": ["top 3 candidate strengths"],
    "main_concerns": ["primary areas of concern"],
    "cultural_fit": "assessment of team/company alignment",
    "next_steps": "recommended follow-up actions"
  },
  "interview_quality": {
    "questions_effectiveness": "how well the interview was conducted",
    "areas_not_explored": ["topics that could have been covered better"],
    "suggested_follow_ups": ["questions for next rounds"]
  }
}"""

FOLLOWUP_SYSTEM_PROMPT = (
    "You are an expert interview coach specializing in generating strategic follow-up "
    "questions. Your goal is to identify gaps in the conversation and suggest high-value "
    "questions that will unlock deeper insights."
)

MENTOR_PERSONALITIES: Dict[str, str] = {
    "yoda": "wise, philosophical, focuses on deeper understanding and reflection",
    "obiwan": "strategic, analytical, emphasizes process and methodology",
    "vader": "direct, results-focused, pushes for accountability and performance",
}

INTERVIEW_FOCUS_AREAS: Dict[str, str] = {
    "behavioral": "leadership scenarios, team dynamics, conflict resolution, decision-making process",
    "technical": "system design, scalability, problem-solving approach, implementation details",
    "consulting": "business strategy, data analysis, client management, stakeholder communication",
    "leadership": "team building, strategic vision, change management, organizational impact",
}


def get_mentor_context(mentor: Optional[str]) -> str:
    return MENTOR_CONTEXTS.get((mentor or "").lower(), MENTOR_CONTEXTS[DEFAULT_MENTOR])


def get_interview_type_context(interview_type: Optional[str]) -> str:
    return INTERVIEW_TYPE_CONTEXTS.get((interview_type or "").lower(), GENERAL_INTERVIEW_CONTEXT)


def estimate_duration_minutes(transcript: str) -> int:
    return round(len(transcript.split()) / WORDS_PER_MINUTE)


def build_analysis_messages(
    transcript: str,
    mentor: Optional[str] = None,
    interview_type: Optional[str] = None,
) -> List[Dict[str, str]]:
    """Собирает system + user сообщения для анализа транскрипта"""
    prompt = f"""Analyze this {estimate_duration_minutes(transcript)}-minute interview transcript and return ONLY valid JSON with this exact structure:

{ANALYSIS_JSON_SKELETON}

Analysis Guidelines:
1. Be specific and evidence-based - quote actual responses
2. Balance positive and constructive feedback
3. Consider both technical and soft skills
4. Assess communication clarity and thought process
5. Note any red flags or exceptional strengths
6. Provide actionable next steps

MENTOR CONTEXT: {get_mentor_context(mentor)}
INTERVIEW TYPE FOCUS: {get_interview_type_context(interview_type)}

Interview Transcript:
{transcript}

Return ONLY the JSON object:"""

    return [
        {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def build_followup_messages(
    original_transcript: str,
    mentor_response: str,
    mentor: str,
    interview_type: str,
) -> List[Dict[str, str]]:
    personality = MENTOR_PERSONALITIES.get(mentor, "balanced approach")
    focus = INTERVIEW_FOCUS_AREAS.get(interview_type, "general interview skills")

    prompt = f"""
CONTEXT ANALYSIS:
- Interview Type: {interview_type.upper()}
- Mentor Personality: {mentor.upper()} ({personality})
- Focus Areas: {focus}

ORIGINAL USER INPUT:
"{original_transcript}"

MENTOR'S RESPONSE:
"{mentor_response}"

TASK: Generate 3 strategic follow-up questions that will help the user get deeper, more valuable insights. Consider:

1. GAPS ANALYSIS: What important aspects did the mentor's response NOT fully address?
2. SPECIFICITY OPPORTUNITIES: Where can we push for more concrete examples, metrics, or details?
3. IMPLEMENTATION FOCUS: What practical next steps or real-world application questions would be valuable?
4. CHALLENGE SCENARIOS: What "what if" situations would test their understanding?
5. MENTOR ALIGNMENT: How can we leverage this mentor's strengths ({personality})?

RESPONSE FORMAT (JSON):
{{
  "suggestions": [
    {{
      "question": "Specific, actionable follow-up question",
      "category": "IMPLEMENTATION|SPECIFICITY|CHALLENGES|DEPTH|SCALE",
      "reasoning": "Why this question adds value"
    }}
  ]
}}

QUALITY STANDARDS:
- Questions should be specific to the context provided
- Each question should unlock different types of insights
- Avoid generic questions that could apply to any situation
- Focus on what would differentiate a junior vs senior response

Generate exactly 3 high-value follow-up questions now:"""

    return [
        {"role": "system", "content": FOLLOWUP_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]
