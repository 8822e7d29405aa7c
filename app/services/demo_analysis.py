"""
Демо-анализ: используется, когда ключ OpenRouter не настроен
или все попытки обращения к API завершились ошибкой.

Данные шаблонные, несколько полей меняются по простым
эвристикам (упоминания технологий и компаний, длина интервью).
"""
import re
from typing import Optional

from app.models.interview_analysis import (
    AnalysisMetadata, AnalysisResponse, CommunicationAnalysis, Entities,
    Highlight, Improvement, InterviewAnalysis, InterviewFlowSection,
    InterviewQuality, OverallRecommendation, TechnicalAssessment,
)

DEMO_MODEL_NAME = "Demo Mode - Enhanced Analysis"
LONG_INTERVIEW_WORDS = 800

TECH_PATTERN = re.compile(r"javascript|react|node|python|java|system|design|database|api", re.IGNORECASE)
COMPANY_PATTERN = re.compile(r"google|microsoft|amazon|apple|meta|netflix|uber", re.IGNORECASE)

QUESTIONS_EFFECTIVENESS_BY_TYPE = {
    "behavioral": "Good coverage of past experiences, team dynamics and conflict scenarios",
    "technical": "Good coverage of problem-solving approach and technical depth",
    "consulting": "Good coverage of structured thinking and business reasoning",
    "leadership": "Good coverage of leadership style and decision-making examples",
}


def generate_demo_analysis(
    transcript: str,
    mentor: Optional[str] = None,
    interview_type: Optional[str] = None,
) -> AnalysisResponse:
    has_tech = bool(TECH_PATTERN.search(transcript))
    has_companies = bool(COMPANY_PATTERN.search(transcript))
    is_long_interview = len(transcript.split()) > LONG_INTERVIEW_WORDS

    if has_tech:
        level = "senior" if is_long_interview else "mid"
        skills = ["JavaScript", "React", "Node.js", "System Design", "Problem Solving"]
        technologies = ["JavaScript", "React", "Node.js", "Database", "API"]
    else:
        level = "junior"
        skills = ["Programming Fundamentals", "Logical Thinking"]
        technologies = ["Programming"]

    analysis = InterviewAnalysis(
        highlights=[
            Highlight(
                text="Demonstrated clear communication throughout the interview",
                category="communication",
                confidence=0.85,
                reasoning="Responses were well-structured and easy to follow",
            ),
            Highlight(
                text=("Strong technical knowledge in modern web development" if has_tech
                      else "Good fundamental technical understanding"),
                category="technical_skill",
                confidence=0.9 if has_tech else 0.7,
                reasoning="Showed familiarity with relevant technologies and concepts",
            ),
            Highlight(
                text="Proactive about asking clarifying questions",
                category="problem_solving",
                confidence=0.8,
                reasoning="Good practice for understanding requirements before solving",
            ),
        ],
        improvements=[
            Improvement(
                text="Could provide more specific examples with quantified impact",
                suggestion=("When describing achievements, include metrics like performance "
                            "improvements or user impact"),
                priority="medium",
                category="communication",
            ),
            Improvement(
                text="Opportunity to discuss system design considerations",
                suggestion="Elaborate on scalability, reliability, and trade-offs in technical solutions",
                priority="medium",
                category="technical",
            ),
        ],
        technical_assessment=TechnicalAssessment(
            level=level,
            skills_demonstrated=skills,
            knowledge_gaps=([] if is_long_interview
                            else ["Advanced system architecture", "Performance optimization"]),
            problem_solving_approach="Systematic approach with good questioning technique",
        ),
        communication_analysis=CommunicationAnalysis(
            clarity="good",
            structure="Well-organized responses with clear examples",
            listening="Good comprehension and appropriate follow-up questions",
            questioning="Asked relevant questions about requirements and constraints",
        ),
        entities=Entities(
            technologies=technologies,
            companies=["Google", "Microsoft", "Amazon"] if has_companies else ["Tech Company"],
            projects=["Web Application", "System Design"],
            methodologies=["Agile", "Problem-Solving Process"],
        ),
        interview_flow=[
            InterviewFlowSection(
                section="introduction",
                summary="Background and experience discussion",
                key_moments=["Professional background", "Key experiences"],
                duration_estimate="8-10 minutes",
            ),
            InterviewFlowSection(
                section="technical_questions",
                summary="Technical problem-solving and system design",
                key_moments=["Approach explanation", "Technology choices", "Trade-off considerations"],
                duration_estimate="15-20 minutes",
            ),
            InterviewFlowSection(
                section="candidate_questions",
                summary="Questions about role and team",
                key_moments=["Interest in team dynamics", "Growth opportunities"],
                duration_estimate="5-8 minutes",
            ),
        ],
        overall_recommendation=OverallRecommendation(
            decision="hire" if has_tech else "maybe",
            confidence=8 if has_tech else 6,
            key_strengths=[
                "Clear communication skills",
                "Strong technical foundation" if has_tech else "Good learning potential",
                "Collaborative approach",
            ],
            main_concerns=[] if is_long_interview else ["Limited experience with complex systems"],
            cultural_fit="Positive indicators for team collaboration and growth mindset",
            next_steps=("Technical deep-dive or system design round" if has_tech
                        else "Pair programming or technical assessment"),
        ),
        interview_quality=InterviewQuality(
            questions_effectiveness=QUESTIONS_EFFECTIVENESS_BY_TYPE.get(
                (interview_type or "").lower(),
                "Good coverage of technical and behavioral aspects",
            ),
            areas_not_explored=[] if is_long_interview else ["Leadership experience", "Conflict resolution"],
            suggested_follow_ups=["System design deep-dive", "Code review exercise",
                                  "Team collaboration scenarios"],
        ),
    )

    return AnalysisResponse(
        success=True,
        analysis=analysis,
        metadata=AnalysisMetadata(
            model=DEMO_MODEL_NAME,
            transcript_length=len(transcript),
            analysis_type="demo",
            demo_mode=True,
            mentor=mentor,
            interview_type=interview_type,
        ),
    )
