"""
Модели результата анализа интервью.

Все поля всегда заполнены: значения по умолчанию подставляет
app.services.response_validator, модели только фиксируют форму.
"""
from datetime import datetime
from typing import List, Dict, Any, Literal, Optional
from pydantic import BaseModel, Field

HighlightCategory = Literal[
    "communication", "technical_skill", "problem_solving", "leadership", "general"
]
Priority = Literal["high", "medium", "low"]
# "unknown" выставляет только запасной анализ при ошибке парсинга
TechnicalLevel = Literal["junior", "mid", "senior", "staff", "principal", "unknown"]
Clarity = Literal["poor", "fair", "good", "excellent", "unknown"]
Decision = Literal["strong_hire", "hire", "maybe", "no_hire"]
AnalysisType = Literal["live", "parse_fallback", "demo"]


class Highlight(BaseModel):
    text: str
    category: HighlightCategory
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str


class Improvement(BaseModel):
    text: str
    suggestion: str
    priority: Priority
    category: str


class TechnicalAssessment(BaseModel):
    level: TechnicalLevel
    skills_demonstrated: List[str] = Field(max_length=8)
    knowledge_gaps: List[str] = Field(max_length=4)
    problem_solving_approach: str


class CommunicationAnalysis(BaseModel):
    clarity: Clarity
    structure: str
    listening: str
    questioning: str


class Entities(BaseModel):
    technologies: List[str] = Field(max_length=10)
    companies: List[str] = Field(max_length=5)
    projects: List[str] = Field(max_length=5)
    methodologies: List[str] = Field(max_length=5)


class InterviewFlowSection(BaseModel):
    section: str
    summary: str
    key_moments: List[str] = Field(max_length=3)
    duration_estimate: str


class OverallRecommendation(BaseModel):
    decision: Decision
    confidence: int = Field(ge=1, le=10)
    key_strengths: List[str] = Field(max_length=4)
    main_concerns: List[str] = Field(max_length=3)
    cultural_fit: str
    next_steps: str


class InterviewQuality(BaseModel):
    questions_effectiveness: str
    areas_not_explored: List[str] = Field(max_length=3)
    suggested_follow_ups: List[str] = Field(max_length=4)


class InterviewAnalysis(BaseModel):
    """Нормализованный анализ интервью"""
    highlights: List[Highlight] = Field(max_length=6)
    improvements: List[Improvement] = Field(max_length=4)
    technical_assessment: TechnicalAssessment
    communication_analysis: CommunicationAnalysis
    entities: Entities
    interview_flow: List[InterviewFlowSection] = Field(max_length=8)
    overall_recommendation: OverallRecommendation
    interview_quality: InterviewQuality


class AnalysisMetadata(BaseModel):
    model: str
    timestamp: datetime = Field(default_factory=datetime.now)
    transcript_length: int
    analysis_type: AnalysisType
    demo_mode: bool = False
    attempt_number: Optional[int] = None
    token_usage: Optional[Dict[str, Any]] = None
    mentor: Optional[str] = None
    interview_type: Optional[str] = None
    processing_time_sec: Optional[float] = None


class AnalysisResponse(BaseModel):
    success: bool = True
    analysis: InterviewAnalysis
    metadata: AnalysisMetadata
