# Экспортируем все модели для удобного импорта
from .transcript import Transcript, TranscriptSegment, WordTiming
from .interview_analysis import (
    AnalysisMetadata,
    AnalysisResponse,
    CommunicationAnalysis,
    Entities,
    Highlight,
    Improvement,
    InterviewAnalysis,
    InterviewFlowSection,
    InterviewQuality,
    OverallRecommendation,
    TechnicalAssessment,
)
from .transcription import (
    CompleteResponse,
    TimelineEntry,
    TranscriptEntities,
    TranscriptionMetadata,
    TranscriptionResponse,
)
from .followup import FollowupRequest, FollowupResponse, FollowupSuggestion

__all__ = [
    "Transcript",
    "TranscriptSegment",
    "WordTiming",
    "AnalysisMetadata",
    "AnalysisResponse",
    "CommunicationAnalysis",
    "Entities",
    "Highlight",
    "Improvement",
    "InterviewAnalysis",
    "InterviewFlowSection",
    "InterviewQuality",
    "OverallRecommendation",
    "TechnicalAssessment",
    "CompleteResponse",
    "TimelineEntry",
    "TranscriptEntities",
    "TranscriptionMetadata",
    "TranscriptionResponse",
    "FollowupRequest",
    "FollowupResponse",
    "FollowupSuggestion",
]
