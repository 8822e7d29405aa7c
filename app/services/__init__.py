# Экспортируем все сервисы для удобного импорта
from app.services.response_validator import validate_analysis, validate_section, ANALYSIS_SCHEMA
from app.services.response_normalizer import (
    ResponseNormalizer,
    create_fallback_analysis,
    extract_json_object,
)
from app.services.demo_analysis import generate_demo_analysis
from app.services.openrouter import ChatCompletion, ChatCompletionClient, OpenRouterClient
from app.services.analysis_orchestrator import AnalysisOrchestrator
from app.services.followup import FollowupService
from app.services.transcriber import (
    Transcriber,
    OpenAIWhisperTranscriber,
    LocalWhisperTranscriber,
    validate_audio_upload,
)
from app.services.transcript_insights import build_timeline, extract_entities
from app.services.pipeline import InterviewPipeline

__all__ = [
    # Validation
    "validate_analysis",
    "validate_section",
    "ANALYSIS_SCHEMA",
    "ResponseNormalizer",
    "create_fallback_analysis",
    "extract_json_object",

    # Analysis
    "generate_demo_analysis",
    "AnalysisOrchestrator",
    "FollowupService",

    # LLM
    "ChatCompletion",
    "ChatCompletionClient",
    "OpenRouterClient",

    # Transcription
    "Transcriber",
    "OpenAIWhisperTranscriber",
    "LocalWhisperTranscriber",
    "validate_audio_upload",
    "build_timeline",
    "extract_entities",

    # Pipeline
    "InterviewPipeline",
]
