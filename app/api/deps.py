from functools import lru_cache

from app.core.config import settings, secret_value
from app.services.analysis_orchestrator import AnalysisOrchestrator
from app.services.followup import FollowupService
from app.services.openrouter import OpenRouterClient
from app.services.pipeline import InterviewPipeline
from app.services.transcriber import (
    LocalWhisperTranscriber, OpenAIWhisperTranscriber, Transcriber,
)


@lru_cache(maxsize=1)
def get_chat_client() -> OpenRouterClient:
    return OpenRouterClient(
        api_key=secret_value(settings.openrouter_api_key),
        base_url=settings.openrouter_base_url,
        model=settings.openrouter_model,
        timeout=settings.openrouter_timeout,
        referer=settings.openrouter_referer,
        title=settings.openrouter_title,
    )


@lru_cache(maxsize=1)
def get_orchestrator() -> AnalysisOrchestrator:
    return AnalysisOrchestrator(
        chat_client=get_chat_client(),
        api_key=secret_value(settings.openrouter_api_key),
        model=settings.openrouter_model,
        max_attempts=settings.analysis_max_attempts,
        retry_delay_sec=settings.analysis_retry_delay_sec,
        deadline_sec=settings.analysis_deadline_sec,
        min_chars=settings.analysis_min_chars,
        temperature=settings.openrouter_temperature,
        max_tokens=settings.openrouter_max_tokens,
    )


@lru_cache(maxsize=1)
def get_followup_service() -> FollowupService:
    return FollowupService(
        chat_client=get_chat_client(),
        api_key=secret_value(settings.openrouter_api_key),
        model=settings.openrouter_followup_model,
    )


@lru_cache(maxsize=1)
def get_transcriber() -> Transcriber:
    if settings.transcription_backend == "local":
        return LocalWhisperTranscriber(
            model_size=settings.whisper_model,
            device=settings.whisper_device,
            compute_type=settings.whisper_compute_type,
            language=settings.whisper_language,
        )
    return OpenAIWhisperTranscriber(
        api_key=secret_value(settings.openai_api_key),
        base_url=settings.openai_base_url,
        model=settings.whisper_api_model,
        language=settings.whisper_language,
        timeout=settings.whisper_timeout,
    )


@lru_cache(maxsize=1)
def get_pipeline() -> InterviewPipeline:
    """
    Создаёт и кеширует единственный экземпляр пайплайна.
    """
    return InterviewPipeline(
        transcriber=get_transcriber(),
        orchestrator=get_orchestrator(),
        max_upload_bytes=settings.max_upload_mb * 1024 * 1024,
    )


async def shutdown_clients() -> None:
    """Закрывает HTTP-клиенты уже созданных сервисов"""
    # Незапрошенные сервисы не создаем: локальный Whisper грузил бы модель
    if get_chat_client.cache_info().currsize:
        await get_chat_client().close()

    if get_transcriber.cache_info().currsize:
        close = getattr(get_transcriber(), "close", None)
        if close is not None:
            await close()
