import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.api.deps import get_pipeline
from app.core.exceptions import InvalidAudioError
from app.models.transcription import TranscriptionResponse
from app.services.pipeline import InterviewPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["transcription"])


@router.post("/transcribe", response_model=TranscriptionResponse)
async def transcribe_audio(
    audio: UploadFile = File(...),
    pipeline: InterviewPipeline = Depends(get_pipeline),
):
    """
    Транскрибация аудиозаписи интервью.

    Возвращает текст, сегменты и слова с таймингами, разбивку на разделы
    и упомянутые технологии/компании. Если транскрибация недоступна,
    текст пустой, а metadata.demo_mode = true.
    """
    logger.info(
        f"Transcription request received: {audio.filename} ({audio.content_type})")

    try:
        return await pipeline.transcribe(audio)
    except InvalidAudioError as e:
        logger.error(f"File validation failed: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
