import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import get_orchestrator, get_pipeline
from app.core.exceptions import InvalidAudioError, InvalidInputError
from app.models.interview_analysis import AnalysisResponse
from app.models.transcription import CompleteResponse
from app.services.analysis_orchestrator import AnalysisOrchestrator
from app.services.pipeline import InterviewPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transcript: Optional[str] = None
    mentor: Optional[str] = None
    interview_type: Optional[str] = Field(default=None, alias="interviewType")


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_transcript(
    request: AnalyzeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Анализ текстового транскрипта интервью.

    Всегда возвращает полный анализ; по metadata.analysis_type видно,
    получен ли он от модели (live), из заглушки (parse_fallback) или демо (demo).
    """
    if not request.transcript:
        raise HTTPException(status_code=400, detail="No transcript provided")

    logger.info(f"Analysis request received (mentor: {request.mentor}, type: {request.interview_type})")

    try:
        return await orchestrator.analyze(request.transcript, request.mentor, request.interview_type)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/complete", response_model=CompleteResponse)
async def complete_processing(
    audio: UploadFile = File(...),
    mentor: Optional[str] = Form(None),
    interview_type: Optional[str] = Form(None, alias="interviewType"),
    pipeline: InterviewPipeline = Depends(get_pipeline),
):
    """Полный цикл: транскрибация аудио и анализ транскрипта."""
    logger.info("Complete processing request received")

    try:
        return await pipeline.complete(audio, mentor, interview_type)
    except InvalidAudioError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
