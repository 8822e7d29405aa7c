import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.exceptions import TranscriptionError
from app.models.transcript import Transcript
from app.models.transcription import (
    CompleteMetadata, CompleteResponse, TranscriptionMetadata, TranscriptionResponse,
)
from app.services.analysis_orchestrator import AnalysisOrchestrator
from app.services.transcriber import Transcriber, validate_audio_upload
from app.services.transcript_insights import build_timeline, extract_entities

logger = logging.getLogger(__name__)

MOCK_TRANSCRIBER_MODEL = "mock-whisper"


class InterviewPipeline:
    """
    Координирует обработку записи интервью: загрузка -> транскрипт -> анализ.
    """

    def __init__(
        self,
        transcriber: Transcriber,
        orchestrator: AnalysisOrchestrator,
        max_upload_bytes: int = 25 * 1024 * 1024,
    ):
        self.transcriber = transcriber
        self.orchestrator = orchestrator
        self.max_upload_bytes = max_upload_bytes

    async def transcribe(self, file: UploadFile) -> TranscriptionResponse:
        """
        Транскрибирует загруженное аудио.
        При ошибке транскрибации возвращает пустой транскрипт (demo_mode),
        чтобы пользователь мог ввести текст вручную.
        """
        validate_audio_upload(
            file.filename, file.content_type, self._upload_size(file), self.max_upload_bytes)

        temp_audio_path = await self._prepare_file(file)
        file_size = temp_audio_path.stat().st_size

        try:
            transcript = await self.transcriber.transcribe(temp_audio_path)
            model_name = self.transcriber.model_name
            demo_mode = False
            logger.info("Transcription completed")
        except TranscriptionError as e:
            logger.error(f"Transcription failed: {e}")
            logger.warning("Falling back to mock transcription (empty for manual input)")
            transcript = Transcript.empty()
            model_name = MOCK_TRANSCRIBER_MODEL
            demo_mode = True
        finally:
            self._cleanup_files(temp_audio_path)

        return TranscriptionResponse(
            success=True,
            transcript=transcript.text,
            timeline=build_timeline(transcript.segments),
            entities=extract_entities(transcript.text),
            segments=transcript.segments,
            words=transcript.word_timings,
            metadata=TranscriptionMetadata(
                model=model_name,
                filename=file.filename or "audio",
                file_size=file_size,
                segment_count=len(transcript.segments),
                language=transcript.language,
                duration=transcript.duration,
                demo_mode=demo_mode,
            ),
        )

    async def complete(
        self,
        file: UploadFile,
        mentor: Optional[str] = None,
        interview_type: Optional[str] = None,
    ) -> CompleteResponse:
        """Полный цикл: транскрибация и анализ"""
        logger.info("Step 1: Transcribing audio...")
        transcription = await self.transcribe(file)

        logger.info("Step 2: Analyzing transcript...")
        analysis = await self.orchestrator.analyze(transcription.transcript, mentor, interview_type)

        return CompleteResponse(
            success=True,
            transcription=transcription,
            analysis=analysis.analysis,
            metadata=CompleteMetadata(
                transcription=transcription.metadata,
                analysis=analysis.metadata,
            ),
        )

    @staticmethod
    def _upload_size(file: UploadFile) -> int:
        if file.size is not None:
            return file.size
        file.file.seek(0, os.SEEK_END)
        size = file.file.tell()
        file.file.seek(0)
        return size

    async def _prepare_file(self, file: UploadFile) -> Path:
        """Сохраняет загрузку во временный файл с исходным расширением."""
        suffix = Path(file.filename or "audio").suffix or ".wav"

        tmp_audio = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
        temp_audio_path = Path(tmp_audio.name)
        tmp_audio.close()

        await self._save_upload_to_path(file, temp_audio_path)
        return temp_audio_path

    @staticmethod
    async def _save_upload_to_path(upload: UploadFile, dst: Path) -> None:
        """Сохраняет загруженный файл."""
        upload.file.seek(0)
        with dst.open("wb") as out_file:
            shutil.copyfileobj(upload.file, out_file)
        await upload.close()

    @staticmethod
    def _cleanup_files(*paths: Path) -> None:
        """Удаляет временные файлы."""
        for path in paths:
            try:
                if path.exists():
                    os.remove(path)
            except OSError as e:
                logger.debug(f"Failed to remove temp file {path}: {e}")
