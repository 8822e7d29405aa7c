import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import httpx
from faster_whisper import WhisperModel

from app.core.config import is_configured_key
from app.core.exceptions import InvalidAudioError, TranscriptionError
from app.models.transcript import Transcript, TranscriptSegment, WordTiming

logger = logging.getLogger(__name__)

ALLOWED_AUDIO_TYPES = frozenset({
    "audio/mpeg", "audio/mp3", "audio/mp4", "audio/wav", "audio/webm",
    "audio/m4a", "audio/x-m4a", "audio/mp4a-latm", "audio/aac", "audio/ogg",
})

MIME_BY_SUFFIX = {
    ".wav": "audio/wav",
    ".webm": "audio/webm",
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
    ".ogg": "audio/ogg",
    ".aac": "audio/aac",
}


def mime_type_for(filename: str) -> str:
    return MIME_BY_SUFFIX.get(Path(filename or "").suffix.lower(), "audio/wav")


def validate_audio_upload(
    filename: Optional[str],
    content_type: Optional[str],
    size: int,
    max_bytes: int,
) -> None:
    """Проверяет тип и размер загруженного аудио"""
    if not filename:
        raise InvalidAudioError("No audio file provided")

    if size > max_bytes:
        raise InvalidAudioError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB, "
            f"got {round(size / 1024 / 1024)}MB",
            status_code=413,
        )

    if content_type not in ALLOWED_AUDIO_TYPES:
        raise InvalidAudioError(
            f"Invalid audio format: {content_type}. Supported: MP3, WAV, M4A, MP4, WEBM, OGG")


class Transcriber(Protocol):
    model_name: str

    async def transcribe(self, audio_path: Path) -> Transcript:
        ...


class OpenAIWhisperTranscriber:
    """
    Транскрибация через OpenAI Whisper API (verbose_json с таймингами
    сегментов и слов).
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openai.com/v1",
        model: str = "whisper-1",
        language: str = "en",
        timeout: float = 60,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.api_url = base_url.rstrip("/")
        self.model_name = model
        self.language = language
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    async def transcribe(self, audio_path: Path) -> Transcript:
        if not is_configured_key(self.api_key):
            raise TranscriptionError("OpenAI API key not configured")

        audio_bytes = audio_path.read_bytes()
        logger.info(
            f"Sending {audio_path.name} ({len(audio_bytes)} bytes) to Whisper API...")

        files = {"file": (audio_path.name, audio_bytes, mime_type_for(audio_path.name))}
        data = {
            "model": self.model_name,
            "language": self.language,
            "response_format": "verbose_json",
            "timestamp_granularities[]": ["segment", "word"],
            "temperature": "0",
        }

        try:
            response = await self.client.post(
                f"{self.api_url}/audio/transcriptions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                data=data,
                files=files,
            )
        except httpx.RequestError as e:
            raise TranscriptionError(f"Whisper API request failed: {e}") from e

        if response.status_code != 200:
            if response.status_code == 401:
                logger.error("Whisper authentication failed, check OPENAI_API_KEY")
            elif response.status_code == 429:
                logger.error("Whisper quota exceeded or rate limited")
            raise TranscriptionError(
                f"Whisper API error {response.status_code}: {response.text[:500]}")

        try:
            payload = response.json()
        except ValueError as e:
            raise TranscriptionError(f"Whisper returned invalid JSON: {e}") from e

        # null вместо таймингов, строки вместо объектов и т.п.
        try:
            return self._parse_verbose_json(payload)
        except (TypeError, ValueError, AttributeError) as e:
            raise TranscriptionError(f"Whisper returned unexpected payload: {e}") from e

    def _parse_verbose_json(self, payload: Dict[str, Any]) -> Transcript:
        words = [
            WordTiming(
                word=item.get("word", ""),
                start=float(item.get("start", 0.0)),
                end=float(item.get("end", 0.0)),
            )
            for item in payload.get("words") or []
        ]

        segments: List[TranscriptSegment] = []
        for seg in payload.get("segments") or []:
            start = float(seg.get("start", 0.0))
            end = float(seg.get("end", 0.0))
            segments.append(TranscriptSegment(
                start=start,
                end=end,
                text=seg.get("text", ""),
                # Слова из общего списка, попавшие в границы сегмента
                words=[w for w in words if start <= w.start < end],
            ))

        return Transcript(
            text=(payload.get("text") or "").strip(),
            segments=segments,
            word_timings=words,
            language=payload.get("language") or self.language,
            duration=float(payload.get("duration") or 0.0),
        )

    async def close(self):
        await self.client.aclose()


class LocalWhisperTranscriber:
    """
    Использует локальную модель Whisper через faster-whisper.
    Модель скачивается при первом запуске (несколько сотен МБ).
    """

    def __init__(
        self,
        model_size: str = "small",
        device: str = "cpu",
        compute_type: str = "int8",
        language: Optional[str] = "en",
    ):
        self.model_name = f"faster-whisper-{model_size}"
        self.language = language
        self.model = WhisperModel(
            model_size,
            device=device,
            compute_type=compute_type,
        )

    async def transcribe(self, audio_path: Path) -> Transcript:
        # Модель блокирующая, выносим в поток
        try:
            return await asyncio.to_thread(self._transcribe_with_word_timings, audio_path)
        except Exception as e:
            raise TranscriptionError(f"Local transcription failed: {e}") from e

    def _transcribe_with_word_timings(self, audio_path: Path) -> Transcript:
        # segments - генератор, info - объект с метаданными
        segments_iter, info = self.model.transcribe(
            str(audio_path),
            beam_size=5,
            language=self.language,
            word_timestamps=True,
            vad_filter=True
        )

        segments: List[TranscriptSegment] = []
        all_word_timings: List[WordTiming] = []
        texts: List[str] = []

        for seg in segments_iter:
            words_in_segment: List[WordTiming] = []

            if getattr(seg, "words", None):
                for word_info in seg.words:
                    word_timing = WordTiming(
                        word=word_info.word,
                        start=float(word_info.start),
                        end=float(word_info.end),
                        confidence=getattr(word_info, "probability", None)
                    )
                    words_in_segment.append(word_timing)
                    all_word_timings.append(word_timing)

            segments.append(TranscriptSegment(
                start=float(seg.start),
                end=float(seg.end),
                text=seg.text,
                words=words_in_segment
            ))
            texts.append(seg.text)

        return Transcript(
            text=" ".join(texts).strip(),
            segments=segments,
            word_timings=all_word_timings,
            language=getattr(info, "language", None) or self.language or "en",
            duration=float(getattr(info, "duration", 0.0) or 0.0),
        )
