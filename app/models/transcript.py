"""
Транскрипт записи интервью в том виде, в каком его отдает Whisper:
текст, сегменты и слова с таймингами в секундах.
"""
from typing import List

from pydantic import BaseModel, Field


class WordTiming(BaseModel):
    word: str
    start: float = Field(ge=0.0)
    end: float = Field(ge=0.0)
    confidence: float | None = None  # есть только у локального Whisper


class TranscriptSegment(BaseModel):
    """Фраза Whisper; слова внутри нее уже отфильтрованы по времени"""
    start: float = Field(ge=0.0)
    end: float = Field(ge=0.0)
    text: str
    words: List[WordTiming] = Field(default_factory=list)


class Transcript(BaseModel):
    text: str
    segments: List[TranscriptSegment] = Field(default_factory=list)
    word_timings: List[WordTiming] = Field(default_factory=list)
    language: str = "en"
    duration: float = 0.0

    @classmethod
    def empty(cls, language: str = "en") -> "Transcript":
        """Пустой транскрипт, когда транскрибация недоступна (текст вводят вручную)"""
        return cls(text="", language=language)
