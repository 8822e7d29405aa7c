from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.models.transcript import TranscriptSegment, WordTiming
from app.models.interview_analysis import InterviewAnalysis, AnalysisMetadata


class TimelineEntry(BaseModel):
    """Раздел интервью на временной шкале (MM:SS)"""
    start: str
    end: Optional[str] = None
    section: str
    content: str
    summary: str


class TranscriptEntities(BaseModel):
    names: List[str] = []
    companies: List[str] = []
    technologies: List[str] = []
    locations: List[str] = []


class TranscriptionMetadata(BaseModel):
    model: str
    timestamp: datetime = Field(default_factory=datetime.now)
    filename: str
    file_size: int = 0
    segment_count: int = 0
    language: str = "en"
    duration: float = 0.0
    demo_mode: bool = False


class TranscriptionResponse(BaseModel):
    success: bool = True
    transcript: str
    timeline: List[TimelineEntry] = []
    entities: TranscriptEntities = TranscriptEntities()
    segments: List[TranscriptSegment] = []
    words: List[WordTiming] = []
    metadata: TranscriptionMetadata


class CompleteMetadata(BaseModel):
    transcription: TranscriptionMetadata
    analysis: AnalysisMetadata


class CompleteResponse(BaseModel):
    success: bool = True
    transcription: TranscriptionResponse
    analysis: InterviewAnalysis
    metadata: CompleteMetadata
