from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

FollowupCategory = Literal["IMPLEMENTATION", "SPECIFICITY", "CHALLENGES", "DEPTH", "SCALE"]


class ConversationMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class FollowupRequest(BaseModel):
    # Фронтенд присылает camelCase
    model_config = ConfigDict(populate_by_name=True)

    original_transcript: str = Field(default="", alias="originalTranscript")
    mentor_response: str = Field(default="", alias="mentorResponse")
    mentor: Optional[str] = "yoda"
    interview_type: Optional[str] = Field(default="behavioral", alias="interviewType")
    conversation_history: List[ConversationMessage] = Field(
        default_factory=list, alias="conversationHistory")


class FollowupSuggestion(BaseModel):
    question: str
    category: FollowupCategory = "DEPTH"
    reasoning: str = "AI-generated strategic follow-up"


class FollowupMetadata(BaseModel):
    model: str
    timestamp: datetime = Field(default_factory=datetime.now)
    interview_type: Optional[str] = None
    mentor: Optional[str] = None
    suggestions_count: int = 0
    fallback: bool = False


class FollowupResponse(BaseModel):
    success: bool = True
    suggestions: List[FollowupSuggestion] = Field(default_factory=list, max_length=3)
    metadata: FollowupMetadata
