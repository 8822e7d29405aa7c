from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_followup_service
from app.models.followup import FollowupRequest, FollowupResponse
from app.services.followup import FollowupService

router = APIRouter(prefix="/api", tags=["followup"])


@router.post("/followup", response_model=FollowupResponse)
async def generate_followups(
    request: FollowupRequest,
    service: FollowupService = Depends(get_followup_service),
):
    """Три follow-up вопроса по ответу ментора."""
    if not request.original_transcript.strip() or not request.mentor_response.strip():
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: originalTranscript and mentorResponse",
        )

    return await service.generate(request)
