from datetime import datetime

from fastapi import APIRouter, Depends

from app.api.deps import get_chat_client
from app.core.config import settings, is_configured_key
from app.services.openrouter import OpenRouterClient

router = APIRouter(tags=["health"])

ENDPOINTS = [
    "POST /api/transcribe",
    "POST /api/analyze",
    "POST /api/followup",
    "POST /api/complete",
    "GET /api/test-deepseek",
]


@router.get("/health")
async def health():
    return {
        "status": "OK",
        "timestamp": datetime.now().isoformat(),
        "service": "Interview Helper",
        "apis": {
            "openrouter_configured": is_configured_key(settings.openrouter_api_key),
            "openai_configured": is_configured_key(settings.openai_api_key),
        },
        "endpoints": ENDPOINTS,
    }


@router.get("/api/test-deepseek")
async def test_deepseek(client: OpenRouterClient = Depends(get_chat_client)):
    """Проверка соединения с OpenRouter."""
    result = await client.test_connection()
    return {"timestamp": datetime.now().isoformat(), **result}
