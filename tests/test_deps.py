from unittest.mock import AsyncMock, patch

import pytest

from app.api import deps
from app.core.config import settings


@pytest.fixture(autouse=True)
def clear_caches():
    deps.get_chat_client.cache_clear()
    deps.get_transcriber.cache_clear()
    yield
    deps.get_chat_client.cache_clear()
    deps.get_transcriber.cache_clear()


@pytest.mark.asyncio
async def test_shutdown_closes_created_clients():
    with patch("app.api.deps.OpenRouterClient") as chat_cls, \
            patch("app.api.deps.OpenAIWhisperTranscriber") as whisper_cls, \
            patch.object(settings, "transcription_backend", "openai"):
        chat_cls.return_value.close = AsyncMock()
        whisper_cls.return_value.close = AsyncMock()
        deps.get_chat_client()
        deps.get_transcriber()

        await deps.shutdown_clients()

    chat_cls.return_value.close.assert_awaited_once()
    whisper_cls.return_value.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_shutdown_does_not_create_services():
    with patch("app.api.deps.OpenRouterClient") as chat_cls, \
            patch("app.api.deps.LocalWhisperTranscriber") as local_cls, \
            patch("app.api.deps.OpenAIWhisperTranscriber") as whisper_cls:
        await deps.shutdown_clients()

    chat_cls.assert_not_called()
    local_cls.assert_not_called()
    whisper_cls.assert_not_called()


@pytest.mark.asyncio
async def test_shutdown_skips_transcriber_without_close():
    # У локального Whisper нет HTTP-клиента
    with patch("app.api.deps.LocalWhisperTranscriber") as local_cls, \
            patch.object(settings, "transcription_backend", "local"):
        local_cls.return_value = object()
        deps.get_transcriber()

        await deps.shutdown_clients()
