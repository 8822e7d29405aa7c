import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.core.exceptions import InvalidInputError, TransportError
from app.services.analysis_orchestrator import AnalysisOrchestrator
from app.services.openrouter import ChatCompletion, OpenRouterClient

TRANSCRIPT = (
    "Interviewer: Tell me about the hardest bug you fixed. "
    "Candidate: At Stripe we had a race condition in our Python payment worker, "
    "I reproduced it with a stress test and fixed it with an idempotency key."
)

VALID_RESPONSE = json.dumps({
    "highlights": [{"text": "Clear debugging story", "category": "problem_solving",
                    "confidence": 0.8, "reasoning": "Structured approach"}],
    "overall_recommendation": {"decision": "hire", "confidence": 8},
})


def make_completion(content=VALID_RESPONSE):
    return ChatCompletion(content=content, model="deepseek/test-model",
                          usage={"total_tokens": 1234})


@pytest.fixture
def chat_client():
    client = AsyncMock()
    client.complete = AsyncMock(return_value=make_completion())
    return client


def make_orchestrator(chat_client, api_key="sk-or-test", **kwargs):
    kwargs.setdefault("retry_delay_sec", 0)
    return AnalysisOrchestrator(chat_client=chat_client, api_key=api_key, **kwargs)


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   \n\t  ", "too short", "a " * 40])
async def test_short_transcript_rejected_without_calls(chat_client, text):
    """Короткий транскрипт отклоняется до любых сетевых вызовов"""
    orchestrator = make_orchestrator(chat_client)

    with pytest.raises(InvalidInputError):
        await orchestrator.analyze(text)

    chat_client.complete.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("api_key", [None, "", "   ", "your_openrouter_api_key_here"])
async def test_missing_key_returns_demo(chat_client, api_key):
    orchestrator = make_orchestrator(chat_client, api_key=api_key)

    result = await orchestrator.analyze(TRANSCRIPT, mentor="yoda", interview_type="technical")

    assert result.success is True
    assert result.metadata.demo_mode is True
    assert result.metadata.analysis_type == "demo"
    chat_client.complete.assert_not_called()


@pytest.mark.asyncio
async def test_successful_first_attempt(chat_client):
    orchestrator = make_orchestrator(chat_client)

    result = await orchestrator.analyze(TRANSCRIPT, mentor="obiwan", interview_type="behavioral")

    assert result.metadata.analysis_type == "live"
    assert result.metadata.demo_mode is False
    assert result.metadata.attempt_number == 1
    assert result.metadata.model == "deepseek/test-model"
    assert result.metadata.token_usage == {"total_tokens": 1234}
    assert result.metadata.transcript_length == len(TRANSCRIPT)
    assert result.analysis.overall_recommendation.decision == "hire"
    chat_client.complete.assert_awaited_once()


@pytest.mark.asyncio
async def test_request_uses_configured_model_and_sampling(chat_client):
    orchestrator = make_orchestrator(chat_client, model="deepseek/custom", temperature=0.3, max_tokens=1000)

    await orchestrator.analyze(TRANSCRIPT)

    messages = chat_client.complete.call_args.args[0]
    kwargs = chat_client.complete.call_args.kwargs
    assert messages[0]["role"] == "system"
    assert TRANSCRIPT in messages[-1]["content"]
    assert kwargs["model"] == "deepseek/custom"
    assert kwargs["temperature"] == 0.3
    assert kwargs["max_tokens"] == 1000


@pytest.mark.asyncio
async def test_retry_after_transport_error(chat_client):
    chat_client.complete.side_effect = [TransportError("503"), make_completion()]
    orchestrator = make_orchestrator(chat_client)

    result = await orchestrator.analyze(TRANSCRIPT)

    assert result.metadata.analysis_type == "live"
    assert result.metadata.attempt_number == 2
    assert chat_client.complete.await_count == 2


@pytest.mark.asyncio
async def test_all_attempts_fail_returns_demo(chat_client):
    """Три ошибки транспорта: демо-анализ вместо исключения"""
    chat_client.complete.side_effect = TransportError("connection refused")
    orchestrator = make_orchestrator(chat_client, retry_delay_sec=1.0, deadline_sec=None)

    with patch("app.services.analysis_orchestrator.asyncio.sleep", new_callable=AsyncMock) as sleep:
        result = await orchestrator.analyze(TRANSCRIPT)

    assert result.success is True
    assert result.metadata.demo_mode is True
    assert chat_client.complete.await_count == 3
    # Линейная задержка, после последней попытки не ждем
    assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]


@pytest.mark.asyncio
async def test_unparseable_response_is_not_retried(chat_client):
    chat_client.complete.return_value = make_completion("I am unable to produce JSON today.")
    orchestrator = make_orchestrator(chat_client)

    result = await orchestrator.analyze(TRANSCRIPT)

    assert result.metadata.analysis_type == "parse_fallback"
    assert result.metadata.demo_mode is False
    assert result.metadata.attempt_number == 1
    assert result.analysis.technical_assessment.level == "unknown"
    chat_client.complete.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"choices": ["oops"]},
    {"choices": [{"message": "oops"}]},
    {"choices": {"0": 1}},
    {"model": 123, "choices": [{"message": {"content": "not json"}}]},
    {"usage": "n/a", "choices": [{"message": {"content": "not json"}}]},
])
async def test_malformed_envelope_never_escapes(body):
    """Битый ответ API с кодом 200: демо-анализ или заглушка, но не исключение"""
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)))
    client = OpenRouterClient(api_key="sk-or-test", http_client=http_client)
    orchestrator = make_orchestrator(client)

    result = await orchestrator.analyze(TRANSCRIPT)

    assert result.success is True
    assert result.metadata.analysis_type in ("demo", "parse_fallback")


@pytest.mark.asyncio
async def test_deadline_returns_demo(chat_client):
    async def hang(*args, **kwargs):
        await asyncio.sleep(10)

    chat_client.complete.side_effect = hang
    orchestrator = make_orchestrator(chat_client, deadline_sec=0.05)

    result = await orchestrator.analyze(TRANSCRIPT)

    assert result.metadata.demo_mode is True
    assert result.metadata.analysis_type == "demo"


def test_max_attempts_must_be_positive(chat_client):
    with pytest.raises(ValueError):
        AnalysisOrchestrator(chat_client=chat_client, api_key="key", max_attempts=0)


def test_validate_input_counts_non_whitespace(chat_client):
    orchestrator = make_orchestrator(chat_client, min_chars=5)

    orchestrator.validate_input("a b c d e")
    with pytest.raises(InvalidInputError):
        orchestrator.validate_input("a b c d")
