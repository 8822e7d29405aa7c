import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx
from pydantic import BaseModel

from app.core.config import is_configured_key
from app.core.exceptions import TransportError

logger = logging.getLogger(__name__)


class ChatCompletion(BaseModel):
    """Текст ответа chat completion и расход токенов"""
    content: str
    model: str
    usage: Optional[Dict[str, Any]] = None


class ChatCompletionClient(Protocol):
    async def complete(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        model: Optional[str] = None,
        **extra: Any,
    ) -> ChatCompletion:
        ...


class OpenRouterClient:
    """
    Клиент chat completion API OpenRouter (DeepSeek).

    Подходит любой провайдер с OpenAI-совместимым /chat/completions.
    Любая ошибка транспорта или пустой ответ превращаются в TransportError.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://openrouter.ai/api/v1",
        model: str = "deepseek/deepseek-r1-distill-llama-70b:free",
        timeout: float = 60,
        referer: Optional[str] = None,
        title: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.api_url = base_url.rstrip("/")
        self.model = model
        self.referer = referer
        self.title = title

        self.client = http_client or httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(
                max_keepalive_connections=5, max_connections=10)
        )

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        # Необязательные заголовки атрибуции OpenRouter
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.title:
            headers["X-Title"] = self.title
        return headers

    async def complete(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float = 0.2,
        max_tokens: int = 4000,
        model: Optional[str] = None,
        **extra: Any,
    ) -> ChatCompletion:
        """Отправляет сообщения в /chat/completions и возвращает текст ответа"""
        request_data = {
            "model": model or self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            **extra,
        }
        chat_url = f"{self.api_url}/chat/completions"

        try:
            response = await self.client.post(chat_url, json=request_data, headers=self._headers())
        except httpx.RequestError as e:
            raise TransportError(f"Request to OpenRouter failed: {e}") from e

        if response.status_code != 200:
            raise TransportError(
                f"OpenRouter API error {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise TransportError(f"OpenRouter returned invalid JSON envelope: {e}") from e

        if not isinstance(result, dict):
            raise TransportError("OpenRouter response envelope is not an object")

        choices = result.get("choices")
        if not isinstance(choices, list) or not choices:
            raise TransportError("No choices in OpenRouter response")

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise TransportError("No analysis content received from model")

        logger.info(f"OpenRouter response received: {len(content)} characters")

        # Необязательные поля берем, только если у них ожидаемый тип
        model_name = result.get("model")
        usage = result.get("usage")
        return ChatCompletion(
            content=content,
            model=model_name if isinstance(model_name, str) and model_name else request_data["model"],
            usage=usage if isinstance(usage, dict) else None,
        )

    async def test_connection(self) -> Dict[str, Any]:
        """Проверка доступности API; никогда не бросает исключений"""
        if not is_configured_key(self.api_key):
            return {"success": False, "model": self.model, "error": "OpenRouter API key not configured"}

        try:
            response = await self.client.post(
                f"{self.api_url}/chat/completions",
                json={
                    "model": self.model,
                    "messages": [{
                        "role": "user",
                        "content": 'Test connection. Respond with: {"status": "connected"}',
                    }],
                    "max_tokens": 50,
                },
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            logger.error(f"OpenRouter connection test failed: {e}")
            return {"success": False, "model": self.model, "error": str(e)}

        ok = response.status_code == 200
        try:
            body: Any = response.json() if ok else response.text
        except ValueError:
            body = response.text

        return {
            "success": ok,
            "status": response.status_code,
            "model": self.model,
            "response": body,
        }

    async def close(self):
        """Закрывает HTTP-клиент"""
        try:
            await self.client.aclose()
            logger.debug("OpenRouter HTTP client closed")
        except Exception as e:
            logger.debug(f"Error closing HTTP client: {e}")
