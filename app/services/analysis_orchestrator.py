import asyncio
import logging
import time
from typing import Optional

from app.core.config import is_configured_key
from app.core.exceptions import InvalidInputError, TransportError
from app.models.interview_analysis import AnalysisMetadata, AnalysisResponse
from app.services.demo_analysis import generate_demo_analysis
from app.services.openrouter import ChatCompletionClient
from app.services.prompts import build_analysis_messages
from app.services.response_normalizer import ResponseNormalizer

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """
    Анализ транскрипта через LLM с повторами и запасными вариантами.

    Результат всегда валидный AnalysisResponse:
    - нет ключа API -> демо-анализ без сетевых вызовов;
    - ответ получен -> нормализованный анализ (или заглушка, если JSON битый);
    - все попытки упали по транспорту или истек общий дедлайн -> демо-анализ.
    Исключение бросается только для слишком короткого транскрипта.
    """

    def __init__(
        self,
        chat_client: ChatCompletionClient,
        api_key: Optional[str],
        model: str = "deepseek/deepseek-r1-distill-llama-70b:free",
        max_attempts: int = 3,
        retry_delay_sec: float = 1.0,
        deadline_sec: Optional[float] = 120.0,
        min_chars: int = 50,
        temperature: float = 0.2,
        max_tokens: int = 4000,
        normalizer: Optional[ResponseNormalizer] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.chat_client = chat_client
        self.api_key = api_key
        self.model = model
        self.max_attempts = max_attempts
        self.retry_delay_sec = retry_delay_sec
        self.deadline_sec = deadline_sec
        self.min_chars = min_chars
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.normalizer = normalizer or ResponseNormalizer()

    @property
    def has_credentials(self) -> bool:
        return is_configured_key(self.api_key)

    def validate_input(self, text: Optional[str]) -> None:
        # Считаем только непробельные символы
        meaningful = len("".join((text or "").split()))
        if meaningful < self.min_chars:
            raise InvalidInputError(
                f"Transcript too short or empty for meaningful analysis "
                f"(need at least {self.min_chars} characters, got {meaningful})"
            )

    async def analyze(
        self,
        text: str,
        mentor: Optional[str] = None,
        interview_type: Optional[str] = None,
    ) -> AnalysisResponse:
        self.validate_input(text)

        logger.info(f"Starting interview analysis (mentor: {mentor}, type: {interview_type})")

        if not self.has_credentials:
            logger.warning("OpenRouter API key not configured, using demo analysis")
            return generate_demo_analysis(text, mentor, interview_type)

        attempts = self._analyze_with_retries(text, mentor, interview_type)
        if self.deadline_sec is None:
            return await attempts

        try:
            return await asyncio.wait_for(attempts, timeout=self.deadline_sec)
        except asyncio.TimeoutError:
            logger.error(
                f"Analysis exceeded deadline of {self.deadline_sec:.0f}s, falling back to demo analysis")
            return generate_demo_analysis(text, mentor, interview_type)

    async def _analyze_with_retries(
        self,
        text: str,
        mentor: Optional[str],
        interview_type: Optional[str],
    ) -> AnalysisResponse:
        # Попытки строго последовательные
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await self._perform_analysis(text, attempt, mentor, interview_type)
                logger.info("Interview analysis completed successfully")
                return result
            except TransportError as e:
                logger.error(f"Analysis attempt {attempt}/{self.max_attempts} failed: {e}")

                if attempt == self.max_attempts:
                    break

                delay = self.retry_delay_sec * attempt
                logger.info(f"Waiting {delay:.1f} seconds before retry...")
                await asyncio.sleep(delay)

        logger.warning("All attempts failed, falling back to demo analysis")
        return generate_demo_analysis(text, mentor, interview_type)

    async def _perform_analysis(
        self,
        text: str,
        attempt: int,
        mentor: Optional[str],
        interview_type: Optional[str],
    ) -> AnalysisResponse:
        logger.info(f"API attempt {attempt}/{self.max_attempts}...")
        start_time = time.time()

        completion = await self.chat_client.complete(
            build_analysis_messages(text, mentor, interview_type),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            model=self.model,
            top_p=0.9,
            frequency_penalty=0.1,
        )

        analysis, parsed = self.normalizer.normalize_with_status(completion.content, text)

        return AnalysisResponse(
            success=True,
            analysis=analysis,
            metadata=AnalysisMetadata(
                model=completion.model,
                transcript_length=len(text),
                analysis_type="live" if parsed else "parse_fallback",
                demo_mode=False,
                attempt_number=attempt,
                token_usage=completion.usage,
                mentor=mentor,
                interview_type=interview_type,
                processing_time_sec=round(time.time() - start_time, 3),
            ),
        )
