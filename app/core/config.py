from typing import Optional, Union
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr

# Значения-заглушки из .env.example, которые считаются "ключ не задан"
PLACEHOLDER_KEYS = frozenset({
    "your_openrouter_api_key_here",
    "your_api_key_here",
    "your_openai_key_here",
})


def is_configured_key(value: Union[SecretStr, str, None]) -> bool:
    """Проверяет, что ключ задан и не является заглушкой"""
    if value is None:
        return False
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    value = value.strip()
    return bool(value) and value not in PLACEHOLDER_KEYS


def secret_value(value: Optional[SecretStr]) -> Optional[str]:
    return value.get_secret_value() if value else None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Настройки OpenRouter (DeepSeek)
    openrouter_api_key: Optional[SecretStr] = Field(
        default=None, alias="OPENROUTER_API_KEY"
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        alias="OPENROUTER_BASE_URL"
    )
    openrouter_model: str = Field(
        default="deepseek/deepseek-r1-distill-llama-70b:free",
        alias="OPENROUTER_MODEL"
    )
    openrouter_followup_model: str = Field(
        default="deepseek/deepseek-chat", alias="OPENROUTER_FOLLOWUP_MODEL"
    )
    openrouter_timeout: int = Field(
        default=60, alias="OPENROUTER_TIMEOUT"
    )
    openrouter_max_tokens: int = Field(
        default=4000, alias="OPENROUTER_MAX_TOKENS"
    )
    openrouter_temperature: float = Field(
        default=0.2, alias="OPENROUTER_TEMPERATURE"
    )
    openrouter_referer: str = Field(
        default="http://localhost:3001", alias="OPENROUTER_REFERER"
    )
    openrouter_title: str = Field(
        default="Interview Helper - Professional Analysis",
        alias="OPENROUTER_TITLE"
    )

    # Политика анализа
    analysis_max_attempts: int = Field(
        default=3, alias="ANALYSIS_MAX_ATTEMPTS"
    )
    analysis_retry_delay_sec: float = Field(
        default=1.0, alias="ANALYSIS_RETRY_DELAY_SEC"
    )  # задержка растет линейно: delay * номер попытки
    analysis_deadline_sec: float = Field(
        default=120.0, alias="ANALYSIS_DEADLINE_SEC"
    )
    analysis_min_chars: int = Field(
        default=50, alias="ANALYSIS_MIN_CHARS"
    )

    # Настройки транскрибации
    transcription_backend: str = Field(
        default="openai", alias="TRANSCRIPTION_BACKEND"
    )  # openai или local
    openai_api_key: Optional[SecretStr] = Field(
        default=None, alias="OPENAI_API_KEY"
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", alias="OPENAI_BASE_URL"
    )
    whisper_api_model: str = Field(
        default="whisper-1", alias="WHISPER_API_MODEL"
    )
    whisper_language: str = Field(
        default="en", alias="WHISPER_LANGUAGE"
    )
    whisper_timeout: int = Field(
        default=60, alias="WHISPER_TIMEOUT"
    )

    # Локальный Whisper (faster-whisper)
    whisper_model: str = Field(
        default="small", alias="WHISPER_MODEL"
    )  # варианты: tiny, base, small, medium, large-v3
    whisper_device: str = Field(
        default="cpu", alias="WHISPER_DEVICE"
    )  # cpu или cuda
    whisper_compute_type: str = Field(
        default="int8", alias="WHISPER_COMPUTE_TYPE"
    )  # int8, int8_float16, float16, float32

    max_upload_mb: int = Field(
        default=25, alias="MAX_UPLOAD_MB"
    )

    # Сервер
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3001, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


settings = Settings()
