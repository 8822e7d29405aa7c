"""
Иерархия ошибок сервиса.

Наружу (в HTTP-слой) выходят только InvalidInputError и InvalidAudioError,
остальные обрабатываются внутри сервисов через повторы и запасные ответы.
"""


class InterviewHelperError(Exception):
    """Базовая ошибка сервиса"""
    pass


class InvalidInputError(InterviewHelperError):
    """Транскрипт пустой или слишком короткий для анализа"""
    pass


class TransportError(InterviewHelperError):
    """Ошибка сети или HTTP при обращении к LLM API"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(InterviewHelperError):
    """LLM ответил, но в ответе нет пригодного JSON"""
    pass


class TranscriptionError(InterviewHelperError):
    """Не удалось получить транскрипт"""
    pass


class InvalidAudioError(InterviewHelperError):
    """Загруженный файл не подходит для транскрибации"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
