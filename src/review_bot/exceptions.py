class ReviewBotError(Exception):
    """Базовая ошибка пайплайна ревью."""


class EventValidationError(ReviewBotError):
    """Событие вебхука некорректно или не относится к открытому PR."""


class GitHubAPIError(ReviewBotError):
    """Ошибка обращения к GitHub API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamFetchError(GitHubAPIError):
    """Не удалось получить данные PR из GitHub."""


class ReviewCapabilityError(ReviewBotError):
    """Вызов LLM завершился ошибкой или вернул пустой ответ."""
