"""
Типизированные ошибки сервисного слоя.
Роутеры переводят их в HTTP статус и тело {"error": message}.
"""


class SmartTasksError(Exception):
    """Базовая ошибка приложения с человекочитаемым сообщением."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProviderError(SmartTasksError):
    """Ошибка провайдера эмбеддингов/completion (сеть, неожиданный ответ)."""


class ProviderNotConfiguredError(ProviderError):
    """Не задан ключ провайдера; внешние вызовы не выполняются."""

    def __init__(self, message: str = "OpenAI API key not configured"):
        super().__init__(message)


class StoreError(SmartTasksError):
    """Ошибка хранилища задач."""


class UnauthenticatedError(SmartTasksError):
    """Операция требует аутентифицированного пользователя."""


class TaskNotFoundError(SmartTasksError):
    """Запись не найдена среди записей текущего пользователя."""
