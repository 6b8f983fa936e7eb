"""
Конфигурация логирования для Smart Tasks.
Разделение INFO логов (stdout) и WARNING/ERROR логов (stderr).
"""

import logging
import sys


LOG_FORMAT = '[%(asctime)s] [PID %(process)d] [%(threadName)s] [%(name)s] [%(levelname)s] %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3")


class InfoFilter(logging.Filter):
    """Пропускает только DEBUG и INFO сообщения."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= logging.INFO


class ErrorFilter(logging.Filter):
    """Пропускает только WARNING, ERROR и CRITICAL сообщения."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.WARNING


def _quiet_libraries() -> None:
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Настройка логирования с разделением потоков только для app модулей.
    Root logger не трогаем, чтобы не конфликтовать с Dramatiq и uvicorn.

    Args:
        log_level: Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(InfoFilter())
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.addFilter(ErrorFilter())
    stderr_handler.setFormatter(formatter)

    app_logger = logging.getLogger("app")
    app_logger.handlers.clear()
    app_logger.addHandler(stdout_handler)
    app_logger.addHandler(stderr_handler)
    app_logger.setLevel(getattr(logging, log_level.upper()))
    app_logger.propagate = False  # Не передавать в root logger

    _quiet_libraries()

    app_logger.info("Логирование настроено для app модулей")


def setup_test_logging(log_level: str = "INFO") -> None:
    """
    Настройка логирования для тестов.
    propagate=True, чтобы caplog мог ловить сообщения.
    """
    app_logger = logging.getLogger("app")
    app_logger.handlers.clear()
    app_logger.setLevel(getattr(logging, log_level.upper()))
    app_logger.propagate = True

    _quiet_libraries()
