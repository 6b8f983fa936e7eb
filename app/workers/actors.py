"""
Точка входа для Dramatiq воркеров: dramatiq app.workers.actors
Импортирует все actor'ы для их регистрации.
"""
import logging

from app.core.config import get_settings
from app.core.dramatiq_setup import init_dramatiq
from app.core.logging_config import setup_logging

setup_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

# Сначала инициализируем брокер с актуальными настройками Redis
broker = init_dramatiq()
logger.info(f"Брокер инициализирован: {broker}")

import app.workers.embedding_tasks  # noqa: E402,F401
