"""
Брокер Dramatiq для фоновой синхронизации эмбеддингов.
Сообщения уходят в Redis из REDIS_URL; воркер поднимается через app.workers.actors.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import CurrentMessage
from dramatiq.middleware.asyncio import AsyncIO
import logging
from app.core.config import get_settings

logger = logging.getLogger(__name__)

EMBEDDING_QUEUE = "embeddings"
BROKER_NAMESPACE = "smart-tasks"

_redis_broker = None


def get_redis_broker() -> RedisBroker:
    """Брокер создается один раз на процесс"""
    global _redis_broker
    if _redis_broker is None:
        settings = get_settings()
        _redis_broker = RedisBroker(url=settings.redis_url, namespace=BROKER_NAMESPACE)

        _redis_broker.add_middleware(AsyncIO())
        _redis_broker.add_middleware(CurrentMessage())

        dramatiq.set_broker(_redis_broker)
        logger.info(f"Dramatiq брокер готов, очередь '{EMBEDDING_QUEUE}'")

    return _redis_broker


def init_dramatiq() -> RedisBroker:
    return get_redis_broker()


class _LazyBroker:
    """Откладывает подключение к Redis до первого обращения к брокеру"""
    _instance = None

    def __str__(self):
        return str(self._instance) if self._instance else "<uninitialized broker>"

    def __getattr__(self, name):
        if self._instance is None:
            self._instance = get_redis_broker()
        return getattr(self._instance, name)


redis_broker = _LazyBroker()

__all__ = ["redis_broker", "get_redis_broker", "init_dramatiq", "EMBEDDING_QUEUE"]
