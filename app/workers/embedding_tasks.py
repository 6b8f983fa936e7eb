"""
Фоновая синхронизация эмбеддингов задач.
Запускается после успешного создания задачи или смены заголовка
и никак не влияет на исход исходной операции.
"""
import dramatiq
import logging
import uuid

from dramatiq.errors import DramatiqError
from redis.exceptions import RedisError

from app.core.config import get_settings
from app.core.db import init_db, close_db
from app.core.dramatiq_setup import EMBEDDING_QUEUE, redis_broker
from app.core.exceptions import SmartTasksError
from app.repositories.task_repository import TaskRepository
from app.services.embedding_sync import EmbeddingSyncService
from app.services.openai_tools import get_openai_service

logger = logging.getLogger(__name__)


async def _generate_task_embedding_impl(task_id: str, text: str) -> bool:
    """Логика actor'а; ошибки синхронизации только логируются"""
    try:
        service = EmbeddingSyncService(TaskRepository(), get_openai_service())
        return await service.sync_embedding(uuid.UUID(task_id), text)
    except SmartTasksError as e:
        logger.error(f"Синхронизация эмбеддинга задачи {task_id} не удалась: {e.message}")
        return False


@dramatiq.actor(
    broker=redis_broker,
    queue_name=EMBEDDING_QUEUE,
    max_retries=0,
    time_limit=get_settings().embedding_job_time_limit_ms,
)
async def generate_task_embedding(task_id: str, text: str):
    # Инициализируем Tortoise ORM для воркера
    await init_db()
    try:
        await _generate_task_embedding_impl(task_id, text)
    finally:
        await close_db()


def enqueue_embedding_sync(task_id: uuid.UUID, text: str) -> None:
    """Ставит синхронизацию в очередь; недоступность брокера не ломает запись задачи"""
    try:
        generate_task_embedding.send(str(task_id), text)
        logger.info(f"Синхронизация эмбеддинга задачи {task_id} поставлена в очередь")
    except (DramatiqError, RedisError) as e:
        logger.error(f"Не удалось поставить синхронизацию эмбеддинга задачи {task_id} в очередь: {e}")
