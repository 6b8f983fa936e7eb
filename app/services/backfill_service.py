"""
Заполнение эмбеддингов для задач, у которых их нет
(созданы до появления поиска или синхронизация не удалась).
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass

from tortoise.exceptions import BaseORMException

from app.core.config import get_settings
from app.core.exceptions import SmartTasksError, StoreError
from app.repositories.task_repository import TaskRepository
from app.services.search_service import Embedder

logger = logging.getLogger(__name__)


@dataclass
class BackfillReport:
    processed: int
    errors: int
    message: str


class BackfillService:
    def __init__(self, repo: TaskRepository, embedder: Embedder, delay_seconds: float = None):
        self.repo = repo
        self.embedder = embedder
        self.delay_seconds = get_settings().backfill_delay_seconds if delay_seconds is None else delay_seconds

    async def backfill(self, user_id: uuid.UUID) -> BackfillReport:
        """
        Последовательно считает эмбеддинги задач пользователя без вектора.

        Один запрос к провайдеру за раз с паузой после каждого успешного,
        результат пишется сразу. Ошибка по задаче только увеличивает счетчик errors.
        Параллельные вызовы для одного пользователя не координируются.
        """
        try:
            tasks = await self.repo.list_without_embedding(user_id)
        except BaseORMException as e:
            raise StoreError(f"Failed to fetch tasks: {e}") from e

        if not tasks:
            return BackfillReport(processed=0, errors=0, message="No tasks need embeddings")

        processed = 0
        errors = 0
        for task in tasks:
            try:
                embedding = await self.embedder.embed(task.title)
                updated = await self.repo.set_embedding(task.id, task.title, embedding)
                if not updated:
                    raise StoreError("Task was changed or deleted during backfill")
                processed += 1

                await asyncio.sleep(self.delay_seconds)
            except (SmartTasksError, BaseORMException) as e:
                logger.error(f"Ошибка обработки задачи {task.id}: {e}")
                errors += 1

        logger.info(f"Бэкфилл для пользователя {user_id}: обработано {processed}, ошибок {errors}")
        return BackfillReport(
            processed=processed,
            errors=errors,
            message=f"Successfully processed {processed} tasks with {errors} errors",
        )
