import logging
import uuid

from tortoise.exceptions import BaseORMException

from app.core.exceptions import StoreError
from app.repositories.task_repository import TaskRepository
from app.services.search_service import Embedder

logger = logging.getLogger(__name__)


class EmbeddingSyncService:
    def __init__(self, repo: TaskRepository, embedder: Embedder):
        self.repo = repo
        self.embedder = embedder

    async def sync_embedding(self, task_id: uuid.UUID, text: str) -> bool:
        """
        Считает эмбеддинг text и записывает его в задачу task_id поверх прежнего.

        Запись происходит только если заголовок задачи все еще равен text,
        поэтому результат для устаревшего заголовка не перезапишет вектор
        более позднего. Возвращает True, если вектор записан.
        """
        embedding = await self.embedder.embed(text)

        try:
            updated = await self.repo.set_embedding(task_id, text, embedding)
        except BaseORMException as e:
            raise StoreError(f"Database update error: {e}") from e

        if not updated:
            logger.info(f"Эмбеддинг задачи {task_id} не записан: задача удалена или заголовок изменился")
            return False

        logger.info(f"Эмбеддинг задачи {task_id} обновлен ({len(embedding)} измерений)")
        return True
