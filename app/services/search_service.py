"""
Семантический поиск задач по эмбеддингам заголовков.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

import numpy as np
from tortoise.exceptions import BaseORMException

from app.core.config import get_settings
from app.core.exceptions import SmartTasksError, StoreError
from app.models.task import Task
from app.repositories.task_repository import TaskRepository

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    async def embed(self, text: str) -> List[float]: ...


@dataclass
class SearchResult:
    task: Task
    similarity: float


@dataclass
class SearchOutcome:
    results: List[SearchResult] = field(default_factory=list)
    error: Optional[str] = None


def cosine_similarity(a, b) -> Optional[float]:
    """Косинусное сходство; None для векторов разной длины или нулевой нормы"""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.ndim != 1 or va.shape != vb.shape:
        return None
    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        return None
    return float(np.dot(va, vb) / norm)


def _rank_key(result: SearchResult):
    # similarity по убыванию, при равенстве новые задачи выше, затем id
    created = result.task.created_at.timestamp() if result.task.created_at else 0.0
    return (-result.similarity, -created, str(result.task.id))


class SearchService:
    def __init__(self, repo: TaskRepository, embedder: Embedder, threshold: float = None, match_count: int = None):
        settings = get_settings()
        self.repo = repo
        self.embedder = embedder
        self.threshold = settings.search_match_threshold if threshold is None else threshold
        self.match_count = settings.search_match_count if match_count is None else match_count

    async def search(self, query: Optional[str], user_id: uuid.UUID) -> List[SearchResult]:
        """
        Ранжирует задачи пользователя по сходству с запросом.

        Пустой запрос дает пустой результат без обращения к провайдеру.
        Задачи без эмбеддинга в ранжировании не участвуют.
        Ошибки провайдера и хранилища пробрасываются как ProviderError/StoreError.
        """
        if not query or not query.strip():
            return []

        query_embedding = await self.embedder.embed(query)

        try:
            candidates = await self.repo.list_embedded_for_user(user_id)
        except BaseORMException as e:
            raise StoreError(f"Search error: {e}") from e

        results = []
        for task in candidates:
            similarity = cosine_similarity(query_embedding, task.embedding)
            if similarity is None:
                logger.warning(f"Эмбеддинг задачи {task.id} несовместим с запросом, пропускаем")
                continue
            if similarity >= self.threshold:
                results.append(SearchResult(task=task, similarity=similarity))

        results.sort(key=_rank_key)
        logger.info(f"Поиск для пользователя {user_id}: {len(results)} совпадений из {len(candidates)} задач")
        return results[:self.match_count]

    async def search_or_empty(self, query: Optional[str], user_id: uuid.UUID) -> SearchOutcome:
        """Вариант для клиента: ошибка превращается в пустой список и сообщение"""
        try:
            return SearchOutcome(results=await self.search(query, user_id))
        except SmartTasksError as e:
            logger.error(f"Ошибка поиска для пользователя {user_id}: {e.message}")
            return SearchOutcome(results=[], error=e.message)
