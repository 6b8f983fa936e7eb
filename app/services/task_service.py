import logging
import uuid
from typing import Callable, Dict, List, Optional

from tortoise.exceptions import BaseORMException

from app.core.auth import Identity, require_identity
from app.core.exceptions import StoreError, TaskNotFoundError
from app.models.task import Subtask, Task
from app.repositories.task_repository import SubtaskRepository, TaskRepository
from app.repositories.user_repository import UserRepository
from app.schemas.task import SubtaskCreate, SubtaskUpdate, TaskCreate, TaskUpdate
from app.workers.embedding_tasks import enqueue_embedding_sync

logger = logging.getLogger(__name__)


class TaskService:
    """
    CRUD задач и подзадач от имени одного пользователя.

    Держит локальный кэш текущего представления (tasks, subtasks) и последнюю
    ошибку (error). После успешной записи кэш обновляется строкой, которую
    вернуло хранилище, а не данными из запроса.
    """

    def __init__(
        self,
        identity: Optional[Identity],
        repo: TaskRepository = None,
        subtask_repo: SubtaskRepository = None,
        user_repo: UserRepository = None,
        enqueue_embedding: Callable[[uuid.UUID, str], None] = None,
    ):
        self.identity = identity
        self.repo = repo or TaskRepository()
        self.subtask_repo = subtask_repo or SubtaskRepository()
        self.user_repo = user_repo or UserRepository()
        self.enqueue_embedding = enqueue_embedding or enqueue_embedding_sync

        self.tasks: List[Task] = []
        self.subtasks: Dict[uuid.UUID, List[Subtask]] = {}
        self.error: Optional[str] = None

    def _require_user(self, action: str) -> uuid.UUID:
        return require_identity(self.identity, action).user_id

    def _store_error(self, err: BaseORMException, fallback: str) -> StoreError:
        message = str(err) or fallback
        logger.error(f"{fallback}: {message}")
        self.error = message
        return StoreError(message)

    def _not_found(self, message: str) -> TaskNotFoundError:
        self.error = message
        return TaskNotFoundError(message)

    def _sync_embedding(self, task: Task) -> None:
        # Синхронизация не должна влиять на результат записи
        try:
            self.enqueue_embedding(task.id, task.title)
        except Exception:
            logger.exception(f"Не удалось запустить синхронизацию эмбеддинга задачи {task.id}")

    # Задачи

    async def fetch_tasks(self) -> List[Task]:
        if self.identity is None:
            self.tasks = []
            return []

        self.error = None
        try:
            self.tasks = await self.repo.list_for_user(self.identity.user_id)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to fetch tasks") from e
        return self.tasks

    async def create_task(self, data: TaskCreate) -> Task:
        user_id = self._require_user("create tasks")
        self.error = None
        try:
            await self.user_repo.ensure(user_id)
            task = await self.repo.create(user_id, title=data.title, priority=data.priority, status=data.status)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to create task") from e

        self.tasks.insert(0, task)
        self._sync_embedding(task)
        return task

    async def update_task(self, task_id: uuid.UUID, data: TaskUpdate) -> Task:
        user_id = self._require_user("update tasks")
        self.error = None
        changes = data.model_dump(exclude_none=True)
        try:
            current = await self.repo.get(user_id, task_id)
            if current is None:
                raise self._not_found("Task not found")

            title_changed = "title" in changes and changes["title"] != current.title
            if title_changed:
                # Старый вектор больше не описывает задачу
                changes["embedding"] = None

            task = await self.repo.update(user_id, task_id, changes)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to update task") from e

        if task is None:
            raise self._not_found("Task not found")

        self.tasks = [task if cached.id == task.id else cached for cached in self.tasks]
        if title_changed:
            self._sync_embedding(task)
        return task

    async def delete_task(self, task_id: uuid.UUID) -> None:
        user_id = self._require_user("delete tasks")
        self.error = None
        try:
            deleted = await self.repo.delete(user_id, task_id)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to delete task") from e

        if not deleted:
            raise self._not_found("Task not found")

        self.tasks = [cached for cached in self.tasks if cached.id != task_id]
        self.subtasks.pop(task_id, None)

    # Подзадачи

    async def fetch_subtasks(self, task_id: uuid.UUID) -> List[Subtask]:
        user_id = self._require_user("fetch subtasks")
        self.error = None
        try:
            subtasks = await self.subtask_repo.list_for_task(user_id, task_id)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to fetch subtasks") from e

        self.subtasks[task_id] = subtasks
        return subtasks

    async def create_subtask(self, task_id: uuid.UUID, data: SubtaskCreate) -> Subtask:
        user_id = self._require_user("create subtasks")
        self.error = None
        try:
            subtask = await self.subtask_repo.create(user_id, task_id, title=data.title, priority=data.priority, status=data.status)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to create subtask") from e

        if subtask is None:
            raise self._not_found("Task not found")

        self.subtasks.setdefault(task_id, []).append(subtask)
        return subtask

    async def update_subtask(self, subtask_id: uuid.UUID, data: SubtaskUpdate) -> Subtask:
        user_id = self._require_user("update subtasks")
        self.error = None
        try:
            subtask = await self.subtask_repo.update(user_id, subtask_id, **data.model_dump(exclude_none=True))
        except BaseORMException as e:
            raise self._store_error(e, "Failed to update subtask") from e

        if subtask is None:
            raise self._not_found("Subtask not found")

        cached = self.subtasks.get(subtask.task_id)
        if cached is not None:
            self.subtasks[subtask.task_id] = [subtask if item.id == subtask.id else item for item in cached]
        return subtask

    async def delete_subtask(self, subtask_id: uuid.UUID) -> None:
        user_id = self._require_user("delete subtasks")
        self.error = None
        try:
            deleted = await self.subtask_repo.delete(user_id, subtask_id)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to delete subtask") from e

        if not deleted:
            raise self._not_found("Subtask not found")

        for task_id, cached in self.subtasks.items():
            self.subtasks[task_id] = [item for item in cached if item.id != subtask_id]
