from tortoise.transactions import in_transaction
from app.models.task import Task, Subtask, TaskPriority, TaskStatus
from typing import Optional, List
from datetime import datetime, timezone
import uuid


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TaskRepository:
    """
    Доступ к задачам. Каждый запрос от имени пользователя фильтруется по user_id
    вместе с id записи: это единственный механизм разграничения доступа.
    """

    async def create(self, user_id: uuid.UUID, *, title: str, priority: TaskPriority, status: TaskStatus) -> Task:
        task = await Task.create(user_id=user_id, title=title, priority=priority, status=status)
        # Возвращаем строку в том виде, в котором ее сохранила БД
        return await Task.get(id=task.id)

    async def get(self, user_id: uuid.UUID, task_id: uuid.UUID) -> Optional[Task]:
        return await Task.filter(id=task_id, user_id=user_id).first()

    async def list_for_user(self, user_id: uuid.UUID) -> List[Task]:
        return await Task.filter(user_id=user_id).order_by("-created_at", "id").all()

    async def update(self, user_id: uuid.UUID, task_id: uuid.UUID, changes: dict) -> Optional[Task]:
        """Применяет changes как есть (None тоже записывается) и возвращает строку из БД"""
        updated_count = await Task.filter(id=task_id, user_id=user_id).update(**changes, updated_at=_now())
        if updated_count > 0:
            return await self.get(user_id, task_id)
        return None

    async def delete(self, user_id: uuid.UUID, task_id: uuid.UUID) -> int:
        # Подзадачи удаляем явно в той же транзакции, не полагаясь на FK-настройки драйвера
        async with in_transaction():
            await Subtask.filter(task_id=task_id, user_id=user_id).delete()
            return await Task.filter(id=task_id, user_id=user_id).delete()

    async def list_without_embedding(self, user_id: uuid.UUID) -> List[Task]:
        return await Task.filter(user_id=user_id, embedding__isnull=True).order_by("created_at").all()

    async def list_embedded_for_user(self, user_id: uuid.UUID) -> List[Task]:
        return await Task.filter(user_id=user_id, embedding__not_isnull=True).all()

    async def set_embedding(self, task_id: uuid.UUID, title: str, embedding: list[float]) -> int:
        """
        Записывает эмбеддинг, если заголовок задачи все еще равен title.
        Возвращает число обновленных строк (0 для устаревшего заголовка или удаленной задачи).
        """
        return await Task.filter(id=task_id, title=title).update(embedding=embedding)


class SubtaskRepository:
    async def create(self, user_id: uuid.UUID, task_id: uuid.UUID, *, title: str, priority: TaskPriority, status: TaskStatus) -> Optional[Subtask]:
        parent_exists = await Task.filter(id=task_id, user_id=user_id).exists()
        if not parent_exists:
            return None
        subtask = await Subtask.create(task_id=task_id, user_id=user_id, title=title, priority=priority, status=status)
        return await Subtask.get(id=subtask.id)

    async def get(self, user_id: uuid.UUID, subtask_id: uuid.UUID) -> Optional[Subtask]:
        return await Subtask.filter(id=subtask_id, user_id=user_id).first()

    async def list_for_task(self, user_id: uuid.UUID, task_id: uuid.UUID) -> List[Subtask]:
        return await Subtask.filter(task_id=task_id, user_id=user_id).order_by("created_at", "id").all()

    async def update(self, user_id: uuid.UUID, subtask_id: uuid.UUID, **updates) -> Optional[Subtask]:
        changes = {key: value for key, value in updates.items() if value is not None}
        changes["updated_at"] = _now()
        updated_count = await Subtask.filter(id=subtask_id, user_id=user_id).update(**changes)
        if updated_count > 0:
            return await self.get(user_id, subtask_id)
        return None

    async def delete(self, user_id: uuid.UUID, subtask_id: uuid.UUID) -> int:
        return await Subtask.filter(id=subtask_id, user_id=user_id).delete()
