from tortoise import fields, models
from enum import Enum
import uuid


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class Task(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="tasks", on_delete=fields.CASCADE)
    title = fields.CharField(max_length=255)
    priority = fields.CharEnumField(TaskPriority, max_length=20, default=TaskPriority.MEDIUM, description="Приоритет задачи")
    status = fields.CharEnumField(TaskStatus, max_length=20, default=TaskStatus.PENDING, description="Статус выполнения")
    # Эмбеддинг заголовка (список float); NULL, пока синхронизация не записала вектор
    embedding = fields.JSONField(null=True)

    # Временные метки
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    subtasks: fields.ReverseRelation["Subtask"]

    class Meta:
        table = "tasks"
        indexes = [
            models.Index(fields=["user_id"], name="idx_task_user"),
            models.Index(fields=["created_at"], name="idx_task_created"),
            models.Index(fields=["status"], name="idx_task_status"),
            models.Index(fields=["priority"], name="idx_task_priority"),
        ]


class Subtask(models.Model):
    """Подзадача всегда принадлежит ровно одной задаче и удаляется вместе с ней"""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    task = fields.ForeignKeyField("models.Task", related_name="subtasks", on_delete=fields.CASCADE)
    user = fields.ForeignKeyField("models.User", related_name="subtasks", on_delete=fields.CASCADE)
    title = fields.CharField(max_length=255)
    priority = fields.CharEnumField(TaskPriority, max_length=20, default=TaskPriority.MEDIUM)
    status = fields.CharEnumField(TaskStatus, max_length=20, default=TaskStatus.PENDING)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "subtasks"
        indexes = [
            models.Index(fields=["task_id"], name="idx_subtask_task"),
            models.Index(fields=["user_id"], name="idx_subtask_user"),
        ]
