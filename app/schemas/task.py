from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional
import uuid

from app.models.task import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255, description="Заголовок задачи")
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None


class SubtaskCreate(TaskCreate):
    pass


class SubtaskUpdate(TaskUpdate):
    pass


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    priority: TaskPriority
    status: TaskStatus
    has_embedding: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(cls, task) -> "TaskOut":
        return cls(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            priority=task.priority,
            status=task.status,
            has_embedding=task.embedding is not None,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class SubtaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    task_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    priority: TaskPriority
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


class SearchResultOut(BaseModel):
    task: TaskOut
    similarity: float


class SearchResponse(BaseModel):
    results: list[SearchResultOut]
    error: Optional[str] = None


class SuggestionsResponse(BaseModel):
    subtasks: list[str]
    error: Optional[str] = None
