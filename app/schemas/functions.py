"""
Схемы запросов/ответов serverless-эндпоинтов (JSON в camelCase).
Поля запросов опциональны: обязательность проверяется в роутере,
чтобы отвечать 400 {"error": ...}, а не 422.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class _CamelRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GenerateEmbeddingRequest(_CamelRequest):
    task_id: Optional[str] = Field(default=None, alias="taskId")
    text: Optional[str] = None


class GenerateAllEmbeddingsRequest(_CamelRequest):
    user_id: Optional[str] = Field(default=None, alias="userId")


class GenerateSubtasksRequest(_CamelRequest):
    task_title: Optional[str] = Field(default=None, alias="taskTitle")


class SmartSearchRequest(_CamelRequest):
    query: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")


class GenerateEmbeddingResponse(BaseModel):
    success: bool
    updated: bool


class BackfillResponse(BaseModel):
    processed: int
    errors: int
    message: str


class GenerateSubtasksResponse(BaseModel):
    subtasks: list[str]


class ErrorResponse(BaseModel):
    error: str
