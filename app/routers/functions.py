"""
Эндпоинты эмбеддингов, поиска и генерации подзадач.
Ошибки отдаются как {"error": message}: 400 для отсутствующих полей,
500 для ошибок провайдера и хранилища (см. обработчики в app.main).
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.auth import require_client_key
from app.repositories.task_repository import TaskRepository
from app.schemas.functions import (
    BackfillResponse,
    ErrorResponse,
    GenerateAllEmbeddingsRequest,
    GenerateEmbeddingRequest,
    GenerateEmbeddingResponse,
    GenerateSubtasksRequest,
    GenerateSubtasksResponse,
    SmartSearchRequest,
)
from app.schemas.task import SearchResponse, SearchResultOut, TaskOut
from app.services.backfill_service import BackfillService
from app.services.embedding_sync import EmbeddingSyncService
from app.services.openai_tools import get_openai_service
from app.services.search_service import SearchService
from app.services.subtask_suggestion_service import SubtaskSuggestionService

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_client_key)])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Отсутствуют обязательные поля"},
    401: {"model": ErrorResponse, "description": "Неверный apikey"},
    500: {"model": ErrorResponse, "description": "Ошибка провайдера или хранилища"},
}


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


@router.post(
    "/generate-embedding",
    response_model=GenerateEmbeddingResponse,
    responses=ERROR_RESPONSES,
    summary="Эмбеддинг задачи",
    description="Считает эмбеддинг текста и сохраняет его в задачу.",
)
async def generate_embedding(payload: GenerateEmbeddingRequest):
    if not payload.task_id or not payload.text:
        return _bad_request("TaskId and text are required")
    task_id = _parse_uuid(payload.task_id)
    if task_id is None:
        return _bad_request("TaskId must be a valid UUID")

    service = EmbeddingSyncService(TaskRepository(), get_openai_service())
    updated = await service.sync_embedding(task_id, payload.text)
    return GenerateEmbeddingResponse(success=True, updated=updated)


@router.post(
    "/generate-all-embeddings",
    response_model=BackfillResponse,
    responses=ERROR_RESPONSES,
    summary="Бэкфилл эмбеддингов",
    description="Последовательно считает эмбеддинги всех задач пользователя без вектора.",
)
async def generate_all_embeddings(payload: GenerateAllEmbeddingsRequest):
    if not payload.user_id:
        return _bad_request("UserId is required")
    user_id = _parse_uuid(payload.user_id)
    if user_id is None:
        return _bad_request("UserId must be a valid UUID")

    service = BackfillService(TaskRepository(), get_openai_service())
    report = await service.backfill(user_id)
    return BackfillResponse(processed=report.processed, errors=report.errors, message=report.message)


@router.post(
    "/generate-subtasks",
    response_model=GenerateSubtasksResponse,
    responses=ERROR_RESPONSES,
    summary="Генерация подзадач",
    description="Предлагает 5-7 коротких подзадач для заголовка задачи.",
)
async def generate_subtasks(payload: GenerateSubtasksRequest):
    if not payload.task_title:
        return _bad_request("Task title is required")

    service = SubtaskSuggestionService(get_openai_service())
    subtasks = await service.generate(payload.task_title)
    return GenerateSubtasksResponse(subtasks=subtasks)


@router.post(
    "/smart-search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Семантический поиск",
    description="Возвращает до 5 задач пользователя, наиболее близких к запросу по смыслу.",
)
async def smart_search(payload: SmartSearchRequest):
    if payload.query is None or not payload.user_id:
        return _bad_request("Query and userId are required")
    user_id = _parse_uuid(payload.user_id)
    if user_id is None:
        return _bad_request("UserId must be a valid UUID")

    service = SearchService(TaskRepository(), get_openai_service())
    results = await service.search(payload.query, user_id)
    return SearchResponse(
        results=[SearchResultOut(task=TaskOut.from_task(r.task), similarity=r.similarity) for r in results]
    )
