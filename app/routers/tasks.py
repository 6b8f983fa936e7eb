from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional
import uuid

from app.core.auth import Identity, get_identity, require_identity
from app.core.exceptions import ProviderNotConfiguredError, TaskNotFoundError
from app.repositories.task_repository import TaskRepository
from app.schemas.task import (
    SearchResponse,
    SearchResultOut,
    SubtaskCreate,
    SubtaskOut,
    SubtaskUpdate,
    SuggestionsResponse,
    TaskCreate,
    TaskOut,
    TaskUpdate,
)
from app.services.openai_tools import get_openai_service
from app.services.search_service import SearchService
from app.services.subtask_suggestion_service import SubtaskSuggestionService
from app.services.task_service import TaskService

router = APIRouter()
subtasks_router = APIRouter()


async def get_task_service(identity: Optional[Identity] = Depends(get_identity)) -> TaskService:
    return TaskService(identity)


@router.get("", response_model=List[TaskOut], summary="Список задач")
async def list_tasks(svc: TaskService = Depends(get_task_service)):
    require_identity(svc.identity, "list tasks")
    tasks = await svc.fetch_tasks()
    return [TaskOut.from_task(task) for task in tasks]


@router.post("", response_model=TaskOut, status_code=201, summary="Создание задачи")
async def create_task(payload: TaskCreate, svc: TaskService = Depends(get_task_service)):
    task = await svc.create_task(payload)
    return TaskOut.from_task(task)


@router.get("/search", response_model=SearchResponse, summary="Поиск задач по смыслу")
async def search_tasks(q: str = Query(default=""), identity: Optional[Identity] = Depends(get_identity)):
    """Для клиента: при ошибке пустой список и поле error вместо 500"""
    identity = require_identity(identity, "search tasks")
    try:
        embedder = get_openai_service()
    except ProviderNotConfiguredError as e:
        return SearchResponse(results=[], error=e.message)

    outcome = await SearchService(TaskRepository(), embedder).search_or_empty(q, identity.user_id)
    return SearchResponse(
        results=[SearchResultOut(task=TaskOut.from_task(r.task), similarity=r.similarity) for r in outcome.results],
        error=outcome.error,
    )


@router.patch("/{task_id}", response_model=TaskOut, summary="Обновление задачи")
async def update_task(task_id: uuid.UUID, payload: TaskUpdate, svc: TaskService = Depends(get_task_service)):
    task = await svc.update_task(task_id, payload)
    return TaskOut.from_task(task)


@router.delete("/{task_id}", status_code=204, summary="Удаление задачи вместе с подзадачами")
async def delete_task(task_id: uuid.UUID, svc: TaskService = Depends(get_task_service)):
    await svc.delete_task(task_id)
    return Response(status_code=204)


@router.get("/{task_id}/subtasks", response_model=List[SubtaskOut], summary="Подзадачи задачи")
async def list_subtasks(task_id: uuid.UUID, svc: TaskService = Depends(get_task_service)):
    return await svc.fetch_subtasks(task_id)


@router.post("/{task_id}/subtasks", response_model=SubtaskOut, status_code=201, summary="Создание подзадачи")
async def create_subtask(task_id: uuid.UUID, payload: SubtaskCreate, svc: TaskService = Depends(get_task_service)):
    return await svc.create_subtask(task_id, payload)


@router.get("/{task_id}/suggestions", response_model=SuggestionsResponse, summary="Подсказки подзадач")
async def suggest_subtasks(task_id: uuid.UUID, identity: Optional[Identity] = Depends(get_identity)):
    """Для клиента: при ошибке провайдера пустой список и поле error"""
    identity = require_identity(identity, "generate subtasks")
    task = await TaskRepository().get(identity.user_id, task_id)
    if task is None:
        raise TaskNotFoundError("Task not found")
    try:
        ai = get_openai_service()
    except ProviderNotConfiguredError as e:
        return SuggestionsResponse(subtasks=[], error=e.message)

    subtasks, error = await SubtaskSuggestionService(ai).suggest_or_empty(task.title)
    return SuggestionsResponse(subtasks=subtasks, error=error)


@subtasks_router.patch("/{subtask_id}", response_model=SubtaskOut, summary="Обновление подзадачи")
async def update_subtask(subtask_id: uuid.UUID, payload: SubtaskUpdate, svc: TaskService = Depends(get_task_service)):
    return await svc.update_subtask(subtask_id, payload)


@subtasks_router.delete("/{subtask_id}", status_code=204, summary="Удаление подзадачи")
async def delete_subtask(subtask_id: uuid.UUID, svc: TaskService = Depends(get_task_service)):
    await svc.delete_subtask(subtask_id)
    return Response(status_code=204)
