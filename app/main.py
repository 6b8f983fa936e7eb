import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.db import init_db, close_db
from app.core.exceptions import (
    ProviderError,
    SmartTasksError,
    StoreError,
    TaskNotFoundError,
    UnauthenticatedError,
)
from app.core.logging_config import setup_logging
from app.routers import functions, profile, tasks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(get_settings().log_level)
    await init_db()
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title="Smart Tasks API",
    description="Асинхронный API задач и подзадач с семантическим поиском по эмбеддингам",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

ERROR_STATUS = {
    UnauthenticatedError: 401,
    TaskNotFoundError: 404,
    ProviderError: 500,
    StoreError: 500,
}


@app.exception_handler(SmartTasksError)
async def smart_tasks_error_handler(request: Request, exc: SmartTasksError):
    status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500)
    if status_code >= 500:
        logger.error(f"Ошибка обработки {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(functions.router, tags=["functions"])
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(tasks.subtasks_router, prefix="/subtasks", tags=["subtasks"])
app.include_router(profile.router, prefix="/profile", tags=["profile"])

__all__ = ["app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000)
