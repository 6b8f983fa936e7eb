import os
import sys
import pytest
import pytest_asyncio
from unittest.mock import Mock, patch
from tortoise import Tortoise

# Добавляем корневую директорию проекта и папку тестов в путь Python
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
sys.path.insert(0, os.path.dirname(__file__))

from app.core.config import reset_settings
from app.core.db import get_tortoise_config
from app.core.logging_config import setup_test_logging
from app.models.user import User
from mocks.fake_embedder import FakeEmbedder

# Используем SQLite в памяти для тестов
TEST_DB_URL = "sqlite://:memory:"


# Пометки для группировки тестов
def pytest_configure(config):
    """Регистрируем кастомные маркеры"""
    config.addinivalue_line(
        "markers", "database: marks tests that use database"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that go through the HTTP layer"
    )


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Тестовые переменные окружения и сброс кэша настроек"""
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("DATABASE_URL", TEST_DB_URL)
    monkeypatch.setenv("BACKFILL_DELAY_SECONDS", "0")
    monkeypatch.delenv("CLIENT_API_KEY", raising=False)
    reset_settings()
    setup_test_logging()
    yield
    reset_settings()


@pytest_asyncio.fixture
async def db():
    """Чистая SQLite база в памяти на каждый тест"""
    await Tortoise.init(config=get_tortoise_config(TEST_DB_URL))
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def user(db):
    return await User.create(email="alice@example.com", full_name="Alice")


@pytest_asyncio.fixture
async def other_user(db):
    return await User.create(email="bob@example.com", full_name="Bob")


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def enqueue_mock():
    """Подменяет постановку синхронизации эмбеддинга в очередь Dramatiq"""
    with patch("app.services.task_service.enqueue_embedding_sync", new=Mock()) as mock_enqueue:
        yield mock_enqueue
