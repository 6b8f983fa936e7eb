"""
Тесты синхронизации эмбеддингов и фонового actor'а.
"""
import logging
import uuid
import pytest
from unittest.mock import Mock, patch
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.exceptions import ProviderError
from app.models.task import Task
from app.repositories.task_repository import TaskRepository
from app.services.embedding_sync import EmbeddingSyncService
from app.workers.embedding_tasks import _generate_task_embedding_impl, enqueue_embedding_sync
from mocks.fake_embedder import FakeEmbedder


@pytest.mark.database
class TestEmbeddingSyncService:

    @pytest.mark.asyncio
    async def test_sync_writes_embedding(self, user, embedder):
        task = await Task.create(user=user, title="Plan a wedding")

        updated = await EmbeddingSyncService(TaskRepository(), embedder).sync_embedding(task.id, "Plan a wedding")

        assert updated is True
        saved = await Task.get(id=task.id)
        assert saved.embedding == await embedder.embed("Plan a wedding")

    @pytest.mark.asyncio
    async def test_sync_overwrites_previous_embedding(self, user, embedder):
        task = await Task.create(user=user, title="Buy milk", embedding=[9.0] * 7)

        await EmbeddingSyncService(TaskRepository(), embedder).sync_embedding(task.id, "Buy milk")

        saved = await Task.get(id=task.id)
        assert saved.embedding == await embedder.embed("Buy milk")

    @pytest.mark.asyncio
    async def test_stored_embedding_matches_recomputed_title(self, user, embedder):
        """Для неизменного заголовка сохраненный вектор совпадает с пересчитанным"""
        titles = ["Plan a wedding", "Buy milk", "Gym workout"]
        service = EmbeddingSyncService(TaskRepository(), embedder)
        for title in titles:
            task = await Task.create(user=user, title=title)
            await service.sync_embedding(task.id, title)

        for task in await Task.filter(user_id=user.id, embedding__not_isnull=True):
            assert task.embedding == await embedder.embed(task.title)

    @pytest.mark.asyncio
    async def test_out_of_order_completion_keeps_last_title(self, user, embedder):
        """Два обновления заголовка подряд: побеждает вектор последнего заголовка"""
        task = await Task.create(user=user, title="Buy milk")
        service = EmbeddingSyncService(TaskRepository(), embedder)

        await Task.filter(id=task.id).update(title="Plan a wedding", embedding=None)
        await Task.filter(id=task.id).update(title="Gym workout", embedding=None)

        # Синхронизация последнего заголовка завершается раньше первой
        assert await service.sync_embedding(task.id, "Gym workout") is True
        assert await service.sync_embedding(task.id, "Plan a wedding") is False

        saved = await Task.get(id=task.id)
        assert saved.embedding == await embedder.embed("Gym workout")

    @pytest.mark.asyncio
    async def test_sync_for_deleted_task_is_noop(self, db, embedder):
        updated = await EmbeddingSyncService(TaskRepository(), embedder).sync_embedding(uuid.uuid4(), "Ghost")

        assert updated is False

    @pytest.mark.asyncio
    async def test_provider_error_propagates_to_direct_caller(self, user):
        task = await Task.create(user=user, title="Plan a wedding")
        service = EmbeddingSyncService(TaskRepository(), FakeEmbedder(fail_on={"Plan a wedding"}))

        with pytest.raises(ProviderError):
            await service.sync_embedding(task.id, "Plan a wedding")

        saved = await Task.get(id=task.id)
        assert saved.embedding is None


@pytest.mark.database
class TestEmbeddingActor:

    @pytest.mark.asyncio
    async def test_actor_impl_writes_embedding(self, user, embedder):
        task = await Task.create(user=user, title="Plan a wedding")

        with patch("app.workers.embedding_tasks.get_openai_service", return_value=embedder):
            result = await _generate_task_embedding_impl(str(task.id), "Plan a wedding")

        assert result is True
        saved = await Task.get(id=task.id)
        assert saved.embedding is not None

    @pytest.mark.asyncio
    async def test_actor_impl_logs_and_swallows_provider_error(self, user, caplog):
        task = await Task.create(user=user, title="Plan a wedding")
        failing = FakeEmbedder(fail_on={"Plan a wedding"})

        with patch("app.workers.embedding_tasks.get_openai_service", return_value=failing):
            with caplog.at_level(logging.ERROR, logger="app.workers.embedding_tasks"):
                result = await _generate_task_embedding_impl(str(task.id), "Plan a wedding")

        assert result is False
        assert str(task.id) in caplog.text
        saved = await Task.get(id=task.id)
        assert saved.embedding is None

    @pytest.mark.asyncio
    async def test_actor_impl_swallows_missing_api_key(self, user, monkeypatch):
        from app.core.config import reset_settings
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        reset_settings()
        task = await Task.create(user=user, title="Plan a wedding")

        assert await _generate_task_embedding_impl(str(task.id), "Plan a wedding") is False


class TestEnqueueEmbeddingSync:

    def test_sends_message_to_actor(self):
        task_id = uuid.uuid4()
        with patch("app.workers.embedding_tasks.generate_task_embedding") as mock_actor:
            mock_actor.send = Mock()

            enqueue_embedding_sync(task_id, "Plan a wedding")

            mock_actor.send.assert_called_once_with(str(task_id), "Plan a wedding")

    def test_broker_failure_is_logged_not_raised(self, caplog):
        task_id = uuid.uuid4()
        with patch("app.workers.embedding_tasks.generate_task_embedding") as mock_actor:
            mock_actor.send = Mock(side_effect=RedisConnectionError("redis is down"))

            with caplog.at_level(logging.ERROR, logger="app.workers.embedding_tasks"):
                enqueue_embedding_sync(task_id, "Plan a wedding")

        assert str(task_id) in caplog.text
