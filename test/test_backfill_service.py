import pytest
from unittest.mock import AsyncMock, patch

from app.models.task import Task
from app.repositories.task_repository import TaskRepository
from app.services.backfill_service import BackfillService
from mocks.fake_embedder import FakeEmbedder


@pytest.mark.database
class TestBackfillService:

    @pytest.mark.asyncio
    async def test_no_tasks_need_embeddings(self, user, embedder):
        report = await BackfillService(TaskRepository(), embedder).backfill(user.id)

        assert report.processed == 0
        assert report.errors == 0
        assert report.message == "No tasks need embeddings"
        assert embedder.calls == []

    @pytest.mark.asyncio
    async def test_only_unembedded_tasks_are_processed(self, user, embedder):
        """N задач, K уже с эмбеддингом: провайдер вызывается N-K раз"""
        await Task.create(user=user, title="Already done", embedding=[0.5] * 7)
        await Task.create(user=user, title="Also done", embedding=[0.5] * 7)
        pending_titles = ["Plan a wedding", "Buy milk", "Gym workout"]
        for title in pending_titles:
            await Task.create(user=user, title=title)

        report = await BackfillService(TaskRepository(), embedder).backfill(user.id)

        assert sorted(embedder.calls) == sorted(pending_titles)
        assert report.processed + report.errors == len(pending_titles)
        assert report.processed == 3
        assert report.message == "Successfully processed 3 tasks with 0 errors"
        assert await Task.filter(user_id=user.id, embedding__isnull=True).count() == 0

    @pytest.mark.asyncio
    async def test_failure_on_one_task_does_not_abort(self, user):
        for title in ["Plan a wedding", "Buy milk", "Gym workout"]:
            await Task.create(user=user, title=title)
        embedder = FakeEmbedder(fail_on={"Buy milk"})

        report = await BackfillService(TaskRepository(), embedder).backfill(user.id)

        assert report.processed == 2
        assert report.errors == 1
        assert report.message == "Successfully processed 2 tasks with 1 errors"
        assert len(embedder.calls) == 3
        failed = await Task.get(user_id=user.id, title="Buy milk")
        assert failed.embedding is None

    @pytest.mark.asyncio
    async def test_other_users_tasks_untouched(self, user, other_user, embedder):
        await Task.create(user=user, title="Plan a wedding")
        foreign = await Task.create(user=other_user, title="Buy milk")

        report = await BackfillService(TaskRepository(), embedder).backfill(user.id)

        assert report.processed == 1
        assert embedder.calls == ["Plan a wedding"]
        assert (await Task.get(id=foreign.id)).embedding is None

    @pytest.mark.asyncio
    async def test_paced_by_delay_between_calls(self, user, embedder):
        for title in ["Plan a wedding", "Buy milk"]:
            await Task.create(user=user, title=title)

        with patch("app.services.backfill_service.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            await BackfillService(TaskRepository(), embedder, delay_seconds=0.1).backfill(user.id)

        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(0.1)

    @pytest.mark.asyncio
    async def test_default_delay_from_settings(self, db, embedder, monkeypatch):
        from app.core.config import reset_settings
        monkeypatch.setenv("BACKFILL_DELAY_SECONDS", "0.25")
        reset_settings()

        service = BackfillService(TaskRepository(), embedder)

        assert service.delay_seconds == 0.25
