"""
Тесты профиля пользователя: создание при первом чтении, обновление, авторизация.
"""
import uuid
import httpx
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock
from tortoise.exceptions import OperationalError

from app.core.auth import Identity
from app.core.exceptions import StoreError, UnauthenticatedError
from app.main import app
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.profile import ProfileUpdate
from app.services.profile_service import ProfileService


@pytest_asyncio.fixture
async def api(db):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.database
class TestProfileService:

    @pytest.mark.asyncio
    async def test_fetch_without_identity(self):
        svc = ProfileService(None)

        assert await svc.fetch_profile() is None
        assert svc.profile is None

    @pytest.mark.asyncio
    async def test_fetch_existing_profile(self, user):
        svc = ProfileService(Identity(user_id=user.id))

        profile = await svc.fetch_profile()

        assert profile.id == user.id
        assert profile.full_name == "Alice"
        assert svc.profile is profile

    @pytest.mark.asyncio
    async def test_fetch_creates_missing_profile(self, db):
        user_id = uuid.uuid4()

        profile = await ProfileService(Identity(user_id=user_id)).fetch_profile()

        assert profile.id == user_id
        assert profile.full_name is None
        assert await User.filter(id=user_id).exists()

    @pytest.mark.asyncio
    async def test_update_returns_stored_row(self, user):
        svc = ProfileService(Identity(user_id=user.id))

        profile = await svc.update_profile(ProfileUpdate(full_name="Alice Smith", avatar_url="https://cdn.example.com/a.png"))

        assert profile.full_name == "Alice Smith"
        assert profile.avatar_url == "https://cdn.example.com/a.png"
        assert svc.profile is profile
        stored = await User.get(id=user.id)
        assert stored.avatar_url == "https://cdn.example.com/a.png"

    @pytest.mark.asyncio
    async def test_update_only_touches_sent_fields(self, user):
        svc = ProfileService(Identity(user_id=user.id))

        profile = await svc.update_profile(ProfileUpdate(avatar_url="https://cdn.example.com/a.png"))

        assert profile.full_name == "Alice"

    @pytest.mark.asyncio
    async def test_update_requires_identity(self, db):
        with pytest.raises(UnauthenticatedError, match="User must be authenticated to update profile"):
            await ProfileService(None).update_profile(ProfileUpdate(full_name="Ghost"))

    @pytest.mark.asyncio
    async def test_store_error_is_captured(self, user):
        repo = UserRepository()
        repo.update_profile = AsyncMock(side_effect=OperationalError("connection lost"))
        svc = ProfileService(Identity(user_id=user.id), user_repo=repo)

        with pytest.raises(StoreError, match="connection lost"):
            await svc.update_profile(ProfileUpdate(full_name="Alice Smith"))

        assert svc.error == "connection lost"


@pytest.mark.api
@pytest.mark.database
class TestProfileApi:

    @pytest.mark.asyncio
    async def test_get_profile(self, api, user):
        response = await api.get("/profile", headers={"X-User-Id": str(user.id)})

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(user.id)
        assert body["full_name"] == "Alice"
        assert body["avatar_url"] is None

    @pytest.mark.asyncio
    async def test_patch_profile(self, api, user):
        response = await api.patch(
            "/profile",
            json={"full_name": "Alice Smith", "avatar_url": "https://cdn.example.com/a.png"},
            headers={"X-User-Id": str(user.id)},
        )

        assert response.status_code == 200
        assert response.json()["full_name"] == "Alice Smith"
        assert response.json()["avatar_url"] == "https://cdn.example.com/a.png"

    @pytest.mark.asyncio
    async def test_profile_requires_user(self, api):
        get_response = await api.get("/profile")
        patch_response = await api.patch("/profile", json={"full_name": "Ghost"})

        assert get_response.status_code == 401
        assert patch_response.status_code == 401
        assert patch_response.json() == {"error": "User must be authenticated to update profile"}
