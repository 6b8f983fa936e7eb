import logging
from typing import Optional

from tortoise.exceptions import BaseORMException

from app.core.auth import Identity, require_identity
from app.core.exceptions import StoreError
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.profile import ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Профиль текущего пользователя. Как и TaskService, держит последнее
    прочитанное состояние (profile) и последнюю ошибку (error).
    """

    def __init__(self, identity: Optional[Identity], user_repo: UserRepository = None):
        self.identity = identity
        self.user_repo = user_repo or UserRepository()

        self.profile: Optional[User] = None
        self.error: Optional[str] = None

    def _store_error(self, err: BaseORMException, fallback: str) -> StoreError:
        message = str(err) or fallback
        logger.error(f"{fallback}: {message}")
        self.error = message
        return StoreError(message)

    async def fetch_profile(self) -> Optional[User]:
        """Без пользователя профиля нет; отсутствующий профиль создается при первом чтении"""
        if self.identity is None:
            self.profile = None
            return None

        self.error = None
        try:
            self.profile = await self.user_repo.ensure(self.identity.user_id)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to fetch profile") from e
        return self.profile

    async def update_profile(self, data: ProfileUpdate) -> User:
        user_id = require_identity(self.identity, "update profile").user_id
        self.error = None
        # Переданный явно null очищает поле
        changes = data.model_dump(exclude_unset=True)
        try:
            await self.user_repo.ensure(user_id)
            profile = await self.user_repo.update_profile(user_id, changes)
        except BaseORMException as e:
            raise self._store_error(e, "Failed to update profile") from e

        self.profile = profile
        return profile
