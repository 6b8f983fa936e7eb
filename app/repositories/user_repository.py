from app.models.user import User
from typing import Optional
from datetime import datetime, timezone
import uuid

class UserRepository:
    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        return await User.filter(id=user_id).first()

    async def ensure(self, user_id: uuid.UUID) -> User:
        """Создает запись пользователя при первом обращении от его имени"""
        user, _ = await User.get_or_create(id=user_id)
        return user

    async def update_profile(self, user_id: uuid.UUID, changes: dict) -> Optional[User]:
        # update() не трогает auto_now поля, updated_at выставляем сами
        updated_count = await User.filter(id=user_id).update(**changes, updated_at=datetime.now(timezone.utc))
        if updated_count > 0:
            return await self.get(user_id)
        return None
