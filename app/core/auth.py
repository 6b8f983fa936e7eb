"""
Идентичность клиента. Текущий пользователь передается в сервисы явно,
а не читается из глобального состояния.
"""
import logging
import secrets
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from app.core.config import get_settings
from app.core.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: uuid.UUID


def require_identity(identity: Optional[Identity], action: str) -> Identity:
    """Единое сообщение для операций, которым нужен пользователь"""
    if identity is None:
        raise UnauthenticatedError(f"User must be authenticated to {action}")
    return identity


async def require_client_key(apikey: Optional[str] = Header(default=None)) -> None:
    """Если задан CLIENT_API_KEY, заголовок apikey обязан ему соответствовать"""
    expected_key = get_settings().client_api_key
    if expected_key and not (apikey and secrets.compare_digest(apikey, expected_key)):
        raise UnauthenticatedError("Invalid API key")


async def get_identity(
    x_user_id: Optional[str] = Header(default=None),
    _client_key: None = Depends(require_client_key),
) -> Optional[Identity]:
    """
    Извлекает пользователя из заголовка X-User-Id.
    Без пользователя возвращает None: решение принимает сервис.
    """
    if not x_user_id:
        return None
    try:
        return Identity(user_id=uuid.UUID(x_user_id))
    except ValueError:
        logger.warning(f"Некорректный X-User-Id: {x_user_id!r}")
        return None
