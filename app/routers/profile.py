from fastapi import APIRouter, Depends
from typing import Optional

from app.core.auth import Identity, get_identity, require_identity
from app.schemas.profile import ProfileOut, ProfileUpdate
from app.services.profile_service import ProfileService

router = APIRouter()


async def get_profile_service(identity: Optional[Identity] = Depends(get_identity)) -> ProfileService:
    return ProfileService(identity)


@router.get("", response_model=ProfileOut, summary="Профиль текущего пользователя")
async def get_profile(svc: ProfileService = Depends(get_profile_service)):
    require_identity(svc.identity, "fetch profile")
    return await svc.fetch_profile()


@router.patch("", response_model=ProfileOut, summary="Обновление профиля")
async def update_profile(payload: ProfileUpdate, svc: ProfileService = Depends(get_profile_service)):
    return await svc.update_profile(payload)
