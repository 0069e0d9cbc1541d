from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from core.auth import get_current_user
from core.db import DB
from core.user_service import list_users, require_user, update_profile, user_to_dict

router = APIRouter(prefix="/users", tags=["用户"])


class UpdateProfileRequest(BaseModel):
    university: Optional[str] = Field(default=None, max_length=200)
    major: Optional[str] = Field(default=None, max_length=200)
    experience_level: Optional[str] = Field(default=None, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=5000)
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    looking_for: Optional[str] = Field(default=None, max_length=2000)


@router.get("", summary="获取用户列表")
async def get_user_list(
    keyword: str = Query("", max_length=120),
    current_user: dict = Depends(get_current_user),
):
    session = DB.get_session()
    try:
        return list_users(session, keyword=keyword)
    finally:
        session.close()


@router.get("/{user_id}", summary="获取用户资料")
async def get_user_profile(user_id: str, current_user: dict = Depends(get_current_user)):
    session = DB.get_session()
    try:
        return user_to_dict(require_user(session, user_id))
    finally:
        session.close()


@router.patch("/{user_id}", summary="修改个人资料（仅本人）")
async def update_user_profile(
    user_id: str,
    payload: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user),
):
    session = DB.get_session()
    try:
        user = update_profile(session, user_id, payload.model_dump(exclude_unset=True), current_user)
        return user_to_dict(user)
    finally:
        session.close()
