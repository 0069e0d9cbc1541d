from fastapi import APIRouter, Depends

from core.auth import get_current_user
from core.db import DB
from core.user_service import require_user, user_to_dict

router = APIRouter(prefix="/auth", tags=["认证"])


@router.get("/user", summary="获取当前登录用户")
async def get_auth_user(current_user: dict = Depends(get_current_user)):
    session = DB.get_session()
    try:
        return user_to_dict(require_user(session, current_user["id"]))
    finally:
        session.close()
