from fastapi import APIRouter, Depends, Query

from core.auth import get_current_user
from core.content_store import item_to_dict
from core.db import DB
from core.moderation import moderation_queue, moderation_summary

router = APIRouter(prefix="/admin", tags=["审核管理"])


@router.get("/pending", summary="待审核内容（仅管理员）")
async def get_pending(
    limit: int = Query(200, ge=1, le=500),
    current_user: dict = Depends(get_current_user),
):
    session = DB.get_session()
    try:
        queue = moderation_queue(session, current_user, limit=limit)
        return {kind: [item_to_dict(x) for x in rows] for kind, rows in queue.items()}
    finally:
        session.close()


@router.get("/summary", summary="各类内容审核状态统计（仅管理员）")
async def get_summary(current_user: dict = Depends(get_current_user)):
    session = DB.get_session()
    try:
        return moderation_summary(session, current_user)
    finally:
        session.close()
