from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from core.auth import get_current_user
from core.db import DB
from core.message_service import (
    create_message,
    list_user_messages,
    mark_read,
    message_to_dict,
    unread_count,
)

router = APIRouter(prefix="/messages", tags=["私信"])


class SendMessageRequest(BaseModel):
    receiver_id: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1, max_length=5000)


@router.get("", summary="获取我的私信")
async def list_messages(
    with_user: str = Query("", max_length=255),
    current_user: dict = Depends(get_current_user),
):
    session = DB.get_session()
    try:
        rows = list_user_messages(session, current_user["id"], with_user=with_user)
        return [message_to_dict(r) for r in rows]
    finally:
        session.close()


@router.get("/unread-count", summary="获取未读数量")
async def get_unread_count(current_user: dict = Depends(get_current_user)):
    session = DB.get_session()
    try:
        return {"count": unread_count(session, current_user["id"])}
    finally:
        session.close()


@router.post("", summary="发送私信", status_code=status.HTTP_201_CREATED)
async def send_message(payload: SendMessageRequest, current_user: dict = Depends(get_current_user)):
    session = DB.get_session()
    try:
        message = create_message(session, current_user["id"], payload.model_dump())
        return message_to_dict(message)
    finally:
        session.close()


@router.patch("/{message_id}/read", summary="标记已读")
async def read_message(message_id: str, current_user: dict = Depends(get_current_user)):
    session = DB.get_session()
    try:
        return message_to_dict(mark_read(session, message_id, current_user))
    finally:
        session.close()
