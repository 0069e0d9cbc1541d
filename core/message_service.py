import uuid
from datetime import datetime
from typing import Dict, List

from sqlalchemy import and_, or_

from core.db import commit_or_raise
from core.errors import ForbiddenError, NotFoundError, ValidationError
from core.events import log_event, E
from core.guard import can_read_message
from core.log import get_logger
from core.models.message import Message
from core.user_service import get_user

logger = get_logger(__name__)

MAX_CONTENT_LENGTH = 5000


def message_to_dict(message: Message) -> Dict:
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "content": message.content or "",
        "read": bool(message.read),
        "created_at": message.created_at.isoformat() if message.created_at else None,
    }


def list_user_messages(session, user_id: str, with_user: str = "", limit: int = 500) -> List[Message]:
    """用户收发的全部私信，按时间正序；with_user 限定为与某人的对话。"""
    uid = str(user_id or "").strip()
    query = session.query(Message)
    other = str(with_user or "").strip()
    if other:
        query = query.filter(
            or_(
                and_(Message.sender_id == uid, Message.receiver_id == other),
                and_(Message.sender_id == other, Message.receiver_id == uid),
            )
        )
    else:
        query = query.filter(or_(Message.sender_id == uid, Message.receiver_id == uid))
    return query.order_by(Message.created_at.asc()).limit(max(1, min(int(limit or 500), 2000))).all()


def unread_count(session, user_id: str) -> int:
    return session.query(Message).filter(
        Message.receiver_id == str(user_id or "").strip(),
        Message.read.is_(False),
    ).count()


def create_message(session, sender_id: str, payload: Dict) -> Message:
    data = payload or {}
    content = str(data.get("content") or "").strip()
    receiver_id = str(data.get("receiver_id") or "").strip()
    if not content or not receiver_id:
        raise ValidationError("Invalid input")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError("Invalid input", field="content")
    if get_user(session, sender_id) is None or get_user(session, receiver_id) is None:
        raise NotFoundError("User not found")
    message = Message(
        id=str(uuid.uuid4()),
        sender_id=str(sender_id),
        receiver_id=receiver_id,
        content=content,
        read=False,
        created_at=datetime.now(),
    )
    session.add(message)
    commit_or_raise(session, "message.create")
    session.refresh(message)
    log_event(logger, E.MESSAGE_SEND, message_id=message.id, sender=sender_id, receiver=receiver_id)
    return message


def mark_read(session, message_id: str, principal: Dict) -> Message:
    message = session.query(Message).filter(Message.id == str(message_id or "").strip()).first()
    if message is None:
        raise NotFoundError("Message not found")
    if not can_read_message(message, principal):
        raise ForbiddenError()
    if not message.read:
        message.read = True
        commit_or_raise(session, "message.read")
        session.refresh(message)
        log_event(logger, E.MESSAGE_READ, level="debug", message_id=message.id)
    return message
