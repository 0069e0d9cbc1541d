"""
core/moderation.py — 内容审核状态机

状态：pending（创建时的初始值）→ approved / rejected。
三类内容共用同一个状态字段，状态机按内容类型参数化，不为每类各写一份。

• 只有管理员能改状态；重复设置同一状态视为成功（幂等）
• 不做乐观锁：两个管理员同时操作同一条内容时以最后一次写入为准
• 不保留历史状态，也不自动触发实时通知
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import func

from core.content_store import KIND_MODELS, get_item, resolve_kind
from core.db import commit_or_raise
from core.errors import ForbiddenError, ValidationError
from core.events import log_event, E
from core.guard import can_moderate
from core.log import get_logger
from core.models.base import STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED

logger = get_logger(__name__)

VALID_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)


def normalize_status(status: Any) -> str:
    if not isinstance(status, str) or status not in VALID_STATUSES:
        raise ValidationError("Invalid status")
    return status


def _require_moderator(principal: Dict, **fields) -> None:
    if not can_moderate(principal):
        log_event(logger, E.MODERATION_DENIED, level="warning", user_id=(principal or {}).get("id"), **fields)
        raise ForbiddenError()


def set_status(session, kind: Any, item_id: str, new_status: Any, principal: Dict):
    """
    设置内容审核状态。

    校验顺序：管理员权限 → 状态取值 → 内容是否存在；任何一步失败都不写库。
    成功后 status 更新、updated_at 前移，返回更新后的内容对象。
    """
    kind = resolve_kind(kind)
    _require_moderator(principal, kind=kind.value, item_id=item_id)
    status = normalize_status(new_status)
    item = get_item(session, kind, item_id)
    previous = item.status
    item.status = status
    item.updated_at = datetime.now()
    commit_or_raise(session, f"{kind.value}.status")
    session.refresh(item)
    log_event(
        logger,
        E.MODERATION_STATUS_SET,
        kind=kind.value,
        item_id=item.id,
        status=status,
        previous=previous,
        by=principal.get("id"),
    )
    return item


def moderation_queue(session, principal: Dict, limit: int = 200) -> Dict[str, List]:
    """待审核内容，按类型分组，最早提交的排在前面。"""
    _require_moderator(principal, action="queue")
    queue = {}
    for kind, model in KIND_MODELS.items():
        queue[kind.value] = (
            session.query(model)
            .filter(model.status == STATUS_PENDING)
            .order_by(model.created_at.asc())
            .limit(max(1, min(int(limit or 200), 500)))
            .all()
        )
    return queue


def moderation_summary(session, principal: Dict) -> Dict[str, Dict[str, int]]:
    _require_moderator(principal, action="summary")
    summary = {}
    for kind, model in KIND_MODELS.items():
        counts = {s: 0 for s in VALID_STATUSES}
        rows = session.query(model.status, func.count(model.id)).group_by(model.status).all()
        for status, count in rows:
            if status in counts:
                counts[status] = int(count or 0)
        summary[kind.value] = counts
    return summary

