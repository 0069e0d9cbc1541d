"""
core/content_store.py — 可审核内容（组队帖 / 项目外包 / 创业项目）的增删改查

三类内容共用同一套逻辑，按 ContentKind 选择模型：
• 新建内容一律为 pending，客户端传入的 status / id / user_id / 时间戳全部丢弃
• 修改、删除前先过权限判定（所有者或管理员）
• 所有者创建后不可变更
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from sqlalchemy import or_

from core.db import commit_or_raise
from core.errors import ForbiddenError, NotFoundError, ValidationError
from core.events import log_event, E
from core.guard import can_mutate
from core.log import get_logger
from core.models.base import STATUS_PENDING
from core.models.project_gig import ProjectGig
from core.models.startup import Startup
from core.models.team_post import TeamPost

logger = get_logger(__name__)


class ContentKind(str, Enum):
    TEAM_POST = "team_post"
    PROJECT_GIG = "project_gig"
    STARTUP = "startup"


KIND_MODELS = {
    ContentKind.TEAM_POST: TeamPost,
    ContentKind.PROJECT_GIG: ProjectGig,
    ContentKind.STARTUP: Startup,
}

KIND_LABELS = {
    ContentKind.TEAM_POST: "Team post",
    ContentKind.PROJECT_GIG: "Project gig",
    ContentKind.STARTUP: "Startup",
}

_LIST_COLUMNS = {
    "skills_needed",
    "required_skills",
    "category_tags",
    "milestones",
    "current_needs",
    "founder_ids",
}
_DATETIME_COLUMNS = {"deadline"}


def resolve_kind(kind: Any) -> ContentKind:
    try:
        return ContentKind(getattr(kind, "value", kind))
    except ValueError:
        raise ValidationError("Invalid content kind")


def model_for(kind: Any):
    return KIND_MODELS[resolve_kind(kind)]


def _clean_value(field: str, value: Any) -> Any:
    if field in _LIST_COLUMNS:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValidationError("Invalid input", field=field)
        return [str(x).strip() for x in value if str(x or "").strip()]
    if field in _DATETIME_COLUMNS:
        if value in (None, ""):
            return None
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError("Invalid input", field=field)
    if value is None:
        return None
    return str(value).strip()


def _extract_fields(model, payload: Dict) -> Dict:
    """只保留该类内容允许客户端写入的字段。"""
    data = {}
    for field in model.EDITABLE_FIELDS:
        if field in (payload or {}):
            data[field] = _clean_value(field, payload[field])
    return data


def _check_required(model, data: Dict) -> None:
    missing = [f for f in model.REQUIRED_FIELDS if data.get(f) is None or data.get(f) == ""]
    if missing:
        raise ValidationError("Invalid input", errors=[{"field": f, "message": "Required"} for f in missing])


def _require_owner(kind: ContentKind, item, principal: Dict) -> None:
    if not can_mutate(item, principal):
        log_event(logger, E.CONTENT_FORBIDDEN, level="warning", kind=kind.value, item_id=item.id, by=(principal or {}).get("id"))
        raise ForbiddenError()


def item_to_dict(item) -> Dict:
    data = {}
    for column in item.__table__.columns:
        value = getattr(item, column.name)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif column.name in _LIST_COLUMNS:
            value = list(value or [])
        data[column.name] = value
    return data


def list_items(
    session,
    kind: Any,
    status: str = "",
    user_id: str = "",
    keyword: str = "",
    limit: int = 100,
    offset: int = 0,
) -> List:
    from core.moderation import normalize_status

    model = model_for(kind)
    query = session.query(model)
    status_text = str(status or "").strip().lower()
    if status_text:
        query = query.filter(model.status == normalize_status(status_text))
    if user_id:
        query = query.filter(model.user_id == str(user_id).strip())
    kw = str(keyword or "").strip()[:120]
    if kw:
        fuzzy = f"%{kw}%"
        query = query.filter(or_(*[getattr(model, f).like(fuzzy) for f in model.SEARCH_FIELDS]))
    return (
        query.order_by(model.created_at.desc())
        .offset(max(0, int(offset or 0)))
        .limit(max(1, min(int(limit or 100), 200)))
        .all()
    )


def get_item(session, kind: Any, item_id: str):
    kind = resolve_kind(kind)
    model = KIND_MODELS[kind]
    item = session.query(model).filter(model.id == str(item_id or "").strip()).first()
    if item is None:
        raise NotFoundError(f"{KIND_LABELS[kind]} not found")
    return item


def create_item(session, kind: Any, owner_id: str, payload: Dict):
    kind = resolve_kind(kind)
    model = KIND_MODELS[kind]
    owner = str(owner_id or "").strip()
    if not owner:
        raise ValidationError("Invalid input", field="user_id")
    data = _extract_fields(model, payload)
    _check_required(model, data)
    now = datetime.now()
    item = model(
        id=str(uuid.uuid4()),
        user_id=owner,
        status=STATUS_PENDING,
        created_at=now,
        updated_at=now,
        **data,
    )
    session.add(item)
    commit_or_raise(session, f"{kind.value}.create")
    session.refresh(item)
    log_event(logger, E.CONTENT_CREATE, kind=kind.value, item_id=item.id, owner_id=owner)
    return item


def update_item(session, kind: Any, item_id: str, payload: Dict, principal: Dict):
    """编辑内容字段；status 与所有者不在可编辑范围内。"""
    kind = resolve_kind(kind)
    model = KIND_MODELS[kind]
    item = get_item(session, kind, item_id)
    _require_owner(kind, item, principal)
    data = _extract_fields(model, payload)
    _check_required(model, {**{f: getattr(item, f) for f in model.REQUIRED_FIELDS}, **data})
    for field, value in data.items():
        setattr(item, field, value)
    item.updated_at = datetime.now()
    commit_or_raise(session, f"{kind.value}.update")
    session.refresh(item)
    log_event(logger, E.CONTENT_UPDATE, kind=kind.value, item_id=item.id, by=principal.get("id"))
    return item


def delete_item(session, kind: Any, item_id: str, principal: Dict) -> None:
    kind = resolve_kind(kind)
    item = get_item(session, kind, item_id)
    _require_owner(kind, item, principal)
    session.delete(item)
    commit_or_raise(session, f"{kind.value}.delete")
    log_event(logger, E.CONTENT_DELETE, kind=kind.value, item_id=item_id, by=principal.get("id"))
