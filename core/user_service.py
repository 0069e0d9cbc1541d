from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_

from core.db import commit_or_raise
from core.errors import ForbiddenError, NotFoundError, ValidationError
from core.events import log_event, E
from core.log import get_logger
from core.models.user import User

logger = get_logger(__name__)

_LIST_FIELDS = ("skills", "interests")
_IDENTITY_FIELDS = ("email", "first_name", "last_name", "profile_image_url")


def _safe_text(value: Any, limit: int = 255) -> str:
    return str(value or "").strip()[:limit]


def _clean_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        raise ValidationError("Invalid input", field="list")
    return [str(x).strip() for x in value if str(x or "").strip()]


def user_to_dict(user: User) -> Dict:
    return {
        "id": user.id,
        "email": user.email or "",
        "first_name": user.first_name or "",
        "last_name": user.last_name or "",
        "profile_image_url": user.profile_image_url or "",
        "university": user.university or "",
        "major": user.major or "",
        "experience_level": user.experience_level or "",
        "bio": user.bio or "",
        "skills": list(user.skills or []),
        "interests": list(user.interests or []),
        "looking_for": user.looking_for or "",
        "is_admin": bool(user.is_admin),
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "updated_at": user.updated_at.isoformat() if user.updated_at else None,
    }


def to_principal(user: User) -> Dict:
    return {
        "id": user.id,
        "email": user.email or "",
        "is_admin": bool(user.is_admin),
    }


def get_user(session, user_id: str) -> Optional[User]:
    uid = _safe_text(user_id)
    if not uid:
        return None
    return session.query(User).filter(User.id == uid).first()


def require_user(session, user_id: str) -> User:
    user = get_user(session, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def upsert_user(session, claims: Dict) -> User:
    """按外部身份 id 新建或刷新用户基础信息；不触碰资料字段与管理员标记。"""
    uid = _safe_text(claims.get("id"))
    if not uid:
        raise ValidationError("Invalid input", field="id")
    now = datetime.now()
    user = get_user(session, uid)
    if user is None:
        user = User(id=uid, is_admin=False, skills=[], interests=[], created_at=now)
        session.add(user)
    for field in _IDENTITY_FIELDS:
        if claims.get(field) is None:
            continue
        value = _safe_text(claims.get(field), 512)
        # email 唯一约束，空串统一存 NULL
        setattr(user, field, value or None if field == "email" else value)
    user.updated_at = now
    commit_or_raise(session, "user.upsert")
    session.refresh(user)
    log_event(logger, E.USER_UPSERT, level="debug", user_id=uid)
    return user


def list_users(session, keyword: str = "", limit: int = 200) -> List[Dict]:
    query = session.query(User)
    kw = _safe_text(keyword, 120)
    if kw:
        fuzzy = f"%{kw}%"
        query = query.filter(
            or_(
                User.first_name.like(fuzzy),
                User.last_name.like(fuzzy),
                User.email.like(fuzzy),
                User.university.like(fuzzy),
                User.major.like(fuzzy),
            )
        )
    rows = query.order_by(User.created_at.desc()).limit(max(1, min(int(limit or 200), 500))).all()
    return [user_to_dict(x) for x in rows]


def update_profile(session, user_id: str, payload: Dict, principal: Dict) -> User:
    """只能修改自己的资料。"""
    if str((principal or {}).get("id") or "") != _safe_text(user_id):
        raise ForbiddenError()
    user = require_user(session, user_id)
    data = payload or {}
    for field in User.PROFILE_FIELDS:
        if field not in data:
            continue
        value = data.get(field)
        if field in _LIST_FIELDS:
            setattr(user, field, _clean_list(value))
        else:
            setattr(user, field, str(value or "").strip())
    user.updated_at = datetime.now()
    commit_or_raise(session, "user.profile.update")
    session.refresh(user)
    log_event(logger, E.USER_PROFILE_UPDATE, user_id=user.id, fields=",".join(sorted(k for k in data if k in User.PROFILE_FIELDS)))
    return user
