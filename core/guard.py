"""
core/guard.py — 权限判定

纯函数，无状态。principal 为认证后的用户字典 {"id", "is_admin", ...}。
调用方在产生任何副作用之前先做判定，不通过时抛 ForbiddenError。
"""

from typing import Any, Dict


def is_admin(principal: Dict) -> bool:
    return bool((principal or {}).get("is_admin"))


def can_mutate(item: Any, principal: Dict) -> bool:
    """内容所有者或管理员可修改、删除。"""
    if not principal:
        return False
    owner_id = str(getattr(item, "user_id", "") or "")
    return (bool(owner_id) and owner_id == str(principal.get("id") or "")) or is_admin(principal)


def can_moderate(principal: Dict) -> bool:
    return is_admin(principal)


def can_read_message(message: Any, principal: Dict) -> bool:
    """只有收件人能标记已读。"""
    if not principal:
        return False
    return str(getattr(message, "receiver_id", "") or "") == str(principal.get("id") or "")
