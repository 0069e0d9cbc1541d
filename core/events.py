"""
core/events.py — 结构化事件日志

格式：event=xxx | key=val | key=val

用法：
    from core.log import get_logger
    from core.events import log_event, E

    logger = get_logger(__name__)
    log_event(logger, E.MODERATION_STATUS_SET, kind="team_post", item_id="p1", status="approved")
    # 输出：event=moderation.status.set | kind=team_post | item_id=p1 | status=approved
"""

import logging
from typing import Any


class E:
    """结构化事件类型常量，按功能模块分组。"""

    # ── 认证 Auth ──────────────────────────────────────────────────────────────
    AUTH_TOKEN_INVALID = "auth.token.invalid"
    AUTH_FIRST_SIGN_IN = "auth.first_sign_in"

    # ── 用户 User ──────────────────────────────────────────────────────────────
    USER_UPSERT = "user.upsert"
    USER_PROFILE_UPDATE = "user.profile.update"

    # ── 内容 Content ───────────────────────────────────────────────────────────
    CONTENT_CREATE = "content.create"
    CONTENT_UPDATE = "content.update"
    CONTENT_DELETE = "content.delete"
    CONTENT_FORBIDDEN = "content.forbidden"

    # ── 审核 Moderation ────────────────────────────────────────────────────────
    MODERATION_STATUS_SET = "moderation.status.set"
    MODERATION_DENIED = "moderation.denied"

    # ── 私信 Message ───────────────────────────────────────────────────────────
    MESSAGE_SEND = "message.send"
    MESSAGE_READ = "message.read"

    # ── 上传 Upload ────────────────────────────────────────────────────────────
    UPLOAD_SAVE = "upload.save"
    UPLOAD_REJECT = "upload.reject"

    # ── 实时中继 Relay ─────────────────────────────────────────────────────────
    RELAY_CONNECT = "relay.connect"
    RELAY_DISCONNECT = "relay.disconnect"
    RELAY_BROADCAST = "relay.broadcast"
    RELAY_DROP = "relay.drop"
    RELAY_SEND_FAIL = "relay.send.fail"

    # ── 存储 Storage ───────────────────────────────────────────────────────────
    STORAGE_FAIL = "storage.fail"

    # ── 系统 System ────────────────────────────────────────────────────────────
    SYSTEM_STARTUP = "system.startup"
    SYSTEM_DB_INIT = "system.db_init"
    HTTP_REQUEST = "http.request"


def log_event(
    logger: logging.Logger,
    event: str,
    level: str = "info",
    **fields: Any,
) -> None:
    """
    记录结构化事件日志，格式：event=xxx | key=val | key=val

        log_event(logger, E.RELAY_DROP, level="debug", reason="unknown_type")
        # → event=relay.drop | reason=unknown_type
    """
    parts = [f"event={event}"]
    for k, v in fields.items():
        sv = str(v) if not isinstance(v, str) else v
        # 截断超长字段，避免单行日志过大
        if len(sv) > 300:
            sv = sv[:297] + "..."
        parts.append(f"{k}={sv}")
    msg = " | ".join(parts)
    getattr(logger, level)(msg, stacklevel=2)
