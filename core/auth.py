"""
core/auth.py — 身份解析

令牌由外部身份服务签发（HS256，共享密钥 cfg.secret），本服务只做校验并信任其中的 sub。
首次见到某个 sub 时按令牌声明创建用户（首次登录即注册）；管理员标记始终以数据库为准。
"""

from datetime import datetime, timedelta
from typing import Dict, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import cfg
from core.db import DB
from core.events import log_event, E
from core.log import get_logger
from core.user_service import get_user, upsert_user, to_principal

logger = get_logger(__name__)

SECRET_KEY = str(cfg.get("secret", "foundry-dev-secret"))
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(cfg.get("token_expire_minutes", 60 * 24 * 7))

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = dict(data)
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Dict:
    """校验签名与过期时间，失败返回空字典。"""
    token = str(token or "").strip()
    if not token:
        return {}
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.PyJWTError as e:
        log_event(logger, E.AUTH_TOKEN_INVALID, level="debug", reason=type(e).__name__)
        return {}
    if not str(payload.get("sub") or "").strip():
        return {}
    return payload


def resolve_principal(token: str) -> Optional[Dict]:
    """令牌 → {"id", "email", "is_admin"}；无效令牌返回 None。"""
    claims = decode_token(token)
    if not claims:
        return None
    session = DB.get_session()
    try:
        user = get_user(session, str(claims["sub"]))
        if user is None:
            user = upsert_user(session, {**claims, "id": claims["sub"]})
            log_event(logger, E.AUTH_FIRST_SIGN_IN, user_id=user.id)
        return to_principal(user)
    finally:
        session.close()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict:
    token = credentials.credentials if credentials else ""
    principal = resolve_principal(token)
    if not principal:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return principal
