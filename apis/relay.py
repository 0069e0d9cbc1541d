from fastapi import APIRouter, WebSocket, status

from core.auth import resolve_principal
from core.config import cfg
from core.relay import relay

router = APIRouter(tags=["实时通知"])


@router.websocket(str(cfg.get("relay.path", "/ws")))
async def relay_endpoint(websocket: WebSocket, token: str = ""):
    """刷新信号通道：客户端收到 {"type": ...} 后自行通过 HTTP 接口重新拉取数据。"""
    principal = resolve_principal(token) if token else None
    if cfg.get("relay.require_auth", False) and not principal:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await relay.serve(websocket, principal=principal)
