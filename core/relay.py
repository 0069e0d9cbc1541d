"""
core/relay.py — 实时通知中继

WebSocket 只用来广播“有东西变了，请重新拉取”的信号，不承载任何业务数据：
• 入站消息只认 type 字段，且必须在白名单内；其余一律静默丢弃，不回任何错误
• 出站只包含校验过的 type，发送方附带的其他字段全部剥离
• 广播给当前所有处于打开状态的连接（包括发送方），尽力而为，不重试、不持久化

连接集合只在事件循环线程内访问（连接、断开、广播都是协程或同步回调），
广播时遍历快照，期间发生的连接/断开不会影响本次迭代。
"""

import json
from typing import Any, Dict, Iterable, Optional, Set

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from core.events import log_event, E
from core.log import get_logger, trace_ctx

logger = get_logger(__name__)

ALLOWED_EVENT_TYPES = frozenset({
    "new_message",
    "new_post",
    "new_gig",
    "new_startup",
    "approval_update",
})


def is_open(websocket: Any) -> bool:
    return (
        getattr(websocket, "client_state", None) == WebSocketState.CONNECTED
        and getattr(websocket, "application_state", None) == WebSocketState.CONNECTED
    )


class NotificationRelay:
    def __init__(self, allowed_types: Iterable[str] = ALLOWED_EVENT_TYPES):
        self.allowed_types = frozenset(allowed_types)
        self._connections: Set[Any] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def connect(self, websocket: Any) -> None:
        self._connections.add(websocket)
        log_event(logger, E.RELAY_CONNECT, clients=len(self._connections))

    def disconnect(self, websocket: Any) -> None:
        """移出广播集合；重复调用或连接已在关闭中都不报错。"""
        if websocket in self._connections:
            self._connections.discard(websocket)
            log_event(logger, E.RELAY_DISCONNECT, clients=len(self._connections))

    def sanitize(self, raw: Any) -> Optional[Dict[str, str]]:
        """解析入站消息，合法时返回只含 type 的新字典，否则返回 None。"""
        message = raw
        if isinstance(raw, (bytes, bytearray)):
            try:
                message = raw.decode("utf-8")
            except UnicodeDecodeError:
                return None
        if isinstance(message, str):
            try:
                message = json.loads(message)
            except (ValueError, RecursionError):
                # 超深嵌套也算噪声
                return None
        if not isinstance(message, dict):
            return None
        event_type = message.get("type")
        if not isinstance(event_type, str) or event_type not in self.allowed_types:
            return None
        return {"type": event_type}

    async def broadcast(self, notification: Dict[str, str]) -> int:
        """发给所有打开的连接，返回成功发送的数量。"""
        text = json.dumps(notification)
        sent = 0
        for websocket in list(self._connections):
            if not is_open(websocket):
                continue
            try:
                await websocket.send_text(text)
                sent += 1
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                log_event(logger, E.RELAY_SEND_FAIL, level="debug", error=type(e).__name__)
                self.disconnect(websocket)
        log_event(logger, E.RELAY_BROADCAST, type=notification.get("type"), delivered=sent)
        return sent

    async def handle_message(self, raw: Any) -> Optional[Dict[str, str]]:
        notification = self.sanitize(raw)
        if notification is None:
            log_event(logger, E.RELAY_DROP, level="debug", size=len(raw or ""))
            return None
        await self.broadcast(notification)
        return notification

    async def serve(self, websocket: WebSocket, principal: Optional[Dict] = None) -> None:
        """单个连接的生命周期：accept → 循环读消息 → 断开时移出集合。"""
        with trace_ctx():
            await websocket.accept()
            self.connect(websocket)
            if principal:
                logger.debug("relay client identified | user_id=%s", principal.get("id"))
            try:
                while True:
                    message = await websocket.receive()
                    if message.get("type") == "websocket.disconnect":
                        break
                    raw = message.get("text")
                    if raw is None:
                        raw = message.get("bytes")
                    await self.handle_message(raw)
            except WebSocketDisconnect:
                pass
            finally:
                self.disconnect(websocket)


relay = NotificationRelay()
