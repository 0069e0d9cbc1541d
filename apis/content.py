"""三类可审核内容共用的路由构造：列表 / 详情 / 创建 / 编辑 / 审核 / 删除。"""

from typing import Any, Optional, Type

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from core.auth import get_current_user
from core.content_store import (
    ContentKind,
    create_item,
    delete_item,
    get_item,
    item_to_dict,
    list_items,
    update_item,
)
from core.db import DB
from core.moderation import set_status


class StatusUpdateRequest(BaseModel):
    # 不在这里约束取值，非法状态由审核状态机返回 "Invalid status"
    status: Optional[Any] = None


def build_content_router(
    kind: ContentKind,
    prefix: str,
    tag: str,
    update_schema: Type[BaseModel],
    create_schema: Optional[Type[BaseModel]] = None,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("", summary=f"获取{tag}列表")
    async def list_content(
        status: str = Query("", max_length=20),
        user_id: str = Query("", max_length=255),
        keyword: str = Query("", max_length=120),
        limit: int = Query(100, ge=1, le=200),
        offset: int = Query(0, ge=0),
        current_user: dict = Depends(get_current_user),
    ):
        session = DB.get_session()
        try:
            rows = list_items(
                session,
                kind,
                status=status,
                user_id=user_id,
                keyword=keyword,
                limit=limit,
                offset=offset,
            )
            return [item_to_dict(r) for r in rows]
        finally:
            session.close()

    @router.get("/{item_id}", summary=f"获取{tag}详情")
    async def get_content(item_id: str, current_user: dict = Depends(get_current_user)):
        session = DB.get_session()
        try:
            return item_to_dict(get_item(session, kind, item_id))
        finally:
            session.close()

    # 未提供 create_schema 时由调用方自行注册创建接口
    if create_schema is not None:
        @router.post("", summary=f"发布{tag}", status_code=status.HTTP_201_CREATED)
        async def create_content(payload: create_schema, current_user: dict = Depends(get_current_user)):
            session = DB.get_session()
            try:
                item = create_item(session, kind, current_user["id"], payload.model_dump())
                return item_to_dict(item)
            finally:
                session.close()

    @router.put("/{item_id}", summary=f"编辑{tag}")
    async def update_content(
        item_id: str,
        payload: update_schema,
        current_user: dict = Depends(get_current_user),
    ):
        session = DB.get_session()
        try:
            item = update_item(session, kind, item_id, payload.model_dump(exclude_unset=True), current_user)
            return item_to_dict(item)
        finally:
            session.close()

    @router.patch("/{item_id}", summary=f"审核{tag}（仅管理员）")
    async def update_content_status(
        item_id: str,
        payload: StatusUpdateRequest,
        current_user: dict = Depends(get_current_user),
    ):
        session = DB.get_session()
        try:
            item = set_status(session, kind, item_id, payload.status, current_user)
            return item_to_dict(item)
        finally:
            session.close()

    @router.delete("/{item_id}", summary=f"删除{tag}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_content(item_id: str, current_user: dict = Depends(get_current_user)):
        session = DB.get_session()
        try:
            delete_item(session, kind, item_id, current_user)
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        finally:
            session.close()

    return router
