import json
from typing import List, Optional, Tuple

from fastapi import Depends, File, Form, UploadFile, status
from pydantic import BaseModel, Field

from core.auth import get_current_user
from core.content_store import ContentKind, create_item, item_to_dict
from core.db import DB
from core.errors import ValidationError
from core.upload_service import discard_image, save_image, validate_image
from .content import build_content_router


class StartupUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    one_liner: Optional[str] = Field(default=None, min_length=1, max_length=300)
    description: Optional[str] = None
    logo_url: Optional[str] = Field(default=None, max_length=512)
    hero_image_url: Optional[str] = Field(default=None, max_length=512)
    stage: Optional[str] = Field(default=None, max_length=50)
    milestones: Optional[List[str]] = None
    current_needs: Optional[List[str]] = None
    founder_ids: Optional[List[str]] = None
    linkedin_url: Optional[str] = Field(default=None, max_length=512)
    website_url: Optional[str] = Field(default=None, max_length=512)
    twitter_url: Optional[str] = Field(default=None, max_length=512)
    pitch_deck_url: Optional[str] = Field(default=None, max_length=512)


router = build_content_router(
    ContentKind.STARTUP,
    prefix="/startups",
    tag="创业项目",
    update_schema=StartupUpdateRequest,
)


def _json_list(value: Optional[str], field: str) -> Optional[List[str]]:
    """表单里的列表字段以 JSON 字符串提交。"""
    if not value:
        return None
    try:
        data = json.loads(value)
    except ValueError:
        raise ValidationError("Invalid input", errors=[{"field": field, "message": "Must be a JSON array"}])
    if not isinstance(data, list):
        raise ValidationError("Invalid input", errors=[{"field": field, "message": "Must be a JSON array"}])
    return data


async def _read_upload(upload: Optional[UploadFile]) -> Optional[Tuple[UploadFile, bytes]]:
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    validate_image(upload.filename, upload.content_type, data)
    return upload, data


@router.post("", summary="发布创业项目", status_code=status.HTTP_201_CREATED)
async def create_startup(
    name: str = Form(""),
    one_liner: str = Form(""),
    description: str = Form(""),
    stage: str = Form(""),
    linkedin_url: str = Form(""),
    website_url: str = Form(""),
    twitter_url: str = Form(""),
    pitch_deck_url: str = Form(""),
    milestones: str = Form(""),
    current_needs: str = Form(""),
    founder_ids: str = Form(""),
    logo_url: str = Form(""),
    hero_image_url: str = Form(""),
    logo_file: Optional[UploadFile] = File(None),
    hero_image_file: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    payload = {
        "name": name,
        "one_liner": one_liner,
        "description": description,
        "stage": stage,
        "linkedin_url": linkedin_url or None,
        "website_url": website_url or None,
        "twitter_url": twitter_url or None,
        "pitch_deck_url": pitch_deck_url or None,
        "milestones": _json_list(milestones, "milestones"),
        "current_needs": _json_list(current_needs, "current_needs"),
        "founder_ids": _json_list(founder_ids, "founder_ids"),
        "logo_url": logo_url.strip() or None,
        "hero_image_url": hero_image_url.strip() or None,
    }
    for field in ("name", "one_liner", "description", "stage"):
        if not payload[field].strip():
            raise ValidationError("Invalid input", errors=[{"field": field, "message": "Required"}])
    # 两个文件都校验通过后才开始落盘
    uploads = {
        "logo_url": ("logo_file", await _read_upload(logo_file)),
        "hero_image_url": ("hero_image_file", await _read_upload(hero_image_file)),
    }

    saved = []
    session = DB.get_session()
    try:
        for url_field, (form_field, upload) in uploads.items():
            if upload is None:
                continue
            file, data = upload
            payload[url_field] = save_image(form_field, file.filename, file.content_type, data)
            saved.append(payload[url_field])
        item = create_item(session, ContentKind.STARTUP, current_user["id"], payload)
        return item_to_dict(item)
    except Exception:
        for url in saved:
            discard_image(url)
        raise
    finally:
        session.close()
