"""
图片上传服务
用于创业项目的 Logo / 头图上传：先落本地磁盘（/uploads 静态目录），
配置了七牛云时再推送到 bucket，返回可长期访问的 CDN 链接。
"""
import os
import random
import time
from typing import Tuple

import qiniu

from core.config import cfg
from core.errors import ValidationError
from core.events import log_event, E
from core.log import get_logger

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}


def get_upload_dir() -> str:
    return str(cfg.get("uploads.dir", "./data/uploads"))


def get_url_prefix() -> str:
    return str(cfg.get("uploads.url_prefix", "/uploads")).rstrip("/")


def get_qiniu_config() -> Tuple[str, str, str, str]:
    ak = os.environ.get("QINIU_AK") or cfg.get("qiniu.access_key", "")
    sk = os.environ.get("QINIU_SK") or cfg.get("qiniu.secret_key", "")
    bucket = os.environ.get("QINIU_BUCKET") or cfg.get("qiniu.bucket", "")
    domain = os.environ.get("QINIU_DOMAIN") or cfg.get("qiniu.domain", "")
    return ak, sk, bucket, domain


def is_qiniu_configured() -> bool:
    return all(get_qiniu_config())


def validate_image(filename: str, content_type: str, data: bytes) -> str:
    _, ext = os.path.splitext(str(filename or ""))
    ext = ext.lower()
    if ext not in ALLOWED_EXTENSIONS or str(content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        log_event(logger, E.UPLOAD_REJECT, level="warning", reason="type", filename=filename, content_type=content_type)
        raise ValidationError("Only image files are allowed!")
    max_bytes = int(cfg.get("uploads.max_bytes", 5 * 1024 * 1024))
    if len(data or b"") > max_bytes:
        log_event(logger, E.UPLOAD_REJECT, level="warning", reason="size", size=len(data))
        raise ValidationError("File too large")
    if not data:
        raise ValidationError("Empty file")
    return ext


def _push_to_qiniu(key: str, data: bytes) -> str:
    """推送到七牛云，失败返回空串（调用方保留本地链接）。"""
    ak, sk, bucket, domain = get_qiniu_config()
    try:
        q = qiniu.Auth(ak, sk)
        token = q.upload_token(bucket, key, 3600)
        ret, info = qiniu.put_data(token, key, data)
    except Exception as e:
        logger.warning("[Qiniu] 上传异常，保留本地文件: %s", e)
        return ""
    status = getattr(info, "status_code", None)
    if status == 200 and ret:
        return f"{domain.rstrip('/')}/{ret['key']}"
    logger.warning("[Qiniu] 上传失败，保留本地文件 | status=%s | info=%s", status, info)
    return ""


def save_image(field_name: str, filename: str, content_type: str, data: bytes) -> str:
    """
    保存上传的图片，返回访问链接

    Args:
        field_name: 表单字段名（用作文件名前缀）
        filename: 客户端原始文件名（只取扩展名）
        content_type: 客户端声明的 MIME 类型
        data: 文件内容

    Returns:
        /uploads/<name> 或七牛云 CDN 链接
    """
    ext = validate_image(filename, content_type, data)
    name = f"{field_name}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"
    upload_dir = get_upload_dir()
    os.makedirs(upload_dir, exist_ok=True)
    with open(os.path.join(upload_dir, name), "wb") as f:
        f.write(data)
    url = f"{get_url_prefix()}/{name}"

    if is_qiniu_configured():
        remote = _push_to_qiniu(f"uploads/{name}", data)
        if remote:
            url = remote
    log_event(logger, E.UPLOAD_SAVE, field=field_name, url=url, size=len(data))
    return url


def discard_image(url: str) -> None:
    """删除 save_image 落在本地的文件，用于后续步骤失败时回滚。"""
    name = os.path.basename(str(url or "").rstrip("/"))
    if not name:
        return
    path = os.path.join(get_upload_dir(), name)
    if os.path.isfile(path):
        os.remove(path)
        logger.info("[Upload] 已回滚本地文件: %s", name)
