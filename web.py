import os
import time

from fastapi import FastAPI, Request, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from apis.admin import router as admin_router
from apis.auth import router as auth_router
from apis.base import register_error_handlers
from apis.message import router as message_router
from apis.project_gig import router as project_gig_router
from apis.relay import router as relay_router
from apis.startup import router as startup_router
from apis.team_post import router as team_post_router
from apis.user import router as user_router
from core.config import cfg, VERSION, API_BASE
from core.db import DB
from core.events import log_event, E
from core.log import get_logger, set_trace_id
from core.relay import relay
from core.upload_service import get_upload_dir, get_url_prefix

logger = get_logger(__name__)

app = FastAPI(
    title="Foundry StartupMatch API",
    description="大学创业撮合平台：组队帖、项目外包、创业项目展示、私信与内容审核",
    version=VERSION,
    docs_url=f"{API_BASE}/docs",
    redoc_url=f"{API_BASE}/redoc",
    openapi_url=f"{API_BASE}/openapi.json",
)

# CORS配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cfg.get("cors.origins", ["*"])),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    set_trace_id(request.headers.get("X-Request-Id", ""))
    start = time.perf_counter()
    response = await call_next(request)
    path = str(request.url.path or "")
    if path.startswith(API_BASE):
        duration_ms = int((time.perf_counter() - start) * 1000)
        log_event(
            logger,
            E.HTTP_REQUEST,
            method=request.method,
            path=path,
            status=response.status_code,
            ms=duration_ms,
        )
    response.headers["X-Version"] = VERSION
    return response


register_error_handlers(app)

# 创建API路由分组
api_router = APIRouter(prefix=API_BASE)
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(team_post_router)
api_router.include_router(project_gig_router)
api_router.include_router(startup_router)
api_router.include_router(message_router)
api_router.include_router(admin_router)
app.include_router(api_router)
# 实时通知通道不走 API 前缀
app.include_router(relay_router)


@app.on_event("startup")
async def ensure_tables():
    DB.create_tables()
    log_event(logger, E.SYSTEM_STARTUP, app=cfg.get("app_name", "Foundry StartupMatch"), version=VERSION)


@app.get("/health", tags=['默认'])
async def health():
    return {"status": "ok", "version": VERSION, "relay_clients": relay.connection_count}


# 上传文件静态目录
os.makedirs(get_upload_dir(), exist_ok=True)
app.mount(get_url_prefix(), StaticFiles(directory=get_upload_dir()), name="uploads")
