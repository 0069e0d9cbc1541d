from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from core.errors import AppError
from core.log import get_logger

logger = get_logger(__name__)


def error_response(message: str, **extra) -> dict:
    """统一错误体：{"message": "..."}，可附带 errors 等细节。"""
    body = {"message": str(message or "")}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def _validation_errors(errors) -> list:
    return [
        {"field": ".".join(str(x) for x in e.get("loc", ()) if x != "body"), "message": e.get("msg", "")}
        for e in errors
    ]


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        errors = exc.details.get("errors") if exc.status_code == 400 else None
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.message, errors=errors))

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail or "")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_response("Invalid input", errors=_validation_errors(exc.errors())),
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("%s %s unexpected error: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content=error_response("Internal Server Error"))
