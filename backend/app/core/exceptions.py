"""Exception handling utilities for FastAPI routes.

统一异常处理，集成 domains.core 的 ApplicationError 体系。

映射关系:
- NoteNotFoundError / NotFoundError -> 404
- ValidationError                   -> 400
- RequestValidationError（请求体无法解析、字段类型错误）-> 400
- 其他未处理异常                    -> 500

所有错误响应共用 ApiResponse 的结构: {"success": false, "error": ..., ...}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domains.core import ApplicationError

logger = logging.getLogger(__name__)

MALFORMED_REQUEST_MESSAGE = "Malformed request"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def _error_content(error: str, code: str | None = None, details=None) -> dict:
    content = {"success": False, "error": error}
    if code:
        content["code"] = code
    if details:
        content["details"] = details
    return content


def register_exception_handlers(app: FastAPI) -> None:
    """
    注册 FastAPI 异常处理器

    将 ApplicationError 及其子类自动转换为 HTTP 响应。

    使用示例:
        app = FastAPI()
        register_exception_handlers(app)
    """

    @app.exception_handler(ApplicationError)
    async def application_error_handler(
        request: Request,
        exc: ApplicationError
    ) -> JSONResponse:
        """处理 ApplicationError 及其子类"""
        logger.warning(f"Application error: [{exc.code}] {exc.message}")

        return JSONResponse(
            status_code=exc.http_status_code,
            content=_error_content(exc.message, exc.code, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """请求体格式错误，与 ValidationError 归为同一类 400 响应"""
        logger.warning(f"Malformed request: {request.method} {request.url.path}")

        return JSONResponse(
            status_code=400,
            content=_error_content(
                MALFORMED_REQUEST_MESSAGE,
                "MALFORMED_REQUEST",
                {"validation_errors": jsonable_encoder(exc.errors())},
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException
    ) -> JSONResponse:
        """HTTPException 使用统一的错误结构"""
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_content(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """全局异常处理器 - 捕获所有未处理的异常"""
        logger.exception(
            f"Unhandled exception: {type(exc).__name__}: {exc}",
            extra={
                "path": request.url.path,
                "method": request.method,
            }
        )

        return JSONResponse(
            status_code=500,
            content=_error_content(INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR"),
        )


__all__ = [
    "register_exception_handlers",
]
