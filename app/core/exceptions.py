"""
异常处理模块

业务代码抛出 AppException 子类，全局处理器统一转换为
{"success": false, "code", "message", "data"} 格式，code 即 HTTP 状态码。
"""
from typing import Optional

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from loguru import logger

from .response import error_response


class AppException(Exception):
    """应用基础异常"""
    status_code = 500
    default_message = "服务器内部错误"

    def __init__(self, message: Optional[str] = None, data: Optional[dict] = None):
        self.message = message or self.default_message
        self.code = self.status_code
        self.data = data
        super().__init__(self.message)


class BadRequestException(AppException):
    """请求不合法，data 可携带 {"errors": [...]}"""
    status_code = 400
    default_message = "请求参数错误"


class NotFoundException(AppException):
    """资源不存在，或令牌无效"""
    status_code = 404
    default_message = "资源不存在"


class ConflictException(AppException):
    """唯一性冲突（邮箱、岗位+候选人等）"""
    status_code = 409
    default_message = "资源已存在"


class GoneException(AppException):
    """链接已过期"""
    status_code = 410
    default_message = "链接已失效"


class ExternalServiceException(AppException):
    """Claude、AI 面试系统等外部服务调用失败"""
    status_code = 502
    default_message = "外部服务调用失败"


def _json_error(status_code: int, message: str, data=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(message=message, code=status_code, data=data),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    logger.warning("{}: {} | {} {}", type(exc).__name__, exc.message, request.method, request.url.path)
    return _json_error(exc.code, exc.message, exc.data)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning("HTTPException {}: {} | {}", exc.status_code, exc.detail, request.url.path)
    return _json_error(exc.status_code, str(exc.detail))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求体/查询参数校验失败，返回 422 与逐项错误"""
    errors = jsonable_encoder(exc.errors())
    summary = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in errors
    )
    logger.warning("ValidationError: {} | {}", summary, request.url.path)
    return _json_error(422, "请求参数验证失败", {"errors": errors})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("未处理的异常: {} | {} {}", exc, request.method, request.url.path)
    return _json_error(500, "服务器内部错误")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
