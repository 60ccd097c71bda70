"""FastAPI 异常处理器

宿主应用用 FastAPI 承载草稿引擎时，把草稿操作抛出的异常转换为统一的错误响应：

    {
        "status": "error",
        "message": "组织数据自草稿编辑后已被修改，请核对后重新编辑",
        "msg_details": ["user_id=7: department"],
        "data": {},
        "error_code": "ORG_DATA_CHANGED"
    }

设置环境变量 ORGDRAFT_DEBUG=true 时附带 debug_info（异常的 extra 上下文）。
"""

import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from orgdraft.log import get_logger
from .exceptions import BusinessException, ErrorCode

logger = get_logger()

STATUS_ERROR = "error"
INTERNAL_ERROR_MESSAGE = "服务器内部错误"


def debug_enabled() -> bool:
    return os.getenv("ORGDRAFT_DEBUG", "false").lower() == "true"


def error_envelope(
    message: str,
    error_code: Optional[str],
    details: Optional[List[str]] = None,
    debug_info: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """组装错误响应体"""
    content: Dict[str, Any] = {
        "status": STATUS_ERROR,
        "message": message,
        "msg_details": list(details or []),
        "data": {},
    }
    if error_code:
        content["error_code"] = error_code
    if debug_info:
        content["debug_info"] = debug_info
    return content


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "method": request.method,
        "path": request.url.path,
        "draft_id": request.path_params.get("draft_id", "-"),
    }


async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
    """草稿业务异常 -> 对应状态码的错误响应

    extra 中可能包含用户ID等内部数据，只在调试模式下返回。
    """
    logger.warning(
        f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}",
        extra={**_request_context(request), "error_code": exc.code, "details": exc.details},
    )
    content = error_envelope(
        exc.message,
        exc.code,
        exc.details,
        debug_info=exc.extra if debug_enabled() else None,
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """未预期的异常，记录堆栈，响应中不暴露原始错误"""
    logger.exception(
        f"{request.method} {request.url.path} crashed: {type(exc).__name__}: {exc}",
        extra=_request_context(request),
    )
    details = []
    if debug_enabled():
        details = [f"异常类型: {type(exc).__name__}", f"异常消息: {exc}"]
    content = error_envelope(INTERNAL_ERROR_MESSAGE, ErrorCode.INTERNAL_SERVER_ERROR.value, details)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """注册到 FastAPI 应用

    使用示例:
        app = FastAPI()
        register_exception_handlers(app)
    """
    app.add_exception_handler(BusinessException, business_exception_handler)
    # 兜底，放在最后
    app.add_exception_handler(Exception, general_exception_handler)
