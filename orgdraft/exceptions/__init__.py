"""异常处理模块

提供草稿引擎的业务异常类和 FastAPI 全局异常处理器。

使用示例:
    from orgdraft.exceptions import Err, ErrorCode

    if draft is None:
        raise Err.not_found("草稿不存在", code=ErrorCode.DRAFT_NOT_FOUND)
"""

from .exceptions import (
    # ===== 推荐使用 =====
    Err,                            # 异常快捷创建类
    ErrorCode,                      # 错误代码枚举
    ErrorCodeType,

    # ===== 异常类 =====
    BusinessException,              # 业务异常基类
    ResourceNotFoundException,      # 404
    ResourceConflictException,      # 409
    ValidationException,            # 422
    ServiceUnavailableException,    # 503
    DuplicateNodeException,         # 400
    CyclicReparentException,        # 422
)

from .handlers import (
    register_exception_handlers,
    error_envelope,
    business_exception_handler,
    general_exception_handler,
)

__all__ = [
    "Err",
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
    "ResourceNotFoundException",
    "ResourceConflictException",
    "ValidationException",
    "ServiceUnavailableException",
    "DuplicateNodeException",
    "CyclicReparentException",
    "register_exception_handlers",
    "error_envelope",
    "business_exception_handler",
    "general_exception_handler",
]
