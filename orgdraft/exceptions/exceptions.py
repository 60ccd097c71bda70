"""业务异常类定义

定义草稿引擎使用的业务异常类体系。

分类与组织架构草稿的错误语义一一对应：
    - ValidationException        (422) 草稿名称为空、变更内容为空等
    - ResourceNotFoundException  (404) 草稿/变更/用户不存在
    - ResourceConflictException  (409) 发布被拒绝（组织数据已变化、草稿已发布）
    - ServiceUnavailableException(503) 存储层调用失败（网络/传输错误）
    - DuplicateNodeException     (400) 组织树中同一用户出现多次
    - CyclicReparentException    (422) 调整上级后形成循环汇报关系
"""

import copy
from typing import Any, ClassVar, Dict, List, Optional, Union
from enum import Enum


class ErrorCode(str, Enum):
    """错误代码枚举

    继承自 str，可以直接作为字符串使用。

    使用示例:
        from orgdraft.exceptions import ErrorCode, ResourceConflictException

        raise ResourceConflictException(
            "组织数据已被修改",
            code=ErrorCode.ORG_DATA_CHANGED
        )
    """

    # ==================== 通用错误 ====================
    BUSINESS_ERROR = "BUSINESS_ERROR"
    OPERATION_FAILED = "OPERATION_FAILED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    # ==================== 资源相关 (404) ====================
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    DRAFT_NOT_FOUND = "DRAFT_NOT_FOUND"
    CHANGE_NOT_FOUND = "CHANGE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    SQUAD_NOT_FOUND = "SQUAD_NOT_FOUND"

    # ==================== 冲突相关 (409) ====================
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    ORG_DATA_CHANGED = "ORG_DATA_CHANGED"
    DRAFT_NOT_EDITABLE = "DRAFT_NOT_EDITABLE"
    DRAFT_PUBLISH_IN_PROGRESS = "DRAFT_PUBLISH_IN_PROGRESS"

    # ==================== 验证相关 (422) ====================
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    EMPTY_CHANGE = "EMPTY_CHANGE"
    CYCLIC_REPARENT = "CYCLIC_REPARENT"

    # ==================== 组织树结构 (400) ====================
    DUPLICATE_NODE = "DUPLICATE_NODE"

    # ==================== 服务相关 (503) ====================
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


# 类型别名，支持枚举和字符串
ErrorCodeType = Union[str, ErrorCode]
class BusinessException(Exception):
    """草稿引擎业务异常基类

    子类通过类属性声明默认消息、错误代码和 HTTP 状态码，
    构造时传入的 code / status_code 优先。

    属性:
        message: 面向用户的错误消息
        code: 错误代码，供调用方分支判断
        status_code: HTTP 状态码
        details: 逐条错误说明
        extra: 上下文（draft_id、user_id 等），不直接展示给用户

    使用示例:
        raise BusinessException("草稿发布失败", code=ErrorCode.OPERATION_FAILED, draft_id=12)
    """

    default_message: ClassVar[str] = "操作失败"
    default_code: ClassVar[ErrorCodeType] = ErrorCode.BUSINESS_ERROR
    http_status: ClassVar[int] = 400

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCodeType] = None,
        status_code: Optional[int] = None,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.message = message if message is not None else self.default_message
        self.code = code if code is not None else self.default_code
        self.status_code = status_code if status_code is not None else self.http_status
        self.details = list(details) if details else []
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        # 调用方修改返回值不影响异常本身
        return copy.deepcopy({
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
            "extra": self.extra,
        })

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, status_code={self.status_code})"


class ResourceNotFoundException(BusinessException):
    """草稿、变更、用户或小组不存在

    使用示例:
        raise ResourceNotFoundException(
            "草稿不存在",
            code=ErrorCode.DRAFT_NOT_FOUND,
            resource_type="Draft",
            resource_id=3
        )
    """

    default_message = "资源不存在"
    default_code = ErrorCode.RESOURCE_NOT_FOUND
    http_status = 404


class ResourceConflictException(BusinessException):
    """发布被拒绝：组织数据已变化、草稿已发布或正在发布

    冲突总是上报给调用方，不做自动重试。
    """

    default_message = "资源冲突"
    default_code = ErrorCode.RESOURCE_CONFLICT
    http_status = 409


class ValidationException(BusinessException):
    default_message = "数据验证失败"
    default_code = ErrorCode.VALIDATION_ERROR
    http_status = 422


class ServiceUnavailableException(BusinessException):
    """存储层调用出现传输失败"""

    default_message = "服务暂时不可用"
    default_code = ErrorCode.SERVICE_UNAVAILABLE
    http_status = 503


class DuplicateNodeException(BusinessException):
    """同一用户在组织树中出现多次"""

    default_message = "组织树中存在重复的用户节点"
    default_code = ErrorCode.DUPLICATE_NODE
    http_status = 400


class CyclicReparentException(ValidationException):
    """调整上级后形成循环汇报关系（移动到自身或下属之下）"""

    default_message = "不能将用户移动到其下属之下"
    default_code = ErrorCode.CYCLIC_REPARENT


class Err:
    """异常快捷创建

    使用示例:
        raise Err.not_found("草稿不存在", code=ErrorCode.DRAFT_NOT_FOUND, resource_id=1)
        raise Err.conflict("草稿已发布", code=ErrorCode.DRAFT_NOT_EDITABLE)
        raise Err.invalid(details=["name: 草稿名称不能为空"])
    """

    @staticmethod
    def not_found(message: Optional[str] = None, **kwargs) -> ResourceNotFoundException:
        return ResourceNotFoundException(message, **kwargs)

    @staticmethod
    def conflict(message: Optional[str] = None, **kwargs) -> ResourceConflictException:
        return ResourceConflictException(message, **kwargs)

    @staticmethod
    def invalid(message: Optional[str] = None, **kwargs) -> ValidationException:
        return ValidationException(message, **kwargs)

    @staticmethod
    def unavailable(message: Optional[str] = None, **kwargs) -> ServiceUnavailableException:
        return ServiceUnavailableException(message, **kwargs)

    @staticmethod
    def fail(message: Optional[str] = None, **kwargs) -> BusinessException:
        return BusinessException(message, **kwargs)
