"""
组织架构草稿 - 请求参数模型

长度上限默认取 DraftSettings 的默认值，可通过 model_validate 的 context 覆盖：

    CreateDraftRequest.model_validate(
        {"name": "Q3 调整"},
        context={"draft_name_max_length": 120},
    )
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator, model_validator

from orgdraft.exceptions import Err
from .enums import Role
from .models import ChangePatch, CHANGE_FIELDS

DRAFT_NAME_MAX_LENGTH = 255
DEPARTMENT_MAX_LENGTH = 100

S = TypeVar("S", bound="BaseSchemas")


def _limit(info: ValidationInfo, key: str, default: int) -> int:
    if info.context and info.context.get(key):
        return int(info.context[key])
    return default


def _check_draft_name(value: str, info: ValidationInfo) -> str:
    value = value.strip()
    if not value:
        raise ValueError("草稿名称不能为空")
    max_length = _limit(info, "draft_name_max_length", DRAFT_NAME_MAX_LENGTH)
    if len(value) > max_length:
        raise ValueError(f"草稿名称不能超过 {max_length} 个字符")
    return value


class BaseSchemas(BaseModel):
    """基础参数"""
    model_config = {"from_attributes": True, "populate_by_name": True}

    @classmethod
    def parse(cls: Type[S], data: Any, **context: Any) -> S:
        """校验参数，失败时抛出 ValidationException

        Raises:
            ValidationException: 参数校验失败，details 为 "字段: 原因" 列表
        """
        try:
            return cls.model_validate(data, context=context or None)
        except ValidationError as e:
            details = []
            for error in e.errors():
                loc = ".".join(str(part) for part in error["loc"])
                message = error["msg"]
                if message.startswith("Value error, "):
                    message = message[len("Value error, "):]
                details.append(f"{loc}: {message}" if loc else message)
            raise Err.invalid("请求参数验证失败", details=details) from e


class CreateDraftRequest(BaseSchemas):
    """创建草稿"""
    name: str = Field(..., description="草稿名称")
    description: Optional[str] = Field(default=None, description="草稿说明")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str, info: ValidationInfo) -> str:
        return _check_draft_name(v, info)


class UpdateDraftRequest(BaseSchemas):
    """修改草稿名称/说明，未提供的字段保持不变"""
    name: Optional[str] = Field(default=None, description="草稿名称")
    description: Optional[str] = Field(default=None, description="草稿说明")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None:
            return v
        return _check_draft_name(v, info)

    def updates(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}


class AddDraftChangeRequest(BaseSchemas):
    """新增或合并某个用户的变更

    只有显式提供的字段才算提出了变更，显式传 null 表示清空：
        {"user_id": 7, "new_department": null}   -> 清空部门
        {"user_id": 7, "new_squad_ids": []}      -> 移出所有小组
    """
    user_id: int = Field(..., gt=0, description="用户ID")
    new_supervisor_id: Optional[int] = Field(default=None, gt=0, description="新上级ID，null 表示成为根节点")
    new_department: Optional[str] = Field(default=None, description="新部门，null 表示清空")
    new_role: Optional[Role] = Field(default=None, description="新角色")
    new_squad_ids: Optional[List[int]] = Field(default=None, description="新小组列表（整体替换）")

    @field_validator("new_department")
    @classmethod
    def validate_department(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        max_length = _limit(info, "department_max_length", DEPARTMENT_MAX_LENGTH)
        if len(v) > max_length:
            raise ValueError(f"部门名称不能超过 {max_length} 个字符")
        return v

    @model_validator(mode="after")
    def validate_change(self):
        proposed = self.proposed_fields()
        if not proposed:
            raise ValueError("至少需要提供一个变更字段")
        if "role" in proposed and self.new_role is None:
            raise ValueError("角色不能为空")
        return self

    def proposed_fields(self) -> List[str]:
        return [name for name in CHANGE_FIELDS if f"new_{name}" in self.model_fields_set]

    def to_patch(self) -> ChangePatch:
        """转换为 ChangePatch，未提供的字段保持 UNSET"""
        values = {f"new_{name}": getattr(self, f"new_{name}") for name in self.proposed_fields()}
        if "new_squad_ids" in values and values["new_squad_ids"] is None:
            values["new_squad_ids"] = []
        return ChangePatch(**values)

