"""
组织架构草稿 - 枚举定义
"""

from enum import Enum


class Role(str, Enum):
    """用户角色"""

    EMPLOYEE = "employee"
    SUPERVISOR = "supervisor"
    ADMIN = "admin"

    @property
    def label(self) -> str:
        """展示用名称（首字母大写）"""
        return self.value.capitalize()

    @property
    def can_supervise(self) -> bool:
        """是否可以作为其他人的上级"""
        return self in (Role.SUPERVISOR, Role.ADMIN)


class DraftStatus(str, Enum):
    """草稿状态

    草稿创建后处于 DRAFT，发布成功后变为 PUBLISHED，之后不可再编辑。
    """

    DRAFT = "draft"
    PUBLISHED = "published"
