"""
组织架构草稿 - 数据模型

模型说明：
- Squad / User: 不可变值对象。预览时不修改原用户，而是在克隆出的节点上替换新的 User。
- OrgTreeNode: 用户 + 有序子节点 + 展示用的 pending_change 标注。
- Change: 草稿中某个用户的变更。original_* 在首次编辑时记录，new_* 默认为 UNSET。
- Draft: 命名的变更批次，同一用户在一个草稿中最多一条 Change。

UNSET 与 None 的区别：
    new_department = UNSET   -> 未提出部门变更
    new_department = None    -> 将部门清空
    new_squad_ids  = UNSET   -> 未提出小组变更
    new_squad_ids  = []      -> 移出所有小组
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from orgdraft.exceptions import Err, ErrorCode
from .enums import Role, DraftStatus


class _Unset:
    """“未设置”标记，单例"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Unset, ())


UNSET: Any = _Unset()


def is_set(value: Any) -> bool:
    """判断字段是否提出了新值（None 也算提出）"""
    return value is not UNSET


# 可变更的字段
CHANGE_FIELDS = ("supervisor_id", "department", "role", "squad_ids")


# ==================== 组织树 ====================

@dataclass(frozen=True)
class Squad:
    """小组（全局扁平目录）"""
    id: int
    name: str


@dataclass(frozen=True)
class User:
    """用户

    Attributes:
        id: 用户ID
        name: 显示名称
        role: 角色
        department: 部门（可为空）
        supervisor_id: 上级用户ID（为空表示根节点）
        squads: 所属小组
        email: 邮箱
        title: 职位
    """
    id: int
    name: str
    role: Role = Role.EMPLOYEE
    department: Optional[str] = None
    supervisor_id: Optional[int] = None
    squads: Tuple[Squad, ...] = ()
    email: Optional[str] = None
    title: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.role, Role):
            object.__setattr__(self, "role", Role(self.role))
        if not isinstance(self.squads, tuple):
            object.__setattr__(self, "squads", tuple(self.squads))

    @property
    def squad_ids(self) -> List[int]:
        return [s.id for s in self.squads]


@dataclass
class OrgTreeNode:
    """组织树节点

    pending_change 仅用于展示（标注该用户在当前草稿中的变更），
    不属于用户实体本身。
    """
    user: User
    children: List["OrgTreeNode"] = field(default_factory=list)
    pending_change: Optional["Change"] = None

    @property
    def user_id(self) -> int:
        return self.user.id

    def iter_nodes(self) -> Iterator["OrgTreeNode"]:
        """先序遍历当前节点及所有子孙"""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, user_id: int) -> Optional["OrgTreeNode"]:
        for node in self.iter_nodes():
            if node.user.id == user_id:
                return node
        return None


# 森林：一个或多个根节点
Forest = List[OrgTreeNode]


# ==================== 变更 ====================

@dataclass(frozen=True)
class ChangePatch:
    """部分变更（一次编辑提交的字段）

    未提供的字段保持 UNSET，合并时不会覆盖已有的新值。
    """
    new_supervisor_id: Any = UNSET
    new_department: Any = UNSET
    new_role: Any = UNSET
    new_squad_ids: Any = UNSET

    def __post_init__(self):
        if is_set(self.new_role) and self.new_role is not None and not isinstance(self.new_role, Role):
            object.__setattr__(self, "new_role", Role(self.new_role))
        if is_set(self.new_squad_ids) and self.new_squad_ids is not None:
            object.__setattr__(self, "new_squad_ids", list(self.new_squad_ids))

    def proposed_fields(self) -> List[str]:
        return [name for name in CHANGE_FIELDS if is_set(getattr(self, f"new_{name}"))]

    def is_empty(self) -> bool:
        return not self.proposed_fields()


@dataclass
class Change:
    """草稿中某个用户的变更

    以 user_id 为键，在草稿内唯一。
    """
    user_id: int
    original_supervisor_id: Optional[int] = None
    original_department: Optional[str] = None
    original_role: Optional[Role] = None
    original_squad_ids: List[int] = field(default_factory=list)
    new_supervisor_id: Any = UNSET
    new_department: Any = UNSET
    new_role: Any = UNSET
    new_squad_ids: Any = UNSET
    id: Optional[int] = None
    draft_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def capture(cls, user: User, patch: ChangePatch, draft_id: Optional[int] = None) -> "Change":
        """首次编辑某用户时创建变更，记录当前值作为 original_*"""
        change = cls(
            user_id=user.id,
            draft_id=draft_id,
            original_supervisor_id=user.supervisor_id,
            original_department=user.department,
            original_role=user.role,
            original_squad_ids=user.squad_ids,
        )
        return change.merged(patch)

    def merged(self, patch: ChangePatch) -> "Change":
        """合并部分变更，返回新对象；original_* 保持不变"""
        updates = {}
        for name in patch.proposed_fields():
            value = getattr(patch, f"new_{name}")
            updates[f"new_{name}"] = list(value) if isinstance(value, list) else value
        return dataclasses.replace(self, **updates)

    def proposed_fields(self) -> List[str]:
        return [name for name in CHANGE_FIELDS if is_set(getattr(self, f"new_{name}"))]

    @property
    def has_supervisor_change(self) -> bool:
        return is_set(self.new_supervisor_id) and self.new_supervisor_id != self.original_supervisor_id

    @property
    def has_department_change(self) -> bool:
        return is_set(self.new_department) and self.new_department != self.original_department

    @property
    def has_role_change(self) -> bool:
        return is_set(self.new_role) and self.new_role != self.original_role

    @property
    def has_squad_change(self) -> bool:
        return is_set(self.new_squad_ids)


# ==================== 草稿 ====================

@dataclass
class Draft:
    """组织调整草稿"""
    id: int
    name: str
    status: DraftStatus = DraftStatus.DRAFT
    description: Optional[str] = None
    created_by_id: Optional[int] = None
    changes: List[Change] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    @property
    def is_editable(self) -> bool:
        return self.status == DraftStatus.DRAFT

    def ensure_editable(self):
        """已发布的草稿不允许修改

        Raises:
            ResourceConflictException: 草稿不处于 draft 状态
        """
        if not self.is_editable:
            raise Err.conflict(
                f"草稿「{self.name}」已发布，不能修改",
                code=ErrorCode.DRAFT_NOT_EDITABLE,
                draft_id=self.id,
            )

    def change_for(self, user_id: int) -> Optional[Change]:
        for change in self.changes:
            if change.user_id == user_id:
                return change
        return None

    def changes_by_user(self) -> Dict[int, Change]:
        return {change.user_id: change for change in self.changes}

    def build_change(self, user: User, patch: ChangePatch) -> Change:
        """计算 upsert 后的变更，不修改草稿本身

        已有变更则合并新字段，否则以用户当前值创建新变更。
        """
        existing = self.change_for(user.id)
        if existing is not None:
            return existing.merged(patch)
        return Change.capture(user, patch, draft_id=self.id)

    def put_change(self, change: Change):
        """写入变更：同一用户原地替换，否则追加到末尾"""
        for index, existing in enumerate(self.changes):
            if existing.user_id == change.user_id:
                self.changes[index] = change
                return
        self.changes.append(change)

    def discard_change(self, user_id: int) -> Change:
        """删除某用户的变更

        Raises:
            ResourceNotFoundException: 该用户在草稿中没有变更
        """
        for index, existing in enumerate(self.changes):
            if existing.user_id == user_id:
                return self.changes.pop(index)
        raise Err.not_found(
            f"草稿中不存在用户 {user_id} 的变更",
            code=ErrorCode.CHANGE_NOT_FOUND,
            resource_type="Change",
            resource_id=user_id,
            draft_id=self.id,
        )
