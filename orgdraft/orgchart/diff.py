"""
组织架构草稿 - 变更差异展示

把一条 Change 转换为可展示的逐字段前后对比，供待发布变更面板使用。
纯函数、无副作用：相同输入总是得到相同输出。

展示规则：
    - 上级：新旧上级ID不同才展示，ID 解析为名称，为空显示 "None"
    - 部门/角色：新旧值不同且至少一侧非空才展示，角色显示首字母大写的名称
    - 小组：提出了小组变更时，按新旧ID列表划分为 移除/新增/保留 三组，
      解析为小组名称，目录中不存在的ID直接丢弃
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from orgdraft.exceptions import Err, ErrorCode
from .enums import Role
from .models import Change, Squad, is_set

NONE_LABEL = "None"


@dataclass(frozen=True)
class ValueDiff:
    """单个字段的前后值（已转换为展示文本）"""
    old: str
    new: str


@dataclass(frozen=True)
class SquadDiff:
    """小组成员变化"""
    removed: List[str] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.removed or self.added)


@dataclass(frozen=True)
class ChangeDiff:
    """一条变更的展示结果，未变化的字段为 None"""
    user_id: int
    user_name: str
    supervisor: Optional[ValueDiff] = None
    department: Optional[ValueDiff] = None
    role: Optional[ValueDiff] = None
    squads: Optional[SquadDiff] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.supervisor is None
            and self.department is None
            and self.role is None
            and self.squads is None
        )


def _text(value: Any) -> str:
    if value is None or value == "":
        return NONE_LABEL
    if isinstance(value, Role):
        return value.label
    return str(value)


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def diff_squads(
    original_ids: Iterable[int],
    new_ids: Iterable[int],
    squad_names: Mapping[int, str],
) -> SquadDiff:
    """划分小组变化

    removed 保持原列表顺序，added/unchanged 保持新列表顺序。
    目录中不存在的小组ID被丢弃。
    """
    original_ids = list(dict.fromkeys(original_ids))
    new_ids = list(dict.fromkeys(new_ids))
    original_set = set(original_ids)
    new_set = set(new_ids)

    def names(ids):
        return [squad_names[i] for i in ids if i in squad_names]

    return SquadDiff(
        removed=names(i for i in original_ids if i not in new_set),
        added=names(i for i in new_ids if i not in original_set),
        unchanged=names(i for i in new_ids if i in original_set),
    )


class ChangeDiffPresenter:
    """变更差异展示器

    使用示例:
        presenter = ChangeDiffPresenter(index.name_lookup(), squads)
        for diff in presenter.present_all(draft.changes):
            ...
    """

    def __init__(self, user_names: Mapping[int, str], squads: Iterable[Squad] = ()):
        self.user_names: Dict[int, str] = dict(user_names)
        self.squad_names: Dict[int, str] = {squad.id: squad.name for squad in squads}

    def user_label(self, user_id: Optional[int]) -> str:
        """用户ID解析为名称

        Raises:
            ResourceNotFoundException: 用户ID无法解析
        """
        if user_id is None:
            return NONE_LABEL
        name = self.user_names.get(user_id)
        if name is None:
            raise Err.not_found(
                f"用户 {user_id} 不存在",
                code=ErrorCode.USER_NOT_FOUND,
                resource_type="User",
                resource_id=user_id,
            )
        return name

    def present(self, change: Change) -> ChangeDiff:
        supervisor = None
        if change.has_supervisor_change:
            supervisor = ValueDiff(
                old=self.user_label(change.original_supervisor_id),
                new=self.user_label(change.new_supervisor_id),
            )

        department = None
        if change.has_department_change and not (
            _is_blank(change.original_department) and _is_blank(change.new_department)
        ):
            department = ValueDiff(_text(change.original_department), _text(change.new_department))

        role = None
        if change.has_role_change and not (
            _is_blank(change.original_role) and _is_blank(change.new_role)
        ):
            role = ValueDiff(_text(change.original_role), _text(change.new_role))

        squads = None
        if is_set(change.new_squad_ids):
            squad_diff = diff_squads(
                change.original_squad_ids or [],
                change.new_squad_ids or [],
                self.squad_names,
            )
            if squad_diff.has_changes:
                squads = squad_diff

        return ChangeDiff(
            user_id=change.user_id,
            user_name=self.user_label(change.user_id),
            supervisor=supervisor,
            department=department,
            role=role,
            squads=squads,
        )

    def present_all(self, changes: Iterable[Change]) -> List[ChangeDiff]:
        return [self.present(change) for change in changes]


def present_change(
    change: Change,
    user_names: Mapping[int, str],
    squads: Iterable[Squad] = (),
) -> ChangeDiff:
    """生成单条变更的展示结果（ChangeDiffPresenter 的便捷入口）"""
    return ChangeDiffPresenter(user_names, squads).present(change)
