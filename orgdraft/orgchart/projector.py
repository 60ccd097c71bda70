"""
组织架构草稿 - 预览投影

输入原始森林、有序变更列表和小组目录，输出应用变更后的新森林，
原始森林不会被修改。

处理步骤：
    1. 深拷贝原始森林并建立索引
    2. 逐条变更替换节点上的 User（部门、角色、小组、上级ID），并标注 pending_change
    3. 逐条变更调整上级：从原父节点摘下，挂到新上级末尾（新上级为空则成为新的根）
    4. 校验被移动节点的祖先链，发现循环即报错

调整上级基于索引中的节点引用而非数组下标，因此同一批次中的链式移动
（A 挂到 B 下，B 挂到 C 下）与处理顺序无关；被移动节点的整棵子树随之移动。
循环校验在全部移动完成后进行，只按最终结果判定。

使用示例:
    from orgdraft.orgchart import project_tree

    preview = project_tree(forest, draft.changes, squads)
"""

import copy
import dataclasses
from typing import Dict, Iterable, List, Optional, Tuple

from orgdraft.exceptions import Err, ErrorCode, CyclicReparentException
from orgdraft.log import get_logger
from .models import Change, Forest, OrgTreeNode, Squad, User, is_set
from .tree import OrgTreeIndex

logger = get_logger()


class TreeProjector:
    """预览投影器

    纯计算、无副作用，可以在每次渲染时调用。

    使用示例:
        projector = TreeProjector(squads, strict_squads=False)
        preview = projector.project(forest, changes)
    """

    def __init__(self, squads: Iterable[Squad] = (), strict_squads: bool = False):
        """
        Args:
            squads: 小组目录
            strict_squads: 为 True 时遇到目录中不存在的小组 ID 报错，否则丢弃
        """
        self.squad_by_id: Dict[int, Squad] = {squad.id: squad for squad in squads}
        self.strict_squads = strict_squads

    def project(self, base_forest: Forest, changes: Iterable[Change]) -> Forest:
        """应用变更，返回新森林

        Args:
            base_forest: 原始森林（只读）
            changes: 有序变更列表，每个用户最多一条

        Returns:
            深拷贝后应用变更的新森林

        Raises:
            ValidationException: 同一用户存在多条变更，或角色被设为空
            ResourceNotFoundException: 变更引用的用户/上级不在森林中，或严格模式下小组不存在
            CyclicReparentException: 调整上级后形成循环
        """
        changes = list(changes)
        forest = copy.deepcopy(base_forest)
        if not changes:
            return forest

        self._ensure_unique(changes)
        index = OrgTreeIndex(forest)

        for change in changes:
            node = index.get_node(change.user_id)
            node.user = self._apply_fields(node.user, change)
            node.pending_change = copy.deepcopy(change)

        moved: List[int] = []
        for change in changes:
            if not change.has_supervisor_change:
                continue
            node = index.get_node(change.user_id)
            target = None
            if change.new_supervisor_id is not None:
                target = index.get_node(change.new_supervisor_id)
            if index.parent_by_id[change.user_id] is target:
                continue
            index.detach(node)
            index.attach(node, target)
            moved.append(change.user_id)

        if moved:
            self._check_cycles(index, moved)

        logger.debug(f"Projected {len(changes)} change(s), {len(moved)} node(s) reparented")
        return forest

    # ==================== 内部方法 ====================

    @staticmethod
    def _ensure_unique(changes: List[Change]):
        seen = set()
        for change in changes:
            if change.user_id in seen:
                raise Err.invalid(
                    f"用户 {change.user_id} 存在多条变更",
                    code=ErrorCode.INVALID_PARAMETER,
                    user_id=change.user_id,
                )
            seen.add(change.user_id)

    def _apply_fields(self, user: User, change: Change) -> User:
        updates = {}
        if change.has_supervisor_change:
            updates["supervisor_id"] = change.new_supervisor_id
        if is_set(change.new_department):
            updates["department"] = change.new_department
        if is_set(change.new_role):
            if change.new_role is None:
                raise Err.invalid(
                    f"用户 {change.user_id} 的角色不能为空",
                    code=ErrorCode.INVALID_PARAMETER,
                    user_id=change.user_id,
                )
            updates["role"] = change.new_role
        if change.has_squad_change:
            updates["squads"] = self.resolve_squads(change.new_squad_ids or [])
        if not updates:
            return user
        return dataclasses.replace(user, **updates)

    def resolve_squads(self, squad_ids: Iterable[int]) -> Tuple[Squad, ...]:
        """按目录解析小组 ID，去重并保持顺序

        Raises:
            ResourceNotFoundException: 严格模式下存在目录中没有的小组 ID
        """
        resolved: List[Squad] = []
        missing: List[int] = []
        seen = set()
        for squad_id in squad_ids:
            if squad_id in seen:
                continue
            seen.add(squad_id)
            squad = self.squad_by_id.get(squad_id)
            if squad is None:
                missing.append(squad_id)
            else:
                resolved.append(squad)

        if missing and self.strict_squads:
            raise Err.not_found(
                "小组不存在",
                code=ErrorCode.SQUAD_NOT_FOUND,
                details=[f"squad_id={squad_id}" for squad_id in missing],
                resource_type="Squad",
                resource_id=missing,
            )
        return tuple(resolved)

    @staticmethod
    def _check_cycles(index: OrgTreeIndex, moved: List[int]):
        # 循环中至少有一个被移动的节点，因此只需从被移动节点向上检查
        for user_id in moved:
            chain = [user_id]
            visited = {user_id}
            parent = index.parent_by_id[user_id]
            while parent is not None:
                parent_id = parent.user.id
                chain.append(parent_id)
                if parent_id in visited:
                    raise CyclicReparentException(
                        f"不能将用户 {user_id} 移动到其下属之下",
                        details=[" -> ".join(str(i) for i in chain)],
                        user_id=user_id,
                    )
                visited.add(parent_id)
                parent = index.parent_by_id[parent_id]


def project_tree(
    base_forest: Forest,
    changes: Iterable[Change],
    squads: Iterable[Squad] = (),
    strict_squads: bool = False,
) -> Forest:
    """应用变更生成预览森林（TreeProjector 的便捷入口）"""
    return TreeProjector(squads, strict_squads=strict_squads).project(base_forest, changes)


def find_node(forest: Forest, user_id: int) -> Optional[OrgTreeNode]:
    """在森林中查找用户节点，不存在返回 None"""
    for root in forest:
        node = root.find(user_id)
        if node is not None:
            return node
    return None
