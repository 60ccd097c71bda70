"""
组织架构草稿 - 组织树索引

为森林建立两张 O(1) 查找表：
    node_by_id:   用户ID -> 节点
    parent_by_id: 用户ID -> 父节点（根节点为 None）

预览投影和变更差异展示都依赖这两张表。

使用示例:
    index = OrgTreeIndex(forest)
    node = index.get_node(7)
    parent = index.get_parent(7)
    chain = index.get_ancestors(7)
"""

from typing import Dict, Iterable, List, Optional

from orgdraft.exceptions import Err, ErrorCode, DuplicateNodeException, CyclicReparentException
from .models import Forest, OrgTreeNode, User


class OrgTreeIndex:
    """组织树索引

    索引直接引用森林中的节点对象（不复制），
    对节点的 children 做修改后需通过 attach/detach 同步父节点表。
    """

    def __init__(self, forest: Forest):
        """建立索引

        Args:
            forest: 根节点列表

        Raises:
            DuplicateNodeException: 同一用户 ID 出现多次
        """
        self.roots: Forest = forest
        self.node_by_id: Dict[int, OrgTreeNode] = {}
        self.parent_by_id: Dict[int, Optional[OrgTreeNode]] = {}

        # 显式栈遍历，避免深层级时递归过深
        stack = [(root, None) for root in reversed(forest)]
        while stack:
            node, parent = stack.pop()
            user_id = node.user.id
            if user_id in self.node_by_id:
                raise DuplicateNodeException(
                    f"用户 {user_id} 在组织树中出现多次",
                    details=[f"user_id={user_id}"],
                    user_id=user_id,
                )
            self.node_by_id[user_id] = node
            self.parent_by_id[user_id] = parent
            for child in reversed(node.children):
                stack.append((child, node))

    def __contains__(self, user_id: int) -> bool:
        return user_id in self.node_by_id

    def __len__(self) -> int:
        return len(self.node_by_id)

    def user_ids(self) -> List[int]:
        return list(self.node_by_id.keys())

    def get_node(self, user_id: int) -> OrgTreeNode:
        """获取节点

        Raises:
            ResourceNotFoundException: 用户不在当前组织树中
        """
        node = self.node_by_id.get(user_id)
        if node is None:
            raise Err.not_found(
                f"用户 {user_id} 不在当前组织树中",
                code=ErrorCode.USER_NOT_FOUND,
                resource_type="User",
                resource_id=user_id,
            )
        return node

    def get_user(self, user_id: int) -> User:
        return self.get_node(user_id).user

    def get_parent(self, user_id: int) -> Optional[OrgTreeNode]:
        """获取父节点，根节点返回 None"""
        self.get_node(user_id)
        return self.parent_by_id[user_id]

    def get_ancestors(self, user_id: int) -> List[OrgTreeNode]:
        """获取从直接上级到根的祖先链"""
        ancestors = []
        parent = self.get_parent(user_id)
        while parent is not None:
            ancestors.append(parent)
            parent = self.parent_by_id.get(parent.user.id)
        return ancestors

    def is_descendant_of(self, user_id: int, ancestor_id: int) -> bool:
        """判断 user_id 是否在 ancestor_id 的子树中（不含自身）"""
        return any(node.user.id == ancestor_id for node in self.get_ancestors(user_id))

    def name_lookup(self) -> Dict[int, str]:
        """用户ID -> 显示名称"""
        return {user_id: node.user.name for user_id, node in self.node_by_id.items()}

    # ==================== 节点挂载 ====================

    def detach(self, node: OrgTreeNode):
        """从当前父节点（或根列表）中摘除节点，子树随节点一起移动"""
        user_id = node.user.id
        parent = self.parent_by_id.get(user_id)
        siblings = parent.children if parent is not None else self.roots
        for position, sibling in enumerate(siblings):
            if sibling is node:
                del siblings[position]
                break
        self.parent_by_id[user_id] = None

    def attach(self, node: OrgTreeNode, parent: Optional[OrgTreeNode]):
        """将节点追加到 parent 的子节点末尾；parent 为 None 时成为新的根"""
        if parent is None:
            self.roots.append(node)
        else:
            parent.children.append(node)
        self.parent_by_id[node.user.id] = parent


def build_forest(users: Iterable[User]) -> Forest:
    """由扁平用户列表构建森林

    没有上级、或上级不在列表中的用户成为根节点。
    子节点顺序与输入顺序一致。

    Args:
        users: 用户列表

    Returns:
        根节点列表

    Raises:
        DuplicateNodeException: 同一用户 ID 出现多次
        CyclicReparentException: 上级关系成环，部分用户无法挂到任何根节点下
    """
    users = list(users)
    nodes: Dict[int, OrgTreeNode] = {}
    for user in users:
        if user.id in nodes:
            raise DuplicateNodeException(
                f"用户 {user.id} 在用户列表中出现多次",
                user_id=user.id,
            )
        nodes[user.id] = OrgTreeNode(user=user)

    roots: Forest = []
    for user in users:
        node = nodes[user.id]
        parent = nodes.get(user.supervisor_id) if user.supervisor_id is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.children.append(node)

    reachable = sum(1 for root in roots for _ in root.iter_nodes())
    if reachable != len(nodes):
        attached = {user.id for user in flatten(roots)}
        orphaned = sorted(user_id for user_id in nodes if user_id not in attached)
        raise CyclicReparentException(
            "用户上级关系存在循环",
            details=[f"user_id={user_id}" for user_id in orphaned],
            user_ids=orphaned,
        )
    return roots


def subtree(forest: Forest, user_id: int) -> OrgTreeNode:
    """获取以某用户为根的子树（上级视角）

    Raises:
        ResourceNotFoundException: 用户不在森林中
    """
    return OrgTreeIndex(forest).get_node(user_id)


def flatten(forest: Forest) -> List[User]:
    """先序展开森林中的所有用户"""
    users = []
    for root in forest:
        users.extend(node.user for node in root.iter_nodes())
    return users


def collect_user_ids(forest: Forest) -> List[int]:
    return [user.id for user in flatten(forest)]
