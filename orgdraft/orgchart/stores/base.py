"""草稿存储抽象基类

定义草稿引擎与外部持久化协作方之间的异步接口规范。
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models import Change, Draft, Forest, Squad


class BaseDraftStore(ABC):
    """草稿存储抽象基类

    所有存储实现都应继承此类。实现方约定：
    - 返回的对象归调用方所有，调用方修改不影响存储内部状态
    - 资源不存在抛出 ResourceNotFoundException
    - 传输失败抛出 ServiceUnavailableException
    - publish_draft 必须全部成功或全部不生效
    """

    @abstractmethod
    async def get_org_tree(self, root_user_id: Optional[int] = None) -> Forest:
        """获取组织树

        Args:
            root_user_id: 指定时只返回该用户的子树（上级视角），否则返回全部根节点

        Returns:
            根节点列表
        """
        pass

    @abstractmethod
    async def get_squads(self) -> List[Squad]:
        """获取小组目录"""
        pass

    @abstractmethod
    async def list_drafts(self) -> List[Draft]:
        """获取所有草稿（含已发布），按创建顺序排列"""
        pass

    @abstractmethod
    async def get_draft(self, draft_id: int) -> Draft:
        """获取草稿及其全部变更"""
        pass

    @abstractmethod
    async def create_draft(
        self,
        name: str,
        description: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> Draft:
        """创建空草稿"""
        pass

    @abstractmethod
    async def update_draft(self, draft_id: int, updates: Dict[str, Any]) -> Draft:
        """修改草稿名称/说明

        Args:
            draft_id: 草稿ID
            updates: 需要修改的字段，只包含 name / description
        """
        pass

    @abstractmethod
    async def delete_draft(self, draft_id: int) -> None:
        """删除草稿及其全部变更"""
        pass

    @abstractmethod
    async def save_change(self, draft_id: int, change: Change) -> Change:
        """保存变更（同一用户覆盖已有变更）

        Returns:
            保存后的变更（带 id 与时间戳）
        """
        pass

    @abstractmethod
    async def remove_change(self, draft_id: int, user_id: int) -> None:
        """删除草稿中某个用户的变更"""
        pass

    @abstractmethod
    async def publish_draft(self, draft_id: int) -> Draft:
        """原子地提交草稿中的全部变更

        Returns:
            状态为 published 的草稿

        Raises:
            ResourceConflictException: 草稿已发布，或组织数据自草稿编辑后已变化
        """
        pass
