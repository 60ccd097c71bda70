"""内存草稿存储

默认的内存存储实现，适用于单实例场景和测试。

注意：应用重启后数据会丢失。
"""

import asyncio
import copy
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from orgdraft.exceptions import Err, ErrorCode
from orgdraft.log import draft_log
from ..enums import DraftStatus
from ..models import Change, Draft, Forest, Squad, User
from ..projector import TreeProjector
from ..tree import build_forest, flatten, subtree
from .base import BaseDraftStore


class MemoryDraftStore(BaseDraftStore):
    """内存草稿存储

    所有读取接口返回深拷贝；发布在同一把锁内完成校验和替换，
    任何一项校验失败时用户数据保持不变。

    使用示例:
        store = MemoryDraftStore(users=users, squads=squads)
        service = DraftService(store)
    """

    def __init__(
        self,
        users: Iterable[User] = (),
        squads: Iterable[Squad] = (),
    ):
        self._users: Dict[int, User] = {}
        for user in users:
            if user.id in self._users:
                raise Err.invalid(f"用户 {user.id} 重复", code=ErrorCode.INVALID_PARAMETER)
            self._users[user.id] = user
        self._squads: Dict[int, Squad] = {squad.id: squad for squad in squads}
        self._drafts: Dict[int, Draft] = {}
        self._next_draft_id = 1
        self._next_change_id = 1
        self._lock = asyncio.Lock()

    # ==================== 组织数据 ====================

    @property
    def users(self) -> List[User]:
        """当前用户快照"""
        return list(self._users.values())

    def get_user(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise Err.not_found(
                f"用户 {user_id} 不存在",
                code=ErrorCode.USER_NOT_FOUND,
                resource_type="User",
                resource_id=user_id,
            )
        return user

    def put_user(self, user: User):
        """直接写入用户（模拟草稿之外的组织数据修改）"""
        self._users[user.id] = user

    async def get_org_tree(self, root_user_id: Optional[int] = None) -> Forest:
        forest = build_forest(self._users.values())
        if root_user_id is not None:
            forest = [subtree(forest, root_user_id)]
        return copy.deepcopy(forest)

    async def get_squads(self) -> List[Squad]:
        return list(self._squads.values())

    # ==================== 草稿 ====================

    def _get_draft(self, draft_id: int) -> Draft:
        draft = self._drafts.get(draft_id)
        if draft is None:
            raise Err.not_found(
                f"草稿 {draft_id} 不存在",
                code=ErrorCode.DRAFT_NOT_FOUND,
                resource_type="Draft",
                resource_id=draft_id,
            )
        return draft

    async def list_drafts(self) -> List[Draft]:
        return copy.deepcopy(list(self._drafts.values()))

    async def get_draft(self, draft_id: int) -> Draft:
        return copy.deepcopy(self._get_draft(draft_id))

    async def create_draft(
        self,
        name: str,
        description: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> Draft:
        now = datetime.now()
        draft = Draft(
            id=self._next_draft_id,
            name=name,
            description=description,
            created_by_id=created_by_id,
            created_at=now,
            updated_at=now,
        )
        self._next_draft_id += 1
        self._drafts[draft.id] = draft
        return copy.deepcopy(draft)

    async def update_draft(self, draft_id: int, updates: Dict[str, Any]) -> Draft:
        draft = self._get_draft(draft_id)
        draft.ensure_editable()
        for name in ("name", "description"):
            if name in updates:
                setattr(draft, name, updates[name])
        draft.updated_at = datetime.now()
        return copy.deepcopy(draft)

    async def delete_draft(self, draft_id: int) -> None:
        self._get_draft(draft_id)
        del self._drafts[draft_id]

    # ==================== 变更 ====================

    async def save_change(self, draft_id: int, change: Change) -> Change:
        draft = self._get_draft(draft_id)
        draft.ensure_editable()
        self.get_user(change.user_id)

        now = datetime.now()
        stored = copy.deepcopy(change)
        stored.draft_id = draft_id
        existing = draft.change_for(change.user_id)
        if existing is not None:
            stored.id = existing.id
            stored.created_at = existing.created_at
        else:
            stored.id = self._next_change_id
            stored.created_at = now
            self._next_change_id += 1
        stored.updated_at = now

        draft.put_change(stored)
        draft.updated_at = now
        return copy.deepcopy(stored)

    async def remove_change(self, draft_id: int, user_id: int) -> None:
        draft = self._get_draft(draft_id)
        draft.ensure_editable()
        draft.discard_change(user_id)
        draft.updated_at = datetime.now()

    # ==================== 发布 ====================

    async def publish_draft(self, draft_id: int) -> Draft:
        async with self._lock:
            draft = self._get_draft(draft_id)
            draft.ensure_editable()
            self._check_conflicts(draft)

            projector = TreeProjector(self._squads.values(), strict_squads=True)
            projected = projector.project(build_forest(self._users.values()), draft.changes)
            updated = {user.id: user for user in flatten(projected)}

            # 保持原有的用户顺序
            self._users = {user_id: updated[user_id] for user_id in self._users}
            now = datetime.now()
            draft.status = DraftStatus.PUBLISHED
            draft.published_at = now
            draft.updated_at = now

        draft_log(draft_id).info(f"Committed {len(draft.changes)} change(s)")
        return copy.deepcopy(draft)

    def _check_conflicts(self, draft: Draft):
        """比较变更记录的原值与当前用户数据，只检查变更涉及的字段

        Raises:
            ResourceNotFoundException: 变更涉及的用户已不存在
            ResourceConflictException: 原值与当前数据不一致
        """
        details = []
        for change in draft.changes:
            user = self.get_user(change.user_id)
            fields = change.proposed_fields()
            if "supervisor_id" in fields and user.supervisor_id != change.original_supervisor_id:
                details.append(f"user_id={user.id}: supervisor_id")
            if "department" in fields and user.department != change.original_department:
                details.append(f"user_id={user.id}: department")
            if "role" in fields and user.role != change.original_role:
                details.append(f"user_id={user.id}: role")
            if "squad_ids" in fields and set(user.squad_ids) != set(change.original_squad_ids or []):
                details.append(f"user_id={user.id}: squad_ids")

        if details:
            draft_log(draft.id).warning(f"Publish rejected, org data changed: {details}")
            raise Err.conflict(
                "组织数据自草稿编辑后已被修改，请核对后重新编辑",
                code=ErrorCode.ORG_DATA_CHANGED,
                details=details,
                draft_id=draft.id,
            )
