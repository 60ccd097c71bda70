"""
组织架构草稿 - 草稿编排服务

负责草稿的创建/选择/删除、变更的新增/合并/删除以及发布，
底层持久化通过 BaseDraftStore 委托给外部协作方。

本地状态约定：
    - 只有存储调用成功返回后才修改本地状态，调用失败或被取消时本地草稿保持原样
    - 只有存储确认发布成功后，草稿才会离开活动列表
    - 同一草稿的发布在完成前不能再次发起

使用示例:
    from orgdraft.orgchart import DraftService, MemoryDraftStore

    service = DraftService(MemoryDraftStore(users=users, squads=squads))
    await service.refresh()

    draft = await service.create_draft("Q3 架构调整")
    await service.upsert_change(draft.id, 7, {"new_department": "Sales"})
    preview = service.preview()
    diffs = service.present_changes()
    await service.publish_draft(draft.id)
"""

import asyncio
import copy
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from orgdraft.config import DraftSettings
from orgdraft.exceptions import BusinessException, Err, ErrorCode
from orgdraft.log import draft_log
from ..diff import ChangeDiff, ChangeDiffPresenter
from ..models import Change, ChangePatch, Draft, Forest, Squad, CHANGE_FIELDS
from ..projector import TreeProjector
from ..schemas import AddDraftChangeRequest, CreateDraftRequest, UpdateDraftRequest
from ..state import ActiveDraftState, EditingDraft, NO_DRAFT
from ..stores.base import BaseDraftStore
from ..tree import OrgTreeIndex


class DraftService:
    """草稿编排服务

    Attributes:
        store: 草稿存储
        settings: 草稿配置
        root_user_id: 上级视角时的子树根用户ID，为空表示查看全部根节点
        forest: 当前组织树（实时数据，只读）
        squads: 小组目录
    """

    def __init__(
        self,
        store: BaseDraftStore,
        settings: Optional[DraftSettings] = None,
        root_user_id: Optional[int] = None,
    ):
        self.store = store
        self.settings = settings or DraftSettings()
        self.root_user_id = root_user_id
        self.forest: Forest = []
        self.squads: List[Squad] = []
        self._drafts: Dict[int, Draft] = {}
        self._state: ActiveDraftState = NO_DRAFT
        self._publishing: Set[int] = set()

    @contextmanager
    def _store_call(self, draft_id: Optional[int], action: str):
        """存储调用失败时记录警告，传输错误统一转换为 STORE_UNAVAILABLE

        Raises:
            ServiceUnavailableException: 存储抛出 OSError 或超时
        """
        try:
            yield
        except BusinessException as e:
            draft_log(draft_id).warning(f"{action} failed: [{e.code}] {e.message}")
            raise
        except (OSError, asyncio.TimeoutError) as e:
            draft_log(draft_id).warning(f"{action} failed: {type(e).__name__}: {e}")
            raise Err.unavailable(
                "存储服务不可用，请稍后重试",
                code=ErrorCode.STORE_UNAVAILABLE,
                draft_id=draft_id,
            ) from e

    # ==================== 状态 ====================

    @property
    def state(self) -> ActiveDraftState:
        return self._state

    @property
    def drafts(self) -> List[Draft]:
        """活动草稿列表（状态为 draft）"""
        return list(self._drafts.values())

    @property
    def active_draft(self) -> Optional[Draft]:
        if isinstance(self._state, EditingDraft):
            return self._drafts.get(self._state.draft_id)
        return None

    @property
    def projector(self) -> TreeProjector:
        return TreeProjector(self.squads, strict_squads=self.settings.strict_squad_ids)

    def get_draft(self, draft_id: int) -> Draft:
        """获取本地活动草稿

        Raises:
            ResourceNotFoundException: 草稿不在活动列表中
        """
        draft = self._drafts.get(draft_id)
        if draft is None:
            raise Err.not_found(
                f"草稿 {draft_id} 不存在",
                code=ErrorCode.DRAFT_NOT_FOUND,
                resource_type="Draft",
                resource_id=draft_id,
            )
        return draft

    async def refresh(self) -> List[Draft]:
        """从存储重新加载组织树、小组目录和草稿列表"""
        with self._store_call(None, "Refresh"):
            forest = await self.store.get_org_tree(self.root_user_id)
            squads = await self.store.get_squads()
            drafts = await self.store.list_drafts()

        self.forest = forest
        self.squads = list(squads)
        self._drafts = {draft.id: draft for draft in drafts if draft.is_editable}
        if isinstance(self._state, EditingDraft) and self._state.draft_id not in self._drafts:
            self._state = NO_DRAFT
        return self.drafts

    async def list_drafts(self) -> List[Draft]:
        return await self.refresh()

    # ==================== 草稿 ====================

    async def create_draft(
        self,
        name: str,
        description: Optional[str] = None,
        created_by_id: Optional[int] = None,
    ) -> Draft:
        """创建草稿并立即进入编辑

        Raises:
            ValidationException: 名称为空或超长
        """
        request = CreateDraftRequest.parse(
            {"name": name, "description": description},
            draft_name_max_length=self.settings.draft_name_max_length,
        )
        with self._store_call(None, "Create"):
            draft = await self.store.create_draft(request.name, request.description, created_by_id)
        self._drafts[draft.id] = draft
        self._state = EditingDraft(draft.id)
        draft_log(draft.id).info(f"Draft created: {draft.name}")
        return draft

    async def select_draft(self, draft_id: int) -> Draft:
        """加载草稿完整数据并进入编辑"""
        with self._store_call(draft_id, "Select"):
            draft = await self.store.get_draft(draft_id)
        draft.ensure_editable()
        self._drafts[draft.id] = draft
        self._state = EditingDraft(draft.id)
        return draft

    def exit_draft_mode(self):
        """退出编辑（草稿保留）"""
        self._state = NO_DRAFT

    async def rename_draft(self, draft_id: int, **fields: Any) -> Draft:
        """修改草稿名称/说明

        Args:
            draft_id: 草稿ID
            **fields: name / description，未提供的保持不变
        """
        request = UpdateDraftRequest.parse(
            fields,
            draft_name_max_length=self.settings.draft_name_max_length,
        )
        updates = request.updates()
        if not updates:
            raise Err.invalid("没有需要修改的字段", code=ErrorCode.INVALID_PARAMETER)
        self.get_draft(draft_id).ensure_editable()

        with self._store_call(draft_id, "Rename"):
            updated = await self.store.update_draft(draft_id, updates)
        local = self._drafts.get(draft_id)
        if local is not None:
            local.name = updated.name
            local.description = updated.description
            local.updated_at = updated.updated_at
        return updated

    async def delete_draft(self, draft_id: int):
        """丢弃草稿；若为当前编辑的草稿则退出编辑"""
        self.get_draft(draft_id)
        with self._store_call(draft_id, "Delete"):
            await self.store.delete_draft(draft_id)
        self._drafts.pop(draft_id, None)
        if self._state.draft_id == draft_id:
            self._state = NO_DRAFT
        draft_log(draft_id).info("Draft deleted")

    # ==================== 变更 ====================

    def _to_patch(self, user_id: int, patch: Union[ChangePatch, Mapping[str, Any]]) -> ChangePatch:
        if isinstance(patch, ChangePatch):
            data = {f"new_{name}": getattr(patch, f"new_{name}") for name in patch.proposed_fields()}
        else:
            data = dict(patch)
        if not any(f"new_{name}" in data for name in CHANGE_FIELDS):
            raise Err.invalid("至少需要提供一个变更字段", code=ErrorCode.EMPTY_CHANGE, user_id=user_id)
        data["user_id"] = user_id
        request = AddDraftChangeRequest.parse(
            data,
            department_max_length=self.settings.department_max_length,
        )
        return request.to_patch()

    async def upsert_change(
        self,
        draft_id: int,
        user_id: int,
        patch: Union[ChangePatch, Mapping[str, Any]],
    ) -> Change:
        """新增或合并某个用户的变更

        首次编辑某用户时以当前组织树中的值作为 original_*，
        之后的编辑只合并 new_* 字段。

        Args:
            draft_id: 草稿ID
            user_id: 用户ID
            patch: ChangePatch 或 {"new_department": ...} 形式的字典

        Returns:
            保存后的变更

        Raises:
            ValidationException: 没有提供变更字段或字段值非法
            ResourceNotFoundException: 草稿/用户/新上级不存在
            CyclicReparentException: 调整上级后形成循环
        """
        patch = self._to_patch(user_id, patch)
        draft = self.get_draft(draft_id)
        draft.ensure_editable()
        user = OrgTreeIndex(self.forest).get_user(user_id)
        change = draft.build_change(user, patch)

        candidate = [c for c in draft.changes if c.user_id != user_id] + [change]
        try:
            self.projector.project(self.forest, candidate)
        except BusinessException as e:
            draft_log(draft_id).warning(f"Change for user {user_id} rejected: {e.message}")
            raise

        with self._store_call(draft_id, f"Saving change for user {user_id}"):
            saved = await self.store.save_change(draft_id, change)
        local = self._drafts.get(draft_id)
        if local is not None:
            local.put_change(saved)
        draft_log(draft_id).info(f"Change for user {user_id} saved ({', '.join(patch.proposed_fields())})")
        return saved

    async def remove_change(self, draft_id: int, user_id: int):
        """删除草稿中某个用户的变更"""
        draft = self.get_draft(draft_id)
        draft.ensure_editable()
        if draft.change_for(user_id) is None:
            raise Err.not_found(
                f"草稿中不存在用户 {user_id} 的变更",
                code=ErrorCode.CHANGE_NOT_FOUND,
                resource_type="Change",
                resource_id=user_id,
                draft_id=draft_id,
            )

        with self._store_call(draft_id, f"Removing change for user {user_id}"):
            await self.store.remove_change(draft_id, user_id)
        local = self._drafts.get(draft_id)
        if local is not None and local.change_for(user_id) is not None:
            local.discard_change(user_id)
        draft_log(draft_id).info(f"Change for user {user_id} removed")

    # ==================== 发布 ====================

    async def publish_draft(self, draft_id: int) -> Draft:
        """发布草稿

        存储确认成功后草稿离开活动列表，组织树替换为发布后的结果；
        失败或取消时草稿及其变更保持不变。

        Raises:
            ResourceConflictException: 草稿已发布、正在发布，或组织数据已变化
            ResourceNotFoundException: 草稿不存在
        """
        if draft_id in self._publishing:
            raise Err.conflict(
                f"草稿 {draft_id} 正在发布",
                code=ErrorCode.DRAFT_PUBLISH_IN_PROGRESS,
                draft_id=draft_id,
            )

        draft = self._drafts.get(draft_id)
        if draft is None:
            with self._store_call(draft_id, "Publish"):
                draft = await self.store.get_draft(draft_id)
        draft.ensure_editable()
        committed = self.projector.project(self.forest, draft.changes)

        self._publishing.add(draft_id)
        try:
            with self._store_call(draft_id, "Publish"):
                published = await self.store.publish_draft(draft_id)
        finally:
            self._publishing.discard(draft_id)

        for root in committed:
            for node in root.iter_nodes():
                node.pending_change = None
        self.forest = committed
        self._drafts.pop(draft_id, None)
        if self._state.draft_id == draft_id:
            self._state = NO_DRAFT
        draft_log(draft_id).info(f"Draft published ({len(published.changes)} change(s))")
        return published

    # ==================== 预览 ====================

    def _resolve_draft(self, draft_id: Optional[int]) -> Optional[Draft]:
        if draft_id is None:
            draft_id = self._state.draft_id
        if draft_id is None:
            return None
        return self.get_draft(draft_id)

    def preview(self, draft_id: Optional[int] = None) -> Forest:
        """草稿预览组织树，默认使用当前编辑的草稿；未选择草稿时返回实时组织树的副本"""
        draft = self._resolve_draft(draft_id)
        if draft is None:
            return copy.deepcopy(self.forest)
        return self.projector.project(self.forest, draft.changes)

    def present_changes(self, draft_id: Optional[int] = None) -> List[ChangeDiff]:
        """待发布变更面板"""
        draft = self._resolve_draft(draft_id)
        if draft is None:
            return []
        presenter = ChangeDiffPresenter(OrgTreeIndex(self.forest).name_lookup(), self.squads)
        return presenter.present_all(draft.changes)
