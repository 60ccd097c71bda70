"""组织架构草稿模块

提供组织调整草稿的完整能力：
- 数据模型: User / Squad / OrgTreeNode / Draft / Change
- 组织树索引: OrgTreeIndex, build_forest
- 预览投影: TreeProjector, project_tree
- 变更展示: ChangeDiffPresenter, present_change
- 草稿编排: DraftService + BaseDraftStore / MemoryDraftStore

快速开始:
    from orgdraft.orgchart import DraftService, MemoryDraftStore

    service = DraftService(MemoryDraftStore(users=users, squads=squads))
    await service.refresh()
    draft = await service.create_draft("Q3 架构调整")
    await service.upsert_change(draft.id, 7, {"new_supervisor_id": 3})
"""

from .enums import Role, DraftStatus
from .models import (
    UNSET,
    is_set,
    CHANGE_FIELDS,
    Squad,
    User,
    OrgTreeNode,
    Forest,
    ChangePatch,
    Change,
    Draft,
)
from .tree import (
    OrgTreeIndex,
    build_forest,
    subtree,
    flatten,
    collect_user_ids,
)
from .projector import TreeProjector, project_tree, find_node
from .diff import (
    ValueDiff,
    SquadDiff,
    ChangeDiff,
    ChangeDiffPresenter,
    diff_squads,
    present_change,
)
from .state import ActiveDraftState, NoDraftSelected, EditingDraft, NO_DRAFT
from .schemas import CreateDraftRequest, UpdateDraftRequest, AddDraftChangeRequest
from .stores import BaseDraftStore, MemoryDraftStore
from .services import DraftService

__all__ = [
    "Role",
    "DraftStatus",
    "UNSET",
    "is_set",
    "CHANGE_FIELDS",
    "Squad",
    "User",
    "OrgTreeNode",
    "Forest",
    "ChangePatch",
    "Change",
    "Draft",
    "OrgTreeIndex",
    "build_forest",
    "subtree",
    "flatten",
    "collect_user_ids",
    "TreeProjector",
    "project_tree",
    "find_node",
    "ValueDiff",
    "SquadDiff",
    "ChangeDiff",
    "ChangeDiffPresenter",
    "diff_squads",
    "present_change",
    "ActiveDraftState",
    "NoDraftSelected",
    "EditingDraft",
    "NO_DRAFT",
    "CreateDraftRequest",
    "UpdateDraftRequest",
    "AddDraftChangeRequest",
    "BaseDraftStore",
    "MemoryDraftStore",
    "DraftService",
]
