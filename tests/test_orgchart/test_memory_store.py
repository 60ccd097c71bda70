"""内存草稿存储测试"""

import dataclasses

import pytest

from orgdraft.exceptions import (
    CyclicReparentException,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from orgdraft.orgchart import (
    Change,
    ChangePatch,
    DraftStatus,
    MemoryDraftStore,
    OrgTreeIndex,
    Role,
    User,
)


async def add_change(store, draft_id, user_id, **fields):
    user = store.get_user(user_id)
    return await store.save_change(draft_id, Change.capture(user, ChangePatch(**fields)))


class TestOrgData:
    """组织数据读取"""

    @pytest.mark.asyncio
    async def test_get_org_tree(self, store):
        """测试获取全部组织树"""
        forest = await store.get_org_tree()
        assert [root.user.id for root in forest] == [1]
        assert len(OrgTreeIndex(forest)) == 7

    @pytest.mark.asyncio
    async def test_get_subtree(self, store):
        """测试上级视角"""
        forest = await store.get_org_tree(root_user_id=2)
        assert [n.user.id for n in forest[0].iter_nodes()] == [2, 4, 5]

    @pytest.mark.asyncio
    async def test_get_squads(self, store):
        """测试小组目录"""
        squads = await store.get_squads()
        assert [s.name for s in squads] == ["Platform", "Growth", "Design"]

    def test_duplicate_users_rejected(self):
        """测试重复用户"""
        with pytest.raises(ValidationException):
            MemoryDraftStore(users=[User(id=1, name="A"), User(id=1, name="B")])


class TestDraftCrud:
    """草稿增删改查"""

    @pytest.mark.asyncio
    async def test_create_and_get(self, store):
        """测试创建草稿"""
        draft = await store.create_draft("Q3", description="三季度调整", created_by_id=1)

        assert draft.id == 1
        assert draft.status is DraftStatus.DRAFT
        assert draft.created_at is not None

        loaded = await store.get_draft(draft.id)
        assert loaded.name == "Q3"
        assert loaded.created_by_id == 1

    @pytest.mark.asyncio
    async def test_returned_objects_are_copies(self, store):
        """测试返回对象修改不影响存储"""
        draft = await store.create_draft("Q3")
        draft.name = "changed"
        draft.changes.append(Change(user_id=4))

        loaded = await store.get_draft(draft.id)
        assert loaded.name == "Q3"
        assert loaded.changes == []

    @pytest.mark.asyncio
    async def test_update_draft(self, store):
        """测试修改草稿"""
        draft = await store.create_draft("Q3")
        updated = await store.update_draft(draft.id, {"name": "Q4"})
        assert updated.name == "Q4"

    @pytest.mark.asyncio
    async def test_delete_draft(self, store):
        """测试删除草稿"""
        draft = await store.create_draft("Q3")
        await store.delete_draft(draft.id)

        with pytest.raises(ResourceNotFoundException) as exc_info:
            await store.get_draft(draft.id)
        assert exc_info.value.code == "DRAFT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_list_drafts(self, store):
        """测试草稿列表"""
        await store.create_draft("A")
        await store.create_draft("B")
        assert [d.name for d in await store.list_drafts()] == ["A", "B"]


class TestChanges:
    """变更保存"""

    @pytest.mark.asyncio
    async def test_save_assigns_id(self, store):
        """测试保存时分配ID"""
        draft = await store.create_draft("Q3")
        saved = await add_change(store, draft.id, 7, new_department="Sales")

        assert saved.id == 1
        assert saved.draft_id == draft.id
        assert saved.created_at is not None

    @pytest.mark.asyncio
    async def test_save_same_user_overwrites(self, store):
        """测试同一用户覆盖"""
        draft = await store.create_draft("Q3")
        first = await add_change(store, draft.id, 7, new_department="Sales")
        second = await add_change(store, draft.id, 7, new_department="Support")

        assert second.id == first.id
        loaded = await store.get_draft(draft.id)
        assert len(loaded.changes) == 1
        assert loaded.changes[0].new_department == "Support"

    @pytest.mark.asyncio
    async def test_save_unknown_user(self, store):
        """测试用户不存在"""
        draft = await store.create_draft("Q3")
        with pytest.raises(ResourceNotFoundException):
            await store.save_change(draft.id, Change(user_id=99, new_department="Sales"))

    @pytest.mark.asyncio
    async def test_remove_change(self, store):
        """测试删除变更"""
        draft = await store.create_draft("Q3")
        await add_change(store, draft.id, 7, new_department="Sales")
        await store.remove_change(draft.id, 7)
        assert (await store.get_draft(draft.id)).changes == []


class TestPublish:
    """发布"""

    @pytest.mark.asyncio
    async def test_publish_applies_all_changes(self, store):
        """测试发布后组织数据更新"""
        draft = await store.create_draft("Q3")
        await add_change(store, draft.id, 2, new_supervisor_id=3)
        await add_change(store, draft.id, 7, new_department="Sales", new_role="supervisor")
        await add_change(store, draft.id, 4, new_squad_ids=[3])

        published = await store.publish_draft(draft.id)

        assert published.status is DraftStatus.PUBLISHED
        assert published.published_at is not None
        assert store.get_user(2).supervisor_id == 3
        assert store.get_user(7).department == "Sales"
        assert store.get_user(7).role is Role.SUPERVISOR
        assert store.get_user(4).squad_ids == [3]
        # 子树随上级移动
        index = OrgTreeIndex(await store.get_org_tree())
        assert index.is_descendant_of(4, 3)

    @pytest.mark.asyncio
    async def test_republish_rejected(self, store):
        """测试重复发布"""
        draft = await store.create_draft("Q3")
        await add_change(store, draft.id, 7, new_department="Sales")
        await store.publish_draft(draft.id)

        with pytest.raises(ResourceConflictException) as exc_info:
            await store.publish_draft(draft.id)
        assert exc_info.value.code == "DRAFT_NOT_EDITABLE"

    @pytest.mark.asyncio
    async def test_published_draft_is_read_only(self, store):
        """测试已发布草稿不能再修改"""
        draft = await store.create_draft("Q3")
        await store.publish_draft(draft.id)

        with pytest.raises(ResourceConflictException):
            await add_change(store, draft.id, 7, new_department="Sales")

    @pytest.mark.asyncio
    async def test_conflict_when_org_data_changed(self, store):
        """测试组织数据变化后发布被拒绝，且不应用任何变更"""
        draft = await store.create_draft("Q3")
        await add_change(store, draft.id, 4, new_department="Support")
        await add_change(store, draft.id, 7, new_department="Sales")
        store.put_user(dataclasses.replace(store.get_user(7), department="Growth"))

        with pytest.raises(ResourceConflictException) as exc_info:
            await store.publish_draft(draft.id)

        assert exc_info.value.code == "ORG_DATA_CHANGED"
        assert exc_info.value.details == ["user_id=7: department"]
        assert store.get_user(4).department == "Engineering"
        assert (await store.get_draft(draft.id)).status is DraftStatus.DRAFT

    @pytest.mark.asyncio
    async def test_unrelated_field_change_not_a_conflict(self, store):
        """测试只检查变更涉及的字段"""
        draft = await store.create_draft("Q3")
        await add_change(store, draft.id, 7, new_department="Sales")
        store.put_user(dataclasses.replace(store.get_user(7), role=Role.SUPERVISOR))

        await store.publish_draft(draft.id)
        assert store.get_user(7).department == "Sales"
        assert store.get_user(7).role is Role.SUPERVISOR

    @pytest.mark.asyncio
    async def test_cycle_rejected_atomically(self, store):
        """测试发布时检查循环，失败不应用任何变更"""
        draft = await store.create_draft("Q3")
        await add_change(store, draft.id, 7, new_department="Sales")
        await add_change(store, draft.id, 1, new_supervisor_id=4)

        with pytest.raises(CyclicReparentException):
            await store.publish_draft(draft.id)

        assert store.get_user(7).department == "Marketing"
        assert store.get_user(1).supervisor_id is None

    @pytest.mark.asyncio
    async def test_unknown_squad_rejected(self, store):
        """测试发布时小组必须存在"""
        draft = await store.create_draft("Q3")
        await add_change(store, draft.id, 4, new_squad_ids=[1, 42])

        with pytest.raises(ResourceNotFoundException) as exc_info:
            await store.publish_draft(draft.id)
        assert exc_info.value.code == "SQUAD_NOT_FOUND"
        assert store.get_user(4).squad_ids == [1, 2]
