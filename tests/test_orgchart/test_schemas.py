"""请求参数模型测试"""

import pytest
from pydantic import ValidationError

from orgdraft.exceptions import ValidationException
from orgdraft.orgchart import (
    UNSET,
    AddDraftChangeRequest,
    CreateDraftRequest,
    Role,
    UpdateDraftRequest,
)


class TestCreateDraftRequest:
    """创建草稿参数"""

    def test_name_is_trimmed(self):
        """测试名称去除首尾空白"""
        request = CreateDraftRequest(name="  Q3 调整  ")
        assert request.name == "Q3 调整"
        assert request.description is None

    def test_empty_name(self):
        """测试空名称"""
        with pytest.raises(ValidationError):
            CreateDraftRequest(name="   ")

    def test_name_too_long(self):
        """测试名称超长"""
        with pytest.raises(ValidationError):
            CreateDraftRequest(name="x" * 256)

    def test_limit_from_context(self):
        """测试通过 context 调整长度上限"""
        with pytest.raises(ValidationError):
            CreateDraftRequest.model_validate({"name": "abcdef"}, context={"draft_name_max_length": 5})

    def test_parse_raises_business_exception(self):
        """测试 parse 转换为 ValidationException"""
        with pytest.raises(ValidationException) as exc_info:
            CreateDraftRequest.parse({"name": ""})
        assert exc_info.value.status_code == 422
        assert exc_info.value.details == ["name: 草稿名称不能为空"]


class TestUpdateDraftRequest:
    """修改草稿参数"""

    def test_only_provided_fields(self):
        """测试只包含提供的字段"""
        request = UpdateDraftRequest(description="新的说明")
        assert request.updates() == {"description": "新的说明"}

    def test_name_validated_when_given(self):
        """测试提供名称时同样校验"""
        with pytest.raises(ValidationError):
            UpdateDraftRequest(name="")


class TestAddDraftChangeRequest:
    """新增变更参数"""

    def test_requires_a_field(self):
        """测试至少提供一个变更字段"""
        with pytest.raises(ValidationException) as exc_info:
            AddDraftChangeRequest.parse({"user_id": 7})
        assert exc_info.value.details == ["至少需要提供一个变更字段"]

    def test_user_id_positive(self):
        """测试用户ID必须为正"""
        with pytest.raises(ValidationError):
            AddDraftChangeRequest(user_id=0, new_department="Sales")

    def test_invalid_role(self):
        """测试非法角色"""
        with pytest.raises(ValidationError):
            AddDraftChangeRequest(user_id=7, new_role="owner")

    def test_null_role(self):
        """测试角色不能为空"""
        with pytest.raises(ValidationError):
            AddDraftChangeRequest(user_id=7, new_role=None)

    def test_department_too_long(self):
        """测试部门名称超长"""
        with pytest.raises(ValidationError):
            AddDraftChangeRequest(user_id=7, new_department="d" * 101)

    def test_to_patch_keeps_unset(self):
        """测试未提供的字段保持 UNSET"""
        patch = AddDraftChangeRequest(user_id=7, new_department="Sales").to_patch()
        assert patch.new_department == "Sales"
        assert patch.new_supervisor_id is UNSET
        assert patch.new_role is UNSET
        assert patch.new_squad_ids is UNSET

    def test_explicit_null_is_kept(self):
        """测试显式 null 表示清空"""
        patch = AddDraftChangeRequest.model_validate(
            {"user_id": 7, "new_supervisor_id": None, "new_department": None}
        ).to_patch()
        assert patch.new_supervisor_id is None
        assert patch.new_department is None
        assert patch.proposed_fields() == ["supervisor_id", "department"]

    def test_null_squads_means_remove_all(self):
        """测试小组为 null 时视为移出所有小组"""
        patch = AddDraftChangeRequest(user_id=7, new_squad_ids=None).to_patch()
        assert patch.new_squad_ids == []

    def test_role_parsed(self):
        """测试角色解析"""
        patch = AddDraftChangeRequest(user_id=7, new_role="admin").to_patch()
        assert patch.new_role is Role.ADMIN
