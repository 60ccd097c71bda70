"""
Pytest 公共配置和 Fixtures

提供测试所需的公共资源：
- 小组目录与用户数据
- 组织树
- 内存草稿存储与草稿服务
- 临时文件
"""

import os
import tempfile

import pytest
import pytest_asyncio

from orgdraft.orgchart import (
    Role,
    Squad,
    User,
    build_forest,
    MemoryDraftStore,
    DraftService,
)


# ==================== 基础 Fixtures ====================

@pytest.fixture
def temp_dir():
    """创建临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def temp_file(temp_dir):
    """创建临时文件的工厂函数"""

    def _create_file(filename: str, content: str = "") -> str:
        filepath = os.path.join(temp_dir, filename)
        if os.path.dirname(filepath):
            os.makedirs(os.path.dirname(filepath), exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(content)
        return filepath

    return _create_file


# ==================== 组织数据 Fixtures ====================
#
#   1 Alice (admin, Executive)
#   ├── 2 Bob (supervisor, Engineering)
#   │   ├── 4 Dave (employee, Engineering)
#   │   └── 5 Erin (employee, Engineering)
#   └── 3 Carol (supervisor, Marketing)
#       ├── 6 Frank (employee, Marketing)
#       └── 7 Grace (employee, Marketing)

@pytest.fixture
def squads():
    """小组目录"""
    return [
        Squad(id=1, name="Platform"),
        Squad(id=2, name="Growth"),
        Squad(id=3, name="Design"),
    ]


@pytest.fixture
def users(squads):
    """用户列表"""
    platform, growth, _ = squads
    return [
        User(id=1, name="Alice", role=Role.ADMIN, department="Executive"),
        User(id=2, name="Bob", role=Role.SUPERVISOR, department="Engineering",
             supervisor_id=1, squads=(platform,)),
        User(id=3, name="Carol", role=Role.SUPERVISOR, department="Marketing",
             supervisor_id=1, squads=(growth,)),
        User(id=4, name="Dave", department="Engineering", supervisor_id=2,
             squads=(platform, growth)),
        User(id=5, name="Erin", department="Engineering", supervisor_id=2),
        User(id=6, name="Frank", department="Marketing", supervisor_id=3),
        User(id=7, name="Grace", department="Marketing", supervisor_id=3,
             squads=(growth,)),
    ]


@pytest.fixture
def forest(users):
    """组织树（单根）"""
    return build_forest(users)


@pytest.fixture
def store(users, squads):
    """内存草稿存储"""
    return MemoryDraftStore(users=users, squads=squads)


@pytest_asyncio.fixture
async def service(store):
    """已加载数据的草稿服务"""
    service = DraftService(store)
    await service.refresh()
    return service


@pytest.fixture
def sample_yaml_config(temp_file):
    """创建示例 YAML 配置文件"""
    yaml_content = """
draft:
  draft_name_max_length: 120
  strict_squad_ids: true

logging:
  level: "DEBUG"
  file_path: "logs/test.log"
"""
    return temp_file("config/settings.yaml", yaml_content)
