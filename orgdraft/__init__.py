"""
OrgDraft - 组织架构草稿与变更跟踪引擎

提供草稿/变更模型、组织树预览投影、变更差异展示和草稿发布编排
"""

from .version import __version__, __author__, __description__

# 导出异常模块
from .exceptions import (
    Err,
    ErrorCode,
    BusinessException,
    ResourceNotFoundException,
    ResourceConflictException,
    ValidationException,
    ServiceUnavailableException,
    DuplicateNodeException,
    CyclicReparentException,
    register_exception_handlers,
)

# 导出日志模块
from .log import (
    setup_logger,
    get_logger,
)

# 导出配置模块
from .config import (
    AppSettings,
    DraftSettings,
    LoggingSettings,
    load_yaml_config,
)

# 导出组织架构草稿
from .orgchart import (
    Role,
    DraftStatus,
    UNSET,
    Squad,
    User,
    OrgTreeNode,
    Change,
    ChangePatch,
    Draft,
    OrgTreeIndex,
    build_forest,
    TreeProjector,
    project_tree,
    ChangeDiffPresenter,
    present_change,
    NoDraftSelected,
    EditingDraft,
    BaseDraftStore,
    MemoryDraftStore,
    DraftService,
)

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    # 异常
    "Err",
    "ErrorCode",
    "BusinessException",
    "ResourceNotFoundException",
    "ResourceConflictException",
    "ValidationException",
    "ServiceUnavailableException",
    "DuplicateNodeException",
    "CyclicReparentException",
    "register_exception_handlers",
    # 日志
    "setup_logger",
    "get_logger",
    # 配置
    "AppSettings",
    "DraftSettings",
    "LoggingSettings",
    "load_yaml_config",
    # 组织架构草稿
    "Role",
    "DraftStatus",
    "UNSET",
    "Squad",
    "User",
    "OrgTreeNode",
    "Change",
    "ChangePatch",
    "Draft",
    "OrgTreeIndex",
    "build_forest",
    "TreeProjector",
    "project_tree",
    "ChangeDiffPresenter",
    "present_change",
    "NoDraftSelected",
    "EditingDraft",
    "BaseDraftStore",
    "MemoryDraftStore",
    "DraftService",
]
