"""草稿存储

- BaseDraftStore: 异步存储接口
- MemoryDraftStore: 内存实现
"""

from .base import BaseDraftStore
from .memory import MemoryDraftStore

__all__ = [
    "BaseDraftStore",
    "MemoryDraftStore",
]
