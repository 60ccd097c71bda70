"""草稿编排服务"""

from .draft_service import DraftService

__all__ = ["DraftService"]
