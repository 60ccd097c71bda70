"""
组织架构草稿 - 当前编辑草稿状态

“未选择草稿”与“正在编辑草稿 D”用两个显式类型表示，
调用方通过 isinstance 区分，不依赖可空的草稿引用。
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class NoDraftSelected:
    """未选择草稿，组织树展示实时数据"""

    @property
    def draft_id(self) -> Optional[int]:
        return None


@dataclass(frozen=True)
class EditingDraft:
    """正在编辑某个草稿，组织树展示该草稿的预览"""
    draft_id: int


ActiveDraftState = Union[NoDraftSelected, EditingDraft]

NO_DRAFT = NoDraftSelected()
