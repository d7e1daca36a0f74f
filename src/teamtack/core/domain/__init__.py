"""
Domain - entities, enums and the status transition table.
"""

from .entities import Attachment, Comment, CycleData, CycleInfo, Task
from .enums import (
    DEFAULT_PRIORITY_ORDER,
    PRIORITY_NAMES,
    CompletionMode,
    LocalStatus,
    SemanticState,
    SourceType,
    StatusSource,
    get_priority_sort_index,
)
from .transitions import StatusTransitions


__all__ = [
    "DEFAULT_PRIORITY_ORDER",
    "PRIORITY_NAMES",
    "Attachment",
    "Comment",
    "CompletionMode",
    "CycleData",
    "CycleInfo",
    "LocalStatus",
    "SemanticState",
    "SourceType",
    "StatusSource",
    "StatusTransitions",
    "Task",
    "get_priority_sort_index",
]
