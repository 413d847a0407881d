from .ports import TaskRepository
from .task_service import (
    EMPTY_LIST_MESSAGE,
    TaskService,
    ToolResult,
    format_added,
    format_listing,
    format_task_line,
    next_task_id,
)

__all__ = [
    "TaskRepository",
    "TaskService",
    "ToolResult",
    "EMPTY_LIST_MESSAGE",
    "next_task_id",
    "format_added",
    "format_listing",
    "format_task_line",
]
