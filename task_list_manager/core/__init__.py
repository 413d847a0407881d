from .task import (
    RECORD_KEYS,
    STATUS_DONE,
    STATUS_PENDING,
    Task,
    TaskRecordError,
    now_iso,
    tasks_from_json,
    tasks_to_json,
)

__all__ = [
    "Task",
    "TaskRecordError",
    "RECORD_KEYS",
    "STATUS_DONE",
    "STATUS_PENDING",
    "now_iso",
    "tasks_from_json",
    "tasks_to_json",
]
