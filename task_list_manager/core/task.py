"""Task record and its strict JSON mapping.

A stored task has exactly four fields:

- id: positive integer, unique within the collection
- title: non-empty text
- completed: boolean, only ever flips False -> True
- createdAt: ISO 8601 timestamp captured at creation
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Final, List

STATUS_DONE: Final[str] = "done"
STATUS_PENDING: Final[str] = "pending"

RECORD_KEYS: Final[tuple[str, ...]] = ("id", "title", "completed", "createdAt")

# Extended ISO 8601 with a zone, as emitted by now_iso() and JS toISOString().
ISO_TIMESTAMP_RE: Final = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.\d{1,6})?(?:Z|[+-]\d{2}:\d{2})"
)


class TaskRecordError(ValueError):
    """Raised when stored data does not match the task record schema."""


def now_iso() -> str:
    """Current UTC time as `YYYY-MM-DDTHH:MM:SS.mmmZ`."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def _is_iso_timestamp(value: str) -> bool:
    match = ISO_TIMESTAMP_RE.fullmatch(value)
    if match is None:
        return False
    try:
        datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return False
    return True


@dataclass
class Task:
    id: int
    title: str
    completed: bool = False
    created_at: str = ""

    @classmethod
    def create(cls, task_id: int, title: str) -> "Task":
        return cls(id=task_id, title=title, completed=False, created_at=now_iso())

    @property
    def status(self) -> str:
        return STATUS_DONE if self.completed else STATUS_PENDING

    def mark_completed(self) -> bool:
        """Flip to completed. Returns False when the task was already done."""
        if self.completed:
            return False
        self.completed = True
        return True

    def to_dict(self) -> Dict[str, Any]:
        # Key order is part of the file format.
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Task":
        if not isinstance(data, dict):
            raise TaskRecordError(f"task record must be an object, got {type(data).__name__}")
        keys = set(data.keys())
        expected = set(RECORD_KEYS)
        if keys != expected:
            missing = sorted(expected - keys)
            extra = sorted(keys - expected)
            raise TaskRecordError(f"task record keys mismatch (missing={missing}, unexpected={extra})")

        task_id = data["id"]
        # bool is an int subclass; reject it explicitly.
        if isinstance(task_id, bool) or not isinstance(task_id, int) or task_id < 1:
            raise TaskRecordError(f"invalid task id: {task_id!r}")
        title = data["title"]
        if not isinstance(title, str) or not title.strip():
            raise TaskRecordError(f"invalid title for task {task_id}")
        completed = data["completed"]
        if not isinstance(completed, bool):
            raise TaskRecordError(f"invalid completed flag for task {task_id}: {completed!r}")
        created_at = data["createdAt"]
        if not isinstance(created_at, str) or not _is_iso_timestamp(created_at):
            raise TaskRecordError(f"invalid createdAt for task {task_id}: {created_at!r}")

        return cls(id=task_id, title=title, completed=completed, created_at=created_at)


def tasks_from_json(data: Any) -> List[Task]:
    """Decode a parsed JSON document into a task collection.

    Raises TaskRecordError on any schema mismatch, including duplicate ids.
    """
    if not isinstance(data, list):
        raise TaskRecordError(f"task collection must be an array, got {type(data).__name__}")
    tasks: List[Task] = []
    seen: set[int] = set()
    for item in data:
        task = Task.from_dict(item)
        if task.id in seen:
            raise TaskRecordError(f"duplicate task id: {task.id}")
        seen.add(task.id)
        tasks.append(task)
    return tasks


def tasks_to_json(tasks: List[Task]) -> List[Dict[str, Any]]:
    return [task.to_dict() for task in tasks]
