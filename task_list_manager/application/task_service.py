"""Task operations: add, list, complete and the raw snapshot.

Each call reloads the collection from the repository, so the durable file is
the only state that survives between calls.
"""

from dataclasses import dataclass
from typing import List, Optional

from task_list_manager.application.ports import TaskRepository
from task_list_manager.core import Task

EMPTY_LIST_MESSAGE = "No tasks yet. Use add_task to create one!"


@dataclass
class ToolResult:
    text: str
    is_error: bool = False
    task: Optional[Task] = None


def next_task_id(tasks: List[Task]) -> int:
    if not tasks:
        return 1
    return max(task.id for task in tasks) + 1


def format_added(task: Task) -> str:
    return (
        "Task added successfully!\n\n"
        f"  ID:    {task.id}\n"
        f"  Title: {task.title}\n"
        f"  Date:  {task.created_at}"
    )


def format_task_line(task: Task) -> str:
    return f"[{task.id}] {task.title}  ({task.status})  — created {task.created_at}"


def format_listing(tasks: List[Task]) -> str:
    if not tasks:
        return EMPTY_LIST_MESSAGE
    lines = "\n".join(format_task_line(task) for task in tasks)
    return f"Tasks ({len(tasks)}):\n\n{lines}"


class TaskService:
    def __init__(self, repository: TaskRepository):
        self.repository = repository

    def add_task(self, title: str) -> ToolResult:
        if not title or not title.strip():
            raise ValueError("title is required")
        tasks = self.repository.load()
        task = Task.create(next_task_id(tasks), title)
        tasks.append(task)
        self.repository.save(tasks)
        return ToolResult(text=format_added(task), task=task)

    def list_tasks(self) -> ToolResult:
        return ToolResult(text=format_listing(self.repository.load()))

    def complete_task(self, task_id: int) -> ToolResult:
        tasks = self.repository.load()
        task = next((t for t in tasks if t.id == task_id), None)
        if task is None:
            return ToolResult(text=f"Error: No task found with ID {task_id}.", is_error=True)
        if not task.mark_completed():
            return ToolResult(
                text=f'Task {task_id} ("{task.title}") is already marked as completed.',
                task=task,
            )
        self.repository.save(tasks)
        return ToolResult(text=f'Task {task_id} ("{task.title}") marked as completed!', task=task)

    def snapshot(self) -> str:
        """Full collection in the durable file encoding (`[]` when empty)."""
        return self.repository.encode(self.repository.load())
