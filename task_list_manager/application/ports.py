from typing import List, Protocol

from task_list_manager.core import Task


class TaskRepository(Protocol):
    def load(self) -> List[Task]:
        ...

    def save(self, tasks: List[Task]) -> None:
        ...

    def encode(self, tasks: List[Task]) -> str:
        ...
