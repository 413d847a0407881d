import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List

from task_list_manager.application.ports import TaskRepository
from task_list_manager.core import Task, TaskRecordError, tasks_from_json, tasks_to_json

logger = logging.getLogger("task_list.store")


class JsonFileTaskRepository(TaskRepository):
    """Whole-collection JSON file store.

    Every load reads the full file and every save rewrites it. A missing file
    is initialised to an empty array; an unreadable or schema-violating file is
    reset to an empty array (the previous content is discarded). Any other
    OSError propagates to the caller.

    Single writer only: two processes sharing one file can lose updates.
    """

    def __init__(self, tasks_file: Path | str):
        self.tasks_file = Path(tasks_file)

    def load(self) -> List[Task]:
        try:
            raw = self.tasks_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Initializing empty task store at %s", self.tasks_file)
            self.save([])
            return []
        except UnicodeDecodeError as exc:
            return self._reset_corrupted(f"not valid UTF-8: {exc}")

        try:
            return tasks_from_json(json.loads(raw))
        except (json.JSONDecodeError, RecursionError) as exc:
            return self._reset_corrupted(f"invalid JSON: {exc}")
        except TaskRecordError as exc:
            return self._reset_corrupted(str(exc))

    def _reset_corrupted(self, reason: str) -> List[Task]:
        logger.warning("Task store %s is corrupted (%s); resetting to an empty list", self.tasks_file, reason)
        self.save([])
        return []

    def encode(self, tasks: List[Task]) -> str:
        return json.dumps(tasks_to_json(tasks), ensure_ascii=False, indent=2)

    def save(self, tasks: List[Task]) -> None:
        data = self.encode(tasks).encode("utf-8")
        root = self.tasks_file.parent
        root.mkdir(parents=True, exist_ok=True)

        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                delete=False,
                dir=str(root),
                prefix=f".{self.tasks_file.name}.",
                suffix=".tmp",
            ) as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
                tmp_path = Path(tmp.name)
            os.replace(str(tmp_path), str(self.tasks_file))
        finally:
            if tmp_path and tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
        logger.debug("Saved %d task(s) to %s", len(tasks), self.tasks_file)
