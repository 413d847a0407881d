from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_TASKS_FILENAME = "tasks.json"
DEFAULT_LOG_LEVEL = "INFO"


def user_config_path() -> Path:
    env_path = os.environ.get("TASK_LIST_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".task_list_config.yaml"


def _load_config() -> Dict[str, Any]:
    path = user_config_path()
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _save_config(data: Dict[str, Any]) -> None:
    path = user_config_path()
    if not data:
        if path.exists():
            path.unlink()
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")


def get_config_value(key: str) -> str:
    value = _load_config().get(key, "")
    return str(value).strip() if value is not None else ""


def set_config_value(key: str, value: str) -> None:
    data = _load_config()
    value = (value or "").strip()
    if value:
        data[key] = value
    else:
        data.pop(key, None)
    _save_config(data)


def resolve_tasks_file(tasks_file: Optional[str | Path] = None) -> Path:
    """Resolve the JSON file backing the task store.

    Priority:
    1. TASK_LIST_FILE env variable.
    2. Explicit tasks_file argument.
    3. `tasks_file` from the user config.
    4. tasks.json in the current working directory.
    """
    env_file = os.environ.get("TASK_LIST_FILE")
    if env_file:
        return Path(env_file).expanduser().resolve()
    if tasks_file:
        return Path(tasks_file).expanduser().resolve()
    configured = get_config_value("tasks_file")
    if configured:
        return Path(configured).expanduser().resolve()
    return Path(DEFAULT_TASKS_FILENAME).resolve()


def resolve_log_level(level: Optional[str] = None) -> str:
    for candidate in (level, os.environ.get("TASK_LIST_LOG_LEVEL"), get_config_value("log_level")):
        if candidate and candidate.strip():
            return candidate.strip().upper()
    return DEFAULT_LOG_LEVEL
