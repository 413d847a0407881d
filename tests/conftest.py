from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch):
    """Keep the developer's env and ~/.task_list_config.yaml out of every test."""
    monkeypatch.delenv("TASK_LIST_FILE", raising=False)
    monkeypatch.delenv("TASK_LIST_LOG_LEVEL", raising=False)
    config_path = tmp_path / "config" / "task_list.yaml"
    monkeypatch.setenv("TASK_LIST_CONFIG", str(config_path))
    return config_path
