from .file_repository import JsonFileTaskRepository

__all__ = ["JsonFileTaskRepository"]
