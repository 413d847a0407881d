"""Persisted task list exposed to agents over MCP."""

__version__ = "1.0.0"
