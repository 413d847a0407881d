#!/usr/bin/env python3
"""MCP (Model Context Protocol) stdio server for the task list.

Tools:
- add_task(title)      append a new pending task
- list_tasks()         human-readable listing in creation order
- complete_task(id)    mark a task as done

Resource:
- task_list (tasks://list)  the raw JSON collection, same bytes as the store file

Transport is newline-delimited JSON-RPC 2.0 on stdin/stdout. Logs go to stderr.
"""

from __future__ import annotations

import io
import json
import logging
import sys
from contextlib import redirect_stdout
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from task_list_manager import __version__
from task_list_manager.application import TaskService, ToolResult
from task_list_manager.config import resolve_log_level, resolve_tasks_file
from task_list_manager.infrastructure import JsonFileTaskRepository
from task_list_manager.logging_setup import setup_logging

logger = logging.getLogger("task_list.mcp")

MCP_VERSION = "2024-11-05"
SERVER_NAME = "task-list-manager"
SERVER_VERSION = __version__

TASK_LIST_RESOURCE_NAME = "task_list"
TASK_LIST_URI = "tasks://list"
TASK_LIST_MIME = "application/json"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
NOT_INITIALIZED = -32002


RequestId = Optional[int | str]


class ProtocolError(Exception):
    """A message that cannot be dispatched; answered with a JSON-RPC error."""

    def __init__(self, code: int, message: str, id: RequestId = None):
        super().__init__(message)
        self.code = code
        self.id = id

    def to_response(self) -> Dict[str, Any]:
        return json_rpc_error(self.id, self.code, str(self))


@dataclass
class JsonRpcRequest:
    jsonrpc: str
    method: str
    id: RequestId = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JsonRpcRequest":
        params = data.get("params")
        return cls(
            jsonrpc=str(data.get("jsonrpc") or "2.0"),
            method=str(data["method"]),
            id=data.get("id"),
            params=params if isinstance(params, dict) else {},
        )

    @classmethod
    def parse(cls, line: str) -> "JsonRpcRequest":
        """Decode one stdin line, raising ProtocolError for anything undispatchable."""
        try:
            data = json.loads(line)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise ProtocolError(PARSE_ERROR, f"Parse error: {exc}") from exc
        if not isinstance(data, dict):
            raise ProtocolError(INVALID_REQUEST, "Invalid Request")
        if "method" not in data:
            raise ProtocolError(INVALID_REQUEST, "Invalid Request", data.get("id"))
        return cls.from_dict(data)


def json_rpc_response(id: RequestId, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": id, "result": result}


def json_rpc_error(id: RequestId, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": id, "error": error}


_TOOL_SPECS: Dict[str, Dict[str, Any]] = {
    "add_task": {
        "description": "Add a new task to the task list",
        "schema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "minLength": 1, "description": "The title / description of the task"},
            },
            "required": ["title"],
        },
    },
    "list_tasks": {
        "description": "List all tasks",
        "schema": {"type": "object", "properties": {}, "required": []},
    },
    "complete_task": {
        "description": "Mark a task as completed",
        "schema": {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "description": "The ID of the task to mark as completed"},
            },
            "required": ["id"],
        },
    },
}


def get_tool_definitions() -> List[Dict[str, Any]]:
    return [
        {"name": name, "description": spec["description"], "inputSchema": spec["schema"]}
        for name, spec in _TOOL_SPECS.items()
    ]


def get_resource_definitions() -> List[Dict[str, Any]]:
    return [
        {
            "uri": TASK_LIST_URI,
            "name": TASK_LIST_RESOURCE_NAME,
            "description": "The complete task list as JSON",
            "mimeType": TASK_LIST_MIME,
        }
    ]


class InvalidArguments(Exception):
    pass


def _no_arguments(arguments: Dict[str, Any]) -> Tuple[Any, ...]:
    return ()


def _title_arguments(arguments: Dict[str, Any]) -> Tuple[Any, ...]:
    title = arguments.get("title")
    if not isinstance(title, str) or not title.strip():
        raise InvalidArguments("'title' must be a non-empty string")
    return (title,)


def _task_id_arguments(arguments: Dict[str, Any]) -> Tuple[Any, ...]:
    raw = arguments.get("id")
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidArguments("'id' must be an integer")
    return (raw,)


class MCPServer:

    def __init__(self, tasks_file: Optional[Path | str] = None):
        self.tasks_file = resolve_tasks_file(tasks_file)
        self.service = TaskService(JsonFileTaskRepository(self.tasks_file))
        self._initialized = False
        # tool name -> (argument extractor, operation)
        self._tools: Dict[str, Tuple[Callable[[Dict[str, Any]], Tuple[Any, ...]], Callable[..., ToolResult]]] = {
            "add_task": (_title_arguments, self.service.add_task),
            "list_tasks": (_no_arguments, self.service.list_tasks),
            "complete_task": (_task_id_arguments, self.service.complete_task),
        }

    @staticmethod
    def _text_content(text: str) -> Dict[str, Any]:
        return {"type": "text", "text": text}

    def handle_request(self, request: JsonRpcRequest) -> Optional[Dict[str, Any]]:
        method = request.method
        params = request.params

        if method == "initialize":
            return json_rpc_response(
                request.id,
                {
                    "protocolVersion": MCP_VERSION,
                    "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
                    "capabilities": {"tools": {}, "resources": {}},
                },
            )

        if not self._initialized and method != "notifications/initialized":
            return json_rpc_error(request.id, NOT_INITIALIZED, "Server not initialized")

        if method == "notifications/initialized":
            self._initialized = True
            return None

        if method.startswith("notifications/"):
            return None

        if method == "ping":
            return json_rpc_response(request.id, {})

        if method == "tools/list":
            return json_rpc_response(request.id, {"tools": get_tool_definitions()})

        if method == "tools/call":
            return self._handle_tools_call(request.id, params)

        if method == "resources/list":
            return json_rpc_response(request.id, {"resources": get_resource_definitions()})

        if method == "resources/read":
            return self._handle_resources_read(request.id, params)

        return json_rpc_error(request.id, METHOD_NOT_FOUND, f"Method not found: {method}")

    def _handle_tools_call(self, id: Optional[int | str], params: Dict[str, Any]) -> Dict[str, Any]:
        tool_name = params.get("name")
        arguments = params.get("arguments", {})
        tool = self._tools.get(tool_name) if isinstance(tool_name, str) else None
        if tool is None:
            return json_rpc_error(id, INVALID_PARAMS, f"Unknown tool: {tool_name}")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            return json_rpc_error(id, INVALID_PARAMS, "arguments must be an object")

        extract, operation = tool
        try:
            args = extract(arguments)
        except InvalidArguments as exc:
            return json_rpc_error(id, INVALID_PARAMS, f"Invalid arguments for {tool_name}: {exc}")

        logger.info("tools/call %s", tool_name)
        leaked = io.StringIO()
        try:
            with redirect_stdout(leaked):
                result = operation(*args)
        finally:
            self._reroute_leaked_output(leaked)

        return json_rpc_response(
            id,
            {
                "content": [self._text_content(result.text)],
                "isError": result.is_error,
            },
        )

    def _handle_resources_read(self, id: Optional[int | str], params: Dict[str, Any]) -> Dict[str, Any]:
        uri = params.get("uri")
        if uri != TASK_LIST_URI:
            return json_rpc_error(id, INVALID_PARAMS, f"Unknown resource: {uri}")
        return json_rpc_response(
            id,
            {
                "contents": [
                    {"uri": TASK_LIST_URI, "mimeType": TASK_LIST_MIME, "text": self.service.snapshot()},
                ],
            },
        )

    @staticmethod
    def _reroute_leaked_output(buffer: io.StringIO) -> None:
        # Never leak prints into the JSON-RPC channel.
        text = buffer.getvalue()
        if text.strip():
            print(text, file=sys.stderr, end="")


def _write_message(payload: Dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
    sys.stdout.flush()


def run_stdio(*, tasks_file: Optional[Path | str] = None) -> int:
    """Run MCP server over stdio (newline-delimited JSON-RPC)."""
    server = MCPServer(tasks_file=tasks_file)
    logger.info("%s %s running on stdio, tasks file %s", SERVER_NAME, SERVER_VERSION, server.tasks_file)
    for line in sys.stdin:
        if not line.strip():
            continue
        try:
            req = JsonRpcRequest.parse(line)
        except ProtocolError as exc:
            _write_message(exc.to_response())
            continue
        out = server.handle_request(req)
        if out is not None and not req.is_notification:
            _write_message(out)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(prog="task-list-mcp", add_help=True)
    parser.add_argument("--tasks-file", type=str, help="JSON file backing the task list (default: ./tasks.json).")
    parser.add_argument("--log-level", type=str, help="Logging level for stderr output (default: INFO).")
    args = parser.parse_args(argv)

    setup_logging(resolve_log_level(args.log_level))
    try:
        return run_stdio(tasks_file=args.tasks_file)
    except Exception:
        logger.exception("Fatal error in %s", SERVER_NAME)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
