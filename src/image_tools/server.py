"""
Line-delimited JSON-RPC 2.0 server over stdin/stdout.

Each request is one JSON object per line; each response is written as one
line. Logs go to stderr so stdout carries protocol traffic only.
"""

import json
import logging
import sys
from typing import Any, Dict, IO, Optional

from . import __version__
from .cache import ImageCache
from .config import ImageToolsConfig
from .tools import TOOL_DEFINITIONS, ToolExecutor

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "image-tools"

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
TOOL_ERROR = -32000


def protocol_tool_list() -> list:
    """TOOL_DEFINITIONS in the protocol's {name, description, inputSchema} shape."""
    return [
        {
            "name": tool["function"]["name"],
            "description": tool["function"]["description"],
            "inputSchema": tool["function"]["parameters"],
        }
        for tool in TOOL_DEFINITIONS
    ]


class ImageToolsServer:
    """Serve the image tools to a single client over a pair of text streams."""

    def __init__(self, config: Optional[ImageToolsConfig] = None, cache: Optional[ImageCache] = None):
        self.config = config or ImageToolsConfig()
        self.executor = ToolExecutor(self.config, cache)

    def run(self, stdin: IO[str] = None, stdout: IO[str] = None) -> None:
        """Process requests until the input stream closes."""
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout

        for raw in stdin:
            line = raw.strip()
            if not line:
                continue
            try:
                request = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Failed to parse request: %s", e)
                continue
            if not isinstance(request, dict):
                logger.warning("Ignoring non-object request: %r", request)
                continue

            response = self.handle_request(request)
            if response is not None:
                stdout.write(json.dumps(response) + "\n")
                stdout.flush()

    def handle_request(self, request: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Dispatch one request; returns None for notifications."""
        method = request.get("method")
        request_id = request.get("id")

        if method == "initialize":
            return self._result(request_id, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": __version__},
            })
        if method == "notifications/initialized":
            return None
        if method == "tools/list":
            return self._result(request_id, {"tools": protocol_tool_list()})
        if method == "tools/call":
            return self._handle_tools_call(request_id, request.get("params"))
        if method == "ping":
            return self._result(request_id, {})

        return self._error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    def _handle_tools_call(self, request_id: Any, params: Any) -> Dict[str, Any]:
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            return self._error(request_id, INVALID_PARAMS, "Invalid params", "params.name is required")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            return self._error(request_id, INVALID_PARAMS, "Invalid params", "params.arguments must be an object")

        name = params["name"]
        try:
            result = self.executor.execute(name, arguments)
        except Exception as e:
            # Any tool failure becomes a protocol error; the server keeps running
            logger.error("Tool %s failed: %s", name, e, exc_info=logger.isEnabledFor(logging.DEBUG))
            return self._error(request_id, TOOL_ERROR, "Tool execution failed", str(e))

        return self._result(request_id, {
            "content": [{"type": "text", "text": json.dumps(result, indent=2)}],
        })

    @staticmethod
    def _result(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    @staticmethod
    def _error(request_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
        error = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        return {"jsonrpc": "2.0", "id": request_id, "error": error}
