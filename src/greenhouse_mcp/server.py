"""Core JSON-RPC server logic for the Greenhouse MCP implementation."""

from __future__ import annotations

import logging
from importlib import metadata
from typing import Any, Dict, Mapping, Optional

from mcp.types import LATEST_PROTOCOL_VERSION

from .client import GreenhouseClient
from .exceptions import ConfigurationError, GreenhouseError
from .tools import Tool, build_tools, format_result

LOGGER = logging.getLogger(__name__)

SERVER_NAME = "greenhouse-harvest"

JsonDict = Dict[str, Any]


class JSONRPCError(Exception):
    """Exception representing a JSON-RPC 2.0 error response."""

    def __init__(self, code: int, message: str, *, data: Any | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_response(self, request_id: Any) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return {"jsonrpc": "2.0", "error": error, "id": request_id}


def package_version() -> Optional[str]:
    try:
        return metadata.version("greenhouse-mcp")
    except metadata.PackageNotFoundError:  # pragma: no cover - metadata missing when running from source tree
        return None


class GreenhouseMCPServer:
    """Serve the tools subset of the Model Context Protocol for Greenhouse Harvest."""

    def __init__(self, client: GreenhouseClient | None = None):
        self._client: GreenhouseClient | None = client
        self._tools: Dict[str, Tool] = build_tools()

    @property
    def tools(self) -> Mapping[str, Tool]:
        return self._tools

    # ------------------------------------------------------------------
    # JSON-RPC entry points
    # ------------------------------------------------------------------
    def handle_json_rpc(self, request: Mapping[str, Any]) -> JsonDict | None:
        """Validate and dispatch a JSON-RPC request.

        Notifications (no ``id``, method under ``notifications/``) are
        accepted and produce no response.
        """

        if not isinstance(request, Mapping):
            raise JSONRPCError(-32600, "Invalid Request", data="Request must be an object")

        if request.get("jsonrpc") != "2.0":
            raise JSONRPCError(-32600, "Invalid Request", data="jsonrpc must be '2.0'")

        method_name = request.get("method")
        if not isinstance(method_name, str) or not method_name:
            raise JSONRPCError(
                -32600,
                "Invalid Request",
                data="Method must be a non-empty string",
            )

        if "id" not in request:
            if method_name.startswith("notifications/"):
                LOGGER.debug("Received notification %s", method_name)
                return None
            raise JSONRPCError(-32600, "Invalid Request", data="Missing id")

        if request.get("id") is None:
            raise JSONRPCError(-32600, "Invalid Request", data="id must not be null")

        raw_params = request.get("params")
        if raw_params is None:
            params: Mapping[str, Any] = {}
        elif isinstance(raw_params, Mapping):
            params = raw_params
        else:
            raise JSONRPCError(-32602, "Invalid params", data="Params must be an object")

        normalized_request: Dict[str, Any] = dict(request)
        normalized_request["params"] = params

        return self._dispatch(normalized_request)

    def describe_protocol(self) -> JsonDict:
        return {
            "protocol": "mcp",
            "protocol_version": LATEST_PROTOCOL_VERSION,
            "capabilities": self._capabilities(),
        }

    # ------------------------------------------------------------------
    # Protocol handlers
    # ------------------------------------------------------------------
    def _dispatch(self, request: Mapping[str, Any]) -> JsonDict:
        method = request.get("method")
        request_id = request.get("id")
        params = request.get("params") or {}

        try:
            if method == "initialize":
                return self._response(request_id, self._handle_initialize())
            if method == "ping":
                return self._response(request_id, {})
            if method in ("tools/list", "list_tools"):
                return self._response(request_id, self._handle_list_tools())
            if method in ("tools/call", "call_tool"):
                return self._response(request_id, self._handle_call_tool(params))
            return self._error(request_id, -32601, f"Unknown method: {method}")
        except JSONRPCError as exc:
            return exc.to_response(request_id)

    def _capabilities(self) -> JsonDict:
        return {"tools": {"listChanged": False}}

    def _handle_initialize(self) -> JsonDict:
        return {
            "protocolVersion": LATEST_PROTOCOL_VERSION,
            "serverInfo": {
                "name": SERVER_NAME,
                "version": package_version() or "0.0.0",
            },
            "capabilities": self._capabilities(),
        }

    def _handle_list_tools(self) -> JsonDict:
        return {"tools": [tool.describe() for tool in self._tools.values()]}

    def _handle_call_tool(self, params: Mapping[str, Any]) -> JsonDict:
        name = params.get("name")
        arguments = params.get("arguments") or {}
        tool = self._tools.get(name) if isinstance(name, str) else None
        if tool is None:
            raise JSONRPCError(-32602, "Invalid params", data=f"Unknown tool: {name}")
        if not isinstance(arguments, Mapping):
            raise JSONRPCError(-32602, "Invalid params", data="arguments must be an object")

        try:
            response = tool.call(self._require_client(), arguments)
        except GreenhouseError as exc:
            LOGGER.warning("Tool %s failed: %s", name, exc)
            return {"content": [{"type": "text", "text": str(exc)}], "isError": True}
        return format_result(response)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _response(request_id: Any, result: Any) -> JsonDict:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": result,
        }

    @staticmethod
    def _error(request_id: Any, code: int, message: str) -> JsonDict:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {
                "code": code,
                "message": message,
            },
        }

    def _require_client(self) -> GreenhouseClient:
        if self._client is None:
            raise ConfigurationError(
                "Greenhouse client not configured. Set GREENHOUSE_CLIENT_ID and GREENHOUSE_CLIENT_SECRET."
            )
        return self._client


__all__ = ["JSONRPCError", "GreenhouseMCPServer", "SERVER_NAME"]
