"""Core package for the Greenhouse Harvest MCP server, exposing the token manager, client, configuration, server, and HTTP helpers."""

from .auth import Credentials, TokenCache, TokenManager
from .client import ApiResponse, GreenhouseClient
from .config import GreenhouseConfig
from .exceptions import (
    ApiConnectionError,
    ApiError,
    AuthError,
    ConfigurationError,
    GreenhouseError,
    PageRequestError,
)
from .http_server import create_http_server, serve_http
from .pagination import Cursored, Filtered, PageRequest, page_request
from .server import GreenhouseMCPServer, JSONRPCError

__all__ = [
    "ApiConnectionError",
    "ApiError",
    "ApiResponse",
    "AuthError",
    "ConfigurationError",
    "Credentials",
    "Cursored",
    "Filtered",
    "GreenhouseClient",
    "GreenhouseConfig",
    "GreenhouseError",
    "GreenhouseMCPServer",
    "JSONRPCError",
    "PageRequest",
    "PageRequestError",
    "TokenCache",
    "TokenManager",
    "create_http_server",
    "page_request",
    "serve_http",
]
