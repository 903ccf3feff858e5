"""Typed protocol errors returned to the MCP host as JSON-RPC errors."""

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND, ErrorData


def _error(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


def unknown_tool(name: str) -> McpError:
    return _error(METHOD_NOT_FOUND, f"Unknown tool: {name}")


def invalid_arguments(errors: list[str]) -> McpError:
    detail = "; ".join(errors)
    return _error(INVALID_PARAMS, f"Invalid search arguments: {detail}" if detail else "Invalid search arguments")


def invalid_request(message: str) -> McpError:
    return _error(INVALID_REQUEST, message)


def internal_error(message: str) -> McpError:
    return _error(INTERNAL_ERROR, message)
