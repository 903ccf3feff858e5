"""MCP server factory: binds the request dispatcher to the protocol."""

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from server.dispatcher import RequestDispatcher
from utils.logger import get_logger

logger = get_logger(__name__)

SERVER_NAME = "tavily-search-server"
SERVER_VERSION = "0.1.0"


def create_server(dispatcher: RequestDispatcher) -> Server:
    """
    Factory function to create the MCP server.

    Handlers are registered on `request_handlers` directly so every response
    shape (including `isError` tool output) is built by the dispatcher, and an
    McpError raised there reaches the host as a JSON-RPC error.
    """
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    async def list_tools(_req: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(dispatcher.list_tools())

    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        logger.info("Tool call", extra={"extra_fields": {"tool": req.params.name}})
        return types.ServerResult(await dispatcher.call_tool(req.params.name, req.params.arguments))

    async def list_resources(_req: types.ListResourcesRequest) -> types.ServerResult:
        return types.ServerResult(dispatcher.list_resources())

    async def list_resource_templates(_req: types.ListResourceTemplatesRequest) -> types.ServerResult:
        return types.ServerResult(dispatcher.list_resource_templates())

    async def read_resource(req: types.ReadResourceRequest) -> types.ServerResult:
        uri = str(req.params.uri)
        logger.info("Resource read", extra={"extra_fields": {"uri": uri}})
        return types.ServerResult(await dispatcher.read_resource(uri))

    server.request_handlers[types.ListToolsRequest] = list_tools
    server.request_handlers[types.CallToolRequest] = call_tool
    server.request_handlers[types.ListResourcesRequest] = list_resources
    server.request_handlers[types.ListResourceTemplatesRequest] = list_resource_templates
    server.request_handlers[types.ReadResourceRequest] = read_resource

    return server


async def run_stdio(server: Server) -> None:
    """Serve over stdin/stdout until the host closes the stream."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info(f"{SERVER_NAME} running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())
