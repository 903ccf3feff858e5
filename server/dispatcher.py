"""Request dispatcher: maps MCP requests to cache lookups and Tavily searches."""

import asyncio
from typing import Any

import mcp.types as types

from server.errors import internal_error, invalid_arguments, unknown_tool
from server.resources import ResourceResolver, result_text
from server.schemas.catalog import (
    LAST_SEARCH_RESOURCE,
    SEARCH_RESOURCE_TEMPLATE,
    SEARCH_TOOL,
    SEARCH_TOOL_NAME,
)
from server.schemas.requests import validate_search_arguments
from tools.web.cache import SearchCacheStore
from tools.web.contracts import SearchStorageError, TavilySearchError
from tools.web.tavily_client import TavilySearchClient
from utils.logger import get_logger

logger = get_logger(__name__)


class RequestDispatcher:
    """
    Handles the tool and resource requests of the search server.

    Validation failures are raised as McpError before anything is sent
    upstream or written to disk. Upstream failures on the tool path come back
    as error-flagged tool output instead.
    """

    def __init__(self, store: SearchCacheStore, client: TavilySearchClient):
        """
        Args:
            store: The process-wide search cache, already loaded
            client: Tavily client used on every tool call and on resource cache misses
        """
        self.store = store
        self.client = client
        self.resolver = ResourceResolver(store, client)

    def list_tools(self) -> types.ListToolsResult:
        return types.ListToolsResult(tools=[SEARCH_TOOL])

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        """
        Run the `search` tool.

        Every valid call goes upstream (the tool is a fresh search, not a cache
        read) and a successful result replaces the cached entry for the query.

        Raises:
            McpError: Unknown tool name, invalid arguments, or cache write failure
        """
        if name != SEARCH_TOOL_NAME:
            logger.warning("Unknown tool requested", extra={"extra_fields": {"tool": name}})
            raise unknown_tool(name)

        validation = validate_search_arguments(arguments)
        if not validation.ok:
            logger.warning(
                "Invalid search arguments",
                extra={"extra_fields": {"errors": validation.errors}},
            )
            raise invalid_arguments(validation.errors)

        args = validation.arguments
        try:
            result = await self.client.search(args.query, args.search_depth)
        except TavilySearchError as e:
            return types.CallToolResult(
                content=[
                    types.TextContent(
                        type="text",
                        text=f"Tavily API error: {e.message} (Status: {e.status})",
                    )
                ],
                isError=True,
            )

        try:
            await asyncio.to_thread(self.store.put, args.query, result)
        except SearchStorageError as e:
            raise internal_error(f"Search succeeded but could not be saved: {e}") from e

        return types.CallToolResult(
            content=[types.TextContent(type="text", text=result_text(result))],
            isError=False,
        )

    def list_resources(self) -> types.ListResourcesResult:
        return types.ListResourcesResult(resources=[LAST_SEARCH_RESOURCE])

    def list_resource_templates(self) -> types.ListResourceTemplatesResult:
        return types.ListResourceTemplatesResult(resourceTemplates=[SEARCH_RESOURCE_TEMPLATE])

    async def read_resource(self, uri: str) -> types.ReadResourceResult:
        return await self.resolver.read(uri)
