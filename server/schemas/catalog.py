"""Tool and resource descriptors advertised to the MCP host."""

import mcp.types as types

URI_SCHEME = "tavily"
LAST_SEARCH_URI = f"{URI_SCHEME}://last-search/result"
SEARCH_URI_PREFIX = f"{URI_SCHEME}://search/"
SEARCH_URI_TEMPLATE = f"{SEARCH_URI_PREFIX}{{query}}"
JSON_MIME_TYPE = "application/json"

SEARCH_TOOL_NAME = "search"

SEARCH_TOOL = types.Tool(
    name=SEARCH_TOOL_NAME,
    description="Perform an AI-powered search using Tavily API",
    inputSchema={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Search query",
            },
            "search_depth": {
                "type": "string",
                "enum": ["basic", "advanced"],
                "description": "Search depth - basic is faster, advanced is more comprehensive",
            },
        },
        "required": ["query"],
    },
)

LAST_SEARCH_RESOURCE = types.Resource(
    uri=LAST_SEARCH_URI,
    name="Last Search Result",
    description="Results from the most recent search query",
    mimeType=JSON_MIME_TYPE,
)

SEARCH_RESOURCE_TEMPLATE = types.ResourceTemplate(
    uriTemplate=SEARCH_URI_TEMPLATE,
    name="Search Results by Query",
    description="Search results for a specific query",
    mimeType=JSON_MIME_TYPE,
)
