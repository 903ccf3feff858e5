"""Resolution of resource addresses against the search cache."""

import asyncio
import json
from urllib.parse import quote, unquote

import mcp.types as types

from server.errors import internal_error, invalid_request
from server.schemas.catalog import JSON_MIME_TYPE, LAST_SEARCH_URI, SEARCH_URI_PREFIX
from tools.web.cache import SearchCacheStore
from tools.web.contracts import (
    DEFAULT_SEARCH_DEPTH,
    SearchResult,
    SearchStorageError,
    TavilySearchError,
)
from tools.web.tavily_client import TavilySearchClient
from utils.logger import get_logger

logger = get_logger(__name__)


def search_uri(query: str) -> str:
    """Build the templated address for a query."""
    return f"{SEARCH_URI_PREFIX}{quote(query, safe='')}"


def parse_search_uri(uri: str) -> str | None:
    """
    Extract the decoded query from a `tavily://search/<query>` address.

    Returns:
        The percent-decoded query, or None if the address is not a search address
    """
    if not uri.startswith(SEARCH_URI_PREFIX):
        return None
    segment = uri[len(SEARCH_URI_PREFIX):]
    if not segment or "/" in segment:
        return None
    return unquote(segment)


def result_text(result: SearchResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)


class ResourceResolver:
    """
    Maps resource addresses to cached search results.

    Cache misses on the templated address go upstream with the default depth
    and are persisted before the read is answered. Each query gets its own
    miss lock, held while the cache is re-checked and the search runs, so
    concurrent reads of one uncached query make a single upstream call while
    misses for other queries proceed independently.
    """

    def __init__(self, store: SearchCacheStore, client: TavilySearchClient):
        self.store = store
        self.client = client
        self._miss_locks: dict[str, asyncio.Lock] = {}
        self._miss_waiters: dict[str, int] = {}

    async def read(self, uri: str) -> types.ReadResourceResult:
        if uri == LAST_SEARCH_URI:
            result = self.store.get_last()
            if result is None:
                raise invalid_request("No search has been performed yet")
            return self._contents(uri, result)

        query = parse_search_uri(uri)
        if query is None:
            logger.warning("Unrecognized resource URI", extra={"extra_fields": {"uri": uri}})
            raise invalid_request(f"Invalid resource URI: {uri}")

        cached = self.store.get(query)
        if cached is not None:
            logger.info("Cache hit", extra={"extra_fields": {"query": query}})
            return self._contents(uri, cached)

        return self._contents(uri, await self._fetch(query))

    async def _fetch(self, query: str) -> SearchResult:
        lock = self._miss_locks.setdefault(query, asyncio.Lock())
        self._miss_waiters[query] = self._miss_waiters.get(query, 0) + 1
        try:
            async with lock:
                cached = self.store.get(query)
                if cached is not None:
                    return cached
                return await self._search_and_store(query)
        finally:
            self._miss_waiters[query] -= 1
            if not self._miss_waiters[query]:
                del self._miss_waiters[query]
                del self._miss_locks[query]

    async def _search_and_store(self, query: str) -> SearchResult:
        logger.info("Cache miss, searching upstream", extra={"extra_fields": {"query": query}})
        try:
            result = await self.client.search(query, DEFAULT_SEARCH_DEPTH)
        except TavilySearchError as e:
            raise internal_error(f"Search failed: {e.message}") from e

        try:
            await asyncio.to_thread(self.store.put, query, result)
        except SearchStorageError as e:
            raise internal_error(f"Search failed: {e}") from e
        return result

    @property
    def pending_misses(self) -> int:
        """Number of queries with a miss in flight or waiting."""
        return len(self._miss_locks)

    @staticmethod
    def _contents(uri: str, result: SearchResult) -> types.ReadResourceResult:
        return types.ReadResourceResult(
            contents=[
                types.TextResourceContents(uri=uri, mimeType=JSON_MIME_TYPE, text=result_text(result)),
            ]
        )
