"""Tavily web search: upstream client, result contracts and the durable search cache."""

from .cache import SearchCacheStore
from .contracts import (
    DEFAULT_SEARCH_DEPTH,
    SearchFailure,
    SearchResult,
    SearchResultItem,
    SearchStorageError,
    TavilySearchError,
)
from .tavily_client import TavilySearchClient

__all__ = [
    "DEFAULT_SEARCH_DEPTH",
    "SearchCacheStore",
    "SearchFailure",
    "SearchResult",
    "SearchResultItem",
    "SearchStorageError",
    "TavilySearchClient",
    "TavilySearchError",
]
