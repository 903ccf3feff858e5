"""Tavily API client for AI-powered web search.

One call type only: POST /search with an AI-generated answer requested and raw
page content declined. Every failure (transport, non-2xx status, malformed body)
leaves this module as a TavilySearchError carrying a normalized SearchFailure.
"""

from typing import Any

import httpx

from utils.logger import get_logger

from .contracts import (
    DEFAULT_SEARCH_DEPTH,
    SearchDepth,
    SearchFailure,
    SearchResult,
    TavilySearchError,
)

logger = get_logger(__name__)

TAVILY_BASE_URL = "https://api.tavily.com"
DEFAULT_TIMEOUT_S = 30.0
FALLBACK_ERROR_MESSAGE = "Unknown error occurred"
MALFORMED_RESPONSE_MESSAGE = "Malformed response from Tavily API"


def _provider_message(response: httpx.Response) -> str | None:
    """Pick the most specific message from a provider error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None

    for key in ("message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value

    detail = body.get("detail")
    if isinstance(detail, dict):
        value = detail.get("error") or detail.get("message")
        if isinstance(value, str) and value:
            return value
    if isinstance(detail, str) and detail:
        return detail
    return None


class TavilySearchClient:
    """
    Async Tavily search client.

    Owns one httpx.AsyncClient unless one is injected. No retries: a single
    attempt either returns a SearchResult or raises TavilySearchError.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = TAVILY_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize Tavily client.

        Args:
            api_key: Tavily API key
            base_url: API root, without the /search path
            timeout_s: Per-request timeout in seconds
            http_client: Pre-built client (tests inject one with a MockTransport)
        """
        if not api_key:
            raise ValueError("Tavily API key is required")

        self.api_key = api_key
        self.timeout_s = timeout_s
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_s,
            headers={"Content-Type": "application/json", "api-key": api_key},
        )

    async def __aenter__(self) -> "TavilySearchClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _build_payload(self, query: str, search_depth: SearchDepth) -> dict[str, Any]:
        return {
            "api_key": self.api_key,
            "query": query,
            "search_depth": search_depth,
            "include_answer": True,
            "include_raw_content": False,
        }

    async def search(self, query: str, search_depth: SearchDepth = DEFAULT_SEARCH_DEPTH) -> SearchResult:
        """
        Search the web using Tavily API.

        Args:
            query: Search query, sent as-is
            search_depth: "basic" (faster) or "advanced" (more comprehensive)

        Returns:
            SearchResult parsed from the provider response

        Raises:
            TavilySearchError: On any transport failure, non-success status or malformed body
        """
        logger.info(
            "Tavily search",
            extra={"extra_fields": {"query": query, "search_depth": search_depth}},
        )

        try:
            response = await self._client.post("/search", json=self._build_payload(query, search_depth))
        except httpx.TimeoutException as e:
            raise self._fail(SearchFailure(f"Request timed out after {self.timeout_s:g}s"), e)
        except httpx.HTTPError as e:
            raise self._fail(SearchFailure(str(e) or FALLBACK_ERROR_MESSAGE), e)

        if not response.is_success:
            message = _provider_message(response) or response.reason_phrase or FALLBACK_ERROR_MESSAGE
            raise self._fail(SearchFailure(message, response.status_code))

        try:
            result = SearchResult.from_payload(response.json(), query=query)
        except ValueError as e:  # includes MalformedPayloadError
            raise self._fail(SearchFailure(MALFORMED_RESPONSE_MESSAGE, response.status_code), e)

        logger.info(
            "Tavily search complete",
            extra={
                "extra_fields": {
                    "query": query,
                    "result_count": len(result.results),
                    "response_time": result.response_time,
                }
            },
        )
        return result

    @staticmethod
    def _fail(failure: SearchFailure, cause: Exception | None = None) -> TavilySearchError:
        logger.error(
            f"Tavily API error: {failure.message}",
            extra={
                "extra_fields": {
                    "status": failure.status,
                    "error_type": type(cause).__name__ if cause else None,
                }
            },
        )
        error = TavilySearchError(failure)
        if cause is not None:
            error.__cause__ = cause
        return error
