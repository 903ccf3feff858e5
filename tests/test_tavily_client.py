import asyncio
import json

import httpx
import pytest

from fakes import make_payload
from tools.web.contracts import TavilySearchError
from tools.web.tavily_client import TavilySearchClient


def _client(handler, timeout_s: float = 30.0) -> TavilySearchClient:
    http_client = httpx.AsyncClient(
        base_url="https://api.tavily.test",
        transport=httpx.MockTransport(handler),
    )
    return TavilySearchClient("tvly-test-key", timeout_s=timeout_s, http_client=http_client)


def _search(client: TavilySearchClient, *args):
    async def _run():
        try:
            return await client.search(*args)
        finally:
            await client._client.aclose()

    return asyncio.run(_run())


@pytest.mark.unit
def test_search_posts_expected_body_and_parses_result():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=make_payload("latest python release"))

    result = _search(_client(handler), "latest python release", "advanced")

    assert seen["method"] == "POST"
    assert seen["path"] == "/search"
    assert seen["body"] == {
        "api_key": "tvly-test-key",
        "query": "latest python release",
        "search_depth": "advanced",
        "include_answer": True,
        "include_raw_content": False,
    }
    assert result.query == "latest python release"
    assert result.answer == "An answer."
    assert [item.url for item in result.results] == ["https://example.com/a", "https://example.com/b"]
    assert result.results[0].score == 0.91
    assert result.response_time == 1.25


@pytest.mark.unit
def test_search_defaults_to_basic_depth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=make_payload("q"))

    _search(_client(handler), "q")

    assert seen["body"]["search_depth"] == "basic"


@pytest.mark.unit
@pytest.mark.parametrize(
    "body, expected",
    [
        ({"message": "Invalid API key", "error": "unauthorized"}, "Invalid API key"),
        ({"error": "unauthorized"}, "unauthorized"),
        ({"detail": {"error": "Usage limit exceeded"}}, "Usage limit exceeded"),
    ],
)
def test_error_status_uses_most_specific_provider_message(body, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json=body)

    with pytest.raises(TavilySearchError) as exc_info:
        _search(_client(handler), "q")

    assert exc_info.value.message == expected
    assert exc_info.value.status == 401


@pytest.mark.unit
def test_error_status_without_body_falls_back_to_reason_phrase():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, content=b"<html>bad gateway</html>")

    with pytest.raises(TavilySearchError) as exc_info:
        _search(_client(handler), "q")

    assert exc_info.value.message == "Bad Gateway"
    assert exc_info.value.status == 502


@pytest.mark.unit
def test_transport_failure_has_unknown_status():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TavilySearchError) as exc_info:
        _search(_client(handler), "q")

    assert exc_info.value.message == "connection refused"
    assert exc_info.value.status == "unknown"
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.unit
def test_timeout_is_reported_as_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TavilySearchError) as exc_info:
        _search(_client(handler, timeout_s=5), "q")

    assert exc_info.value.message == "Request timed out after 5s"
    assert exc_info.value.status == "unknown"


@pytest.mark.unit
@pytest.mark.parametrize(
    "content",
    [
        b"not json at all",
        b"[1, 2, 3]",
        b'{"query": "q", "results": {"not": "a list"}}',
        b'{"query": "q", "results": [{"title": "t", "score": "high"}]}',
        b'{"query": "q", "results": [{"title": 7, "url": "https://example.com"}]}',
    ],
)
def test_malformed_success_body_is_a_failure(content):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=content)

    with pytest.raises(TavilySearchError) as exc_info:
        _search(_client(handler), "q")

    assert exc_info.value.message == "Malformed response from Tavily API"
    assert exc_info.value.status == 200


@pytest.mark.unit
def test_missing_query_in_body_falls_back_to_requested_query():
    payload = make_payload("ignored")
    del payload["query"]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    result = _search(_client(handler), "requested")

    assert result.query == "requested"


@pytest.mark.unit
def test_empty_api_key_is_rejected():
    with pytest.raises(ValueError):
        TavilySearchClient("")
