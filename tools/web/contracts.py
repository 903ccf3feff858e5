"""Data contracts for the Tavily search module."""

from dataclasses import dataclass, field
from typing import Any, Literal

SearchDepth = Literal["basic", "advanced"]
DEFAULT_SEARCH_DEPTH: SearchDepth = "basic"

UNKNOWN_STATUS = "unknown"

_ITEM_FIELDS = ("title", "url", "content", "score")
_RESULT_FIELDS = ("query", "answer", "results", "response_time")


class MalformedPayloadError(ValueError):
    """Provider payload does not have the documented search response shape."""


def _as_number(value: Any, name: str) -> int | float | None:
    """Validate a numeric field, keeping ints as ints so the payload round-trips unchanged."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedPayloadError(f"{name} must be numeric")
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"{name} must be numeric") from e


def _as_text(value: Any, name: str) -> str | None:
    if value is not None and not isinstance(value, str):
        raise MalformedPayloadError(f"{name} must be a string")
    return value


@dataclass(frozen=True)
class SearchResultItem:
    """One ranked hit from the provider. Missing or null fields stay None."""

    title: str | None
    url: str | None
    content: str | None = None
    score: int | float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "SearchResultItem":
        if not isinstance(payload, dict):
            raise MalformedPayloadError("result item must be an object")
        return cls(
            title=_as_text(payload.get("title"), "title"),
            url=_as_text(payload.get("url"), "url"),
            content=_as_text(payload.get("content"), "content"),
            score=_as_number(payload.get("score"), "score"),
            extra={k: v for k, v in payload.items() if k not in _ITEM_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "content": self.content,
            "score": self.score,
            **self.extra,
        }


@dataclass(frozen=True)
class SearchResult:
    """
    Immutable record of one completed search.

    `extra` keeps top-level provider keys this module does not model
    (images, follow-up questions, request ids) so the payload handed back
    to the host matches what the provider sent.
    """

    query: str
    results: tuple[SearchResultItem, ...] = ()
    answer: str | None = None
    response_time: int | float | None = 0.0
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any, query: str | None = None) -> "SearchResult":
        """
        Build a SearchResult from a provider (or persisted) JSON object.

        Args:
            payload: Decoded JSON body
            query: Query to fall back on when the body does not echo it

        Raises:
            MalformedPayloadError: If the body is not a search response
        """
        if not isinstance(payload, dict):
            raise MalformedPayloadError("search response must be an object")

        raw_results = payload.get("results", [])
        if not isinstance(raw_results, list):
            raise MalformedPayloadError("results must be a list")

        result_query = payload.get("query", query)
        if not isinstance(result_query, str):
            raise MalformedPayloadError("query must be a string")

        answer = payload.get("answer")
        if answer is not None and not isinstance(answer, str):
            raise MalformedPayloadError("answer must be a string")

        return cls(
            query=result_query,
            results=tuple(SearchResultItem.from_payload(item) for item in raw_results),
            answer=answer,
            response_time=_as_number(payload.get("response_time", 0.0), "response_time"),
            extra={k: v for k, v in payload.items() if k not in _RESULT_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "answer": self.answer,
            "results": [item.to_dict() for item in self.results],
            "response_time": self.response_time,
            **self.extra,
        }


@dataclass(frozen=True)
class SearchFailure:
    """Normalized upstream failure: a readable message and the HTTP status if one was received."""

    message: str
    status: int | str = UNKNOWN_STATUS

    def __str__(self) -> str:
        return f"{self.message} (Status: {self.status})"


class TavilySearchError(Exception):
    """Raised by the Tavily client for every failed search attempt."""

    def __init__(self, failure: SearchFailure):
        super().__init__(str(failure))
        self.failure = failure

    @property
    def message(self) -> str:
        return self.failure.message

    @property
    def status(self) -> int | str:
        return self.failure.status


class SearchStorageError(Exception):
    """The search cache could not be written to (or initialized on) disk."""
