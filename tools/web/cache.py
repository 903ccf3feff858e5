"""Thread-safe, file-backed cache of search results keyed by query text."""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from utils.logger import get_logger

from .contracts import MalformedPayloadError, SearchResult, SearchStorageError

logger = get_logger(__name__)


class SearchCacheStore:
    """
    Durable mapping of query -> SearchResult plus a pointer to the last stored query.

    The whole state is one JSON document, rewritten in full on every put:

        {"searches": {<query>: <result>, ...}, "lastQuery": <query or null>}

    Uses threading.Lock around every read and mutation so concurrent puts never
    interleave partial writes. Queries are matched exactly; callers normalize.
    """

    def __init__(self, path: str | os.PathLike[str]):
        """
        Initialize an empty store bound to a state file.

        Args:
            path: Location of the JSON state file; its directory is created on load()
        """
        self._path = Path(path)
        self._lock = threading.Lock()
        self._searches: dict[str, SearchResult] = {}
        self._last_query: str | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def last_query(self) -> str | None:
        with self._lock:
            return self._last_query

    def __len__(self) -> int:
        with self._lock:
            return len(self._searches)

    def load(self) -> None:
        """
        Load persisted state, self-healing a missing or corrupt file.

        A missing, unreadable or malformed file is treated as "no history":
        the store resets to empty and writes that empty state immediately.

        Raises:
            SearchStorageError: If the data directory or the empty state cannot be written
        """
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Failed to create data directory {self._path.parent}: {e}")
                raise SearchStorageError("Failed to initialize storage") from e

            try:
                raw = self._path.read_text(encoding="utf-8")
                searches, last_query = self._decode(json.loads(raw))
            except FileNotFoundError:
                logger.info(f"No search cache at {self._path}, starting empty")
            except (OSError, ValueError) as e:
                # json.JSONDecodeError and MalformedPayloadError are both ValueErrors
                logger.warning(
                    "Search cache unreadable, reinitializing",
                    extra={"extra_fields": {"path": str(self._path), "error": str(e)}},
                )
            else:
                self._searches, self._last_query = searches, last_query
                logger.info(
                    "Search cache loaded",
                    extra={
                        "extra_fields": {
                            "path": str(self._path),
                            "entries": len(searches),
                            "last_query": last_query,
                        }
                    },
                )
                return

            self._searches, self._last_query = {}, None
            self._write({}, None)

    def get(self, query: str) -> SearchResult | None:
        """
        Get the stored result for an exact query.

        Returns:
            SearchResult if present, None otherwise
        """
        with self._lock:
            return self._searches.get(query)

    def get_last(self) -> SearchResult | None:
        """
        Get the result of the most recently stored query.

        A null pointer and a pointer whose entry is missing both read as None.
        """
        with self._lock:
            if self._last_query is None:
                return None
            return self._searches.get(self._last_query)

    def put(self, query: str, result: SearchResult) -> None:
        """
        Store a result, move the last-query pointer and persist the whole state.

        The in-memory state only changes once the file has been replaced.

        Args:
            query: Exact query text used as the key
            result: Result to store (overwrites any previous entry)

        Raises:
            SearchStorageError: If the state file cannot be written
        """
        with self._lock:
            searches = dict(self._searches)
            searches[query] = result
            self._write(searches, query)
            self._searches, self._last_query = searches, query

        logger.info(
            "Search stored",
            extra={"extra_fields": {"query": query, "entries": len(searches)}},
        )

    def _write(self, searches: dict[str, SearchResult], last_query: str | None) -> None:
        """Atomically replace the state file. Caller holds the lock."""
        document = {
            "searches": {q: r.to_dict() for q, r in searches.items()},
            "lastQuery": last_query,
        }
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save searches to {self._path}: {e}", exc_info=True)
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            raise SearchStorageError("Failed to save searches") from e

    @staticmethod
    def _decode(document: Any) -> tuple[dict[str, SearchResult], str | None]:
        if not isinstance(document, dict):
            raise MalformedPayloadError("state must be an object")

        raw_searches = document.get("searches")
        if not isinstance(raw_searches, dict):
            raise MalformedPayloadError("searches must be an object")

        last_query = document.get("lastQuery")
        if last_query is not None and not isinstance(last_query, str):
            raise MalformedPayloadError("lastQuery must be a string or null")

        searches = {
            query: SearchResult.from_payload(payload, query=query)
            for query, payload in raw_searches.items()
        }
        return searches, last_query
