#!/usr/bin/env python3
"""MCP stdio server entry point for Tavily search."""

import argparse
import asyncio
import sys
from pathlib import Path

from config.config import Config, ConfigError
from server.app import create_server, run_stdio
from server.dispatcher import RequestDispatcher
from tools.web.cache import SearchCacheStore
from tools.web.contracts import SearchStorageError
from tools.web.tavily_client import TavilySearchClient
from utils.logger import LoggerConfig, get_logger

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tavily search MCP server (stdio)")
    parser.add_argument("--data-dir", type=Path, help="Directory holding searches.json")
    parser.add_argument("--timeout", type=float, help="Tavily request timeout in seconds")
    parser.add_argument("--log-level", help="Override LOG_LEVEL (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def build_dispatcher(config: Config, client: TavilySearchClient) -> RequestDispatcher:
    """
    Load the search cache and wire it into a dispatcher.

    Raises:
        SearchStorageError: If the cache cannot be initialized on disk
    """
    store = SearchCacheStore(config.storage_path)
    store.load()
    return RequestDispatcher(store, client)


async def serve(config: Config) -> None:
    api_key = config.require_api_key()
    async with TavilySearchClient(
        api_key,
        base_url=config.TAVILY_BASE_URL,
        timeout_s=config.TAVILY_TIMEOUT_S,
    ) as client:
        dispatcher = build_dispatcher(config, client)
        await run_stdio(create_server(dispatcher))


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.log_level:
        LoggerConfig.setup_logging(level=args.log_level)

    config = Config()
    if args.data_dir:
        config.SEARCH_DATA_DIR = args.data_dir
    if args.timeout:
        config.TAVILY_TIMEOUT_S = args.timeout

    try:
        asyncio.run(serve(config))
    except ConfigError as e:
        logger.error(f"Refusing to start: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except SearchStorageError as e:
        logger.error(f"Refusing to start: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")

    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
