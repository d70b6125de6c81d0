"""Terminal client that reuses the in-process AI search logic."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Iterable

from gateway.cache import SearchCache
from gateway.catalog import CatalogFetcher
from gateway.errors import GatewayError
from gateway.gemini import GeminiClient
from gateway.matcher import AIMatchResolver
from gateway.search_service import SearchOrchestrator
from gateway.shopify import ShopifyClient

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


class SearchSession:
    """Keeps one cache alive across queries so repeated searches hit it."""

    def __init__(self) -> None:
        self.shopify = ShopifyClient()
        self.gemini = GeminiClient()
        cache = SearchCache()
        self.orchestrator = SearchOrchestrator(cache, CatalogFetcher(self.shopify, cache), AIMatchResolver(self.gemini))

    async def perform_query(self, query: str) -> dict:
        try:
            return await self.orchestrator.search(query)
        except GatewayError as exc:
            return {"error": exc.error, "details": exc.details}

    async def aclose(self) -> None:
        await self.shopify.aclose()
        await self.gemini.aclose()


def pretty_print_response(query: str, payload: dict) -> None:
    if "error" in payload:
        print(f"{RED}Query: {query} | {payload['error']}: {payload.get('details')}{RESET}")
        return
    matches = payload.get("matches", [])
    source = f"{GREEN}cache ({payload.get('cacheAge')}s){RESET}" if payload.get("cached") else "live"
    print(f"Query: {query} | matches: {len(matches)} of {payload.get('totalProducts')} | source: {source}")
    for idx, item in enumerate(matches, start=1):
        print(f"  {idx:02d}. {item.get('title')} | {item.get('price')} {item.get('currency')} | {item.get('vendor')}")


async def run(queries: Iterable[str]) -> None:
    session = SearchSession()
    try:
        for query in queries:
            pretty_print_response(query, await session.perform_query(query))
    finally:
        await session.aclose()


def _read_batch(file_path: Path) -> list[str]:
    with file_path.open("r", encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip()]


def _interactive() -> Iterable[str]:
    print("Interactive AI product search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not query:
            continue
        if query.lower() in {"exit", "quit"}:
            return
        yield query


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the AI product search")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.batch:
        asyncio.run(run(_read_batch(args.batch)))
        return 0
    if args.query:
        asyncio.run(run([args.query]))
        return 0
    asyncio.run(run(_interactive()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
