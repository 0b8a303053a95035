#!/usr/bin/env python3
"""
Documentation chat demo: talk to the docs from the terminal.

Usage:
    python demo.py    # interactive REPL, one thread for the whole run
"""

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from api.chat import ChatOrchestrator
from api.session_store import SessionStore
from src.config import get_settings
from src.errors import ChatError
from src.llm_client import create_llm_client
from src.search_client import SearchClient
from src.token_tracker import tracker


async def run_interactive(orchestrator: ChatOrchestrator):
    print("\nAsk a question about the docs (or 'quit' to exit):\n")
    thread_id = None

    while True:
        try:
            message = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not message or message.lower() in ("quit", "exit", "q"):
            break

        try:
            reply = await orchestrator.handle(message, thread_id)
        except ChatError as e:
            print(f"  Error: {e.public_message}", file=sys.stderr)
            continue

        thread_id = reply.thread_id
        print(f"\n{reply.message}\n")
        if reply.sources:
            print("  Sources:")
            for source in reply.sources:
                print(f"    - {source.title} ({source.path})")
        print()


async def main():
    settings = get_settings()
    search_client = SearchClient(
        host=settings.meili_host,
        api_key=settings.meili_api_key,
        index_name=settings.meili_index_name,
        timeout=settings.search_timeout_sec,
    )
    llm_client = create_llm_client(settings)
    if llm_client is None:
        print("OPENAI_API_KEY is not set.", file=sys.stderr)
        await search_client.aclose()
        sys.exit(1)

    orchestrator = ChatOrchestrator(search_client, llm_client, SessionStore())
    try:
        await run_interactive(orchestrator)
    finally:
        await search_client.aclose()
        await llm_client.aclose()

    s = tracker.summary()
    print(f"\nToken usage: {s['total_calls']} API calls, ${s['total_cost_usd']:.6f} total cost")


if __name__ == "__main__":
    asyncio.run(main())
