"""
Prompt context assembly: recent conversation history plus retrieved documents,
wrapped in tagged blocks ahead of the user's message.

Nothing here is escaped. Retrieved content and user text are inserted as-is,
so either can break the surrounding tags.
"""

from dataclasses import dataclass

from .search_client import MAX_CONTENT_LENGTH, SearchResult

MAX_HISTORY_ENTRIES = 4
MAX_HISTORY_CHAR = 200
NO_RESULTS_MARKER = "No documents found for this query."


@dataclass(frozen=True)
class HistoryEntry:
    role: str  # "user" | "assistant"
    text: str


def build_history_context(history: list[HistoryEntry]) -> str:
    if not history:
        return ""

    recent = history[-MAX_HISTORY_ENTRIES:]
    lines = [f"{entry.role}: {entry.text[:MAX_HISTORY_CHAR]}" for entry in recent]
    return "<conversation_history>\n" + "\n".join(lines) + "\n</conversation_history>\n\n"


def build_search_context(results: list[SearchResult]) -> str:
    if not results:
        return f"<search_results>\n{NO_RESULTS_MARKER}\n</search_results>"

    docs = "\n".join(
        f'<doc index="{i}">\n'
        f"<title>{r.title}</title>\n"
        f"<path>{r.path}</path>\n"
        f"<content>{r.content[:MAX_CONTENT_LENGTH]}</content>\n"
        f"</doc>"
        for i, r in enumerate(results, start=1)
    )
    return f"<search_results>\n{docs}\n</search_results>"


def assemble_prompt(
    message: str,
    results: list[SearchResult],
    history: list[HistoryEntry] | None = None,
) -> str:
    """Single user-turn body: history block, search block, then the raw message."""
    return f"{build_history_context(history or [])}{build_search_context(results)}\n\n{message}"
