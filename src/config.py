"""Environment-backed settings for the search engine, the model API and the server."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_MEILI_HOST = "http://127.0.0.1:7700"
DEFAULT_MEILI_INDEX_NAME = "near-docs"
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_SEARCH_TIMEOUT_SEC = 10.0
DEFAULT_LLM_TIMEOUT_SEC = 60.0
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    meili_host: str = DEFAULT_MEILI_HOST
    meili_api_key: str = ""
    meili_index_name: str = DEFAULT_MEILI_INDEX_NAME
    openai_api_key: str | None = None
    llm_model: str = DEFAULT_LLM_MODEL
    search_timeout_sec: float = DEFAULT_SEARCH_TIMEOUT_SEC
    llm_timeout_sec: float = DEFAULT_LLM_TIMEOUT_SEC
    port: int = DEFAULT_PORT


def get_settings() -> Settings:
    load_dotenv()
    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    return Settings(
        meili_host=os.getenv("MEILI_HOST", DEFAULT_MEILI_HOST),
        meili_api_key=os.getenv("MEILI_API_KEY", ""),
        meili_index_name=os.getenv("MEILI_INDEX_NAME", DEFAULT_MEILI_INDEX_NAME),
        openai_api_key=api_key or None,
        llm_model=os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL),
        search_timeout_sec=float(os.getenv("SEARCH_TIMEOUT_SEC", str(DEFAULT_SEARCH_TIMEOUT_SEC))),
        llm_timeout_sec=float(os.getenv("LLM_TIMEOUT_SEC", str(DEFAULT_LLM_TIMEOUT_SEC))),
        port=int(os.getenv("PORT", str(DEFAULT_PORT))),
    )
