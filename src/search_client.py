"""
Meilisearch gateway.

`search_docs` turns a free-text question into a short, size-capped list of
`SearchResult` summaries for the chat flow. The remaining methods are opaque
pass-through reads used by the tool surface: the decoded JSON is returned
exactly as the engine sent it.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

SEMANTIC_RATIO = 0.7
EMBEDDER = "default"
CROP_LENGTH = 200
DEFAULT_LIMIT = 5
MAX_QUERY_LENGTH = 500
MAX_CONTENT_LENGTH = 800


@dataclass
class SearchResult:
    title: str
    content: str
    path: str


class SearchClient:
    def __init__(
        self,
        host: str,
        api_key: str = "",
        index_name: str = "near-docs",
        timeout: float = 10.0,
    ):
        self.host = host
        self.index_name = index_name
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.AsyncClient(base_url=host, headers=headers, timeout=timeout)

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.error("Search request timed out: %s %s", method, path)
            raise UpstreamTimeoutError("search", f"{method} {path} timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error("Search HTTP error: %s - %s", e.response.status_code, e.response.text[:200])
            raise UpstreamError("search", f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Search request failed: %s", e)
            raise UpstreamError("search", str(e)) from e
        except ValueError as e:
            logger.error("Search returned invalid JSON for %s %s", method, path)
            raise UpstreamError("search", "invalid JSON response") from e

    # ── Chat retrieval ──────────────────────────────────────────────────────

    async def search_docs(self, query: str, limit: int = DEFAULT_LIMIT) -> list[SearchResult]:
        """Hybrid search returning cropped, capped summaries in ranked order."""
        data = await self.search(
            query[:MAX_QUERY_LENGTH],
            limit=limit,
            attributes_to_retrieve=["title", "content", "path"],
            attributes_to_crop=["content"],
            crop_length=CROP_LENGTH,
        )
        return [_to_result(hit) for hit in data.get("hits", [])]

    # ── Pass-through reads ──────────────────────────────────────────────────

    async def search(
        self,
        query: str,
        limit: int | None = None,
        offset: int | None = None,
        filter: str | list | None = None,
        attributes_to_retrieve: list[str] | None = None,
        attributes_to_crop: list[str] | None = None,
        crop_length: int | None = None,
        attributes_to_highlight: list[str] | None = None,
        semantic_ratio: float = SEMANTIC_RATIO,
        embedder: str = EMBEDDER,
        index_name: str | None = None,
    ) -> dict:
        body: dict[str, Any] = {
            "q": query,
            "hybrid": {"semanticRatio": semantic_ratio, "embedder": embedder},
        }
        optional = {
            "limit": limit,
            "offset": offset,
            "filter": filter,
            "attributesToRetrieve": attributes_to_retrieve,
            "attributesToCrop": attributes_to_crop,
            "cropLength": crop_length,
            "attributesToHighlight": attributes_to_highlight,
        }
        body.update({k: v for k, v in optional.items() if v is not None})
        index = index_name or self.index_name
        return await self._request("POST", f"/indexes/{index}/search", json=body)

    async def list_indexes(self) -> dict:
        return await self._request("GET", "/indexes")

    async def get_index_stats(self, index_name: str | None = None) -> dict:
        return await self._request("GET", f"/indexes/{index_name or self.index_name}/stats")

    async def get_document(
        self,
        document_id: str,
        fields: list[str] | None = None,
        index_name: str | None = None,
    ) -> dict:
        params = {"fields": ",".join(fields)} if fields else None
        path = f"/indexes/{index_name or self.index_name}/documents/{document_id}"
        return await self._request("GET", path, params=params)

    async def health(self) -> dict:
        return await self._request("GET", "/health")

    async def aclose(self) -> None:
        await self._client.aclose()


def _to_result(hit: dict) -> SearchResult:
    formatted = hit.get("_formatted") or {}
    content = formatted.get("content") or hit.get("content") or ""
    return SearchResult(
        title=hit.get("title") or "Untitled",
        content=content[:MAX_CONTENT_LENGTH],
        path=hit.get("path") or "",
    )
