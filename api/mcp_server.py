"""
MCP tool surface over the search index.

Tools forward to Meilisearch and hand back the engine's JSON re-serialized,
without interpretation. The server is stateless: every POST gets a fresh
transport and no MCP session is kept between calls.
"""

import json
import logging

from mcp.server.fastmcp import FastMCP

from src.errors import UpstreamError
from src.search_client import SearchClient

logger = logging.getLogger(__name__)

SERVER_NAME = "meilisearch-mcp-server"
DEFAULT_TOOL_LIMIT = 20


def _dump(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _error(e: UpstreamError) -> str:
    return f"Error: search engine request failed ({e.detail})"


# ── Tool bodies ────────────────────────────────────────────────────────────

async def run_search(
    client: SearchClient,
    query: str,
    limit: int | None = None,
    offset: int | None = None,
) -> str:
    logger.info("Received search request with query: %s", query)
    try:
        results = await client.search(
            query,
            limit=limit if limit is not None else DEFAULT_TOOL_LIMIT,
            offset=offset,
        )
    except UpstreamError as e:
        return _error(e)
    return _dump(results)


async def run_search_documents(
    client: SearchClient,
    query: str,
    limit: int | None = None,
    offset: int | None = None,
    filter: str | None = None,
    attributes_to_retrieve: list[str] | None = None,
    attributes_to_crop: list[str] | None = None,
    crop_length: int | None = None,
    semantic_ratio: float | None = None,
) -> str:
    kwargs = {}
    if semantic_ratio is not None:
        kwargs["semantic_ratio"] = semantic_ratio
    try:
        results = await client.search(
            query,
            limit=limit if limit is not None else DEFAULT_TOOL_LIMIT,
            offset=offset,
            filter=filter,
            attributes_to_retrieve=attributes_to_retrieve,
            attributes_to_crop=attributes_to_crop,
            crop_length=crop_length,
            attributes_to_highlight=attributes_to_crop,
            **kwargs,
        )
    except UpstreamError as e:
        return _error(e)
    return _dump(results)


async def run_list_indexes(client: SearchClient) -> str:
    try:
        return _dump(await client.list_indexes())
    except UpstreamError as e:
        return _error(e)


async def run_get_index_stats(client: SearchClient, index_name: str | None = None) -> str:
    try:
        return _dump(await client.get_index_stats(index_name))
    except UpstreamError as e:
        return _error(e)


async def run_get_document(
    client: SearchClient,
    document_id: str,
    fields: list[str] | None = None,
) -> str:
    try:
        return _dump(await client.get_document(document_id, fields=fields))
    except UpstreamError as e:
        return _error(e)


# ── Server ─────────────────────────────────────────────────────────────────

def create_mcp_server(client: SearchClient) -> FastMCP:
    mcp = FastMCP(
        SERVER_NAME,
        instructions=f"Search the '{client.index_name}' documentation index.",
        host="0.0.0.0",
        stateless_http=True,
        json_response=True,
        streamable_http_path="/",
    )

    @mcp.tool()
    async def search(query: str, limit: int | None = None, offset: int | None = None) -> str:
        """Full-text keyword search in a MeiliSearch index.

        Args:
            query: The search query string
            limit: Maximum number of results to return (default: 20)
            offset: Number of results to skip (default: 0)
        """
        return await run_search(client, query, limit, offset)

    @mcp.tool()
    async def search_documents(
        query: str,
        limit: int | None = None,
        offset: int | None = None,
        filter: str | None = None,
        attributes_to_retrieve: list[str] | None = None,
        attributes_to_crop: list[str] | None = None,
        crop_length: int | None = None,
        semantic_ratio: float | None = None,
    ) -> str:
        """Hybrid search with filtering, field projection and cropped snippets.

        Args:
            query: The search query string
            limit: Maximum number of results to return (default: 20)
            offset: Number of results to skip (default: 0)
            filter: Meilisearch filter expression, e.g. "path = '/smart-contracts/what-is'"
            attributes_to_retrieve: Fields to return for each hit
            attributes_to_crop: Fields to crop and highlight around the match
            crop_length: Number of words kept in cropped fields
            semantic_ratio: Blend between keyword (0.0) and semantic (1.0) search (default: 0.7)
        """
        return await run_search_documents(
            client, query, limit, offset, filter,
            attributes_to_retrieve, attributes_to_crop, crop_length, semantic_ratio,
        )

    @mcp.tool()
    async def list_indexes() -> str:
        """List the indexes available on the search engine."""
        return await run_list_indexes(client)

    @mcp.tool()
    async def get_index_stats(index_name: str | None = None) -> str:
        """Document count and field distribution for an index (default: the docs index)."""
        return await run_get_index_stats(client, index_name)

    @mcp.tool()
    async def get_document(document_id: str, fields: list[str] | None = None) -> str:
        """Fetch one raw document by its identifier.

        Args:
            document_id: Primary key of the document
            fields: Optional list of fields to return
        """
        return await run_get_document(client, document_id, fields)

    return mcp
