import asyncio
import json

import httpx
import pytest
import respx

from src.errors import UpstreamError, UpstreamTimeoutError
from src.search_client import SearchClient, SearchResult

MEILI = "http://meili.test"
SEARCH_URL = f"{MEILI}/indexes/near-docs/search"


def _run(coro_fn):
    async def scenario():
        client = SearchClient(host=MEILI, api_key="secret", index_name="near-docs")
        try:
            return await coro_fn(client)
        finally:
            await client.aclose()

    return asyncio.run(scenario())


@respx.mock
def test_search_docs_maps_hits():
    route = respx.post(SEARCH_URL).mock(return_value=httpx.Response(200, json={"hits": [
        {"title": "Accounts", "content": "raw", "path": "/a", "_formatted": {"content": "…cropped…"}},
        {"content": "z" * 1000},
    ]}))

    results = _run(lambda c: c.search_docs("what is an account"))

    assert results == [
        SearchResult(title="Accounts", content="…cropped…", path="/a"),
        SearchResult(title="Untitled", content="z" * 800, path=""),
    ]
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer secret"
    body = json.loads(request.content)
    assert body["q"] == "what is an account"
    assert body["hybrid"] == {"semanticRatio": 0.7, "embedder": "default"}
    assert body["limit"] == 5
    assert body["attributesToRetrieve"] == ["title", "content", "path"]
    assert body["attributesToCrop"] == ["content"]
    assert body["cropLength"] == 200
    assert "offset" not in body


@respx.mock
def test_search_docs_empty():
    respx.post(SEARCH_URL).mock(return_value=httpx.Response(200, json={"hits": []}))

    assert _run(lambda c: c.search_docs("nothing")) == []


@respx.mock
def test_search_passes_response_through_unchanged():
    payload = {"hits": [{"id": 1, "_rankingScore": 0.9}], "estimatedTotalHits": 1, "processingTimeMs": 3}
    route = respx.post(SEARCH_URL).mock(return_value=httpx.Response(200, json=payload))

    data = _run(lambda c: c.search("deploy", limit=3, offset=6, filter="path = '/x'"))

    assert data == payload
    body = json.loads(route.calls.last.request.content)
    assert body["limit"] == 3
    assert body["offset"] == 6
    assert body["filter"] == "path = '/x'"


@respx.mock
def test_http_error_raises_upstream_error():
    respx.post(SEARCH_URL).mock(return_value=httpx.Response(503, text="unavailable"))

    with pytest.raises(UpstreamError) as exc_info:
        _run(lambda c: c.search_docs("q"))

    assert exc_info.value.source == "search"
    assert not isinstance(exc_info.value, UpstreamTimeoutError)


@respx.mock
def test_timeout_raises_timeout_error():
    respx.post(SEARCH_URL).mock(side_effect=httpx.ReadTimeout("slow"))

    with pytest.raises(UpstreamTimeoutError):
        _run(lambda c: c.search_docs("q"))


@respx.mock
def test_get_document_with_fields():
    route = respx.get(f"{MEILI}/indexes/near-docs/documents/doc-1").mock(
        return_value=httpx.Response(200, json={"id": "doc-1", "title": "T"})
    )

    data = _run(lambda c: c.get_document("doc-1", fields=["id", "title"]))

    assert data == {"id": "doc-1", "title": "T"}
    assert route.calls.last.request.url.params["fields"] == "id,title"


@respx.mock
def test_index_introspection():
    respx.get(f"{MEILI}/indexes").mock(return_value=httpx.Response(200, json={"results": [{"uid": "near-docs"}]}))
    respx.get(f"{MEILI}/indexes/other/stats").mock(
        return_value=httpx.Response(200, json={"numberOfDocuments": 12})
    )

    assert _run(lambda c: c.list_indexes()) == {"results": [{"uid": "near-docs"}]}
    assert _run(lambda c: c.get_index_stats("other")) == {"numberOfDocuments": 12}
