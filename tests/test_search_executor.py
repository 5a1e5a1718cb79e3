"""
Tests for the search executor
"""
import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from elasticsearch import ApiError, ConnectionError as ESConnectionError, ConnectionTimeout

from garden_search.errors import EngineProtocolError, EngineTimeout, EngineUnavailable
from garden_search.models.content import ContentType
from garden_search.services.query_analyzer import analyze_query
from garden_search.services.query_compiler import compile_query
from garden_search.services.search_executor import (
    SearchExecutor,
    map_highlight,
    parse_total,
)


@pytest.fixture
def compiled(lexicon):
    return compile_query(analyze_query("tomato", lexicon), lexicon)


def _executor(client, timeout=5.0, excerpt_length=300):
    return SearchExecutor(client, "garden-content", timeout=timeout, excerpt_length=excerpt_length)


def _client(response=None, side_effect=None):
    client = MagicMock()
    client.search = AsyncMock(return_value=response, side_effect=side_effect)
    return client


@pytest.mark.asyncio
async def test_execute_maps_hits(compiled, hit_factory):
    """Hits are mapped onto search results with score and highlight"""
    client = _client({
        "hits": {
            "total": {"value": 42, "relation": "eq"},
            "hits": [
                hit_factory("a1", highlight={"title": ["Growing <mark>Tomatoes</mark>"]}),
                hit_factory("r1", title="Tomato Soup", content_type="recipe", score=3.0),
            ]
        }
    })

    page = await _executor(client).execute(compiled, 12)

    assert page.total == 42
    assert [r.id for r in page.results] == ["a1", "r1"]

    first = page.results[0]
    assert first.type == ContentType.ARTICLE
    assert first.score == 12.5
    assert first.slug == "growing-tomatoes"
    assert first.meta_description == "A guide to tomatoes"
    assert first.highlight.title == ["Growing <mark>Tomatoes</mark>"]
    assert first.highlight.body is None

    assert page.results[1].type == ContentType.RECIPE
    assert page.results[1].highlight is None


@pytest.mark.asyncio
async def test_execute_sends_limit_to_engine(compiled):
    """The limit is applied server-side"""
    client = _client({"hits": {"total": 0, "hits": []}})

    await _executor(client).execute(compiled, 5)

    kwargs = client.search.call_args.kwargs
    assert kwargs["index"] == "garden-content"
    assert kwargs["size"] == 5
    assert kwargs["query"] == compiled.query
    assert kwargs["track_total_hits"] is True


@pytest.mark.asyncio
async def test_execute_total_independent_of_page(compiled, hit_factory):
    """Total counts all matches, not just the returned page"""
    client = _client({"hits": {"total": 250, "hits": [hit_factory("a1")]}})

    page = await _executor(client).execute(compiled, 1)

    assert len(page.results) == 1
    assert page.total == 250


@pytest.mark.asyncio
async def test_execute_truncates_content(compiled, hit_factory):
    """Body text is cut to an excerpt"""
    hit = hit_factory("a1")
    hit["_source"]["content"] = "word " * 200
    client = _client({"hits": {"total": 1, "hits": [hit]}})

    page = await _executor(client, excerpt_length=50).execute(compiled, 12)

    assert len(page.results[0].content) <= 51
    assert page.results[0].content.endswith("…")


@pytest.mark.asyncio
async def test_connection_error_is_unavailable(compiled):
    """Refused connections surface as EngineUnavailable"""
    client = _client(side_effect=ESConnectionError("connection refused"))

    with pytest.raises(EngineUnavailable):
        await _executor(client).execute(compiled, 12)


@pytest.mark.asyncio
async def test_client_timeout_is_timeout(compiled):
    """Client-side timeouts surface as EngineTimeout"""
    client = _client(side_effect=ConnectionTimeout("timed out"))

    with pytest.raises(EngineTimeout):
        await _executor(client).execute(compiled, 12)


@pytest.mark.asyncio
async def test_slow_engine_is_timeout(compiled):
    """The executor enforces its own deadline"""
    async def slow_search(**kwargs):
        await asyncio.sleep(1)
        return {"hits": {"total": 0, "hits": []}}

    client = MagicMock()
    client.search = slow_search

    with pytest.raises(EngineTimeout):
        await _executor(client, timeout=0.01).execute(compiled, 12)


@pytest.mark.asyncio
async def test_server_error_is_unavailable(compiled):
    """5xx responses mean the engine is unavailable"""
    error = ApiError("cluster unavailable", meta=MagicMock(status=503), body={})
    client = _client(side_effect=error)

    with pytest.raises(EngineUnavailable):
        await _executor(client).execute(compiled, 12)


@pytest.mark.asyncio
async def test_missing_index_is_protocol_error(compiled):
    """4xx responses are protocol errors"""
    error = ApiError("index_not_found_exception", meta=MagicMock(status=404), body={})
    client = _client(side_effect=error)

    with pytest.raises(EngineProtocolError):
        await _executor(client).execute(compiled, 12)


@pytest.mark.asyncio
async def test_malformed_response_is_protocol_error(compiled):
    """Responses without hits are rejected"""
    client = _client({"took": 3})

    with pytest.raises(EngineProtocolError):
        await _executor(client).execute(compiled, 12)


@pytest.mark.asyncio
async def test_unknown_content_type_is_protocol_error(compiled, hit_factory):
    """Hits of an unknown type are rejected"""
    client = _client({"hits": {"total": 1, "hits": [hit_factory("p1", content_type="product")]}})

    with pytest.raises(EngineProtocolError):
        await _executor(client).execute(compiled, 12)


def test_parse_total():
    """Test both total formats"""
    assert parse_total(7) == 7
    assert parse_total({"value": 10000, "relation": "gte"}) == 10000
    assert parse_total(None) == 0


def test_map_highlight_renames_fields():
    """Index field names map onto title/body/summary"""
    highlight = map_highlight({
        "content": ["<mark>tomato</mark> seedlings"],
        "metaDescription": ["All about <mark>tomato</mark>"],
    })

    assert highlight.title is None
    assert highlight.body == ["<mark>tomato</mark> seedlings"]
    assert highlight.summary == ["All about <mark>tomato</mark>"]


def test_map_highlight_empty():
    """No highlight fields means no highlight"""
    assert map_highlight(None) is None
    assert map_highlight({}) is None
