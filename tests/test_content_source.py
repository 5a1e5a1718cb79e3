"""
Tests for the CMS content source and client
"""
import asyncio
import httpx
import pytest

from garden_search.errors import (
    ContentSourceProtocolError,
    ContentSourceTimeout,
    ContentSourceUnavailable,
)
from garden_search.models.content import ContentType
from garden_search.services.content_source import (
    ContentSource,
    asset_url,
    normalize_entry,
)
from garden_search.utils.contentful_client import ContentfulClient


def _source(handler, excerpt_length=300):
    client = ContentfulClient(
        space_id="space",
        access_token="token",
        transport=httpx.MockTransport(handler)
    )
    return ContentSource(client, excerpt_length=excerpt_length)


def _entries(items, total=None, includes=None):
    body = {"items": items, "total": len(items) if total is None else total}
    if includes:
        body["includes"] = includes
    return body


@pytest.mark.asyncio
async def test_list_by_type_params(cms_entry_factory):
    """Listings are ordered newest first with links resolved"""
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=_entries([cms_entry_factory("a1")], total=30))

    entries, total = await _source(handler).list_by_type(ContentType.ARTICLE, limit=12, skip=24)

    assert total == 30
    assert entries[0].id == "a1"

    request = seen[0]
    assert request.url.path == "/spaces/space/environments/master/entries"
    assert request.headers["Authorization"] == "Bearer token"
    assert request.url.params["content_type"] == "article"
    assert request.url.params["order"] == "-fields.publishedAt"
    assert request.url.params["skip"] == "24"
    assert request.url.params["include"] == "2"


@pytest.mark.asyncio
async def test_get_by_identifier_falls_back_to_new_slug_then_id(cms_entry_factory):
    """Lookup tries slug, legacy slug and entry id in turn"""
    lookups = []

    def handler(request):
        params = dict(request.url.params)
        lookups.append(params)
        if "sys.id" in params:
            return httpx.Response(200, json=_entries([cms_entry_factory("r9", content_type="recipe")]))
        return httpx.Response(200, json=_entries([]))

    entry = await _source(handler).get_by_identifier(ContentType.RECIPE, "r9")

    assert entry.id == "r9"
    assert entry.content_type == ContentType.RECIPE
    assert [
        next(key for key in ("fields.slug", "fields.newSlug", "sys.id") if key in p)
        for p in lookups
    ] == ["fields.slug", "fields.newSlug", "sys.id"]
    assert lookups[0]["include"] == "3"


@pytest.mark.asyncio
async def test_get_by_identifier_not_found():
    """Test missing entry"""
    source = _source(lambda request: httpx.Response(200, json=_entries([])))

    assert await source.get_by_identifier(ContentType.ARTICLE, "nope") is None


@pytest.mark.asyncio
async def test_fetch_all_pages(cms_entry_factory):
    """All pages are fetched until the total is reached"""
    def handler(request):
        skip = int(request.url.params["skip"])
        ids = [f"a{skip + i}" for i in range(2)] if skip < 4 else [f"a{skip}"]
        return httpx.Response(200, json=_entries([cms_entry_factory(i) for i in ids], total=5))

    entries = await _source(handler).fetch_all(ContentType.ARTICLE, page_size=2)

    assert [e.id for e in entries] == ["a0", "a1", "a2", "a3", "a4"]


@pytest.mark.asyncio
async def test_search_all_types_splits_limit(cms_entry_factory):
    """Each type gets half the limit; results merge newest-updated first"""
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.params["content_type"] == "article":
            items = [
                cms_entry_factory("a1", updated_at="2024-01-01T00:00:00.000Z"),
                cms_entry_factory("a2", updated_at="2024-03-01T00:00:00.000Z"),
            ]
            return httpx.Response(200, json=_entries(items, total=9))

        items = [
            cms_entry_factory("r1", content_type="recipe", updated_at="2024-02-01T00:00:00.000Z"),
            cms_entry_factory("r2", content_type="recipe", updated_at="2024-04-01T00:00:00.000Z"),
        ]
        return httpx.Response(200, json=_entries(items, total=4))

    page = await _source(handler).search("tomato", None, 3)

    assert {r.url.params["limit"] for r in requests} == {"1"}
    assert {r.url.params["query"] for r in requests} == {"tomato"}
    assert {r.url.params["order"] for r in requests} == {"-sys.updatedAt"}

    assert [r.id for r in page.results] == ["r2", "a2", "r1"]
    assert page.total == 13
    assert all(r.score is None and r.highlight is None for r in page.results)


@pytest.mark.asyncio
async def test_search_minimum_one_per_type(cms_entry_factory):
    """A limit of one still queries both types"""
    limits = []

    def handler(request):
        limits.append(request.url.params["limit"])
        return httpx.Response(200, json=_entries([]))

    await _source(handler).search("tomato", None, 1)

    assert limits == ["1", "1"]


@pytest.mark.asyncio
async def test_search_single_type_uses_full_limit(cms_entry_factory):
    """Test single type search"""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=_entries([cms_entry_factory("r1", content_type="recipe")]))

    page = await _source(handler).search("soup", ContentType.RECIPE, 12)

    assert len(requests) == 1
    assert requests[0].url.params["content_type"] == "recipe"
    assert requests[0].url.params["limit"] == "12"
    assert page.results[0].type == ContentType.RECIPE


@pytest.mark.asyncio
async def test_search_results_match_engine_shape(cms_entry_factory):
    """Fallback results carry an excerpt of the body"""
    def handler(request):
        return httpx.Response(200, json=_entries([
            cms_entry_factory("a1", body_text="word " * 100)
        ]))

    page = await _source(handler, excerpt_length=40).search("word", ContentType.ARTICLE, 5)

    result = page.results[0]
    assert result.title == "Growing Tomatoes"
    assert result.slug == "growing-tomatoes"
    assert result.content.endswith("…")
    assert len(result.content) <= 41


@pytest.mark.asyncio
async def test_server_error_is_unavailable():
    """5xx from the CMS means it is unavailable"""
    source = _source(lambda request: httpx.Response(503))

    with pytest.raises(ContentSourceUnavailable):
        await source.search("tomato", ContentType.ARTICLE, 5)


@pytest.mark.asyncio
async def test_rate_limit_is_unavailable():
    """Test 429 handling"""
    source = _source(lambda request: httpx.Response(429))

    with pytest.raises(ContentSourceUnavailable):
        await source.list_by_type(ContentType.ARTICLE)


@pytest.mark.asyncio
async def test_client_error_is_protocol_error():
    """Test 4xx handling"""
    source = _source(lambda request: httpx.Response(401))

    with pytest.raises(ContentSourceProtocolError):
        await source.list_by_type(ContentType.ARTICLE)


@pytest.mark.asyncio
async def test_invalid_json_is_protocol_error():
    """Test malformed response"""
    source = _source(lambda request: httpx.Response(200, content=b"<html>"))

    with pytest.raises(ContentSourceProtocolError):
        await source.list_by_type(ContentType.ARTICLE)


@pytest.mark.asyncio
async def test_missing_items_is_protocol_error():
    """Test response without items"""
    source = _source(lambda request: httpx.Response(200, json={"total": 0}))

    with pytest.raises(ContentSourceProtocolError):
        await source.list_by_type(ContentType.ARTICLE)


@pytest.mark.asyncio
async def test_connect_error_is_unavailable():
    """Test network failure"""
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ContentSourceUnavailable):
        await _source(handler).list_by_type(ContentType.ARTICLE)


@pytest.mark.asyncio
async def test_read_timeout_is_timeout():
    """Test request timeout"""
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ContentSourceTimeout):
        await _source(handler).list_by_type(ContentType.ARTICLE)


def test_normalize_entry_resolves_links(cms_entry_factory):
    """Images and ingredients are resolved from the includes"""
    item = cms_entry_factory(
        "r1",
        content_type="recipe",
        slug="old-soup",
        newSlug="tomato-soup",
        metaDescription="Summer soup",
        listImage={"sys": {"type": "Link", "linkType": "Asset", "id": "img1"}},
        recipeIngredients=[
            {"sys": {"type": "Link", "linkType": "Entry", "id": "ing1"}},
            {"sys": {"type": "Link", "linkType": "Entry", "id": "ing2"}},
            {"sys": {"type": "Link", "linkType": "Entry", "id": "missing"}},
        ],
        instructions=["Chop", "Simmer"],
    )
    includes = {
        ("Asset", "img1"): {"sys": {"id": "img1"}, "fields": {"file": {"url": "//images.example.com/soup.jpg"}}},
        ("Entry", "ing1"): {"sys": {"id": "ing1"}, "fields": {"amount": "2 lb", "ingredientName": "tomatoes"}},
        ("Entry", "ing2"): {"sys": {"id": "ing2"}, "fields": {"ingredientName": "salt"}},
    }

    entry = normalize_entry(item, includes)

    assert entry.slug == "tomato-soup"
    assert entry.image_url == "https://images.example.com/soup.jpg"
    assert entry.ingredients == ["2 lb tomatoes", "salt"]
    assert entry.instructions == ["Chop", "Simmer"]
    assert entry.body_text == "Tomatoes love sun."
    assert entry.meta_description == "Summer soup"


def test_normalize_entry_published_defaults_to_created(cms_entry_factory):
    """Entries without publishedAt use their creation time"""
    item = cms_entry_factory("a1")
    del item["fields"]["publishedAt"]

    entry = normalize_entry(item, {})

    assert entry.published_at == "2024-03-01T00:00:00.000Z"


def test_normalize_entry_unknown_type(cms_entry_factory):
    """Only articles and recipes are accepted"""
    with pytest.raises(ContentSourceProtocolError):
        normalize_entry(cms_entry_factory("p1", content_type="product"), {})


def test_asset_url():
    """Protocol-relative URLs get https"""
    assert asset_url({"fields": {"file": {"url": "//a.example.com/x.png"}}}) == "https://a.example.com/x.png"
    assert asset_url({"fields": {"file": {"url": "https://a.example.com/x.png"}}}) == "https://a.example.com/x.png"
    assert asset_url(None) is None
    assert asset_url({"fields": {}}) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"items": [], "total": "n/a"},
    {"items": None, "total": 0},
    {"items": [None], "total": 1},
    {"items": [{"sys": {"contentType": {"sys": {"id": "article"}}}, "fields": {}}], "total": 1},
    {"items": [{"sys": {"id": "a1", "contentType": {"sys": {"id": "article"}}}, "fields": {"title": 7}}]},
    {"items": [], "includes": {"Asset": None}},
])
async def test_malformed_entries_are_protocol_errors(body):
    """Unexpected shapes inside a 200 response are protocol errors"""
    source = _source(lambda request: httpx.Response(200, json=body))

    with pytest.raises(ContentSourceProtocolError):
        await source.list_by_type(ContentType.ARTICLE)


@pytest.mark.asyncio
async def test_null_fields_are_empty(cms_entry_factory):
    """Entries with no fields normalize to blank content"""
    item = cms_entry_factory("a1")
    item["fields"] = None
    source = _source(lambda request: httpx.Response(200, json=_entries([item])))

    entries, total = await source.list_by_type(ContentType.ARTICLE)

    assert total == 1
    assert entries[0].id == "a1"
    assert entries[0].title == ""
    assert entries[0].body_text == ""


@pytest.mark.asyncio
async def test_search_failure_cancels_other_type():
    """When one type fails the request for the other type is abandoned"""
    started = asyncio.Event()
    cancelled = asyncio.Event()

    async def handler(request):
        if request.url.params["content_type"] == "recipe":
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return httpx.Response(200, json=_entries([]))

        await started.wait()
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ContentSourceUnavailable):
        await asyncio.wait_for(_source(handler).search("tomato", None, 12), timeout=2)

    assert cancelled.is_set()
