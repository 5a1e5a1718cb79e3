"""
Content Source
Reads articles and recipes from the CMS and normalizes them. Also provides the
CMS-native search used when the search engine is unavailable.
"""
import asyncio
from typing import Any, Dict, List, Optional, Tuple

from garden_search.errors import ContentSourceProtocolError
from garden_search.models.content import ContentEntry, ContentType, SearchPage, SearchResult
from garden_search.utils.contentful_client import ContentfulClient
from garden_search.utils.rich_text import extract_text, make_excerpt
import logging

logger = logging.getLogger(__name__)


# Link resolution depth per content type
INCLUDE_DEPTH = {
    ContentType.ARTICLE: 2,
    ContentType.RECIPE: 3,
}

DEFAULT_ORDER = "-fields.publishedAt"
SEARCH_ORDER = "-sys.updatedAt"


def _index_includes(includes: Optional[Dict[str, Any]]) -> Dict[Tuple[str, str], Dict[str, Any]]:
    index = {}
    for link_type, objects in (includes or {}).items():
        for obj in objects:
            obj_id = obj.get("sys", {}).get("id")
            if obj_id:
                index[(link_type, obj_id)] = obj
    return index


def resolve_link(
    link: Optional[Dict[str, Any]],
    includes: Dict[Tuple[str, str], Dict[str, Any]]
) -> Optional[Dict[str, Any]]:
    """
    Resolve a CMS link object against the response includes

    Already-resolved objects (carrying "fields") are returned unchanged.
    """
    if not link:
        return None
    if "fields" in link:
        return link

    sys = link.get("sys", {})
    return includes.get((sys.get("linkType"), sys.get("id")))


def asset_url(asset: Optional[Dict[str, Any]]) -> Optional[str]:
    """Public URL of an asset; protocol-relative URLs get https"""
    url = (asset or {}).get("fields", {}).get("file", {}).get("url")
    if not url:
        return None
    if url.startswith("//"):
        return f"https:{url}"
    return url


def normalize_entry(
    item: Dict[str, Any],
    includes: Dict[Tuple[str, str], Dict[str, Any]]
) -> ContentEntry:
    """
    Flatten a CMS entry into a ContentEntry

    Args:
        item: Entry from the entries endpoint
        includes: Indexed linked assets and entries

    Returns:
        ContentEntry

    Raises:
        ContentSourceProtocolError: If the entry is not an article or recipe
    """
    try:
        sys = item["sys"]
        content_type = ContentType(sys["contentType"]["sys"]["id"])
    except (KeyError, TypeError, ValueError) as e:
        raise ContentSourceProtocolError(f"Unexpected entry shape: {e}") from e

    fields = item.get("fields") or {}

    ingredients = []
    for link in fields.get("recipeIngredients") or []:
        ingredient = resolve_link(link, includes)
        if ingredient and ingredient.get("fields"):
            ing_fields = ingredient["fields"]
            text = f"{ing_fields.get('amount', '')} {ing_fields.get('ingredientName', '')}".strip()
            if text:
                ingredients.append(text)

    return ContentEntry(
        id=sys["id"],
        content_type=content_type,
        title=fields.get("title", ""),
        slug=fields.get("newSlug") or fields.get("slug") or "",
        published_at=fields.get("publishedAt") or sys.get("createdAt"),
        created_at=sys.get("createdAt"),
        updated_at=sys.get("updatedAt"),
        meta_description=fields.get("metaDescription"),
        image_url=asset_url(resolve_link(fields.get("listImage"), includes)),
        body_text=extract_text(fields.get("body")),
        body=fields.get("body"),
        ingredients=ingredients,
        instructions=list(fields.get("instructions") or []),
    )


def entry_to_search_result(entry: ContentEntry, excerpt_length: int) -> SearchResult:
    """Shape a CMS entry like an engine hit (no score, no highlight)"""
    return SearchResult(
        id=entry.id,
        title=entry.title,
        content=make_excerpt(entry.body_text or entry.meta_description, excerpt_length),
        type=entry.content_type,
        slug=entry.slug,
        published_at=entry.published_at,
        meta_description=entry.meta_description,
        image_url=entry.image_url,
    )


class ContentSource:
    """Articles and recipes from the CMS"""

    def __init__(self, client: ContentfulClient, excerpt_length: int = 300):
        self.client = client
        self.excerpt_length = excerpt_length

    async def _get_entries(self, params: Dict[str, Any]) -> Tuple[List[ContentEntry], int]:
        data = await self.client.get_entries(params)

        try:
            includes = _index_includes(data.get("includes"))
            entries = [normalize_entry(item, includes) for item in data["items"]]
            total = int(data.get("total", len(entries)))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ContentSourceProtocolError(f"Malformed entries response: {e}") from e

        return entries, total

    async def list_by_type(
        self,
        content_type: ContentType,
        limit: int = 10,
        skip: int = 0,
        order: str = DEFAULT_ORDER
    ) -> Tuple[List[ContentEntry], int]:
        """
        Paginated listing of one content type

        Returns:
            (entries, total) where total counts all entries of the type
        """
        return await self._get_entries({
            "content_type": content_type.value,
            "limit": limit,
            "skip": skip,
            "order": order,
            "include": INCLUDE_DEPTH[content_type],
        })

    async def get_by_identifier(
        self,
        content_type: ContentType,
        slug_or_id: str
    ) -> Optional[ContentEntry]:
        """
        Look up one entry by slug, then legacy slug, then entry id

        Returns:
            ContentEntry or None if nothing matches
        """
        for key in ("fields.slug", "fields.newSlug", "sys.id"):
            entries, _ = await self._get_entries({
                "content_type": content_type.value,
                key: slug_or_id,
                "limit": 1,
                "include": INCLUDE_DEPTH[content_type],
            })
            if entries:
                return entries[0]

        logger.info(f"No {content_type.value} found for '{slug_or_id}'")
        return None

    async def fetch_all(
        self,
        content_type: ContentType,
        page_size: int = 100
    ) -> List[ContentEntry]:
        """Fetch every entry of a type, page by page"""
        entries: List[ContentEntry] = []
        skip = 0

        while True:
            page, total = await self.list_by_type(content_type, limit=page_size, skip=skip)
            if not page:
                break

            entries.extend(page)
            logger.info(f"Fetched {len(entries)}/{total} {content_type.value} entries")

            if len(entries) >= total:
                break
            skip += page_size

        return entries

    async def _search_type(
        self,
        content_type: ContentType,
        query: str,
        limit: int
    ) -> Tuple[List[ContentEntry], int]:
        return await self._get_entries({
            "content_type": content_type.value,
            "query": query,
            "limit": limit,
            "order": SEARCH_ORDER,
            "include": INCLUDE_DEPTH[content_type],
        })

    async def search(
        self,
        query: str,
        content_type: Optional[ContentType] = None,
        limit: int = 12
    ) -> SearchPage:
        """
        CMS-native full-text search

        With no type filter each type gets half the limit; results are merged
        newest-updated first and cut to the limit.

        Args:
            query: Trimmed query text
            content_type: Restrict to one content type
            limit: Maximum number of results

        Returns:
            SearchPage with unscored results
        """
        if content_type is not None:
            types = [content_type]
            per_type = limit
        else:
            types = [ContentType.ARTICLE, ContentType.RECIPE]
            per_type = max(limit // 2, 1)

        tasks = [
            asyncio.ensure_future(self._search_type(t, query, per_type)) for t in types
        ]
        try:
            responses = await asyncio.gather(*tasks)
        except BaseException:
            # One type failed or the caller cancelled: drop the other request
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        entries: List[ContentEntry] = []
        total = 0
        for type_entries, type_total in responses:
            entries.extend(type_entries)
            total += type_total

        entries.sort(key=lambda e: e.updated_at or "", reverse=True)
        entries = entries[:limit]

        return SearchPage(
            results=[entry_to_search_result(e, self.excerpt_length) for e in entries],
            total=total
        )
