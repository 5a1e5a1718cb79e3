"""
Content API Router
Article and recipe listings and lookups, served straight from the CMS
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
import logging

from garden_search.errors import ContentSourceError
from garden_search.models.content import ContentEntry, ContentType
from garden_search.models.responses import ContentListResponse
from garden_search.router.dependencies import get_content_source
from garden_search.services.content_source import ContentSource

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["content"])

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100


async def _list(
    source: ContentSource,
    content_type: ContentType,
    skip: int,
    limit: int
) -> ContentListResponse:
    try:
        entries, total = await source.list_by_type(content_type, limit=limit, skip=skip)
    except ContentSourceError as e:
        logger.error(f"Failed to fetch {content_type.value} list: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to fetch {content_type.value}s"
        )

    return ContentListResponse(
        items=entries,
        total=total,
        has_more=skip + len(entries) < total
    )


async def _get(
    source: ContentSource,
    content_type: ContentType,
    slug: str
) -> ContentEntry:
    try:
        entry = await source.get_by_identifier(content_type, slug)
    except ContentSourceError as e:
        logger.error(f"Failed to fetch {content_type.value} '{slug}': {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to fetch {content_type.value}"
        )

    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{content_type.value.capitalize()} '{slug}' not found"
        )

    return entry


@router.get("/articles", response_model=ContentListResponse)
async def list_articles(
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    source: ContentSource = Depends(get_content_source)
):
    """Articles, newest first"""
    return await _list(source, ContentType.ARTICLE, skip, limit)


@router.get("/articles/{slug}", response_model=ContentEntry)
async def get_article(
    slug: str,
    source: ContentSource = Depends(get_content_source)
):
    """Article by slug, legacy slug or entry id"""
    return await _get(source, ContentType.ARTICLE, slug)


@router.get("/recipes", response_model=ContentListResponse)
async def list_recipes(
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    source: ContentSource = Depends(get_content_source)
):
    """Recipes, newest first"""
    return await _list(source, ContentType.RECIPE, skip, limit)


@router.get("/recipes/{slug}", response_model=ContentEntry)
async def get_recipe(
    slug: str,
    source: ContentSource = Depends(get_content_source)
):
    """Recipe by slug, legacy slug or entry id"""
    return await _get(source, ContentType.RECIPE, slug)
