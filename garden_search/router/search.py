"""
Search API Router
Handles all search-related endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from typing import Optional
import time
import logging

from garden_search.config import settings
from garden_search.models.content import ContentType
from garden_search.models.requests import SearchRequest
from garden_search.models.responses import (
    QueryAnalysisResponse,
    SearchResponse,
    SuggestionsResponse,
)
from garden_search.router.dependencies import get_garden_lexicon, get_search_coordinator
from garden_search.services.fallback import SearchCoordinator
from garden_search.services.lexicon import DomainLexicon
from garden_search.services.query_analyzer import (
    analyze_query,
    generate_search_suggestions,
    is_searchable,
)
from garden_search.services.query_compiler import compile_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["search"])


def parse_content_type(value: Optional[str]) -> Optional[ContentType]:
    """
    Map the `type` parameter onto a content type filter

    "all" (or nothing) means no filter.

    Raises:
        HTTPException: 422 for unknown types
    """
    if value is None or value.lower() == "all":
        return None

    try:
        return ContentType(value.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown content type '{value}'. Use 'article', 'recipe' or 'all'"
        )


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.default_search_limit
    return min(limit, settings.max_search_limit)


async def _run_search(
    coordinator: SearchCoordinator,
    query: Optional[str],
    content_type: Optional[ContentType],
    limit: Optional[int],
    response: Response
) -> SearchResponse:
    start_time = time.time()

    result = await coordinator.search(query, content_type, clamp_limit(limit))

    if result.error is not None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    latency_ms = int((time.time() - start_time) * 1000)
    logger.info(
        f"Search completed in {latency_ms}ms: '{result.query}' "
        f"{len(result.results)} results, source={result.source.value}"
    )

    return result


@router.get("/search", response_model=SearchResponse)
async def search(
    response: Response,
    q: Optional[str] = Query(None, description="Search query"),
    type: Optional[str] = Query("all", description="article, recipe or all"),
    limit: Optional[int] = Query(None, ge=1, description="Number of results"),
    coordinator: SearchCoordinator = Depends(get_search_coordinator)
):
    """
    Search articles and recipes

    Runs the query through the garden query analyzer and the weighted
    Elasticsearch query; falls back to the CMS search when the engine is
    unavailable. Responds 503 with an error payload when both fail.
    """
    return await _run_search(coordinator, q, parse_content_type(type), limit, response)


@router.post("/search", response_model=SearchResponse)
async def search_post(
    request: SearchRequest,
    response: Response,
    coordinator: SearchCoordinator = Depends(get_search_coordinator)
):
    """Search with a JSON body"""
    return await _run_search(coordinator, request.query, request.type, request.limit, response)


@router.get("/search/analyze", response_model=QueryAnalysisResponse)
async def analyze(
    q: str = Query(..., description="Query to analyze"),
    type: Optional[str] = Query("all", description="article, recipe or all"),
    lexicon: DomainLexicon = Depends(get_garden_lexicon)
):
    """
    Debug endpoint for query analysis

    Shows how a query is classified, the search body it compiles to and the
    suggestions it produces.
    """
    if not is_searchable(q):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Query must be at least 2 characters"
        )

    query = q.strip()
    parsed = analyze_query(query, lexicon)
    compiled = compile_query(parsed, lexicon, parse_content_type(type))

    return QueryAnalysisResponse(
        query=query,
        parsed=parsed,
        search_body=compiled.to_search_body(settings.default_search_limit),
        suggestions=generate_search_suggestions(
            parsed,
            lexicon,
            fuzzy_threshold=settings.suggestion_fuzzy_threshold
        )
    )


@router.get("/search/suggestions", response_model=SuggestionsResponse)
async def suggestions(
    q: Optional[str] = Query(None, description="Partial query"),
    lexicon: DomainLexicon = Depends(get_garden_lexicon)
):
    """Follow-up search suggestions for the current query"""
    if not is_searchable(q):
        return SuggestionsResponse(query="", suggestions=[])

    query = q.strip()
    parsed = analyze_query(query, lexicon)

    return SuggestionsResponse(
        query=query,
        suggestions=generate_search_suggestions(
            parsed,
            lexicon,
            fuzzy_threshold=settings.suggestion_fuzzy_threshold
        )
    )
