"""
Fallback Coordinator
Runs analyzer -> compiler -> executor and, when the search engine fails,
re-issues the query against the CMS-native search
"""
import asyncio
from dataclasses import dataclass
from typing import Optional, Union

from garden_search.errors import (
    ContentSourceError,
    ContentSourceTimeout,
    FallbackFailure,
    SearchEngineError,
)
from garden_search.models.content import ContentType, SearchPage
from garden_search.models.responses import SearchErrorInfo, SearchResponse, SearchSource
from garden_search.services.content_source import ContentSource
from garden_search.services.lexicon import DomainLexicon
from garden_search.services.query_analyzer import analyze_query, is_searchable
from garden_search.services.query_compiler import compile_query
from garden_search.services.search_executor import SearchExecutor
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchSuccess:
    """Results from either path, tagged with the path that produced them"""
    page: SearchPage
    source: SearchSource


@dataclass(frozen=True)
class SearchFailure:
    """Both paths failed"""
    error: FallbackFailure


SearchOutcome = Union[SearchSuccess, SearchFailure]


def _type_label(content_type: Optional[ContentType]) -> str:
    return content_type.value if content_type else "all"


class SearchCoordinator:
    """
    Per-request primary/fallback search.

    No state is carried between requests: every request tries the engine
    first, whatever happened to the previous one.
    """

    def __init__(
        self,
        lexicon: DomainLexicon,
        executor: SearchExecutor,
        content_source: ContentSource,
        fallback_timeout: float = 5.0,
        default_limit: int = 12
    ):
        self.lexicon = lexicon
        self.executor = executor
        self.content_source = content_source
        self.fallback_timeout = fallback_timeout
        self.default_limit = default_limit

    async def run(
        self,
        query: str,
        content_type: Optional[ContentType],
        limit: int
    ) -> SearchOutcome:
        """
        Run one search through the primary path and, if needed, the fallback

        Args:
            query: Trimmed query, at least two characters
            content_type: Optional content type filter
            limit: Maximum number of results

        Returns:
            SearchSuccess or SearchFailure
        """
        parsed = analyze_query(query, self.lexicon)
        compiled = compile_query(parsed, self.lexicon, content_type)

        try:
            page = await self.executor.execute(compiled, limit)
            return SearchSuccess(page=page, source=SearchSource.PRIMARY)
        except SearchEngineError as e:
            primary_error = e
            logger.warning(
                f"Primary search failed for '{query}' ({e.code}): {e}. "
                f"Falling back to content source"
            )

        try:
            page = await asyncio.wait_for(
                self.content_source.search(query, content_type, limit),
                timeout=self.fallback_timeout
            )
        except asyncio.TimeoutError:
            fallback_error = ContentSourceTimeout(f"No response within {self.fallback_timeout}s")
            return self._failure(primary_error, fallback_error)
        except ContentSourceError as e:
            return self._failure(primary_error, e)

        return SearchSuccess(page=page, source=SearchSource.FALLBACK)

    def _failure(
        self,
        primary_error: SearchEngineError,
        fallback_error: ContentSourceError
    ) -> SearchFailure:
        failure = FallbackFailure(primary_error, fallback_error)
        logger.error(f"Search unavailable: {failure}")
        return SearchFailure(error=failure)

    async def search(
        self,
        raw_query: Optional[str],
        content_type: Optional[ContentType] = None,
        limit: Optional[int] = None
    ) -> SearchResponse:
        """
        Search articles and recipes

        Queries shorter than two characters after trimming return an empty
        response without touching either backend.

        Args:
            raw_query: Query as typed by the user
            content_type: Restrict to one content type; None for all
            limit: Maximum number of results (defaults to the configured limit)

        Returns:
            SearchResponse; carries a typed error when both paths failed
        """
        type_label = _type_label(content_type)
        limit = limit or self.default_limit

        if not is_searchable(raw_query):
            return SearchResponse(results=[], total=0, query="", type=type_label)

        query = raw_query.strip()
        outcome = await self.run(query, content_type, limit)

        if isinstance(outcome, SearchFailure):
            return SearchResponse(
                results=[],
                total=0,
                query=query,
                type=type_label,
                source=SearchSource.FALLBACK,
                error=SearchErrorInfo(
                    code=outcome.error.code,
                    message=outcome.error.message
                )
            )

        logger.info(
            f"Search '{query}' (type={type_label}, limit={limit}): "
            f"{len(outcome.page.results)}/{outcome.page.total} results "
            f"from {outcome.source.value}"
        )

        return SearchResponse(
            results=outcome.page.results,
            total=outcome.page.total,
            query=query,
            type=type_label,
            source=outcome.source
        )
