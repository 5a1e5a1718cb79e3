"""
Search Executor
Runs a compiled query against Elasticsearch and normalizes the hits
"""
import asyncio
from typing import Any, Dict, List, Optional

from elasticsearch import (
    ApiError,
    AsyncElasticsearch,
    ConnectionError as ESConnectionError,
    ConnectionTimeout,
    TransportError,
)

from garden_search.models.content import ContentType, Highlight, SearchPage, SearchResult
from garden_search.models.query import CompiledQuery
from garden_search.errors import (
    EngineProtocolError,
    EngineTimeout,
    EngineUnavailable,
)
from garden_search.services.query_compiler import BODY_FIELD, SUMMARY_FIELD, TITLE_FIELD
from garden_search.utils.elasticsearch_client import response_body
from garden_search.utils.rich_text import make_excerpt
import logging

logger = logging.getLogger(__name__)


# Index highlight field -> normalized highlight key
HIGHLIGHT_KEYS = {
    TITLE_FIELD: "title",
    BODY_FIELD: "body",
    SUMMARY_FIELD: "summary",
}


def parse_total(total: Any) -> int:
    """Engine total is either an int or {"value": n, "relation": ...}"""
    if isinstance(total, dict):
        return int(total.get("value", 0))
    if total is None:
        return 0
    return int(total)


def map_highlight(raw: Optional[Dict[str, List[str]]]) -> Optional[Highlight]:
    """Map engine highlight fragments onto title/body/summary"""
    if not raw:
        return None

    fragments = {
        key: raw[field]
        for field, key in HIGHLIGHT_KEYS.items()
        if raw.get(field)
    }

    return Highlight(**fragments) if fragments else None


def map_hit(hit: Dict[str, Any], excerpt_length: int) -> SearchResult:
    """
    Convert one engine hit into a SearchResult

    Raises:
        KeyError, ValueError: If required fields are missing or invalid
    """
    source = hit["_source"]

    return SearchResult(
        id=str(source.get("id") or hit["_id"]),
        title=source.get("title", ""),
        content=make_excerpt(source.get("content"), excerpt_length),
        type=ContentType(source["type"]),
        slug=source.get("slug", ""),
        published_at=source.get("publishedAt"),
        meta_description=source.get("metaDescription"),
        image_url=source.get("imageUrl"),
        score=hit.get("_score"),
        highlight=map_highlight(hit.get("highlight")),
    )


class SearchExecutor:
    """
    Executes compiled queries against the search index.

    Every failure surfaces as EngineUnavailable, EngineTimeout or
    EngineProtocolError so the caller can fall back.
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        index_name: str,
        timeout: float = 5.0,
        excerpt_length: int = 300
    ):
        self.client = client
        self.index_name = index_name
        self.timeout = timeout
        self.excerpt_length = excerpt_length

    async def execute(self, compiled: CompiledQuery, limit: int) -> SearchPage:
        """
        Run a compiled query

        Args:
            compiled: Output of the query compiler
            limit: Maximum number of results (applied by the engine)

        Returns:
            SearchPage with normalized results and the total hit count

        Raises:
            EngineUnavailable: Connection failure or 5xx from the engine
            EngineTimeout: No answer within the timeout
            EngineProtocolError: Missing index, bad request or malformed response
        """
        body = compiled.to_search_body(limit)

        try:
            response = await asyncio.wait_for(
                self.client.search(index=self.index_name, **body),
                timeout=self.timeout
            )
        except (asyncio.TimeoutError, ConnectionTimeout) as e:
            raise EngineTimeout(f"No response within {self.timeout}s: {e}") from e
        except ESConnectionError as e:
            raise EngineUnavailable(str(e)) from e
        except ApiError as e:
            status = getattr(e, "status_code", None)
            if status is not None and status >= 500:
                raise EngineUnavailable(f"HTTP {status}: {e}") from e
            raise EngineProtocolError(f"HTTP {status}: {e}") from e
        except TransportError as e:
            raise EngineProtocolError(str(e)) from e

        return self._map_response(response_body(response))

    def _map_response(self, response: Dict[str, Any]) -> SearchPage:
        try:
            hits = response["hits"]
            results = [map_hit(hit, self.excerpt_length) for hit in hits["hits"]]
            total = parse_total(hits.get("total"))
        except (KeyError, TypeError, ValueError) as e:
            raise EngineProtocolError(f"Malformed search response: {e}") from e

        logger.debug(f"Engine returned {len(results)} of {total} hits")

        return SearchPage(results=results, total=total)
