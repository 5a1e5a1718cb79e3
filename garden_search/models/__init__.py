"""
Data models for Garden Search Service
"""
from .content import (
    ContentType,
    ContentEntry,
    Highlight,
    SearchDocument,
    SearchPage,
    SearchResult
)
from .query import QueryType, ParsedQuery, CompiledQuery
from .requests import SearchRequest
from .responses import (
    SearchResponse,
    SearchSource,
    SearchErrorInfo,
    QueryAnalysisResponse,
    SuggestionsResponse,
    ContentListResponse
)

__all__ = [
    # Content
    "ContentType",
    "ContentEntry",
    "Highlight",
    "SearchDocument",
    "SearchPage",
    "SearchResult",
    # Query pipeline
    "QueryType",
    "ParsedQuery",
    "CompiledQuery",
    # Request/Response
    "SearchRequest",
    "SearchResponse",
    "SearchSource",
    "SearchErrorInfo",
    "QueryAnalysisResponse",
    "SuggestionsResponse",
    "ContentListResponse",
]
