"""
Response models for search service API
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from enum import Enum

from garden_search.models.content import SearchResult, ContentEntry
from garden_search.models.query import ParsedQuery


class SearchSource(str, Enum):
    """Which execution path produced a response"""
    PRIMARY = "primary"
    FALLBACK = "fallback"


class SearchErrorInfo(BaseModel):
    """User-safe description of a terminal search failure"""

    code: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Message safe to show to end users")


class SearchResponse(BaseModel):
    """Response from search endpoint"""

    results: List[SearchResult] = Field(default_factory=list)
    total: int = Field(0, description="Total matches, independent of page size")
    query: str = Field("", description="Query as searched (trimmed)")
    type: str = Field("all", description="Content type filter applied")
    source: SearchSource = SearchSource.PRIMARY
    error: Optional[SearchErrorInfo] = None

    class Config:
        json_schema_extra = {
            "example": {
                "results": [
                    {
                        "id": "4hTz9",
                        "title": "Growing Cherry Tomatoes in Containers",
                        "content": "Cherry tomatoes are the easiest...",
                        "type": "article",
                        "slug": "growing-cherry-tomatoes",
                        "published_at": "2024-04-12T00:00:00.000Z",
                        "score": 42.7,
                        "highlight": {"title": ["Growing <mark>Cherry Tomatoes</mark>"]}
                    }
                ],
                "total": 1,
                "query": "cherry tomato",
                "type": "all",
                "source": "primary"
            }
        }


class QueryAnalysisResponse(BaseModel):
    """Debug view of how a query is understood and compiled"""

    query: str
    parsed: ParsedQuery
    search_body: Dict[str, Any] = Field(default_factory=dict)
    suggestions: List[str] = Field(default_factory=list)


class SuggestionsResponse(BaseModel):
    """Search suggestions for a query"""

    query: str
    suggestions: List[str] = Field(default_factory=list)


class ContentListResponse(BaseModel):
    """Paginated listing of CMS entries"""

    items: List[ContentEntry] = Field(default_factory=list)
    total: int = 0
    has_more: bool = False
