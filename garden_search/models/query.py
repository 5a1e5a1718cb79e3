"""
Query models for the relevance pipeline
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Tuple
from enum import Enum

from garden_search.models.content import ContentType


class QueryType(str, Enum):
    """Overall intent category of a query"""
    SUBJECT_FOCUSED = "subject-focused"
    ACTION_FOCUSED = "action-focused"
    GENERAL = "general"


class ParsedQuery(BaseModel):
    """Classification of a raw query into subject, action and residual terms"""

    subject_terms: Tuple[str, ...] = Field(default_factory=tuple)
    action_terms: Tuple[str, ...] = Field(default_factory=tuple)
    other_terms: Tuple[str, ...] = Field(default_factory=tuple)
    original_query: str = Field(..., description="Query exactly as received")
    primary_subject: Optional[str] = Field(None, description="First subject term")
    query_type: QueryType = QueryType.GENERAL

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "subject_terms": ["cherry tomato"],
                "action_terms": ["grow"],
                "other_terms": [],
                "original_query": "grow cherry tomato",
                "primary_subject": "cherry tomato",
                "query_type": "subject-focused"
            }
        }

    @property
    def has_subjects(self) -> bool:
        return bool(self.subject_terms)


class CompiledQuery(BaseModel):
    """Weighted boolean search request ready for the search engine"""

    query: Dict[str, Any] = Field(..., description="Elasticsearch bool query")
    highlight: Dict[str, Any] = Field(default_factory=dict)
    sort: List[Any] = Field(default_factory=list)
    content_type: Optional[ContentType] = None
    minimum_should_match: int = 1

    class Config:
        frozen = True

    @property
    def clauses(self) -> List[Dict[str, Any]]:
        return self.query["bool"]["should"]

    def to_search_body(self, limit: int) -> Dict[str, Any]:
        """Build the request body with the result limit applied server-side"""
        return {
            "size": limit,
            "query": self.query,
            "highlight": self.highlight,
            "sort": self.sort,
            "track_total_hits": True,
        }
