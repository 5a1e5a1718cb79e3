"""
Request models for search service API
"""
from pydantic import BaseModel, Field
from typing import Optional

from garden_search.models.content import ContentType


class SearchRequest(BaseModel):
    """Request model for search endpoint"""

    query: str = Field(default="", description="Search query text")
    type: Optional[ContentType] = Field(
        default=None,
        description="Restrict results to one content type; omit for all"
    )
    limit: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of results to return"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "query": "how to grow cherry tomatoes",
                "type": "article",
                "limit": 12
            }
        }
