"""
Content and search result models
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from enum import Enum


class ContentType(str, Enum):
    """Content types served by the site"""
    ARTICLE = "article"
    RECIPE = "recipe"


class Highlight(BaseModel):
    """Highlighted fragments per field; absent fields had no match"""

    title: Optional[List[str]] = None
    body: Optional[List[str]] = None
    summary: Optional[List[str]] = None


class SearchResult(BaseModel):
    """Normalized search hit, identical for the primary and fallback paths"""

    id: str
    title: str
    content: str = Field("", description="Body excerpt")
    type: ContentType
    slug: str = ""
    published_at: Optional[str] = None
    meta_description: Optional[str] = None
    image_url: Optional[str] = None
    score: Optional[float] = None
    highlight: Optional[Highlight] = None


class SearchPage(BaseModel):
    """One page of results plus the total match count"""

    results: List[SearchResult] = Field(default_factory=list)
    total: int = 0


class SearchDocument(BaseModel):
    """Document stored in the search index"""

    id: str
    title: str
    content: str
    type: ContentType
    slug: str
    published_at: Optional[str] = None
    meta_description: Optional[str] = None
    image_url: Optional[str] = None

    def to_index_source(self) -> Dict[str, Any]:
        """Field names as mapped in the search index"""
        source = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "type": self.type.value,
            "slug": self.slug,
            "publishedAt": self.published_at,
        }
        if self.meta_description:
            source["metaDescription"] = self.meta_description
        if self.image_url:
            source["imageUrl"] = self.image_url
        return source


class ContentEntry(BaseModel):
    """CMS entry flattened into the fields the search service needs"""

    id: str
    content_type: ContentType
    title: str = ""
    slug: str = ""
    published_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    meta_description: Optional[str] = None
    image_url: Optional[str] = None
    body_text: str = ""
    body: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Rich text document for the rendering layer"
    )
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
