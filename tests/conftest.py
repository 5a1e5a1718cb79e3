"""
PyTest Configuration and Fixtures for Garden Search Tests

Provides:
- Required environment variables (set before the app is imported)
- The default garden lexicon
- Fake CMS entries and search engine hits
- Async test client using httpx.AsyncClient (in-memory, no server required)

Usage:
    pytest tests/ -v
"""
import os

os.environ.setdefault("CONTENTFUL_SPACE_ID", "test-space")
os.environ.setdefault("CONTENTFUL_ACCESS_TOKEN", "test-token")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, AsyncGenerator, Dict, Optional

import httpx
import pytest
import pytest_asyncio

from garden_search.services.lexicon import DomainLexicon, get_lexicon


# ============================================================================
# Lexicon
# ============================================================================

@pytest.fixture
def lexicon() -> DomainLexicon:
    """Default garden vocabulary"""
    return get_lexicon()


# ============================================================================
# CMS Data
# ============================================================================

def make_cms_entry(
    entry_id: str,
    content_type: str = "article",
    title: str = "Growing Tomatoes",
    slug: Optional[str] = "growing-tomatoes",
    updated_at: str = "2024-05-01T00:00:00.000Z",
    body_text: str = "Tomatoes love sun.",
    **fields: Any
) -> Dict[str, Any]:
    """Entry as returned by the Content Delivery API entries endpoint"""
    entry_fields = {
        "title": title,
        "publishedAt": "2024-04-01T00:00:00.000Z",
        "body": {
            "nodeType": "document",
            "content": [
                {
                    "nodeType": "paragraph",
                    "content": [{"nodeType": "text", "value": body_text}]
                }
            ]
        },
    }
    if slug is not None:
        entry_fields["slug"] = slug
    entry_fields.update(fields)

    return {
        "sys": {
            "id": entry_id,
            "createdAt": "2024-03-01T00:00:00.000Z",
            "updatedAt": updated_at,
            "contentType": {"sys": {"type": "Link", "linkType": "ContentType", "id": content_type}},
        },
        "fields": entry_fields,
    }


def make_hit(
    doc_id: str,
    title: str = "Growing Tomatoes",
    content_type: str = "article",
    score: float = 12.5,
    highlight: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Search engine hit"""
    hit = {
        "_id": doc_id,
        "_score": score,
        "_source": {
            "id": doc_id,
            "title": title,
            "content": "Tomatoes love sun and warm soil.",
            "type": content_type,
            "slug": title.lower().replace(" ", "-"),
            "publishedAt": "2024-04-01T00:00:00.000Z",
            "metaDescription": "A guide to tomatoes",
        },
    }
    if highlight is not None:
        hit["highlight"] = highlight
    return hit


@pytest.fixture
def cms_entry_factory():
    return make_cms_entry


@pytest.fixture
def hit_factory():
    return make_hit


# ============================================================================
# HTTP Client Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Async HTTP client that tests the FastAPI app in-memory.

    Dependency overrides set on the app are cleared afterwards.
    """
    from garden_search.main import app

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
