"""
API routers for Garden Search
"""
from .search import router as search_router
from .content import router as content_router

__all__ = [
    "search_router",
    "content_router",
]
