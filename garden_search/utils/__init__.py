"""
Utility modules for Garden Search
"""
from .elasticsearch_client import get_elasticsearch_client, close_elasticsearch_client
from .contentful_client import ContentfulClient, get_contentful_client, close_contentful_client
from .rich_text import extract_text, make_excerpt

__all__ = [
    "get_elasticsearch_client",
    "close_elasticsearch_client",
    "ContentfulClient",
    "get_contentful_client",
    "close_contentful_client",
    "extract_text",
    "make_excerpt",
]
