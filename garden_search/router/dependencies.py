"""
Shared FastAPI dependencies
"""
from garden_search.config import settings
from garden_search.services.content_source import ContentSource
from garden_search.services.fallback import SearchCoordinator
from garden_search.services.lexicon import DomainLexicon, get_lexicon
from garden_search.services.search_executor import SearchExecutor
from garden_search.utils.contentful_client import get_contentful_client
from garden_search.utils.elasticsearch_client import get_elasticsearch_client


def get_garden_lexicon() -> DomainLexicon:
    return get_lexicon()


def get_content_source() -> ContentSource:
    return ContentSource(get_contentful_client(), excerpt_length=settings.excerpt_length)


def get_search_executor() -> SearchExecutor:
    return SearchExecutor(
        client=get_elasticsearch_client(),
        index_name=settings.elasticsearch_index,
        timeout=settings.search_timeout_seconds,
        excerpt_length=settings.excerpt_length
    )


def get_search_coordinator() -> SearchCoordinator:
    """Coordinator wired to the shared clients; one per request, no state kept"""
    return SearchCoordinator(
        lexicon=get_lexicon(),
        executor=get_search_executor(),
        content_source=get_content_source(),
        fallback_timeout=settings.fallback_timeout_seconds,
        default_limit=settings.default_search_limit
    )
