"""
Core service modules for Garden Search
"""
from .lexicon import DomainLexicon, build_lexicon, get_lexicon
from .query_analyzer import analyze_query, generate_search_suggestions, is_searchable
from .query_compiler import compile_query
from .search_executor import SearchExecutor
from .content_source import ContentSource
from .fallback import SearchCoordinator, SearchSuccess, SearchFailure
from .indexer import SearchIndexer, SyncReport, transform_entry

__all__ = [
    "DomainLexicon",
    "build_lexicon",
    "get_lexicon",
    "analyze_query",
    "generate_search_suggestions",
    "is_searchable",
    "compile_query",
    "SearchExecutor",
    "ContentSource",
    "SearchCoordinator",
    "SearchSuccess",
    "SearchFailure",
    "SearchIndexer",
    "SyncReport",
    "transform_entry",
]
