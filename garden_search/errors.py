"""
Error taxonomy for the search and content paths
"""


class SearchServiceError(Exception):
    """Base exception for search service errors"""
    code = "search_error"
    message = "Search failed"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(detail or self.message)


class SearchEngineError(SearchServiceError):
    """Primary search engine failed"""
    code = "engine_error"


class EngineUnavailable(SearchEngineError):
    """Connection, DNS or handshake failure"""
    code = "engine_unavailable"
    message = "Search engine is unavailable"


class EngineTimeout(SearchEngineError):
    """Engine did not answer within the deadline"""
    code = "engine_timeout"
    message = "Search engine timed out"


class EngineProtocolError(SearchEngineError):
    """Malformed response, missing index or mapping mismatch"""
    code = "engine_protocol_error"
    message = "Search engine returned an invalid response"


class ContentSourceError(SearchServiceError):
    """CMS request failed"""
    code = "content_source_error"
    message = "Content source request failed"


class ContentSourceUnavailable(ContentSourceError):
    code = "content_source_unavailable"
    message = "Content source is unavailable"


class ContentSourceTimeout(ContentSourceError):
    code = "content_source_timeout"
    message = "Content source timed out"


class ContentSourceProtocolError(ContentSourceError):
    code = "content_source_protocol_error"
    message = "Content source returned an invalid response"


class FallbackFailure(SearchServiceError):
    """Both the primary engine and the CMS fallback failed"""
    code = "search_unavailable"
    message = "Search is temporarily unavailable. Please try again shortly."

    def __init__(self, primary_error: SearchEngineError, fallback_error: ContentSourceError):
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(
            f"primary={primary_error.code}: {primary_error}; "
            f"fallback={fallback_error.code}: {fallback_error}"
        )
