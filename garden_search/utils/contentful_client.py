"""
Contentful Content Delivery API client for Garden Search
"""
import httpx
from functools import lru_cache
from typing import Any, Dict, Optional
from garden_search.config import settings
from garden_search.errors import (
    ContentSourceProtocolError,
    ContentSourceTimeout,
    ContentSourceUnavailable,
)
import logging

logger = logging.getLogger(__name__)


class ContentfulClient:
    """Thin async wrapper over the Content Delivery API entries endpoint"""

    def __init__(
        self,
        space_id: str,
        access_token: str,
        environment: str = "master",
        base_url: str = "https://cdn.contentful.com",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.space_id = space_id
        self.environment = environment
        self._http = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/spaces/{space_id}/environments/{environment}",
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport
        )

    async def get_entries(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Fetch entries

        Args:
            params: Query parameters (content_type, query, limit, skip, order, ...)

        Returns:
            Decoded response with "items", "total" and optional "includes"

        Raises:
            ContentSourceTimeout: Request timed out
            ContentSourceUnavailable: Network failure, 5xx or rate limit
            ContentSourceProtocolError: Other HTTP errors or invalid JSON
        """
        try:
            response = await self._http.get("/entries", params=params)
            response.raise_for_status()
            data = response.json()

        except httpx.TimeoutException as e:
            logger.error(f"Contentful request timed out: {e}")
            raise ContentSourceTimeout(str(e)) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Contentful returned HTTP {status}")
            if status >= 500 or status == 429:
                raise ContentSourceUnavailable(f"HTTP {status}") from e
            raise ContentSourceProtocolError(f"HTTP {status}") from e
        except httpx.TransportError as e:
            logger.error(f"Contentful connection failed: {e}")
            raise ContentSourceUnavailable(str(e)) from e
        except ValueError as e:
            raise ContentSourceProtocolError(f"Invalid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise ContentSourceProtocolError("Response has no items list")

        return data

    async def aclose(self) -> None:
        await self._http.aclose()


@lru_cache()
def get_contentful_client() -> ContentfulClient:
    """
    Get Contentful client instance (cached)

    Returns:
        ContentfulClient instance
    """
    client = ContentfulClient(
        space_id=settings.contentful_space_id,
        access_token=settings.contentful_access_token,
        environment=settings.contentful_environment,
        base_url=settings.contentful_base_url,
        timeout=settings.fallback_timeout_seconds
    )
    logger.info(f"Contentful client created (environment={settings.contentful_environment})")
    return client


async def close_contentful_client() -> None:
    """Close the cached client if one was created"""
    if get_contentful_client.cache_info().currsize:
        await get_contentful_client().aclose()
        get_contentful_client.cache_clear()
        logger.info("Contentful client closed")
