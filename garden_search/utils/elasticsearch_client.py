"""
Elasticsearch client wrapper for Garden Search
"""
from elasticsearch import AsyncElasticsearch
from functools import lru_cache
from typing import Any, Dict, List
from garden_search.config import settings
import logging

logger = logging.getLogger(__name__)


# Field mappings for the content index
INDEX_MAPPINGS: Dict[str, Any] = {
    "properties": {
        "id": {"type": "keyword"},
        "title": {"type": "text", "analyzer": "standard"},
        "content": {"type": "text", "analyzer": "standard"},
        "type": {"type": "keyword"},
        "slug": {"type": "keyword"},
        "publishedAt": {"type": "date"},
        "metaDescription": {"type": "text", "analyzer": "standard"},
        "imageUrl": {"type": "keyword"},
    }
}


def response_body(response: Any) -> Dict[str, Any]:
    """Plain dict body of a client response (ObjectApiResponse or dict)"""
    return getattr(response, "body", response)


@lru_cache()
def get_elasticsearch_client() -> AsyncElasticsearch:
    """
    Get Elasticsearch client instance (cached)

    Returns:
        AsyncElasticsearch instance
    """
    try:
        client = AsyncElasticsearch(
            settings.elasticsearch_url,
            api_key=settings.elasticsearch_api_key or None,
            request_timeout=settings.search_timeout_seconds,
        )
        logger.info(f"Elasticsearch client created for {settings.elasticsearch_url}")
        return client
    except Exception as e:
        logger.error(f"Failed to create Elasticsearch client: {e}")
        raise


async def close_elasticsearch_client() -> None:
    """Close the cached client if one was created"""
    if get_elasticsearch_client.cache_info().currsize:
        await get_elasticsearch_client().close()
        get_elasticsearch_client.cache_clear()
        logger.info("Elasticsearch client closed")


async def ping(client: AsyncElasticsearch) -> bool:
    """
    Test Elasticsearch connection

    Returns:
        True if the cluster answered
    """
    try:
        return bool(await client.ping())
    except Exception as e:
        logger.error(f"Elasticsearch ping failed: {e}")
        return False


async def index_exists(client: AsyncElasticsearch, index: str) -> bool:
    return bool(await client.indices.exists(index=index))


async def create_index(
    client: AsyncElasticsearch,
    index: str,
    mappings: Dict[str, Any] = INDEX_MAPPINGS
) -> bool:
    """
    Create index with mappings if it doesn't exist

    Returns:
        True if the index was created, False if it already existed
    """
    if await index_exists(client, index):
        logger.info(f"Index {index} already exists")
        return False

    await client.indices.create(index=index, mappings=mappings)
    logger.info(f"Created Elasticsearch index: {index}")
    return True


async def delete_all(client: AsyncElasticsearch, index: str) -> int:
    """
    Delete all documents from the index

    Returns:
        Number of deleted documents
    """
    response = await client.delete_by_query(
        index=index,
        query={"match_all": {}},
        refresh=True
    )
    deleted = response_body(response).get("deleted", 0)
    logger.info(f"Cleared {deleted} documents from index: {index}")
    return deleted


async def bulk_index(
    client: AsyncElasticsearch,
    index: str,
    documents: List[Dict[str, Any]]
) -> int:
    """
    Index multiple documents using the bulk API

    Args:
        client: Elasticsearch client
        index: Target index
        documents: Index sources, each with an "id" field

    Returns:
        Number of documents indexed

    Raises:
        RuntimeError: If any document failed to index
    """
    if not documents:
        return 0

    operations: List[Dict[str, Any]] = []
    for doc in documents:
        operations.append({"index": {"_index": index, "_id": doc["id"]}})
        operations.append(doc)

    response = await client.bulk(operations=operations, refresh="wait_for")

    body = response_body(response)
    if body.get("errors"):
        failed = [
            item["index"]["error"]
            for item in body.get("items", [])
            if item.get("index", {}).get("error")
        ]
        logger.error(f"Bulk indexing errors: {failed[:5]}")
        raise RuntimeError(f"{len(failed)} documents failed to index")

    logger.info(f"Successfully indexed {len(documents)} documents")
    return len(documents)
