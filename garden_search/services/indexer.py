"""
Search Indexer
Syncs articles and recipes from the CMS into the search index.

Run with: garden-search-sync
"""
import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from elasticsearch import ApiError, AsyncElasticsearch

from garden_search.models.content import ContentEntry, ContentType, SearchDocument
from garden_search.services.content_source import ContentSource
from garden_search.utils.elasticsearch_client import (
    INDEX_MAPPINGS,
    bulk_index,
    create_index,
    delete_all,
    ping,
)

logger = logging.getLogger(__name__)


class SyncError(Exception):
    """Ingestion could not complete"""
    pass


@dataclass
class SyncReport:
    """Counts from one sync run"""
    articles: int = 0
    recipes: int = 0
    deleted: int = 0
    indexed: int = 0
    index_created: bool = False

    @property
    def fetched(self) -> int:
        return self.articles + self.recipes


def _with_meta_description(entry: ContentEntry, content: str) -> str:
    if entry.meta_description:
        return f"{entry.meta_description} {content}"
    return content


def build_article_content(entry: ContentEntry) -> str:
    """Meta description followed by the body text"""
    return _with_meta_description(entry, entry.body_text)


def build_recipe_content(entry: ContentEntry) -> str:
    """Ingredients, body text and instructions, prefixed by the meta description"""
    content = entry.body_text

    if entry.ingredients:
        content = f"Ingredients: {', '.join(entry.ingredients)}. {content}"

    if entry.instructions:
        content = f"{content} Instructions: {' '.join(entry.instructions)}"

    return _with_meta_description(entry, content)


def transform_entry(entry: ContentEntry) -> SearchDocument:
    """
    Transform a CMS entry into a search document

    Args:
        entry: Normalized CMS entry

    Returns:
        SearchDocument ready for indexing
    """
    if entry.content_type == ContentType.RECIPE:
        content = build_recipe_content(entry)
    else:
        content = build_article_content(entry)

    return SearchDocument(
        id=entry.id,
        title=entry.title,
        content=content,
        type=entry.content_type,
        slug=entry.slug,
        published_at=entry.published_at,
        meta_description=entry.meta_description,
        image_url=entry.image_url
    )


class SearchIndexer:
    """
    Full rebuild of the search index from the CMS.

    The index is cleared and re-populated on every run; there is no
    incremental update.
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        content_source: ContentSource,
        index_name: str,
        batch_size: int = 50,
        page_size: int = 100
    ):
        self.client = client
        self.content_source = content_source
        self.index_name = index_name
        self.batch_size = batch_size
        self.page_size = page_size

    async def sync(self) -> SyncReport:
        """
        Rebuild the index

        Returns:
            SyncReport with fetched, deleted and indexed counts

        Raises:
            SyncError: Engine unreachable or a document failed to index
        """
        report = SyncReport()

        logger.info("Testing Elasticsearch connection...")
        if not await ping(self.client):
            raise SyncError("Elasticsearch is not reachable")

        report.index_created = await create_index(self.client, self.index_name, INDEX_MAPPINGS)

        articles, recipes = await asyncio.gather(
            self.content_source.fetch_all(ContentType.ARTICLE, page_size=self.page_size),
            self.content_source.fetch_all(ContentType.RECIPE, page_size=self.page_size)
        )
        report.articles = len(articles)
        report.recipes = len(recipes)

        documents = [transform_entry(entry) for entry in articles + recipes]
        logger.info(f"Transformed {len(documents)} documents for indexing")

        try:
            report.deleted = await delete_all(self.client, self.index_name)
        except ApiError as e:
            logger.warning(f"Could not clear index {self.index_name} (might be empty), continuing: {e}")

        for start in range(0, len(documents), self.batch_size):
            batch = documents[start:start + self.batch_size]
            try:
                report.indexed += await bulk_index(
                    self.client,
                    self.index_name,
                    [doc.to_index_source() for doc in batch]
                )
            except RuntimeError as e:
                raise SyncError(f"Batch starting at {start} failed: {e}") from e

            logger.info(f"Indexed batch {start // self.batch_size + 1} ({len(batch)} documents)")

        logger.info(
            f"Sync completed: {report.articles} articles, {report.recipes} recipes, "
            f"{report.indexed} documents indexed"
        )

        return report


async def run_sync() -> SyncReport:
    """Build an indexer from settings and run one sync"""
    from garden_search.config import settings
    from garden_search.utils.contentful_client import close_contentful_client, get_contentful_client
    from garden_search.utils.elasticsearch_client import (
        close_elasticsearch_client,
        get_elasticsearch_client,
    )

    indexer = SearchIndexer(
        client=get_elasticsearch_client(),
        content_source=ContentSource(get_contentful_client(), settings.excerpt_length),
        index_name=settings.elasticsearch_index,
        batch_size=settings.sync_batch_size,
        page_size=settings.sync_page_size
    )

    try:
        return await indexer.sync()
    finally:
        await close_elasticsearch_client()
        await close_contentful_client()


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point"""
    parser = argparse.ArgumentParser(
        description="Index CMS articles and recipes into Elasticsearch"
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help="Logging level (default: info)"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    try:
        asyncio.run(run_sync())
    except Exception as e:
        logger.error(f"Sync failed: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
