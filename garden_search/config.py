"""
Garden Search Service Configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Elasticsearch (primary search path)
    elasticsearch_url: str = "http://localhost:9200"
    elasticsearch_api_key: Optional[str] = None
    elasticsearch_index: str = "garden-content"

    # Contentful (content source and fallback search path)
    contentful_space_id: str
    contentful_access_token: str
    contentful_environment: str = "master"
    contentful_base_url: str = "https://cdn.contentful.com"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"
    cors_origins: List[str] = ["*"]

    # Search
    default_search_limit: int = 12
    max_search_limit: int = 50
    search_timeout_seconds: float = 5.0
    fallback_timeout_seconds: float = 5.0
    excerpt_length: int = 300
    suggestion_fuzzy_threshold: int = 80

    # Ingestion
    sync_batch_size: int = 50
    sync_page_size: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
