"""
Garden Search Service
Main FastAPI application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import sys

from garden_search import __version__
from garden_search.config import settings
from garden_search.router import content_router, search_router
from garden_search.services.lexicon import get_lexicon
from garden_search.utils.contentful_client import close_contentful_client
from garden_search.utils.elasticsearch_client import (
    close_elasticsearch_client,
    get_elasticsearch_client,
    ping,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Garden Search",
    description="Garden-aware search over articles and recipes",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(search_router)
app.include_router(content_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Garden Search",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "garden-search",
        "version": __version__
    }


@app.get("/v1/health")
async def v1_health_check():
    """V1 health check, including search engine reachability"""
    engine_ok = await ping(get_elasticsearch_client())
    return {
        "status": "ok" if engine_ok else "degraded",
        "service": "garden-search",
        "search_engine": "up" if engine_ok else "down"
    }


@app.on_event("startup")
async def startup_event():
    """Startup event handler"""
    logger.info("Garden Search starting up...")
    logger.info(f"Environment: {'DEBUG' if settings.debug else 'PRODUCTION'}")
    logger.info(f"Elasticsearch: {settings.elasticsearch_url} (index={settings.elasticsearch_index})")
    logger.info(f"Contentful environment: {settings.contentful_environment}")
    get_lexicon()
    logger.info("Startup complete!")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown event handler"""
    logger.info("Garden Search shutting down...")
    await close_elasticsearch_client()
    await close_contentful_client()


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.debug else "An error occurred"
        }
    )


def run():
    """Console entry point for the API server"""
    import uvicorn

    uvicorn.run(
        "garden_search.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level
    )


if __name__ == "__main__":
    run()
