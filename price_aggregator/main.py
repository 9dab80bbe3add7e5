"""
Main FastAPI application for Crypto Price Aggregator Service.
Includes lifespan management for the shared upstream HTTP client.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
import time

from price_aggregator.core.config import settings
from price_aggregator.core.logging_config import setup_logging, create_logger
from price_aggregator.api.endpoints import router as api_router
from price_aggregator.providers.base import create_http_client
from price_aggregator.services.data_aggregator import DataAggregatorService

# Setup logging first
setup_logging()
logger = create_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.
    Builds one HTTP client per process and closes it on shutdown.
    """
    logger.info("Starting Crypto Price Aggregator Service", extra={
        "version": settings.app_version,
        "host": settings.server_host,
        "port": settings.server_port,
        "upstream_timeout": settings.upstream_timeout,
        "aggregation_timeout": settings.aggregation_timeout
    })

    client = create_http_client(timeout=settings.upstream_timeout)
    app.state.http_client = client
    app.state.aggregator_service = DataAggregatorService(client, settings)

    yield  # Application is running

    logger.info("Shutting down Crypto Price Aggregator Service")
    await client.aclose()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Concurrent aggregation of DexScreener, CoinGecko and CryptoCompare market data",
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests and responses."""
    start_time = time.time()

    logger.info("Request received", extra={
        "method": request.method,
        "url": str(request.url),
        "client_ip": request.client.host if request.client else None
    })

    try:
        response = await call_next(request)

    except Exception as e:
        logger.exception("Request failed", extra={
            "method": request.method,
            "url": str(request.url),
            "error": str(e),
            "process_time": round(time.time() - start_time, 4)
        })
        return PlainTextResponse("Internal server error", status_code=500)

    process_time = time.time() - start_time
    logger.info("Request completed", extra={
        "method": request.method,
        "url": str(request.url),
        "status_code": response.status_code,
        "process_time": round(process_time, 4)
    })

    response.headers["X-Process-Time"] = str(process_time)
    return response


# Include API routes
app.include_router(api_router, tags=["Price Aggregation API"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "price_aggregator.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True
    )
