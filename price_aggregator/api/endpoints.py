"""
FastAPI endpoints for Crypto Price Aggregator Service.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from ..api.schemas import AggregatedRecord
from ..core.logging_config import create_logger
from ..providers.base import ProviderError
from ..services.data_aggregator import DataAggregatorService

logger = create_logger(__name__)

ROOT_ACKNOWLEDGEMENT = "Root endpoint hit"

# Create API router
router = APIRouter()


def get_aggregator_service(request: Request) -> DataAggregatorService:
    """Return the service built at startup around the shared HTTP client."""
    return request.app.state.aggregator_service


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Health acknowledgement; performs no upstream calls."""
    logger.debug("Root endpoint hit")
    return ROOT_ACKNOWLEDGEMENT


@router.get(
    "/response",
    response_model=AggregatedRecord,
    responses={500: {"description": "An upstream provider failed", "content": {"text/plain": {}}}}
)
async def get_response(service: DataAggregatorService = Depends(get_aggregator_service)):
    """
    Aggregate DexScreener, CoinGecko and CryptoCompare data.

    Returns:
        AggregatedRecord as JSON, or a plain-text 500 naming the failed stage
    """
    try:
        return await service.aggregate()

    except ProviderError as e:
        logger.error("Aggregation failed", extra={
            "provider": e.provider,
            "stage": e.stage,
            "error": e.message
        })
        return PlainTextResponse(e.message, status_code=500)
