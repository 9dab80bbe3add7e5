"""
Abstract base class for upstream price providers in Crypto Price Aggregator.
Defines the interface that all providers must implement and the error taxonomy.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, TypeVar
import httpx
from pydantic import BaseModel, ValidationError

from ..core.logging_config import create_logger

logger = create_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ProviderError(Exception):
    """Base exception for provider errors."""

    stage = "unknown"

    def __init__(self, message: str, provider: str):
        self.message = message
        self.provider = provider
        super().__init__(self.message)


class UpstreamRequestError(ProviderError):
    """The outbound call could not complete (DNS, connect, TLS, timeout, HTTP status)."""
    stage = "request"


class DecodeError(ProviderError):
    """The response body did not match the expected shape."""
    stage = "decode"


class EmptyResultError(ProviderError):
    """The provider answered correctly but returned nothing usable."""
    stage = "empty"


class AggregationTimeoutError(ProviderError):
    """The overall aggregation deadline expired before all providers completed."""
    stage = "timeout"


def get_default_headers() -> Dict[str, str]:
    """Get default HTTP headers for upstream requests."""
    return {
        'User-Agent': 'Crypto-Price-Aggregator/1.0.0',
        'Accept': 'application/json',
        'Accept-Encoding': 'gzip, deflate'
    }


def create_http_client(
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """
    Build the process-wide HTTP client shared by every provider.

    Args:
        timeout: Per-call timeout in seconds; None waits indefinitely
        transport: Optional transport override

    Returns:
        Configured httpx.AsyncClient
    """
    limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        limits=limits,
        headers=get_default_headers(),
        follow_redirects=True,
        transport=transport
    )
    logger.debug("Created upstream HTTP client", extra={"timeout": timeout})
    return client


class BaseDataProvider(ABC):
    """Abstract base class for upstream price providers."""

    # Revision of the canonical response shape this provider decodes into
    shape_version = "v1"

    def __init__(self, name: str, base_url: str, client: httpx.AsyncClient):
        self.name = name
        self.base_url = base_url
        self.client = client

    async def _make_request(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue one GET and return the parsed JSON body."""
        logger.debug("Making request to provider", extra={
            "provider": self.name,
            "url": url
        })

        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Provider request failed", extra={
                "provider": self.name,
                "url": url,
                "error": str(e)
            })
            raise UpstreamRequestError(f"{self.name} request failed: {e}", self.name) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(f"{self.name} JSON parse failed: {e}", self.name) from e

        logger.debug("Received response from provider", extra={
            "provider": self.name,
            "status_code": response.status_code,
            "response_size": len(response.content)
        })
        return payload

    def _decode(self, model: Type[ModelT], payload: Any) -> ModelT:
        """Decode a JSON payload into the provider's typed shape."""
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.warning("Provider response did not match expected shape", extra={
                "provider": self.name,
                "shape": model.__name__,
                "shape_version": self.shape_version,
                "errors": e.error_count()
            })
            raise DecodeError(f"{self.name} JSON parse failed: {e}", self.name) from e

    @abstractmethod
    async def fetch(self) -> Any:
        """
        Fetch and decode this provider's data.

        Raises:
            ProviderError: If the call, the decode or the result selection fails
        """
        pass
