"""
DexScreener data provider implementation.
Looks up the decentralized-exchange pairs of a single token.
"""

import httpx

from .base import BaseDataProvider, EmptyResultError
from ..api.schemas import DexScreenerResponse, Pair
from ..core.logging_config import create_logger

logger = create_logger(__name__)


class DexScreenerProvider(BaseDataProvider):
    """DexScreener provider for DEX pair data."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, token_address: str):
        super().__init__(name="DexScreener", base_url=base_url, client=client)
        self.token_address = token_address

    async def fetch(self) -> Pair:
        """Return the first pair listed for the configured token."""
        payload = await self._make_request(f"{self.base_url}/tokens/{self.token_address}")
        data = self._decode(DexScreenerResponse, payload)

        if not data.pairs:
            raise EmptyResultError("No pairs found in DexScreener response", self.name)

        pair = data.pairs[0]
        logger.info("Retrieved pairs from DexScreener", extra={
            "provider": self.name,
            "pairs": len(data.pairs),
            "chain_id": pair.chain_id,
            "pair_address": pair.pair_address
        })
        return pair
