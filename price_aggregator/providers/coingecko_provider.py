"""
CoinGecko data provider implementation.
Provides bitcoin and ethereum spot prices using the CoinGecko simple price API.
"""

import httpx

from .base import BaseDataProvider
from ..api.schemas import CoinGeckoResponse
from ..core.logging_config import create_logger

logger = create_logger(__name__)

COIN_IDS = ("bitcoin", "ethereum")


class CoinGeckoProvider(BaseDataProvider):
    """CoinGecko provider for major coin prices."""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        super().__init__(name="CoinGecko", base_url=base_url, client=client)

    async def fetch(self) -> CoinGeckoResponse:
        payload = await self._make_request(
            f"{self.base_url}/simple/price",
            params={
                'ids': ','.join(COIN_IDS),
                'vs_currencies': 'usd',
                'include_market_cap': 'true',
                'include_24hr_vol': 'true',
                'include_24hr_change': 'true'
            }
        )
        data = self._decode(CoinGeckoResponse, payload)

        logger.info("Retrieved prices from CoinGecko", extra={
            "provider": self.name,
            "btc_price": data.bitcoin.usd,
            "eth_price": data.ethereum.usd
        })
        return data
