"""
Data aggregator service for Crypto Price Aggregator.
Fans out to the three upstream providers concurrently and merges their results.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, List, Optional

import httpx

from ..api.schemas import AggregatedRecord, CoinGeckoResponse, CryptoCompareSnapshot, Pair
from ..core.config import Settings, settings as default_settings
from ..core.logging_config import create_logger
from ..providers.base import AggregationTimeoutError, BaseDataProvider, ProviderError
from ..providers.coingecko_provider import CoinGeckoProvider
from ..providers.cryptocompare_provider import CryptoCompareProvider
from ..providers.dexscreener_provider import DexScreenerProvider

logger = create_logger(__name__)


class DataAggregatorService:
    """Service that orchestrates one fan-out/fan-in round per request."""

    def __init__(self, client: httpx.AsyncClient, config: Optional[Settings] = None):
        config = config or default_settings
        self._aggregation_timeout = config.aggregation_timeout
        self._dexscreener = DexScreenerProvider(
            client,
            base_url=config.dexscreener_api_url,
            token_address=config.dexscreener_token_address
        )
        self._coingecko = CoinGeckoProvider(client, base_url=config.coingecko_api_url)
        self._cryptocompare = CryptoCompareProvider(client, base_url=config.cryptocompare_api_url)

    @property
    def providers(self) -> List[BaseDataProvider]:
        """Providers in the order their failures are reported."""
        return [self._dexscreener, self._coingecko, self._cryptocompare]

    async def aggregate(self) -> AggregatedRecord:
        """
        Fetch all three providers concurrently and merge them into one record.

        Returns:
            AggregatedRecord stamped with the completion time

        Raises:
            ProviderError: The first failure in provider order, or
                AggregationTimeoutError when the overall deadline expires
        """
        logger.info("Fetching data from upstream providers", extra={
            "providers": [provider.name for provider in self.providers]
        })

        try:
            pair, prices, snapshot = await asyncio.wait_for(
                self._fetch_all(),
                timeout=self._aggregation_timeout
            )
        except asyncio.TimeoutError:
            logger.error("Aggregation timed out", extra={
                "timeout": self._aggregation_timeout
            })
            raise AggregationTimeoutError(
                f"Aggregation timed out after {self._aggregation_timeout}s",
                "aggregator"
            )

        record = self._merge(pair, prices, snapshot)
        logger.info("Successfully aggregated data from all providers", extra={
            "token": record.dex_token_symbol,
            "fetched_at": record.fetched_at
        })
        return record

    async def _fetch_all(self) -> List[Any]:
        """Join all provider calls, then surface the first failure in provider order."""
        results = await asyncio.gather(
            *(provider.fetch() for provider in self.providers),
            return_exceptions=True
        )

        for provider, result in zip(self.providers, results):
            if isinstance(result, BaseException):
                if isinstance(result, ProviderError):
                    logger.error("Provider failed", extra={
                        "provider": provider.name,
                        "stage": result.stage,
                        "error": result.message
                    })
                raise result

        return results

    @staticmethod
    def _merge(pair: Pair, prices: CoinGeckoResponse, snapshot: CryptoCompareSnapshot) -> AggregatedRecord:
        return AggregatedRecord(
            dex_token_name=pair.base_token.name,
            dex_token_symbol=pair.base_token.symbol,
            dex_price_usd=pair.price_usd,
            dex_liquidity_usd=pair.liquidity.usd,
            dex_volume_24h=pair.volume.h24,
            dex_market_cap=pair.market_cap,
            btc_price=prices.bitcoin.usd,
            eth_price=prices.ethereum.usd,
            btc_24h_change=prices.bitcoin.usd_24h_change,
            btc_supply=snapshot.supply,
            btc_market_cap_cc=snapshot.market_cap,
            fetched_at=datetime.now(timezone.utc).isoformat()
        )
