"""
CryptoCompare data provider implementation.
Reads bitcoin market data from the loosely structured pricemultifull response.
"""

import math
from typing import Any

import httpx

from .base import BaseDataProvider
from ..api.schemas import CryptoCompareSnapshot
from ..core.logging_config import create_logger

logger = create_logger(__name__)

FROM_SYMBOL = "BTC"
TO_SYMBOL = "USD"


def extract_number(tree: Any, *path: str) -> float:
    """
    Walk ``path`` through nested JSON objects and return the leaf as a float.

    Missing keys, non-object intermediates and non-numeric leaves (booleans,
    strings, null, non-finite values) all yield 0.0.
    """
    node = tree
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return 0.0
        node = node[key]

    if isinstance(node, bool) or not isinstance(node, (int, float)):
        return 0.0
    try:
        value = float(node)
    except OverflowError:
        return 0.0
    return value if math.isfinite(value) else 0.0


class CryptoCompareProvider(BaseDataProvider):
    """CryptoCompare provider; missing fields default to zero instead of failing."""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        super().__init__(name="CryptoCompare", base_url=base_url, client=client)

    async def fetch(self) -> CryptoCompareSnapshot:
        payload = await self._make_request(
            f"{self.base_url}/pricemultifull",
            params={'fsyms': FROM_SYMBOL, 'tsyms': TO_SYMBOL}
        )

        raw_path = ("RAW", FROM_SYMBOL, TO_SYMBOL)
        snapshot = CryptoCompareSnapshot(
            price=extract_number(payload, *raw_path, "PRICE"),
            market_cap=extract_number(payload, *raw_path, "MKTCAP"),
            supply=extract_number(payload, *raw_path, "SUPPLY")
        )

        if not snapshot.supply or not snapshot.market_cap:
            logger.warning("CryptoCompare response missing fields, defaulted to zero", extra={
                "provider": self.name,
                "supply": snapshot.supply,
                "market_cap": snapshot.market_cap
            })

        logger.info("Retrieved market data from CryptoCompare", extra={
            "provider": self.name,
            "price": snapshot.price
        })
        return snapshot
