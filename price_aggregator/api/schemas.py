"""
Pydantic schemas for Crypto Price Aggregator Service.
Canonical upstream response shapes and the aggregated output record.
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator
from pydantic.alias_generators import to_camel


class UpstreamModel(BaseModel):
    """Base for decoded upstream payloads: immutable, unknown fields ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class DexScreenerModel(UpstreamModel):
    """DexScreener speaks camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# DexScreener (decentralized-exchange pairs)
class Token(DexScreenerModel):
    """Base token descriptor of a trading pair."""
    address: StrictStr
    name: StrictStr
    symbol: StrictStr


class Volume(DexScreenerModel):
    """Trading volume over rolling windows."""
    h24: StrictFloat
    h6: StrictFloat
    h1: StrictFloat
    m5: StrictFloat


class Liquidity(DexScreenerModel):
    """Pool liquidity in USD and in both pair assets."""
    usd: StrictFloat
    base: StrictFloat
    quote: StrictFloat


class Pair(DexScreenerModel):
    """Single DEX trading pair."""
    chain_id: StrictStr
    pair_address: StrictStr
    base_token: Token
    price_usd: StrictStr = Field(..., description="USD price as decimal text")
    volume: Volume
    liquidity: Liquidity
    fdv: StrictFloat
    market_cap: StrictFloat
    pair_created_at: StrictInt = Field(..., description="Pair creation time in epoch milliseconds")


class DexScreenerResponse(DexScreenerModel):
    """Response of the DexScreener token lookup."""
    schema_version: StrictStr
    pairs: List[Pair]

    @field_validator('pairs', mode='before')
    @classmethod
    def null_pairs_as_empty(cls, v):
        # unknown tokens come back as "pairs": null
        return [] if v is None else v


# CoinGecko (simple price)
class CoinGeckoPrice(UpstreamModel):
    """Per-asset price record with market cap, volume and change flags enabled."""
    usd: StrictFloat
    usd_market_cap: StrictFloat
    usd_24h_vol: StrictFloat
    usd_24h_change: StrictFloat


class CoinGeckoResponse(UpstreamModel):
    """Simple price lookup for the fixed bitcoin/ethereum pair of ids."""
    bitcoin: CoinGeckoPrice
    ethereum: CoinGeckoPrice


# CryptoCompare (full market data, extracted by path)
class CryptoCompareSnapshot(UpstreamModel):
    """Fields pulled from RAW.<fsym>.<tsym>; absent or non-numeric values are 0.0."""
    price: float = 0.0
    market_cap: float = 0.0
    supply: float = 0.0


class AggregatedRecord(BaseModel):
    """Merged output of all three providers."""

    model_config = ConfigDict(frozen=True)

    # From DexScreener
    dex_token_name: str
    dex_token_symbol: str
    dex_price_usd: str
    dex_liquidity_usd: float
    dex_volume_24h: float
    dex_market_cap: float

    # From CoinGecko
    btc_price: float
    eth_price: float
    btc_24h_change: float

    # From CryptoCompare
    btc_supply: float
    btc_market_cap_cc: float

    # Metadata
    fetched_at: str = Field(..., description="RFC 3339 UTC timestamp of aggregation")
