import asyncio
import math
from datetime import datetime, timezone

import httpx
import pytest

from price_aggregator.core.config import Settings
from price_aggregator.providers.base import (
    AggregationTimeoutError, DecodeError, EmptyResultError, UpstreamRequestError,
)
from price_aggregator.services.data_aggregator import DataAggregatorService

from tests.upstream_fakes import (
    COINGECKO_HOST, CRYPTOCOMPARE_HOST, DEX_HOST, REFUSED,
    build_handler, coingecko_payload, cryptocompare_payload, default_routes, dexscreener_payload,
)


@pytest.mark.asyncio
async def test_aggregate_merges_all_providers(http_client, settings, calls):
    started = datetime.now(timezone.utc)

    record = await DataAggregatorService(http_client, settings).aggregate()

    assert record.dex_token_name == "SkelSui"
    assert record.dex_token_symbol == "SKELSUI"
    assert record.dex_price_usd == "0.01234"
    assert record.dex_liquidity_usd == 88000.0
    assert record.dex_volume_24h == 15000.5
    assert record.dex_market_cap == 987654.0
    assert record.btc_price == 67000.12
    assert record.eth_price == 3400.5
    assert record.btc_24h_change == -1.25
    assert record.btc_supply == 19700000.0
    assert record.btc_market_cap_cc == 1321000000000.0

    fetched_at = datetime.fromisoformat(record.fetched_at)
    assert fetched_at.tzinfo is not None
    assert started <= fetched_at <= datetime.now(timezone.utc)
    assert sorted(request.url.host for request in calls) == sorted([DEX_HOST, COINGECKO_HOST, CRYPTOCOMPARE_HOST])


@pytest.mark.asyncio
async def test_aggregate_numbers_are_finite(http_client, settings):
    record = await DataAggregatorService(http_client, settings).aggregate()

    for name, value in record.model_dump().items():
        if isinstance(value, float):
            assert math.isfinite(value), name


@pytest.mark.asyncio
async def test_upstream_calls_run_concurrently(settings):
    routes = default_routes()
    sync_handler = build_handler(routes)
    arrived = []
    all_arrived = asyncio.Event()

    async def handler(request):
        arrived.append(request.url.host)
        if len(arrived) == 3:
            all_arrived.set()
        # sequential calls would never see all three in flight
        await asyncio.wait_for(all_arrived.wait(), timeout=2)
        return sync_handler(request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        record = await DataAggregatorService(client, settings).aggregate()

    assert len(arrived) == 3
    assert record.btc_price == 67000.12


@pytest.mark.asyncio
async def test_empty_pairs_wins_over_other_failures(http_client, settings, routes):
    routes[DEX_HOST] = httpx.Response(200, json=dexscreener_payload(pairs=[]))
    routes[COINGECKO_HOST] = REFUSED
    routes[CRYPTOCOMPARE_HOST] = REFUSED

    with pytest.raises(EmptyResultError, match="No pairs found"):
        await DataAggregatorService(http_client, settings).aggregate()


@pytest.mark.asyncio
async def test_failures_reported_in_provider_order(http_client, settings, routes):
    routes[COINGECKO_HOST] = httpx.Response(200, json={"unexpected": True})
    routes[CRYPTOCOMPARE_HOST] = REFUSED

    with pytest.raises(DecodeError) as exc_info:
        await DataAggregatorService(http_client, settings).aggregate()

    assert exc_info.value.provider == "CoinGecko"


@pytest.mark.asyncio
@pytest.mark.parametrize("host, provider", [
    (DEX_HOST, "DexScreener"),
    (COINGECKO_HOST, "CoinGecko"),
    (CRYPTOCOMPARE_HOST, "CryptoCompare"),
])
async def test_single_refused_provider_fails_whole_request(http_client, settings, routes, calls, host, provider):
    routes[host] = REFUSED

    with pytest.raises(UpstreamRequestError) as exc_info:
        await DataAggregatorService(http_client, settings).aggregate()

    assert exc_info.value.provider == provider
    assert provider in exc_info.value.message
    # the other providers were still called; the join waits for everyone
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_missing_supply_and_market_cap_default_to_zero(http_client, settings, routes):
    routes[CRYPTOCOMPARE_HOST] = httpx.Response(200, json=cryptocompare_payload(SUPPLY=None, MKTCAP=None))

    record = await DataAggregatorService(http_client, settings).aggregate()

    assert record.btc_supply == 0.0
    assert record.btc_market_cap_cc == 0.0


@pytest.mark.asyncio
async def test_aggregation_timeout():
    config = Settings(_env_file=None, aggregation_timeout=0.05)
    sync_handler = build_handler(default_routes())

    async def handler(request):
        if request.url.host == COINGECKO_HOST:
            await asyncio.sleep(5)
        return sync_handler(request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(AggregationTimeoutError) as exc_info:
            await DataAggregatorService(client, config).aggregate()

    assert "timed out" in exc_info.value.message
    assert exc_info.value.stage == "timeout"


def test_providers_listed_in_report_order(http_client, settings):
    service = DataAggregatorService(http_client, settings)

    assert [provider.name for provider in service.providers] == ["DexScreener", "CoinGecko", "CryptoCompare"]


@pytest.mark.asyncio
async def test_mistyped_coingecko_price_fails_aggregation(http_client, settings, routes):
    payload = coingecko_payload()
    payload["bitcoin"]["usd"] = "67000.12"
    payload["ethereum"]["usd_24h_vol"] = True
    routes[COINGECKO_HOST] = httpx.Response(200, json=payload)

    with pytest.raises(DecodeError, match="CoinGecko JSON parse failed"):
        await DataAggregatorService(http_client, settings).aggregate()


@pytest.mark.asyncio
async def test_oversized_cryptocompare_supply_defaults_to_zero(http_client, settings, routes):
    routes[CRYPTOCOMPARE_HOST] = httpx.Response(200, json=cryptocompare_payload(SUPPLY=10 ** 400))

    record = await DataAggregatorService(http_client, settings).aggregate()

    assert record.btc_supply == 0.0
    assert record.btc_market_cap_cc == 1321000000000.0
