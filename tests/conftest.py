import httpx
import pytest

from price_aggregator.core.config import Settings

from tests.upstream_fakes import build_handler, default_routes


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def routes():
    return default_routes()


@pytest.fixture
def calls():
    return []


@pytest.fixture
def http_client(routes, calls):
    # MockTransport keeps no connections, so the client needs no closing
    return httpx.AsyncClient(transport=httpx.MockTransport(build_handler(routes, calls)))
