"""
Shared test configuration and fixtures.
"""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from shopauth.core.domain import AccessToken, GrantMode
from shopauth.core.exceptions import ExchangeFailed
from shopauth.main import app
from shopauth.oauth.config import ShopifyAppConfig
from shopauth.shops.repository import InMemoryShopRepository

TEST_API_KEY = "test-api-key"
TEST_API_SECRET = "test-api-secret"
TEST_REDIRECT_URI = "https://localhost/authenticate"

client = TestClient(app)


class FakeTokenClient:
    """
    Token exchange double.

    Returns a new token per call ("token-1", "token-2", ...) and records
    every call. Set ``error`` to make the next exchanges fail.
    """

    def __init__(self):
        self.calls: list[dict] = []
        self.error: Optional[Exception] = None
        self.response_extra: dict = {}

    async def exchange(
        self,
        domain: str,
        code: str,
        *,
        client_id: str,
        client_secret: str,
        timeout: Optional[float] = None,
    ) -> AccessToken:
        self.calls.append(
            {
                "domain": domain,
                "code": code,
                "client_id": client_id,
                "client_secret": client_secret,
                "timeout": timeout,
            }
        )
        if self.error is not None:
            raise self.error
        return AccessToken(
            access_token=f"token-{len(self.calls)}",
            scope="read_products,write_products",
            **self.response_extra,
        )


class FailingShopRepository(InMemoryShopRepository):
    """In-memory repository whose reads or writes can be made to fail."""

    def __init__(self, fail_find: bool = False, fail_upsert: bool = False):
        super().__init__()
        self.fail_find = fail_find
        self.fail_upsert = fail_upsert
        self.upsert_calls = 0

    async def find_by_domain(self, domain):
        if self.fail_find:
            raise ConnectionError("store unreachable")
        return await super().find_by_domain(domain)

    async def upsert(self, shop):
        self.upsert_calls += 1
        if self.fail_upsert:
            raise ConnectionError("write rejected")
        return await super().upsert(shop)


@pytest.fixture
def offline_config():
    """Configuration with the default OFFLINE grant mode."""
    return ShopifyAppConfig(
        api_key=TEST_API_KEY,
        api_secret=TEST_API_SECRET,
        scopes=("read_products", "write_products"),
        redirect_uri=TEST_REDIRECT_URI,
        grant_mode=GrantMode.OFFLINE,
    )


@pytest.fixture
def per_user_config(offline_config):
    """Configuration with the PERUSER grant mode."""
    return ShopifyAppConfig(
        api_key=offline_config.api_key,
        api_secret=offline_config.api_secret,
        scopes=offline_config.scopes,
        redirect_uri=offline_config.redirect_uri,
        grant_mode=GrantMode.PERUSER,
    )


@pytest.fixture
def repository():
    """Create fresh repository for each test."""
    return InMemoryShopRepository()


@pytest.fixture
def token_client():
    """Create fresh token client double for each test."""
    return FakeTokenClient()


@pytest.fixture
def exchange_failure(token_client):
    """Token client double that fails every exchange."""
    token_client.error = ExchangeFailed("Token request failed: 400")
    return token_client
