"""
Tests for the shop authorization endpoint.
"""

import os
from dataclasses import replace
from datetime import datetime, UTC
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from shopauth.core.exceptions import ExchangeFailed
from shopauth.main import app
from shopauth.oauth.config import ShopifyAppConfig, get_app_config
from shopauth.oauth.dependencies import get_repository, get_token_client
from shopauth.shops.models import Shop
from tests.conftest import TEST_API_KEY, FailingShopRepository


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def api_client(offline_config, repository, token_client):
    """Test client with configuration, store and token client overridden."""
    app.dependency_overrides[get_app_config] = lambda: offline_config
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_token_client] = lambda: token_client

    client = TestClient(app)
    yield client

    app.dependency_overrides.pop(get_app_config, None)
    app.dependency_overrides.pop(get_repository, None)
    app.dependency_overrides.pop(get_token_client, None)


# ============================================================================
# GET /authenticate Tests
# ============================================================================


class TestAuthenticateEndpoint:
    """Tests for the GET /authenticate endpoint."""

    def test_redirects_to_consent(self, api_client):
        """Test a request without code redirects to the authorize URL."""
        response = api_client.get(
            "/authenticate",
            params={"shop": "non-existant.myshopify.com"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == (
            "https://non-existant.myshopify.com/admin/oauth/authorize"
            f"?client_id={TEST_API_KEY}"
            "&scope=read_products%2Cwrite_products"
            "&redirect_uri=https%3A%2F%2Flocalhost%2Fauthenticate"
        )

    def test_shop_is_normalized(self, api_client):
        response = api_client.get(
            "/authenticate",
            params={"shop": "Example"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"].startswith(
            "https://example.myshopify.com/admin/oauth/authorize?"
        )

    @pytest.mark.parametrize(
        "params,detail",
        [
            ({}, "Missing shop parameter"),
            ({"shop": ""}, "Missing shop parameter"),
            ({"shop": "example.com"}, "Invalid shop domain"),
        ],
    )
    def test_invalid_shop(self, api_client, params, detail):
        """Test missing or invalid shops are rejected with 400."""
        response = api_client.get("/authenticate", params=params)

        assert response.status_code == 400
        assert detail in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_code_completes_authorization(
        self, api_client, repository, token_client
    ):
        """Test a request with code stores the token and redirects home."""
        await repository.upsert(
            Shop(
                domain="example.myshopify.com",
                access_token="current",
                deleted_at=datetime.now(UTC),
            )
        )

        response = api_client.get(
            "/authenticate",
            params={"shop": "example.myshopify.com", "code": "12345678"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/?shop=example.myshopify.com"
        shop = await repository.find_by_domain("example.myshopify.com")
        assert shop.access_token == "token-1"
        assert shop.is_deleted() is False
        assert token_client.calls[0]["timeout"] == 10.0

    def test_exchange_failure_returns_502(self, api_client, exchange_failure):
        response = api_client.get(
            "/authenticate",
            params={"shop": "example.myshopify.com", "code": "bad"},
        )

        assert response.status_code == 502
        assert response.json()["status"] == "error"

    def test_lookup_failure_returns_503(self, api_client):
        app.dependency_overrides[get_repository] = lambda: FailingShopRepository(
            fail_find=True
        )

        response = api_client.get(
            "/authenticate", params={"shop": "example.myshopify.com"}
        )

        assert response.status_code == 503

    def test_persistence_failure_returns_500(self, api_client):
        app.dependency_overrides[get_repository] = lambda: FailingShopRepository(
            fail_upsert=True
        )

        response = api_client.get(
            "/authenticate",
            params={"shop": "example.myshopify.com", "code": "12345678"},
        )

        assert response.status_code == 500
        assert "could not be saved" in response.json()["message"]

    def test_unconfigured_app_returns_503(self, api_client):
        """Test missing API credentials return 503."""
        app.dependency_overrides[get_app_config] = lambda: ShopifyAppConfig(
            api_key=None,
            api_secret=None,
            scopes=("read_products",),
            redirect_uri="https://localhost/authenticate",
        )

        response = api_client.get(
            "/authenticate", params={"shop": "example.myshopify.com"}
        )

        assert response.status_code == 503
        assert "not configured" in response.json()["detail"]

    @pytest.mark.parametrize(
        "variable,value",
        [
            ("SHOPIFY_API_GRANT_MODE", "online"),
            ("SHOPIFY_EXCHANGE_TIMEOUT", "soon"),
        ],
    )
    def test_invalid_configuration_returns_503(self, api_client, variable, value):
        """Test unusable settings in the environment return 503, not 500."""
        app.dependency_overrides.pop(get_app_config, None)
        env = {
            "SHOPIFY_API_KEY": TEST_API_KEY,
            "SHOPIFY_API_SECRET": "secret",
            variable: value,
        }

        with patch.dict(os.environ, env, clear=True):
            response = api_client.get(
                "/authenticate", params={"shop": "example.myshopify.com"}
            )

        assert response.status_code == 503
        assert "not configured" in response.json()["message"]

    def test_completed_redirect_uses_configured_home(
        self, api_client, offline_config
    ):
        """Test a completed authorization lands on SHOPIFY_APP_HOME."""
        app.dependency_overrides[get_app_config] = lambda: replace(
            offline_config, home_url="https://app.example.com/dashboard"
        )

        response = api_client.get(
            "/authenticate",
            params={"shop": "example.myshopify.com", "code": "12345678"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == (
            "https://app.example.com/dashboard?shop=example.myshopify.com"
        )


def test_exchange_failed_is_not_swallowed(api_client, token_client):
    """Test no redirect is issued when the exchange fails."""
    token_client.error = ExchangeFailed("boom")

    response = api_client.get(
        "/authenticate",
        params={"shop": "example.myshopify.com", "code": "12345678"},
        follow_redirects=False,
    )

    assert response.status_code == 502
    assert "location" not in response.headers
