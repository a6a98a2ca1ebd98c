"""
Shopify application configuration.

Loaded from environment variables on every request rather than cached, so
runtime configuration changes (e.g. switching the grant mode) take effect
immediately.
"""

import os
from dataclasses import dataclass
from urllib.parse import urlencode

from shopauth.core.domain import GrantMode


DEFAULT_SCOPES = "read_products,write_products"
DEFAULT_BASE_URL = "https://localhost"
DEFAULT_EXCHANGE_TIMEOUT = 10.0
DEFAULT_HOME_URL = "/"

# Path of the authorization endpoint, used for the default redirect URI
AUTHENTICATE_PATH = "/authenticate"


class ConfigurationError(ValueError):
    """Raised when an environment variable holds an unusable value."""


def _parse_scopes(raw: str) -> tuple[str, ...]:
    """Split a comma-separated scope list, keeping its order."""
    return tuple(scope.strip() for scope in raw.split(",") if scope.strip())


@dataclass(frozen=True)
class ShopifyAppConfig:
    """
    Shopify application settings.

    Resolved once per call and passed into the authorization service.
    """

    api_key: str | None
    api_secret: str | None
    scopes: tuple[str, ...]
    redirect_uri: str
    grant_mode: GrantMode = GrantMode.OFFLINE
    exchange_timeout: float = DEFAULT_EXCHANGE_TIMEOUT
    home_url: str = DEFAULT_HOME_URL

    @classmethod
    def from_env(cls) -> "ShopifyAppConfig":
        """
        Load configuration from environment variables.

        Raises:
            ConfigurationError: If SHOPIFY_API_GRANT_MODE or
                SHOPIFY_EXCHANGE_TIMEOUT is invalid
        """
        base_url = os.getenv("BASE_URL", DEFAULT_BASE_URL).rstrip("/")

        try:
            grant_mode = GrantMode.parse(
                os.getenv("SHOPIFY_API_GRANT_MODE", GrantMode.OFFLINE.value)
            )
        except ValueError as e:
            raise ConfigurationError(f"SHOPIFY_API_GRANT_MODE: {e}") from e

        raw_timeout = os.getenv("SHOPIFY_EXCHANGE_TIMEOUT", DEFAULT_EXCHANGE_TIMEOUT)
        try:
            exchange_timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"SHOPIFY_EXCHANGE_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from e

        return cls(
            api_key=os.getenv("SHOPIFY_API_KEY"),
            api_secret=os.getenv("SHOPIFY_API_SECRET"),
            scopes=_parse_scopes(os.getenv("SHOPIFY_API_SCOPES", DEFAULT_SCOPES)),
            redirect_uri=os.getenv(
                "SHOPIFY_API_REDIRECT", f"{base_url}{AUTHENTICATE_PATH}"
            ),
            grant_mode=grant_mode,
            exchange_timeout=exchange_timeout,
            home_url=os.getenv("SHOPIFY_APP_HOME", DEFAULT_HOME_URL),
        )

    def is_configured(self) -> bool:
        """Check if API credentials are present."""
        return bool(self.api_key and self.api_secret)

    def home_url_for(self, shop: str) -> str:
        """Build the post-authorization landing URL for a shop."""
        separator = "&" if "?" in self.home_url else "?"
        return f"{self.home_url}{separator}{urlencode({'shop': shop})}"


def get_app_config() -> ShopifyAppConfig:
    """Get the current Shopify application configuration."""
    return ShopifyAppConfig.from_env()
