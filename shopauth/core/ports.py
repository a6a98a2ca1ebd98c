"""
Port definitions (interfaces) for the core domain.

Ports define the contracts between the core domain and external systems.
Infrastructure adapters implement these ports.
"""

from typing import Optional, Protocol

from shopauth.core.domain import AccessToken


class TokenExchangeClient(Protocol):
    """
    Port (interface) for the OAuth code-for-token exchange.

    This is implemented by infrastructure adapters (e.g., ShopifyTokenClient).
    Every failure surfaces as ExchangeFailed; adapters never retry.
    """

    async def exchange(
        self,
        domain: str,
        code: str,
        *,
        client_id: str,
        client_secret: str,
        timeout: Optional[float] = None,
    ) -> AccessToken:
        """
        Exchange an authorization code for an access token.

        Args:
            domain: Normalized shop domain
            code: Authorization code from the provider callback
            client_id: Application API key
            client_secret: Application API secret
            timeout: Caller deadline for the outbound request, in seconds

        Returns:
            The full token response

        Raises:
            ExchangeFailed: On transport errors, non-2xx or malformed responses
        """
        ...
