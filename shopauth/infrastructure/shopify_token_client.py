"""
Client for the Shopify OAuth token endpoint.
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from shopauth.core.domain import AccessToken
from shopauth.core.exceptions import ExchangeFailed

logger = logging.getLogger(__name__)

ACCESS_TOKEN_PATH = "/admin/oauth/access_token"


class ShopifyTokenClient:
    """
    Exchanges authorization codes for access tokens.

    Implements the TokenExchangeClient port. The access token is a secret
    and is never logged.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the client.

        Args:
            http_client: Shared httpx client. When omitted, a client is
                opened for each exchange.
        """
        self._http_client = http_client

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

        Cancellation of the calling task is not intercepted, so a canceled
        exchange aborts without continuing in the background.

        Args:
            domain: Normalized shop domain
            code: Authorization code from the provider callback
            client_id: Application API key
            client_secret: Application API secret
            timeout: Request timeout in seconds (httpx default when None)

        Returns:
            The full token response, per-user fields included

        Raises:
            ExchangeFailed: If the request fails or the response is invalid
        """
        url = f"https://{domain}{ACCESS_TOKEN_PATH}"
        payload = {
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
        }
        request_kwargs = {
            "json": payload,
            "headers": {"Accept": "application/json"},
        }
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, **request_kwargs)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(url, **request_kwargs)
            response.raise_for_status()
            token = AccessToken.model_validate(response.json())

        except httpx.HTTPStatusError as e:
            logger.error(
                f"Token exchange rejected for {domain}: {e.response.status_code}",
                extra={"shop": domain, "status_code": e.response.status_code},
            )
            raise ExchangeFailed(
                f"Token request failed for shop '{domain}': {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Network error during token exchange for {domain}: {e}")
            raise ExchangeFailed(
                f"Network error while exchanging code for shop '{domain}': {e}"
            ) from e
        except (ValueError, ValidationError) as e:
            # ValueError covers non-JSON bodies. The body may hold a token,
            # so it stays out of the message.
            logger.error(f"Malformed token response for {domain}")
            raise ExchangeFailed(
                f"Invalid token response for shop '{domain}'"
            ) from e

        logger.info(
            f"Exchanged authorization code for {domain}",
            extra={"shop": domain, "per_user": token.is_per_user()},
        )
        return token
