"""
Core application services and use cases.

This module contains the shop authorization logic, independent of
infrastructure details like HTTP or storage.
"""

import logging
from typing import Optional

from shopauth.core.domain import AuthorizationResult, GrantMode
from shopauth.core.exceptions import PersistenceFailed, TenantLookupFailed
from shopauth.core.ports import TokenExchangeClient
from shopauth.oauth.authorize_url import build_authorize_url
from shopauth.oauth.config import ShopifyAppConfig
from shopauth.shops.models import Shop
from shopauth.shops.repository import ShopRepository

logger = logging.getLogger(__name__)


def resolve_grant_mode(config: ShopifyAppConfig, shop: Optional[Shop]) -> GrantMode:
    """
    Decide which grant mode to request for this pass.

    Under a per-user configuration an offline token must exist first, so a
    shop without one is sent through an offline grant. Once it holds a
    token, later passes switch to per-user.

    Args:
        config: Application configuration for this call
        shop: Shop snapshot, or None if the shop is unknown

    Returns:
        The grant mode to request
    """
    if config.grant_mode is GrantMode.OFFLINE:
        return GrantMode.OFFLINE

    if shop is None or not shop.has_offline_access():
        return GrantMode.OFFLINE

    return GrantMode.PERUSER


class AuthorizeShopService:
    """
    Application service for authorizing a shop.

    A call without a code begins consent and returns the authorize URL.
    A call with a code completes consent by exchanging it and saving the
    token. No state is kept between calls, so every call resumes from the
    shop's stored record.
    """

    def __init__(
        self,
        shop_repository: ShopRepository,
        token_client: TokenExchangeClient,
    ):
        """
        Initialize the authorization service.

        Args:
            shop_repository: Store for shop records
            token_client: Client for the provider's token endpoint
        """
        self.shop_repository = shop_repository
        self.token_client = token_client

    async def authorize(
        self,
        config: ShopifyAppConfig,
        domain: str,
        code: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> AuthorizationResult:
        """
        Run one authorization pass for a shop.

        Args:
            config: Application configuration resolved for this call
            domain: Normalized shop domain
            code: Authorization code from the provider callback, if any
            timeout: Deadline for the token exchange, in seconds

        Returns:
            Redirect URL with completed=False, or completed=True after a
            successful exchange

        Raises:
            TenantLookupFailed: If the shop store cannot be read
            ExchangeFailed: If the code cannot be exchanged
            PersistenceFailed: If the token cannot be saved after exchange
        """
        shop = await self._find_shop(domain)

        if not code:
            return self._begin_consent(config, domain, shop)

        return await self._complete_consent(config, domain, code, shop, timeout)

    def _begin_consent(
        self, config: ShopifyAppConfig, domain: str, shop: Optional[Shop]
    ) -> AuthorizationResult:
        grant_mode = resolve_grant_mode(config, shop)
        url = build_authorize_url(
            domain,
            config.api_key or "",
            config.scopes,
            config.redirect_uri,
            grant_mode,
        )

        logger.info(
            f"Beginning {grant_mode.value} consent for {domain}",
            extra={"shop": domain, "grant_mode": grant_mode.value},
        )
        return AuthorizationResult(url=url, completed=False)

    async def _complete_consent(
        self,
        config: ShopifyAppConfig,
        domain: str,
        code: str,
        shop: Optional[Shop],
        timeout: Optional[float],
    ) -> AuthorizationResult:
        if shop is None:
            shop = Shop(domain=domain)

        # ExchangeFailed propagates as-is; nothing has been written yet
        token = await self.token_client.exchange(
            domain,
            code,
            client_id=config.api_key or "",
            client_secret=config.api_secret or "",
            timeout=timeout,
        )

        if shop.is_deleted():
            logger.info(f"Reinstating soft-deleted shop {domain}")

        try:
            await self.shop_repository.upsert(shop.with_token(token))
        except Exception as e:
            logger.critical(
                f"Token exchanged for {domain} but saving the shop failed: {e}",
                extra={"shop": domain},
            )
            raise PersistenceFailed(
                f"Failed to persist access token for shop '{domain}': {e}"
            ) from e

        logger.info(
            f"Completed authorization for {domain}",
            extra={"shop": domain, "per_user": token.is_per_user()},
        )
        return AuthorizationResult(url="", completed=True)

    async def _find_shop(self, domain: str) -> Optional[Shop]:
        try:
            return await self.shop_repository.find_by_domain(domain)
        except Exception as e:
            raise TenantLookupFailed(
                f"Failed to look up shop '{domain}': {e}"
            ) from e
