"""
FastAPI dependencies for the authorization endpoint.

Provides dependency injection for configuration, the shop repository and
the authorization service.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status

from shopauth.core.domain import InvalidShopDomainError, normalize_shop_domain
from shopauth.core.ports import TokenExchangeClient
from shopauth.core.services import AuthorizeShopService
from shopauth.infrastructure.shopify_token_client import ShopifyTokenClient
from shopauth.oauth.config import ShopifyAppConfig, get_app_config
from shopauth.shops.repository import ShopRepository, get_shop_repository


logger = logging.getLogger(__name__)


def get_repository() -> ShopRepository:
    """Provide ShopRepository dependency."""
    return get_shop_repository()


def get_token_client() -> TokenExchangeClient:
    """Provide the token exchange client dependency."""
    return ShopifyTokenClient()


def get_authorize_service(
    repository: Annotated[ShopRepository, Depends(get_repository)],
    token_client: Annotated[TokenExchangeClient, Depends(get_token_client)],
) -> AuthorizeShopService:
    """Wire the authorization service with its collaborators."""
    return AuthorizeShopService(repository, token_client)


def get_configured_app(
    config: Annotated[ShopifyAppConfig, Depends(get_app_config)],
) -> ShopifyAppConfig:
    """
    Provide the application configuration, requiring API credentials.

    Raises:
        HTTPException: 503 if SHOPIFY_API_KEY or SHOPIFY_API_SECRET is missing
    """
    if not config.is_configured():
        logger.error("Shopify API credentials are not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Shopify app is not configured",
        )
    return config


async def validate_shop(
    shop: Annotated[str | None, Query(description="Shop domain")] = None,
) -> str:
    """
    Normalize and validate the shop query parameter.

    Raises:
        HTTPException: 400 if the shop domain is missing or invalid
    """
    if not shop:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing shop parameter",
        )

    try:
        return normalize_shop_domain(shop)
    except InvalidShopDomainError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


# Type aliases for cleaner dependency injection
AppConfig = Annotated[ShopifyAppConfig, Depends(get_configured_app)]
ValidShop = Annotated[str, Depends(validate_shop)]
AuthorizeService = Annotated[AuthorizeShopService, Depends(get_authorize_service)]
