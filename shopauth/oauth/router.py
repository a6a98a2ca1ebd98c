"""
Shop authorization endpoint.

GET /authenticate?shop=... starts consent by redirecting to Shopify.
Shopify redirects back with ?code=..., which completes the exchange.
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse

from shopauth.oauth.config import AUTHENTICATE_PATH
from shopauth.oauth.dependencies import AppConfig, AuthorizeService, ValidShop


logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])


@router.get(AUTHENTICATE_PATH)
async def authenticate(
    shop: ValidShop,
    config: AppConfig,
    service: AuthorizeService,
    code: str | None = None,
):
    """
    Authorize a shop.

    Without a code, redirects the browser to the provider's consent page.
    With a code, exchanges it for an access token, stores it and redirects
    to the app home (SHOPIFY_APP_HOME).

    Args:
        shop: Normalized shop domain
        config: Shopify application configuration for this request
        service: Authorization service
        code: Authorization code from the provider callback

    Returns:
        Redirect to the consent page or to the app home
    """
    result = await service.authorize(
        config, shop, code, timeout=config.exchange_timeout
    )

    if not result.completed:
        return RedirectResponse(url=result.url, status_code=status.HTTP_302_FOUND)

    logger.info(f"Shop {shop} authorized", extra={"shop": shop})
    return RedirectResponse(
        url=config.home_url_for(shop), status_code=status.HTTP_302_FOUND
    )
