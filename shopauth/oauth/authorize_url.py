"""
Shopify authorize URL construction.
"""

from collections.abc import Sequence
from urllib.parse import quote, urlencode

from shopauth.core.domain import GrantMode

AUTHORIZE_PATH = "/admin/oauth/authorize"

PER_USER_GRANT_OPTION = "grant_options[]=per-user"


def build_authorize_url(
    domain: str,
    client_id: str,
    scopes: Sequence[str],
    redirect_uri: str,
    grant_mode: GrantMode,
) -> str:
    """
    Build the provider's consent page URL for a shop.

    Parameter order is fixed (client_id, scope, redirect_uri, then
    grant_options) and every value is percent-encoded with no safe
    characters, so commas become %2C and "/" becomes %2F.

    Args:
        domain: Normalized shop domain
        client_id: Application API key
        scopes: Ordered scope names, joined with commas
        redirect_uri: Absolute callback URL
        grant_mode: Grant mode resolved for this pass

    Returns:
        The authorize URL
    """
    query = urlencode(
        [
            ("client_id", client_id),
            ("scope", ",".join(scopes)),
            ("redirect_uri", redirect_uri),
        ],
        quote_via=quote,
        safe="",
    )
    if grant_mode is GrantMode.PERUSER:
        query = f"{query}&{PER_USER_GRANT_OPTION}"

    return f"https://{domain}{AUTHORIZE_PATH}?{query}"
