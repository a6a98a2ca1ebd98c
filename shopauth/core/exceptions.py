"""
Domain exceptions for the core business logic.

These exceptions represent failures of the authorization flow and are caught
by centralized exception handlers in main.py.
"""


class ShopAuthorizationError(Exception):
    """Base class for failures while authorizing a shop."""

    pass


class TenantLookupFailed(ShopAuthorizationError):
    """
    Raised when the shop store cannot be read.

    This indicates a server-side error (storage unreachable) and should
    result in a 503 response.
    """

    pass


class ExchangeFailed(ShopAuthorizationError):
    """
    Raised when the authorization code cannot be exchanged for a token.

    Covers transport errors, non-2xx responses and malformed response
    bodies from the provider's token endpoint.
    """

    pass


class PersistenceFailed(ShopAuthorizationError):
    """
    Raised when saving the shop fails after a successful token exchange.

    The provider now considers the shop authorized while the local record
    is stale. Callers must alert or retry instead of re-prompting consent.
    """

    pass
