"""
Core domain models for Shopify shop authorization.

These models represent the business domain and are independent of
any infrastructure or delivery mechanism.
"""

import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SHOP_DOMAIN_SUFFIX = ".myshopify.com"

_SHOP_DOMAIN_PATTERN = re.compile(r"^[a-z0-9][a-z0-9\-]*\.myshopify\.com$")


class InvalidShopDomainError(ValueError):
    """Raised when a value cannot be normalized into a shop domain."""

    pass


def normalize_shop_domain(value: str) -> str:
    """
    Normalize a shop identifier into its ``*.myshopify.com`` form.

    Accepts bare shop names ("example"), full domains in any case, and
    URLs ("https://example.myshopify.com/admin").

    Args:
        value: Raw shop identifier from the caller

    Returns:
        Lowercase shop domain, e.g. "example.myshopify.com"

    Raises:
        InvalidShopDomainError: If the value is not a valid shop domain
    """
    shop = (value or "").strip().lower()
    shop = shop.split("://", 1)[-1].split("/", 1)[0]

    if shop and "." not in shop:
        shop = f"{shop}{SHOP_DOMAIN_SUFFIX}"

    if not _SHOP_DOMAIN_PATTERN.match(shop):
        raise InvalidShopDomainError(f"Invalid shop domain: {value!r}")

    return shop


class GrantMode(str, Enum):
    """OAuth grant mode requested from the provider."""

    OFFLINE = "offline"
    PERUSER = "per-user"

    @classmethod
    def parse(cls, value: str) -> "GrantMode":
        """
        Parse a configured grant mode.

        Accepts "offline", "per-user" and "peruser" in any case.
        """
        normalized = value.strip().lower().replace("_", "-")
        if normalized == "peruser":
            normalized = cls.PERUSER.value
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"Unknown grant mode {value!r}, expected OFFLINE or PERUSER"
            ) from None


class AuthorizationResult(BaseModel):
    """
    Outcome of an authorization pass.

    completed=False means the browser must be redirected to ``url`` to begin
    consent. completed=True means the token exchange succeeded and ``url``
    is empty.
    """

    url: str = ""
    completed: bool = False

    model_config = ConfigDict(frozen=True)


class AccessToken(BaseModel):
    """
    Token endpoint response.

    Offline grants only carry ``access_token`` and ``scope``. Per-user grants
    add expiry and associated user details. Unknown fields are kept so the
    full response reaches the shop repository unmodified.
    """

    access_token: str = Field(repr=False, description="OAuth access token")
    scope: Optional[str] = Field(default=None, description="Granted scopes")
    expires_in: Optional[int] = Field(
        default=None, description="Seconds until a per-user token expires"
    )
    associated_user_scope: Optional[str] = Field(
        default=None, description="Scopes granted to the associated user"
    )
    associated_user: Optional[dict[str, Any]] = Field(
        default=None, description="Staff user the per-user token belongs to"
    )

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("access_token")
    @classmethod
    def validate_access_token(cls, v: str) -> str:
        """Reject empty tokens."""
        if not v:
            raise ValueError("access_token must not be empty")
        return v

    def is_per_user(self) -> bool:
        """Check whether the provider issued a per-user grant."""
        return self.associated_user is not None
