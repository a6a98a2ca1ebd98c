"""
Shop domain model.

A shop is the storefront tenant authorizing the application. The normalized
shop domain is the primary key, soft-deleted shops included.
"""

from datetime import datetime, UTC

from pydantic import BaseModel, ConfigDict, Field

from shopauth.core.domain import AccessToken


class Shop(BaseModel):
    """
    Shop record snapshot.

    Instances are immutable: ``with_token`` returns a new snapshot instead
    of mutating this one, so a snapshot read at the start of a request
    stays consistent for the whole request.
    """

    domain: str = Field(description="Normalized shop domain (primary key)")
    access_token: str | None = Field(
        default=None, repr=False, description="Current access token"
    )
    deleted_at: datetime | None = Field(
        default=None, description="Soft-delete marker set on uninstall"
    )
    token_details: AccessToken | None = Field(
        default=None,
        repr=False,
        description="Last token endpoint response, including per-user fields",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Record creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Last update timestamp",
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    def has_offline_access(self) -> bool:
        """Check if the shop already holds an access token."""
        return bool(self.access_token)

    def is_deleted(self) -> bool:
        """Check if the shop is soft-deleted."""
        return self.deleted_at is not None

    def with_token(self, token: AccessToken) -> "Shop":
        """
        Return a copy holding a freshly exchanged token.

        A successful exchange means the shop (re)installed the app, so the
        soft-delete marker is cleared. Per-user tokens expire with the staff
        session, so they only land in ``token_details`` and the offline
        ``access_token`` is kept.
        """
        update = {
            "token_details": token,
            "deleted_at": None,
            "updated_at": datetime.now(UTC),
        }
        if not token.is_per_user():
            update["access_token"] = token.access_token

        return self.model_copy(update=update)
