"""
Shop repository interface and implementations.

Defines the port (interface) for shop persistence.
Includes an in-memory implementation for testing and development.
Firestore implementation is available when configured.
"""

import logging
import os
from typing import Protocol

from shopauth.shops.models import Shop


logger = logging.getLogger(__name__)


def _is_firestore_configured() -> bool:
    """Check if Firestore is configured via environment."""
    project_id = os.getenv("GCP_PROJECT_ID") or os.getenv("GOOGLE_CLOUD_PROJECT")
    encryption_key = os.getenv("TOKEN_ENCRYPTION_KEY")
    return project_id is not None and encryption_key is not None


class ShopRepository(Protocol):
    """
    Protocol defining the shop repository interface.

    This is the "port" in hexagonal architecture. Adapters raise their own
    exceptions; the authorization service reclassifies them.
    """

    async def find_by_domain(self, domain: str) -> Shop | None:
        """
        Get a shop by its normalized domain.

        Soft-deleted shops are returned too, since the provider may deliver
        a code for a previously uninstalled shop.

        Args:
            domain: Normalized shop domain

        Returns:
            Shop if found, None otherwise
        """
        ...

    async def upsert(self, shop: Shop) -> Shop:
        """
        Create or replace the shop record keyed on its domain.

        The stored record reflects the snapshot exactly, including a cleared
        soft-delete marker.

        Args:
            shop: Shop snapshot to persist

        Returns:
            Persisted shop
        """
        ...


class InMemoryShopRepository(ShopRepository):
    """
    In-memory implementation of ShopRepository.

    Useful for testing and local development without Firestore.
    Data is lost when the application restarts.
    """

    def __init__(self):
        self._shops: dict[str, Shop] = {}

    async def find_by_domain(self, domain: str) -> Shop | None:
        return self._shops.get(domain)

    async def upsert(self, shop: Shop) -> Shop:
        existing = self._shops.get(shop.domain)
        if existing is not None:
            shop = shop.model_copy(update={"created_at": existing.created_at})
            logger.info(f"Updated shop: {shop.domain}")
        else:
            logger.info(f"Created shop: {shop.domain}")

        self._shops[shop.domain] = shop
        return shop


# Singleton instance for dependency injection
_repository: ShopRepository | None = None


def get_shop_repository() -> ShopRepository:
    """
    Get the shop repository singleton.

    Returns FirestoreShopRepository if Firestore is configured
    (GCP_PROJECT_ID and TOKEN_ENCRYPTION_KEY set).
    Falls back to InMemoryShopRepository for testing/development.

    Can be overridden via set_shop_repository for testing.
    """
    global _repository
    if _repository is None:
        if _is_firestore_configured():
            from shopauth.infrastructure.firestore import get_firestore_client
            from shopauth.infrastructure.firestore_repository import (
                FirestoreShopRepository,
            )

            _repository = FirestoreShopRepository(get_firestore_client())
            logger.info("Using Firestore shop repository")
        else:
            logger.info("Using in-memory shop repository")
            _repository = InMemoryShopRepository()
    return _repository


def set_shop_repository(repository: ShopRepository) -> None:
    """
    Set the shop repository implementation.

    Use this to inject Firestore or mock repositories.
    """
    global _repository
    _repository = repository


def reset_shop_repository() -> None:
    """
    Reset the shop repository singleton.

    Useful for testing to ensure clean state between tests.
    """
    global _repository
    _repository = None
