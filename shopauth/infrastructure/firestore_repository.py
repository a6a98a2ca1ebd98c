"""
Firestore implementation of ShopRepository.

Stores shops and their access tokens in Firestore with encrypted token
storage. This is a driven adapter that implements the ShopRepository
interface.
"""

import logging
from datetime import datetime, UTC
from typing import Any, Optional

from google.cloud.firestore_v1 import AsyncClient

from shopauth.core.domain import AccessToken
from shopauth.infrastructure.encryption import TokenCipher
from shopauth.shops.models import Shop

logger = logging.getLogger(__name__)

SHOPS_COLLECTION = "shops"


class FirestoreShopRepository:
    """
    Firestore implementation of ShopRepository.

    Data model:
    - Collection: shops
      - Document ID: {shop domain}
      - Fields: domain, access_token (encrypted, offline), deleted_at,
                token_details (last token response, its access_token
                encrypted), created_at, updated_at
    """

    def __init__(self, db: AsyncClient, cipher: Optional[TokenCipher] = None):
        """
        Initialize Firestore repository.

        Args:
            db: Firestore async client instance
            cipher: Token cipher (built from TOKEN_ENCRYPTION_KEY if omitted)
        """
        self._db = db
        self._shops = db.collection(SHOPS_COLLECTION)
        self._cipher = cipher or TokenCipher.from_env()

    async def find_by_domain(self, domain: str) -> Shop | None:
        """
        Get a shop by domain, soft-deleted shops included.

        Args:
            domain: Normalized shop domain

        Returns:
            Shop if found, None otherwise
        """
        doc = await self._shops.document(domain).get()

        if not doc.exists:
            return None

        data = doc.to_dict()
        if data is None:
            return None

        return self._to_shop(data)

    async def upsert(self, shop: Shop) -> Shop:
        """
        Create or replace the shop document.

        The original created_at is kept when the document already exists.

        Args:
            shop: Shop snapshot to persist

        Returns:
            Persisted shop
        """
        doc_ref = self._shops.document(shop.domain)
        existing = await doc_ref.get()

        if existing.exists:
            data = existing.to_dict() or {}
            created_at = data.get("created_at", shop.created_at)
            shop = shop.model_copy(update={"created_at": created_at})

        await doc_ref.set(self._to_document(shop))

        logger.info(
            f"{'Updated' if existing.exists else 'Created'} shop: {shop.domain}"
        )
        return shop

    def _to_document(self, shop: Shop) -> dict[str, Any]:
        token_details = None
        if shop.token_details is not None:
            # May hold a per-user token that differs from access_token
            token_details = shop.token_details.model_dump(mode="json")
            token_details["access_token"] = self._cipher.encrypt(
                shop.token_details.access_token
            )

        return {
            "domain": shop.domain,
            "access_token": self._cipher.encrypt(shop.access_token),
            "deleted_at": shop.deleted_at,
            "token_details": token_details,
            "created_at": shop.created_at,
            "updated_at": shop.updated_at,
        }

    def _to_shop(self, data: dict[str, Any]) -> Shop:
        access_token = self._cipher.decrypt(data.get("access_token"))

        token_details = None
        details = data.get("token_details")
        if details and details.get("access_token"):
            token_details = AccessToken(
                **{
                    **details,
                    "access_token": self._cipher.decrypt(details["access_token"]),
                }
            )

        return Shop(
            domain=data["domain"],
            access_token=access_token,
            deleted_at=data.get("deleted_at"),
            token_details=token_details,
            created_at=data.get("created_at", datetime.now(UTC)),
            updated_at=data.get("updated_at", datetime.now(UTC)),
        )
