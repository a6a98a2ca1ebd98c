"""
Access token encryption for secure storage.

Uses Fernet symmetric encryption from the cryptography library.
Shop access tokens are encrypted before storing in Firestore and decrypted
when read back.
"""

import logging
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)

ENCRYPTION_KEY_ENV = "TOKEN_ENCRYPTION_KEY"


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""

    pass


class TokenCipher:
    """Encrypts and decrypts access tokens with a Fernet key."""

    def __init__(self, key: str):
        """
        Args:
            key: URL-safe base64-encoded 32-byte Fernet key

        Raises:
            ValueError: If the key is not a valid Fernet key
        """
        try:
            self._fernet = Fernet(key.encode())
        except Exception as e:
            raise ValueError(f"Invalid {ENCRYPTION_KEY_ENV}: {e}") from e

    @classmethod
    def from_env(cls) -> "TokenCipher":
        """
        Build a cipher from TOKEN_ENCRYPTION_KEY.

        Raises:
            ValueError: If TOKEN_ENCRYPTION_KEY is not set or invalid
        """
        key = os.getenv(ENCRYPTION_KEY_ENV)
        if not key:
            raise ValueError(
                f"{ENCRYPTION_KEY_ENV} environment variable must be set for token encryption"
            )
        cipher = cls(key)
        logger.info("Token encryption initialized")
        return cipher

    @staticmethod
    def generate_key() -> str:
        """Generate a new key suitable for TOKEN_ENCRYPTION_KEY."""
        return Fernet.generate_key().decode()

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        """
        Encrypt a token, passing None through.

        Raises:
            EncryptionError: If encryption fails
        """
        if plaintext is None:
            return None
        try:
            return self._fernet.encrypt(plaintext.encode()).decode()
        except Exception as e:
            logger.error(f"Failed to encrypt token: {type(e).__name__}")
            raise EncryptionError(f"Encryption failed: {type(e).__name__}") from e

    def decrypt(self, ciphertext: Optional[str]) -> Optional[str]:
        """
        Decrypt a token, passing None through.

        Raises:
            EncryptionError: If the data is corrupted or the key does not match
        """
        if ciphertext is None:
            return None
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken as e:
            logger.error("Failed to decrypt token: invalid token or key")
            raise EncryptionError(
                "Decryption failed: invalid token or key mismatch"
            ) from e
