# tenant_auth/utils/security.py
import asyncio
import logging
from typing import Optional
from uuid import uuid4

import bcrypt

from ..auth.hashing import CredentialHasherProtocol, UniqueTokenGeneratorProtocol
from ..errors import HashingError
from ..settings import settings

logger = logging.getLogger(__name__)


class BcryptCredentialHasher(CredentialHasherProtocol):
    """Hashes and verifies passwords with bcrypt, off the event loop."""

    def __init__(self, rounds: Optional[int] = None):
        """
        Initialize the hasher with a bcrypt cost factor.

        Args:
            rounds: bcrypt log2 work factor; defaults to settings.bcrypt_rounds
        """
        self.rounds = rounds or settings.bcrypt_rounds
        # Verified when the email is unknown so the response time matches a real check
        self._dummy_hash = bcrypt.hashpw(b"tenant-auth-dummy", bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def _hash_sync(self, plaintext: str) -> str:
        return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    async def hash_password(self, plaintext: str) -> str:
        """
        Hash a password with a fresh salt.

        Raises:
            HashingError: If bcrypt rejects the input or salt generation fails
        """
        try:
            return await asyncio.to_thread(self._hash_sync, plaintext)
        except (ValueError, TypeError) as e:
            logger.error(f"Password hashing failed: {e}", exc_info=True)
            raise HashingError() from e

    async def verify_password(self, password_hash: str, plaintext: str) -> bool:
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw, plaintext.encode("utf-8"), password_hash.encode("utf-8")
            )
        except ValueError:
            logger.error("Password verification failed: stored hash is not a valid bcrypt hash.")
            return False

    async def simulate_verification(self, plaintext: str) -> None:
        """Run a verification against a throwaway hash, discarding the outcome."""
        await self.verify_password(self._dummy_hash, plaintext)


class UUIDTokenGenerator(UniqueTokenGeneratorProtocol):
    """Generates random UUID4 strings, used as licence keys."""

    def generate(self) -> str:
        return str(uuid4())
