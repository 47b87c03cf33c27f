# tenant_auth/auth/hashing.py
from abc import ABC, abstractmethod


class CredentialHasherProtocol(ABC):
    """Protocol defining one-way password hashing and verification."""

    @abstractmethod
    async def hash_password(self, plaintext: str) -> str:
        """
        Produce a salted, slow one-way hash of ``plaintext``.

        Raises:
            HashingError: If the hash cannot be produced
        """
        pass

    @abstractmethod
    async def verify_password(self, password_hash: str, plaintext: str) -> bool:
        """
        Check ``plaintext`` against a stored hash in constant time.

        Malformed hashes verify as False instead of raising.
        """
        pass

    async def simulate_verification(self, plaintext: str) -> None:
        """
        Spend the same effort as ``verify_password`` without a stored hash.

        Called when a login names an unknown email so response timing does not
        reveal whether the account exists. The default does nothing.
        """
        return None


class UniqueTokenGeneratorProtocol(ABC):
    """Protocol for producing globally unique opaque tokens (licence keys)."""

    @abstractmethod
    def generate(self) -> str:
        pass
