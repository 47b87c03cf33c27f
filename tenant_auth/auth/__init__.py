# tenant_auth/auth/__init__.py
"""
Authentication module initialization.

Hashing protocols and login models. The verifier itself lives in
``tenant_auth.auth.verifier``.
"""

from .hashing import CredentialHasherProtocol, UniqueTokenGeneratorProtocol
from .models import LoginRequest, LoginResult

__all__ = [
    # Protocols
    "CredentialHasherProtocol",
    "UniqueTokenGeneratorProtocol",
    # Data models
    "LoginRequest",
    "LoginResult",
]
