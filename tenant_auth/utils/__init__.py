# tenant_auth/utils/__init__.py

"""
Utility module initialization file.

Email normalization and UTC time helpers shared by models and stores.
The bcrypt hasher lives in ``tenant_auth.utils.security``.
"""

from .email import normalize_email, email_domain
from .time import utcnow, ensure_utc

# Export public API for the utils package
__all__ = ["normalize_email", "email_domain", "utcnow", "ensure_utc"]
