# tenant_auth/__init__.py
"""
Tenant Auth: multi-tenant identity core.

Provisions tenants with a seat-limited licence and a first administrator,
registers and removes users against that licence, and verifies logins.
"""

__version__ = "0.1.0"
