# tenant_auth/cli/__init__.py
