# tenant_auth/utils/email.py


def normalize_email(email: str) -> str:
    """Trim and lowercase an address; raises ValueError when it has no local part or domain."""
    cleaned = email.strip().lower()
    local_part, sep, domain = cleaned.rpartition("@")
    if not sep or not local_part or not domain:
        raise ValueError(f"'{email}' is not a valid email address.")
    return cleaned


def email_domain(email: str) -> str:
    """Return the domain an email address belongs to (the part after the last '@')."""
    return normalize_email(email).rpartition("@")[2]
