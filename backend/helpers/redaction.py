"""
Log redaction for contact form data.

Submitters' addresses are personal data; logs keep enough to spot abuse
patterns by domain without recording who wrote in.
"""

import hashlib


def mask_email(email: str, salt: str = "contact_log") -> str:
    """
    Hash the local part of an email address for logging.

    Format: first 8 chars of hash + @domain.tld

    Args:
        email: Email address to mask
        salt: Salt for hashing (use consistent salt for matching)

    Returns:
        Masked email in format "a3f2c1d4...@example.com"
    """
    if not email or "@" not in email:
        return "invalid@unknown"

    local_part, domain = email.rsplit("@", 1)

    hash_value = hashlib.sha256(f"{salt}:{local_part}".encode("utf-8")).hexdigest()
    return f"{hash_value[:8]}...@{domain}"
