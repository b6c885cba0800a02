"""
Authentication utilities - password hashing, token generation and email checks.
"""

import secrets

import bcrypt
from email_validator import SPECIAL_USE_DOMAIN_NAMES, EmailNotValidError, validate_email

# 32 random bytes, 64 hex characters
TOKEN_BYTES = 32

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72

# Not on the special-use list, so it stands in for a reserved TLD when checking syntax
_STAND_IN_TLD = "example"


def _is_reserved_domain(domain: str) -> bool:
    domain = domain.lower()
    # Dotless names like "localhost" stay rejected
    if "." not in domain:
        return False
    return any(domain == name or domain.endswith("." + name) for name in SPECIAL_USE_DOMAIN_NAMES)


def _password_bytes(password: str) -> bytes:
    return password.encode('utf-8')[:_BCRYPT_MAX_BYTES]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh salt."""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt())
    return hashed.decode('utf-8')


def generate_auth_token() -> str:
    """Create an opaque, hex-encoded 256-bit session token."""
    return secrets.token_hex(TOKEN_BYTES)


def is_valid_email(email: str) -> bool:
    """
    Syntactic email check, no DNS lookups.

    Reserved names such as ``.local`` or ``.test`` are well-formed and accepted;
    email-validator only refuses them for not being globally deliverable.
    """
    local_part, at, domain = email.rpartition("@")
    if at and _is_reserved_domain(domain):
        email = f"{local_part}@{domain}.{_STAND_IN_TLD}"
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
