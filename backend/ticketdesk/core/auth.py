"""
JWT authentication, password hashing and token utilities.

This module provides:
1. Password hashing with bcrypt (cost factor from BCRYPT_ROUNDS)
2. Access-token (JWT) generation and verification
3. Opaque refresh-token generation and hashing
4. Duration parsing for token lifetimes
5. Organization slug derivation

WHY: Access tokens are short-lived JWTs checked without a database read;
refresh tokens are opaque, long-lived and revocable, so they live in the
database and can be deleted on rotation, logout or suspension.
"""

import hashlib
import re
import secrets
import unicodedata
from datetime import datetime, timedelta
from typing import Dict, Any, Optional, Tuple

from jose import jwt, JWTError
from passlib.context import CryptContext

from ticketdesk.core.config import settings
from ticketdesk.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
)


# WHY: bcrypt with a configurable cost factor; tests lower BCRYPT_ROUNDS to
# keep hashing fast.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")
DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}
DEFAULT_REFRESH_LIFETIME = timedelta(days=7)

SLUG_MAX_LENGTH = 50


# ============================================================================
# Password Hashing
# ============================================================================


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password (60 characters, includes salt and cost factor)
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    WHY: passlib compares in constant time, so response timing does not leak
    how much of the password matched.

    Args:
        plain_password: Password provided by user
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================================
# Durations
# ============================================================================


def parse_duration(value: str, default: timedelta = DEFAULT_REFRESH_LIFETIME) -> timedelta:
    """
    Parse a "<number><unit>" duration such as "15m" or "7d".

    Units are s, m, h and d. Anything that doesn't match falls back to
    ``default``.

    Example:
        >>> parse_duration("15m")
        datetime.timedelta(seconds=900)
        >>> parse_duration("soon")
        datetime.timedelta(days=7)
    """
    match = DURATION_PATTERN.match(value.strip()) if value else None
    if not match:
        return default
    amount, unit = match.groups()
    return timedelta(**{DURATION_UNITS[unit]: int(amount)})


def access_token_lifetime() -> timedelta:
    return parse_duration(settings.ACCESS_TOKEN_EXPIRES_IN, default=timedelta(minutes=15))


def refresh_token_lifetime() -> timedelta:
    return parse_duration(settings.REFRESH_TOKEN_EXPIRES_IN)


# ============================================================================
# JWT Access Tokens
# ============================================================================


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Token includes:
    - User data (sub, email, role, status, org_id)
    - exp: Expiration time (default: ACCESS_TOKEN_EXPIRES_IN)
    - iat: Issued at time
    - nbf: Not before time

    WHY: The status claim lets the guard refuse non-active accounts without
    a database read. The short lifetime bounds how long a suspended account
    keeps a working token.

    Args:
        data: Claims to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        JWT token string
    """
    to_encode = data.copy()

    now = datetime.utcnow()
    expire = now + (expires_delta if expires_delta is not None else access_token_lifetime())

    to_encode.update(
        {
            "exp": expire,
            "iat": now,
            "nbf": now,
        }
    )

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        TokenExpiredError: If token has expired
        TokenInvalidError: If token is malformed or signature invalid
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )

    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()

    except JWTError as e:
        raise TokenInvalidError(error=str(e))


# ============================================================================
# Refresh Tokens
# ============================================================================


def hash_refresh_token(token: str) -> str:
    """SHA-256 hex digest under which a refresh token is stored.

    WHY: Only the digest is persisted, so a leaked refresh_tokens table cannot
    be replayed. SHA-256 without salt is enough because the raw token already
    carries 512 random bits, and it keeps the lookup an indexed equality.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_refresh_token() -> Tuple[str, str, datetime]:
    """
    Generate a new opaque refresh token.

    The raw value is only ever handed to the client; callers persist the
    hash and the expiry.

    Returns:
        Tuple of (raw token, token hash, expires_at)
    """
    raw = secrets.token_hex(64)
    return raw, hash_refresh_token(raw), datetime.utcnow() + refresh_token_lifetime()


# ============================================================================
# Slugs
# ============================================================================


def generate_slug(name: str) -> str:
    """
    Derive an organization slug from its display name.

    Lowercases, strips diacritics, collapses every run of characters outside
    [a-z0-9] into one hyphen, trims hyphens at both ends and truncates to
    50 characters.

    Example:
        >>> generate_slug("Acme Corp")
        'acme-corp'
        >>> generate_slug("  Société Générale!! ")
        'societe-generale'
    """
    decomposed = unicodedata.normalize("NFD", name.lower())
    ascii_only = "".join(c for c in decomposed if not unicodedata.combining(c))
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_only).strip("-")
    return slug[:SLUG_MAX_LENGTH]
