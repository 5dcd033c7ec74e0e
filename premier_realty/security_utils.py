"""
Security Utilities
Token signing, secret encryption and input sanitization using industry-standard libraries
"""

import base64
import hashlib
import logging
import secrets
from typing import Any, Optional

# Input sanitization
import bleach
from bleach.css_sanitizer import CSSSanitizer

# Secrets at rest
from cryptography.fernet import Fernet, InvalidToken

# Token generation and validation
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jose import JWTError
from jose import jwt as jose_jwt

from .config import SECRET_KEY, SUPABASE_JWT_AUDIENCE, SUPABASE_JWT_SECRET, TOKEN_ENCRYPTION_KEY

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Tags produced by the blog rich-text editor
RICH_TEXT_TAGS = [
    "p",
    "br",
    "strong",
    "b",
    "em",
    "i",
    "u",
    "s",
    "a",
    "ul",
    "ol",
    "li",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "blockquote",
    "code",
    "pre",
    "img",
    "figure",
    "figcaption",
    "hr",
    "span",
]

RICH_TEXT_ATTRIBUTES = {
    "a": ["href", "title", "target", "rel"],
    "img": ["src", "alt", "title", "width", "height"],
    "*": ["class", "style"],
}


# ============================================================================
# TOKENS
# ============================================================================


def generate_timed_token(data: dict[str, Any], salt: str = "security-token") -> str:
    """
    Generate a time-limited token using itsdangerous.
    Expiry is enforced when verifying.
    """
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    return serializer.dumps(data, salt=salt)


def verify_timed_token(
    token: str, max_age: int = 3600, salt: str = "security-token"
) -> Optional[dict[str, Any]]:
    """
    Verify and decode a timed token

    Args:
        token: The token to verify
        max_age: Maximum age in seconds (default 1 hour)
        salt: Must match the salt used to sign

    Returns:
        Decoded data if valid, None if invalid or expired
    """
    serializer = URLSafeTimedSerializer(SECRET_KEY)
    try:
        return serializer.loads(token, salt=salt, max_age=max_age)
    except SignatureExpired:
        logger.warning("Token expired")
        return None
    except BadSignature:
        logger.warning("Invalid token signature")
        return None


def verify_platform_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify an access token issued by the hosted auth platform.

    Returns:
        Decoded claims if valid, None if invalid or expired
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        return None

    try:
        return jose_jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


# ============================================================================
# SECRETS AT REST
# ============================================================================


def get_cipher() -> Fernet:
    """Fernet cipher for stored OAuth tokens"""
    if TOKEN_ENCRYPTION_KEY:
        return Fernet(TOKEN_ENCRYPTION_KEY.encode())
    derived = base64.urlsafe_b64encode(hashlib.sha256(SECRET_KEY.encode()).digest())
    return Fernet(derived)


def encrypt_secret(value: str) -> str:
    return get_cipher().encrypt(value.encode()).decode()


def decrypt_secret(value: str) -> Optional[str]:
    """Decrypt a stored secret. Returns None when the key has rotated or the value is corrupt."""
    try:
        return get_cipher().decrypt(value.encode()).decode()
    except InvalidToken:
        logger.error("❌ Stored secret could not be decrypted - was the encryption key rotated?")
        return None


# ============================================================================
# INPUT SANITIZATION
# ============================================================================


def sanitize_html(html_content: str, allowed_tags: Optional[list] = None) -> str:
    """
    Sanitize HTML content to prevent XSS attacks

    Args:
        html_content: Raw HTML content
        allowed_tags: List of allowed HTML tags (default: rich-text subset)

    Returns:
        Sanitized HTML
    """
    if allowed_tags is None:
        allowed_tags = RICH_TEXT_TAGS

    css_sanitizer = CSSSanitizer(
        allowed_css_properties=["color", "background-color", "font-weight", "text-align"]
    )

    return bleach.clean(
        html_content,
        tags=allowed_tags,
        attributes=RICH_TEXT_ATTRIBUTES,
        protocols=["http", "https", "mailto"],
        css_sanitizer=css_sanitizer,
        strip=True,
    )


def strip_html(html_content: str) -> str:
    """Plain text of an HTML fragment"""
    return bleach.clean(html_content or "", tags=[], strip=True)


def constant_time_compare(a: str, b: str) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks

    Args:
        a: First string
        b: Second string

    Returns:
        True if strings are equal, False otherwise
    """
    return secrets.compare_digest(a.encode(), b.encode())
