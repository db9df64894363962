"""
Access Grant Sealing Utilities.

Turns an AccessGrant into an opaque encrypted blob a host application can
persist (cookie, database column, file) and restores it later to resume a
session without repeating the OAuth handshake.

Security:
- Derives encryption key from GRANT_SECRET using PBKDF2-HMAC-SHA256
- 100,000 iterations for key stretching
- Fernet (AES-128 CBC + HMAC) authenticates the blob, so tampering is detected
"""

import base64
import hashlib
import logging

from cryptography.fernet import Fernet, InvalidToken
from pydantic import ValidationError

from socialauth.core.config import settings
from socialauth.core.exceptions import InvalidGrantError
from socialauth.models.oauth import AccessGrant

logger = logging.getLogger(__name__)

# Salt for PBKDF2 key derivation (constant, not a secret)
_GRANT_SALT = b"socialauth_access_grant_v1"


def _get_fernet_key() -> bytes:
    """
    Derive Fernet encryption key from GRANT_SECRET.

    Returns:
        Base64-encoded 32-byte key for Fernet

    Raises:
        ValueError: If GRANT_SECRET is not configured
    """
    if not settings.GRANT_SECRET or settings.GRANT_SECRET == "change_me":
        raise ValueError("GRANT_SECRET must be configured for grant encryption")

    derived_key = hashlib.pbkdf2_hmac(
        "sha256",
        settings.GRANT_SECRET.encode("utf-8"),
        _GRANT_SALT,
        100000,
        dklen=32,
    )
    return base64.urlsafe_b64encode(derived_key)


def seal_grant(grant: AccessGrant) -> str:
    """
    Serialize and encrypt an access grant.

    Args:
        grant: Grant returned by a provider after verification

    Returns:
        URL-safe encrypted blob

    Raises:
        ValueError: If grant is missing or GRANT_SECRET not configured
    """
    if grant is None:
        raise ValueError("Cannot seal empty grant")

    fernet = Fernet(_get_fernet_key())
    sealed = fernet.encrypt(grant.model_dump_json().encode("utf-8"))
    logger.debug(f"Sealed access grant {grant!r}")
    return sealed.decode("utf-8")


def open_grant(blob: str) -> AccessGrant:
    """
    Decrypt a blob produced by ``seal_grant``.

    Raises:
        ValueError: If blob is empty or GRANT_SECRET not configured
        InvalidGrantError: If the blob was tampered with, sealed under another
            key, or does not contain a grant
    """
    if not blob:
        raise ValueError("Cannot open empty grant blob")

    fernet = Fernet(_get_fernet_key())
    try:
        payload = fernet.decrypt(blob.encode("utf-8"))
    except InvalidToken as e:
        logger.warning("Grant decryption failed: invalid blob or wrong key")
        raise InvalidGrantError("sealed grant could not be decrypted") from e

    try:
        return AccessGrant.model_validate_json(payload)
    except ValidationError as e:
        raise InvalidGrantError("sealed payload is not an access grant") from e


def is_encryption_configured() -> bool:
    """
    Check if grant encryption is properly configured.

    Returns:
        True if GRANT_SECRET is set and not using default value
    """
    return bool(settings.GRANT_SECRET and settings.GRANT_SECRET != "change_me")
