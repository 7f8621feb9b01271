"""
Core identity logic.

Cookie format: ``<uuid hex (32 chars)><hmac-sha256 hex (64 chars)>``, the
signature covering the 16 raw UUID bytes.
"""

import uuid
from typing import Optional, Tuple

from .utils import sign, verify

_UID_HEX_LEN = 32
_SIG_HEX_LEN = 64


def encode_uid(uid: uuid.UUID, secret: str) -> str:
    """Render ``uid`` as a signed cookie value."""
    return uid.hex + sign(uid.bytes, secret)


def decode_uid(value: str, secret: str) -> uuid.UUID:
    """
    Verify a cookie value and return the identity it carries.

    Raises:
        ValueError: If the value is malformed or the signature does not match.
    """
    if not value or len(value) != _UID_HEX_LEN + _SIG_HEX_LEN:
        raise ValueError("malformed auth cookie")
    uid_hex, signature = value[:_UID_HEX_LEN], value[_UID_HEX_LEN:]
    try:
        uid = uuid.UUID(hex=uid_hex)
    except ValueError:
        raise ValueError("malformed auth cookie") from None
    if not verify(uid.bytes, signature.lower(), secret):
        raise ValueError("auth cookie signature mismatch")
    return uid


def resolve_identity(cookie: Optional[str], secret: str) -> Tuple[uuid.UUID, bool]:
    """
    Return ``(uid, issued)``.

    The cookie's identity is reused when it verifies; otherwise a fresh
    random identity is issued and ``issued`` is True so the caller sets the
    cookie.
    """
    if cookie:
        try:
            return decode_uid(cookie, secret), False
        except ValueError:
            pass
    return uuid.uuid4(), True
