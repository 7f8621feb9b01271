"""
Utility functions for the auth module.
"""

import hashlib
import hmac


def sign(payload: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA256 of ``payload`` keyed by ``secret``."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify(payload: bytes, signature: str, secret: str) -> bool:
    """Constant-time check of a signature produced by :func:`sign`."""
    return hmac.compare_digest(sign(payload, secret), signature)
