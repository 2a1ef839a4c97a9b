"""Device request signatures.

Devices sign the raw request body with their shared secret and send the hex
digest in ``x-device-signature``:

    signature = hex(HMAC-SHA256(secret_key, raw_body))

Comparison is case-insensitive and constant-time.
"""

import hashlib
import hmac
import logging
from typing import Union

logger = logging.getLogger(__name__)


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def compute_signature(body: Union[str, bytes], secret: Union[str, bytes]) -> str:
    """Return the lower-case hex HMAC-SHA256 of ``body`` keyed with ``secret``."""
    return hmac.new(_to_bytes(secret), _to_bytes(body), hashlib.sha256).hexdigest()


def verify_signature(body: Union[str, bytes], signature: str, secret: Union[str, bytes]) -> bool:
    """Check a device signature.

    Args:
        body: Raw request body exactly as received
        signature: Hex digest sent by the device (any case)
        secret: Device secret key

    Returns:
        True if the signature matches. Malformed input (missing secret,
        non-ASCII signature, wrong types) is logged and counts as a mismatch.
    """
    try:
        expected = compute_signature(body, secret)
        return hmac.compare_digest(signature.lower(), expected)
    except (TypeError, ValueError, AttributeError) as e:
        logger.error(f"Signature verification error: {e}")
        return False
