"""HMAC and nonce helpers shared by the payload and token modules."""

import hashlib
import hmac
import ipaddress
import secrets
from typing import Callable


RandomBytes = Callable[[int], bytes]

# 32 bytes -> 64 hex characters
NONCE_BYTES = 32


def hmac_sha256_hex(secret: str, message: bytes | str) -> str:
    """Compute a hex-encoded HMAC-SHA256 of message keyed by secret."""
    if isinstance(message, str):
        message = message.encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def signatures_match(expected: bytes | str, provided: bytes | str) -> bool:
    """Compare two signatures in constant time.

    Unequal lengths are rejected before the constant-time compare.
    """
    if isinstance(expected, str):
        expected = expected.encode()
    if isinstance(provided, str):
        provided = provided.encode()
    if len(expected) != len(provided):
        return False
    return hmac.compare_digest(expected, provided)


def generate_nonce(random_bytes: RandomBytes = secrets.token_bytes, nbytes: int = NONCE_BYTES) -> str:
    """Generate a hex nonce from a cryptographically secure byte source.

    Returns:
        Hex string of 2 * nbytes characters
    """
    return random_bytes(nbytes).hex()


def is_ip_address(value: str) -> bool:
    """Return True if value is an IPv4 or IPv6 literal."""
    if not isinstance(value, str):
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True
