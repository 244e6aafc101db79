"""Legacy signed_payload verification.

BigCommerce load/uninstall/remove_user callbacks carry a ``signed_payload``
query parameter of the form ``base64(json).base64(hex_hmac)``. Newer
callbacks also send ``signed_payload_jwt``, which should be preferred (see
:mod:`bigcommerce_auth.auth.jwt`). This module is kept separate so the
legacy format can be dropped without touching the JWT path.
"""

import base64
import json
import logging
from typing import Any

from bigcommerce_auth.auth.crypto import hmac_sha256_hex, signatures_match
from bigcommerce_auth.errors import (
    InvalidSignatureError,
    MalformedInputError,
    MalformedPayloadError,
)


logger = logging.getLogger(__name__)


def _b64decode(segment: str) -> bytes:
    """Decode a base64 segment, accepting URL-safe characters and missing padding.

    Raises ValueError (binascii.Error or UnicodeEncodeError) on bad input.
    """
    padded = segment.encode("ascii") + b"=" * (-len(segment) % 4)
    return base64.b64decode(padded, altchars=b"-_")


def _decode_signature(segment: str) -> bytes:
    """Decode the signature segment; anything but canonical base64 is a mismatch."""
    try:
        signature = _b64decode(segment)
    except ValueError as e:
        raise InvalidSignatureError("Signature is invalid", original_error=e) from e

    # Stray characters and unused trailing bits would otherwise decode to the
    # same bytes as the genuine signature
    normalized = segment.replace("-", "+").replace("_", "/").rstrip("=")
    if base64.b64encode(signature).decode().rstrip("=") != normalized:
        raise InvalidSignatureError("Signature is invalid")
    return signature


def verify_signed_payload(signed_payload: str, secret: str) -> dict[str, Any]:
    """Verify a legacy signed payload and return its decoded data.

    Args:
        signed_payload: The ``signed_payload`` value from the callback
        secret: The app's client secret

    Returns:
        The decoded JSON object

    Raises:
        MalformedInputError: If the payload is empty or has fewer than two parts
        MalformedPayloadError: If the data segment can't be decoded or isn't JSON
        InvalidSignatureError: If the signature segment doesn't decode or match
    """
    if not signed_payload:
        raise MalformedInputError("The signed payload is required to verify the call.")

    parts = signed_payload.split(".")
    if len(parts) < 2:
        raise MalformedInputError(
            "The signed payload must contain two parts separated by a '.' (full stop)."
        )

    try:
        data = _b64decode(parts[0])
    except ValueError as e:
        raise MalformedPayloadError(
            "The signed payload is not valid base64.", original_error=e
        ) from e

    signature = _decode_signature(parts[1])

    expected = hmac_sha256_hex(secret, data).encode()

    if not signatures_match(expected, signature):
        logger.warning("Rejected signed payload with invalid signature")
        raise InvalidSignatureError("Signature is invalid")

    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedPayloadError(
            "The signed payload data is not valid JSON.", original_error=e
        ) from e

    if not isinstance(payload, dict):
        raise MalformedPayloadError("The signed payload data must be a JSON object.")

    logger.debug("Signed payload verified for context %s", payload.get("context"))
    return payload


def sign_payload(data: dict[str, Any], secret: str) -> str:
    """Build a signed payload in the format BigCommerce sends.

    Useful for fixtures and local tooling.
    """
    encoded = json.dumps(data, separators=(",", ":")).encode()
    signature = hmac_sha256_hex(secret, encoded)
    return (
        base64.b64encode(encoded).decode()
        + "."
        + base64.b64encode(signature.encode()).decode()
    )
