"""Signed payload, JWT and OAuth primitives for BigCommerce apps."""

from .crypto import generate_nonce, hmac_sha256_hex, signatures_match
from .jwt import ALGORITHM, AppContextClaims, CustomerLoginClaims, TokenIssuer
from .oauth import BigCommerceOAuth
from .signed_payload import sign_payload, verify_signed_payload

__all__ = [
    "ALGORITHM",
    "AppContextClaims",
    "BigCommerceOAuth",
    "CustomerLoginClaims",
    "TokenIssuer",
    "generate_nonce",
    "hmac_sha256_hex",
    "sign_payload",
    "signatures_match",
    "verify_signed_payload",
]
