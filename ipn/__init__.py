"""
PayPal Instant Payment Notification verification.

Hand the raw POST body PayPal delivered to ``IPNVerifier.verify``; it is
echoed back to PayPal and the literal answer decides the verdict.
"""

from ipn.errors import (
    InvalidResponseException,
    IPNError,
    TransportError,
    UnexpectedResponseError,
)
from ipn.payload import decode, encode, validation_body
from ipn.verifier import (
    IPNVerifier,
    Verdict,
    VerdictStatus,
    VerifierConfig,
    verify,
)

__all__ = [
    "IPNError",
    "IPNVerifier",
    "InvalidResponseException",
    "TransportError",
    "UnexpectedResponseError",
    "Verdict",
    "VerdictStatus",
    "VerifierConfig",
    "decode",
    "encode",
    "validation_body",
    "verify",
]
