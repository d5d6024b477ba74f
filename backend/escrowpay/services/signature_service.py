"""
Signature Service

HMAC-SHA256 signing and verification.

- Razorpay webhooks: signature is the hex HMAC of the exact raw request body
  bytes, keyed with the webhook secret. Never re-serialize the JSON before
  verifying: a re-encoded body differs byte-wise and must fail.
- Identity tokens: same primitive over the token payload segment.
"""
import hmac
import hashlib
from typing import Optional, Union


def compute_hmac_sha256(message: Union[bytes, str], secret_key: str) -> str:
    """
    Compute HMAC-SHA256 hex digest.

    Args:
        message: Bytes to sign (str is UTF-8 encoded)
        secret_key: HMAC secret

    Returns:
        Lowercase hexadecimal digest
    """
    if isinstance(message, str):
        message = message.encode('utf-8')

    return hmac.new(
        secret_key.encode('utf-8'),
        message,
        hashlib.sha256
    ).hexdigest()


def verify_hmac_sha256(
    message: Union[bytes, str],
    signature: Optional[str],
    secret_key: Optional[str]
) -> bool:
    """
    Verify an HMAC-SHA256 hex signature using constant-time comparison.

    Returns:
        True if signature valid, False otherwise (including missing signature or secret)
    """
    if not signature or not secret_key:
        return False

    expected_signature = compute_hmac_sha256(message, secret_key)

    # Constant-time comparison
    return hmac.compare_digest(
        expected_signature.encode('utf-8'),
        signature.strip().encode('utf-8')
    )


def compute_webhook_signature(raw_body: bytes, webhook_secret: str) -> str:
    """Signature Razorpay sends in X-Razorpay-Signature for this body."""
    return compute_hmac_sha256(raw_body, webhook_secret)


def verify_webhook_signature(
    raw_body: bytes,
    received_signature: Optional[str],
    webhook_secret: Optional[str]
) -> bool:
    """Verify X-Razorpay-Signature against the raw request body."""
    return verify_hmac_sha256(raw_body, received_signature, webhook_secret)
