"""
Identity Service

Verifies bearer tokens issued by the auth layer and turns them into an
explicit CallerIdentity. Tokens are <base64url(json claims)>.<hmac hex>,
signed with settings.identity_token_secret.
"""
import base64
import json
from typing import Optional
import logging

from ..models.identity import CallerIdentity
from .signature_service import compute_hmac_sha256, verify_hmac_sha256

logger = logging.getLogger(__name__)


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def issue_identity_token(uid: str, email: Optional[str], secret_key: str) -> str:
    """
    Issue a signed identity token.

    Args:
        uid: Caller user id
        email: Caller email as verified by the identity provider
        secret_key: Identity token secret

    Returns:
        Token string for the Authorization: Bearer header
    """
    claims = json.dumps({"uid": uid, "email": email}, sort_keys=True, separators=(',', ':'))
    payload = _b64encode(claims.encode("utf-8"))
    return f"{payload}.{compute_hmac_sha256(payload, secret_key)}"


def verify_identity_token(token: Optional[str], secret_key: str) -> Optional[CallerIdentity]:
    """
    Verify a token and extract the caller identity.

    Returns:
        CallerIdentity, or None if the token is missing, malformed or forged
    """
    if not token or "." not in token:
        return None

    payload, signature = token.rsplit(".", 1)
    if not verify_hmac_sha256(payload, signature, secret_key):
        logger.warning("Rejected identity token with invalid signature")
        return None

    try:
        claims = json.loads(_b64decode(payload))
    except (ValueError, UnicodeDecodeError):
        logger.warning("Rejected identity token with undecodable claims")
        return None

    if not isinstance(claims, dict) or not claims.get("uid"):
        return None

    return CallerIdentity(uid=str(claims["uid"]), email=claims.get("email"))


def identity_from_authorization_header(
    authorization: Optional[str],
    secret_key: str
) -> Optional[CallerIdentity]:
    """Parse 'Bearer <token>' and verify it."""
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None

    return verify_identity_token(token.strip(), secret_key)
