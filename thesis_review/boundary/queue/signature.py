"""
Inbound signature verification.

The broker signs every delivery with a JWT (HS256) carried in the
``Upstash-Signature`` header. The token's ``body`` claim is the base64url
SHA-256 of the raw request body; ``sub`` is the destination URL. The
current key is tried first, then the next key, so keys can be rotated
without downtime.

Dependencies: PyJWT
System role: Stage endpoint authentication
"""

import base64
import hashlib
import logging

import jwt

from thesis_review.configs.queue import QueueSettings

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Upstash-Signature"
ISSUER = "Upstash"


def body_digest(body: bytes) -> str:
    """base64url(sha256(body)) without padding."""
    digest = hashlib.sha256(body).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class SignatureVerifier:
    """Verifies broker signatures against the current and next signing keys."""

    def __init__(self, settings: QueueSettings) -> None:
        self._keys = [
            key for key in (settings.current_signing_key, settings.next_signing_key) if key
        ]
        self._leeway = settings.signature_clock_tolerance_seconds

    @property
    def enabled(self) -> bool:
        """Whether any signing key is configured."""
        return bool(self._keys)

    def verify(self, signature: str | None, body: bytes, url: str | None = None) -> bool:
        """
        Check a signature against the raw body.

        With no signing key configured every request is accepted. With keys
        configured a missing signature is rejected.

        Args:
            signature: Header value
            body: Raw request body
            url: Destination URL to match against the ``sub`` claim, if known

        Returns:
            bool: True if the signature is valid under either key
        """
        if not self.enabled:
            return True
        if not signature:
            logger.warning("verify - Missing signature")
            return False

        for key in self._keys:
            if self._verify_with_key(signature, body, key, url):
                return True

        logger.warning("verify - Signature rejected by all signing keys")
        return False

    def _verify_with_key(self, signature: str, body: bytes, key: str, url: str | None) -> bool:
        try:
            claims = jwt.decode(
                signature,
                key,
                algorithms=["HS256"],
                issuer=ISSUER,
                leeway=self._leeway,
                options={"require": ["iss", "exp", "nbf"]},
            )
        except jwt.InvalidTokenError as e:
            logger.debug(f"_verify_with_key - Token invalid: {type(e).__name__}")
            return False

        if url is not None and claims.get("sub") != url:
            logger.debug("_verify_with_key - Subject does not match destination URL")
            return False

        return claims.get("body", "").rstrip("=") == body_digest(body)
