"""Webhook signature validation."""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def compute_signature(payload: bytes, secret: str) -> str:
    """Compute the X-Hub-Signature-256 value for a payload.

    Args:
        payload: The raw request body bytes.
        secret: The webhook secret configured in the GitHub App.

    Returns:
        ``sha256=`` followed by the hex HMAC digest.
    """
    return SIGNATURE_PREFIX + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """Verify the HMAC-SHA256 signature of a webhook payload.

    The digest is computed over the raw body exactly as received; a
    re-serialized JSON body is not byte-stable. Never raises: any problem
    with the header or the computation counts as a mismatch.

    Args:
        payload: The raw request body bytes.
        signature: The X-Hub-Signature-256 header value.
        secret: The webhook secret configured in the GitHub App.

    Returns:
        True if the signature matches.
    """
    if not signature or not signature.startswith(SIGNATURE_PREFIX):
        return False

    try:
        expected = compute_signature(payload, secret).encode()
        received = signature.encode()
    except Exception:  # noqa: BLE001
        return False

    # Length is public information; only content is compared in constant time
    if len(received) != len(expected):
        return False

    return hmac.compare_digest(received, expected)
