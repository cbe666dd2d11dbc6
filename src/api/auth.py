"""Webhook signature verification for GitHub deliveries.

GitHub signs the raw request body with the shared secret and sends the
result as ``X-Hub-Signature: sha1=<hex_digest>``.
"""

import hashlib
import hmac
from typing import Optional

import structlog

from ..utils.constants import SIGNATURE_PREFIX

logger = structlog.get_logger()


def compute_signature(payload_body: bytes, secret: str) -> str:
    """Return the ``sha1=<hex>`` signature GitHub would send for a body."""
    digest = hmac.new(
        secret.encode("utf-8"),
        payload_body,
        hashlib.sha1,
    ).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_github_signature(
    payload_body: bytes,
    signature_header: Optional[str],
    secret: str,
) -> bool:
    """Verify GitHub webhook HMAC-SHA1 signature.

    The whole body is the HMAC input, so it must be read in full first.
    """
    if not signature_header:
        logger.warning("GitHub webhook missing signature header")
        return False

    expected_signature = compute_signature(payload_body, secret)

    return hmac.compare_digest(
        expected_signature.encode("utf-8"), signature_header.encode("utf-8")
    )
