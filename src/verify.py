"""Attestation verification.

``verify_attestation`` runs a fixed sequence of checks and reports the
first failure; it never raises:

1. structure        -> ``malformed``
2. version          -> ``unsupported_version``
3. key resolution   -> ``malformed`` / ``missing_public_key``
4. signature        -> ``invalid_signature`` / ``malformed``
5. expiry           -> ``malformed`` on an unparseable date

Revocation is not consulted here; revocation records are separate
signed documents (see ``revocation``).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from constants import (
    ARR_VERSION,
    REASON_INVALID_SIGNATURE,
    REASON_MALFORMED,
    REASON_MISSING_PUBLIC_KEY,
    REASON_UNSUPPORTED_VERSION,
)
from keys import PublicKeyLike, parse_creator_public_key, verify_signature
from models import Rejected, VerificationResult, Verified
from utils import parse_timestamp
from validation import is_signed_attestation

logger = logging.getLogger(__name__)


def _resolve_public_key(
    attestation: dict[str, Any],
    explicit_public_key: PublicKeyLike | None,
) -> PublicKeyLike | None:
    if explicit_public_key:
        return explicit_public_key
    return parse_creator_public_key(attestation["creator"])


def verify_attestation(
    signed: Any,
    explicit_public_key: PublicKeyLike | None = None,
    now: datetime | None = None,
) -> VerificationResult:
    """
    Verify a signed attestation.

    Args:
        signed: Signed envelope, possibly straight from untrusted JSON.
        explicit_public_key: Key to use instead of the one in ``creator``.
        now: Reference time for the expiry check (defaults to current UTC time).

    Returns:
        ``Verified(expired=...)`` or ``Rejected(reason=...)``.
    """
    if not is_signed_attestation(signed):
        return Rejected(REASON_MALFORMED)

    attestation = signed["attestation"]

    if attestation["version"] != ARR_VERSION:
        return Rejected(REASON_UNSUPPORTED_VERSION)

    try:
        public_key = _resolve_public_key(attestation, explicit_public_key)
    except Exception as exc:
        logger.debug("Creator key could not be parsed: %s", exc)
        return Rejected(REASON_MALFORMED)

    if public_key is None:
        return Rejected(REASON_MISSING_PUBLIC_KEY)

    try:
        signature_valid = verify_signature(attestation, signed["signature"], public_key)
    except Exception as exc:
        logger.debug("Signature check failed with an error: %s", exc)
        return Rejected(REASON_MALFORMED)

    if not signature_valid:
        return Rejected(REASON_INVALID_SIGNATURE)

    expires = attestation.get("expires")
    if expires is None:
        return Verified(expired=False)

    try:
        expiry = parse_timestamp(expires)
    except ValueError:
        logger.debug("Unparseable expires value: %r", expires)
        return Rejected(REASON_MALFORMED)

    current = now if now is not None else datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return Verified(expired=current > expiry)
