"""Signed revocation records.

A revocation is its own signed document ``{revocation, signature}``
pointing at an attestation id, signed over the canonical form of the
record the same way attestations are.  Publishing and enforcing
revocations is left to whoever consumes them; ``verify_attestation``
does not look at them.
"""

from __future__ import annotations

from typing import Any

from errors import ArrError, ErrorCodes
from keys import PrivateKeyLike, PublicKeyLike, sign_record, verify_record_signature
from models import RevocationRecord, SignedRevocation
from utils import utc_now_iso


def build_revocation(
    attestation_id: str,
    reason: str | None = None,
    revoked_at: str | None = None,
) -> RevocationRecord:
    """Build a revocation record, timestamped now unless ``revoked_at`` is given."""
    record: RevocationRecord = {
        "attestation_id": attestation_id,
        "revoked_at": revoked_at or utc_now_iso(),
    }
    if reason:
        record["reason"] = reason
    return record


def sign_revocation(
    attestation_id: str,
    private_key: PrivateKeyLike,
    reason: str | None = None,
    revoked_at: str | None = None,
) -> SignedRevocation:
    """
    Create and sign a revocation record.

    Args:
        attestation_id: Id of the attestation being revoked.
        private_key: PEM text or Ed25519 private key of the creator.
        reason: Optional human-readable reason.
        revoked_at: Optional timestamp; defaults to now.

    Returns:
        Signed revocation envelope.
    """
    record = build_revocation(attestation_id, reason, revoked_at)
    return {"revocation": record, "signature": sign_record(dict(record), private_key)}


def _is_revocation_record(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    if not isinstance(value.get("attestation_id"), str):
        return False
    if not isinstance(value.get("revoked_at"), str):
        return False
    return "reason" not in value or isinstance(value["reason"], str)


def parse_signed_revocation(value: Any) -> SignedRevocation:
    """
    Accept a value as a signed revocation envelope or reject it.

    Raises:
        ArrError: ``malformed`` if the value fails the structural checks.
    """
    if (
        not isinstance(value, dict)
        or not isinstance(value.get("signature"), str)
        or not _is_revocation_record(value.get("revocation"))
    ):
        raise ArrError(ErrorCodes.MALFORMED, "Signed revocation payload is malformed.")
    return value


def verify_revocation(signed: Any, public_key: PublicKeyLike) -> bool:
    """
    Check a signed revocation.

    Returns:
        True if the envelope is well formed and the signature matches.
    """
    try:
        envelope = parse_signed_revocation(signed)
        return verify_record_signature(envelope["revocation"], envelope["signature"], public_key)
    except (ArrError, ValueError):
        return False
