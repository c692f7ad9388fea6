"""Persisted form of signed attestations.

The persisted form is pretty-printed JSON (2-space indent, original key
order, trailing newline).  It is what sidecars and both embedded
payloads carry; the canonical form is never stored.
"""

from __future__ import annotations

import json

from errors import ArrError, ErrorCodes
from models import SignedAttestation
from validation import parse_signed_attestation


def serialize_signed_attestation(signed: SignedAttestation) -> str:
    """Render a signed attestation in the persisted form."""
    return json.dumps(signed, indent=2, ensure_ascii=False) + "\n"


def parse_signed_attestation_json(raw: str) -> SignedAttestation:
    """
    Parse persisted-form JSON and validate its shape.

    Args:
        raw: JSON text.

    Returns:
        The validated signed attestation.

    Raises:
        ArrError: ``malformed_json`` for invalid JSON, ``malformed`` for a bad shape.
    """
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise ArrError(ErrorCodes.MALFORMED_JSON, "Signed attestation JSON is invalid.") from exc

    return parse_signed_attestation(parsed)
