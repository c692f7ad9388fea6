"""Structural gate for untrusted attestation payloads.

Every value read from a sidecar, an image or a network request passes
through ``parse_signed_attestation`` before it is treated as a real
attestation.  Checks are shallow: required string fields, declared
types for optional fields, ``extensions`` must be a record.  Fields the
protocol does not declare are carried through untouched because they
are part of the signed canonical form.
"""

from __future__ import annotations

from typing import Any

from constants import OPTIONAL_FIELDS, REQUIRED_FIELDS
from errors import ArrError, ErrorCodes
from models import Attestation, SignedAttestation


def _is_record(value: Any) -> bool:
    return isinstance(value, dict)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(entry, str) for entry in value)


def _matches_kind(value: Any, kind: str) -> bool:
    if kind == "string":
        return isinstance(value, str)
    if kind == "boolean":
        return isinstance(value, bool)
    if kind == "string_list":
        return _is_string_list(value)
    if kind == "record":
        return _is_record(value)
    return False


def is_attestation(value: Any) -> bool:
    """
    Check whether a value has the shape of an attestation.

    Args:
        value: Decoded JSON value.

    Returns:
        True if required fields are strings and optional fields match their types.
    """
    if not _is_record(value):
        return False

    for field in REQUIRED_FIELDS:
        if not isinstance(value.get(field), str):
            return False

    for field, kind in OPTIONAL_FIELDS.items():
        if field in value and not _matches_kind(value[field], kind):
            return False

    return True


def is_signed_attestation(value: Any) -> bool:
    """Check whether a value is a ``{attestation, signature}`` envelope."""
    if not _is_record(value):
        return False
    return isinstance(value.get("signature"), str) and is_attestation(value.get("attestation"))


def parse_attestation(value: Any) -> Attestation:
    """
    Accept a value as an attestation or reject it.

    Raises:
        ArrError: ``malformed`` if the value fails the structural checks.
    """
    if not is_attestation(value):
        raise ArrError(ErrorCodes.MALFORMED, "Attestation payload is malformed.")
    return value


def parse_signed_attestation(value: Any) -> SignedAttestation:
    """
    Accept a value as a signed attestation envelope or reject it.

    Raises:
        ArrError: ``malformed`` if the value fails the structural checks.
    """
    if not is_signed_attestation(value):
        raise ArrError(ErrorCodes.MALFORMED, "Signed attestation payload is malformed.")
    return value
