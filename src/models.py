"""Typed shapes for attestations, signed envelopes and verification results.

Attestations stay plain ``dict`` objects on the wire so that their key
order and any forward-compatible fields survive a read/write cycle;
the ``TypedDict`` declarations document their shape.  The verification
result is a closed variant: ``Verified`` or ``Rejected``, never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, TypedDict, Union

FileFormat = Literal["png", "jpeg", "unknown"]
EmbeddedFormat = Literal["png", "jpeg"]
VerifyReason = Literal[
    "invalid_signature",
    "unsupported_version",
    "malformed",
    "missing_public_key",
]


class _AttestationRequired(TypedDict):
    version: str
    id: str
    created: str
    creator: str


class Attestation(_AttestationRequired, total=False):
    """Unsigned provenance claim."""

    intent: str
    tool: str
    upstream: list[str]
    content_hash: str
    expires: str
    revocable: bool
    license: str
    renews: str
    extensions: dict[str, Any]


class SignedAttestation(TypedDict):
    attestation: Attestation
    signature: str


class _RevocationRequired(TypedDict):
    attestation_id: str
    revoked_at: str


class RevocationRecord(_RevocationRequired, total=False):
    reason: str


class SignedRevocation(TypedDict):
    revocation: RevocationRecord
    signature: str


@dataclass(frozen=True)
class Verified:
    """Signature checked out; ``expired`` reports the expiry comparison."""

    expired: bool = False

    @property
    def valid(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"valid": True, "expired": self.expired}


@dataclass(frozen=True)
class Rejected:
    """Verification failed for ``reason``."""

    reason: VerifyReason

    @property
    def valid(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"valid": False, "reason": self.reason}


VerificationResult = Union[Verified, Rejected]


@dataclass(frozen=True)
class ExtractedAttestation:
    """A signed attestation pulled out of image metadata."""

    format: EmbeddedFormat
    signed: SignedAttestation
