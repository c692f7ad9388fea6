"""Ed25519 key handling, signing and signature checks.

Keys travel as PEM text (PKCS8 private, SubjectPublicKeyInfo public).
A creator identifier of the form ``pubkey:ed25519:<base64url>`` embeds
the raw 32-byte public key so that attestations can be verified
without an out-of-band key; any other creator string is opaque.

Signatures are computed over the canonical form and rendered as
``ed25519:<base64url>``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from canonicalize import canonicalize, canonicalize_attestation
from constants import (
    CREATOR_PUBKEY_PREFIX,
    ED25519_PUBLIC_KEY_SIZE,
    ED25519_SPKI_PREFIX,
    SIGNATURE_PREFIX,
)
from errors import ArrError, ErrorCodes
from models import Attestation, SignedAttestation
from utils import decode_base64url, encode_base64url

logger = logging.getLogger(__name__)

PrivateKeyLike = Union[str, bytes, ed25519.Ed25519PrivateKey]
PublicKeyLike = Union[str, bytes, ed25519.Ed25519PublicKey]


@dataclass(frozen=True)
class KeyPair:
    """Freshly generated Ed25519 key material."""

    private_key_pem: str
    public_key_pem: str
    creator: str


def load_private_key(private_key: PrivateKeyLike) -> ed25519.Ed25519PrivateKey:
    """
    Load an Ed25519 private key from PEM text or pass a key object through.

    Raises:
        ArrError: ``invalid_key`` if the PEM is unreadable or not Ed25519.
    """
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return private_key

    data = private_key.encode("utf-8") if isinstance(private_key, str) else private_key
    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError) as exc:
        raise ArrError(ErrorCodes.INVALID_KEY, f"Unreadable private key: {exc}") from exc

    if not isinstance(key, ed25519.Ed25519PrivateKey):
        raise ArrError(ErrorCodes.INVALID_KEY, "Private key is not an Ed25519 key.")
    return key


def load_public_key(public_key: PublicKeyLike) -> ed25519.Ed25519PublicKey:
    """
    Load an Ed25519 public key from PEM text or pass a key object through.

    Raises:
        ArrError: ``invalid_key`` if the PEM is unreadable or not Ed25519.
    """
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return public_key

    data = public_key.encode("utf-8") if isinstance(public_key, str) else public_key
    try:
        key = serialization.load_pem_public_key(data)
    except (ValueError, TypeError) as exc:
        raise ArrError(ErrorCodes.INVALID_KEY, f"Unreadable public key: {exc}") from exc

    if not isinstance(key, ed25519.Ed25519PublicKey):
        raise ArrError(ErrorCodes.INVALID_KEY, "Public key is not an Ed25519 key.")
    return key


def public_key_to_creator(public_key: PublicKeyLike) -> str:
    """Derive the ``pubkey:ed25519:`` creator identifier for a public key."""
    key = load_public_key(public_key)
    der = key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    raw = der[-ED25519_PUBLIC_KEY_SIZE:]
    return f"{CREATOR_PUBKEY_PREFIX}{encode_base64url(raw)}"


def generate_key_pair() -> KeyPair:
    """Generate an Ed25519 keypair and its derived creator identifier."""
    private_key = ed25519.Ed25519PrivateKey.generate()
    public_key = private_key.public_key()

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    public_pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")

    return KeyPair(
        private_key_pem=private_pem,
        public_key_pem=public_pem,
        creator=public_key_to_creator(public_key),
    )


def parse_creator_public_key(creator: str) -> ed25519.Ed25519PublicKey | None:
    """
    Recover the public key embedded in a creator identifier.

    Args:
        creator: Creator identifier from an attestation.

    Returns:
        The public key, or None if the identifier uses another scheme.

    Raises:
        ArrError: ``invalid_key`` if the embedded key is not 32 bytes.
        ValueError: If the embedded key is not valid base64url.
    """
    if not creator.startswith(CREATOR_PUBKEY_PREFIX):
        return None

    raw = decode_base64url(creator[len(CREATOR_PUBKEY_PREFIX):])
    if len(raw) != ED25519_PUBLIC_KEY_SIZE:
        raise ArrError(
            ErrorCodes.INVALID_KEY,
            "Creator key must contain a 32-byte Ed25519 public key.",
            {"length": len(raw)},
        )

    key = serialization.load_der_public_key(ED25519_SPKI_PREFIX + raw)
    if not isinstance(key, ed25519.Ed25519PublicKey):
        raise ArrError(ErrorCodes.INVALID_KEY, "Creator key is not an Ed25519 key.")
    return key


def _sign_bytes(data: bytes, private_key: PrivateKeyLike) -> str:
    signature = load_private_key(private_key).sign(data)
    return f"{SIGNATURE_PREFIX}{encode_base64url(signature)}"


def _verify_bytes(data: bytes, signature: str, public_key: PublicKeyLike) -> bool:
    if not signature.startswith(SIGNATURE_PREFIX):
        logger.debug("Rejecting signature with unsupported algorithm prefix")
        return False

    signature_bytes = decode_base64url(signature[len(SIGNATURE_PREFIX):])
    key = load_public_key(public_key)
    try:
        key.verify(signature_bytes, data)
    except InvalidSignature:
        return False
    return True


def sign(attestation: Attestation, private_key: PrivateKeyLike) -> str:
    """
    Sign an attestation's canonical form.

    Args:
        attestation: Attestation document.
        private_key: PEM text or Ed25519 private key.

    Returns:
        Signature string ``ed25519:<base64url>``.
    """
    return _sign_bytes(canonicalize_attestation(attestation), private_key)


def sign_attestation(attestation: Attestation, private_key: PrivateKeyLike) -> SignedAttestation:
    """Sign an attestation and wrap it in a signed envelope."""
    return {"attestation": attestation, "signature": sign(attestation, private_key)}


def verify_signature(
    attestation: Attestation,
    signature: str,
    public_key: PublicKeyLike,
) -> bool:
    """
    Check an attestation signature.

    Args:
        attestation: Attestation document as signed.
        signature: ``ed25519:<base64url>`` signature string.
        public_key: PEM text or Ed25519 public key.

    Returns:
        True if the signature matches, False otherwise.

    Raises:
        ValueError: If the signature payload is not base64url.
        ArrError: If the public key cannot be loaded.
    """
    return _verify_bytes(canonicalize_attestation(attestation), signature, public_key)


def sign_record(record: dict[str, Any], private_key: PrivateKeyLike) -> str:
    """Sign the canonical form of an arbitrary JSON record."""
    return _sign_bytes(canonicalize(record), private_key)


def verify_record_signature(
    record: dict[str, Any],
    signature: str,
    public_key: PublicKeyLike,
) -> bool:
    """Check a signature produced by ``sign_record``."""
    return _verify_bytes(canonicalize(record), signature, public_key)
