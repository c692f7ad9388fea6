"""Public façade for the ARR codec — re-exports every symbol.

Consumers should ``import provenance_handler`` rather than reaching
into the internal modules directly.  This file gathers all public
names so that the API surface stays stable even as the implementation
is reorganised.

Internal modules:

- ``constants``     — protocol literals
- ``errors``        — ``ArrError`` and error codes
- ``canonicalize``  — signing-input serialization
- ``validation``    — structural gate for untrusted payloads
- ``keys``          — Ed25519 keys, signing, creator identifiers
- ``verify``        — attestation verification
- ``attestation``   — building and renewing attestations
- ``revocation``    — signed revocation records
- ``signed``        — persisted-form serialization
- ``png_adapter``   — PNG iTXt embedding
- ``jpeg_adapter``  — JPEG APP1/XMP embedding
- ``sidecar``       — ``.arr`` companion files
- ``adapters``      — format detection and file-level helpers
"""

from adapters import (
    LoadedAttestation,
    attested_output_path,
    detect_file_format,
    embed_attestation_file,
    embed_attestation_in_metadata,
    extract_attestation_from_metadata,
    load_signed_attestation,
    remove_attestation_from_metadata,
)
from attestation import build_attestation, renew_attestation
from canonicalize import canonicalize, canonicalize_attestation
from constants import (
    ARR_ITXT_KEYWORD,
    ARR_VERSION,
    ARR_XMP_NAMESPACE,
    CREATOR_PUBKEY_PREFIX,
    SIGNATURE_PREFIX,
    SUPPORTED_FORMATS,
)
from errors import ArrError, ErrorCodes
from keys import (
    KeyPair,
    generate_key_pair,
    load_private_key,
    load_public_key,
    parse_creator_public_key,
    public_key_to_creator,
    sign,
    sign_attestation,
    verify_signature,
)
from models import (
    Attestation,
    ExtractedAttestation,
    Rejected,
    RevocationRecord,
    SignedAttestation,
    SignedRevocation,
    VerificationResult,
    Verified,
)
from revocation import build_revocation, sign_revocation, verify_revocation
from sidecar import read_sidecar, sidecar_path_for, write_sidecar
from signed import parse_signed_attestation_json, serialize_signed_attestation
from validation import (
    is_attestation,
    is_signed_attestation,
    parse_attestation,
    parse_signed_attestation,
)
from verify import verify_attestation

__all__ = [
    # Constants
    "ARR_VERSION",
    "ARR_ITXT_KEYWORD",
    "ARR_XMP_NAMESPACE",
    "CREATOR_PUBKEY_PREFIX",
    "SIGNATURE_PREFIX",
    "SUPPORTED_FORMATS",
    # Errors
    "ArrError",
    "ErrorCodes",
    # Models
    "Attestation",
    "SignedAttestation",
    "RevocationRecord",
    "SignedRevocation",
    "VerificationResult",
    "Verified",
    "Rejected",
    "ExtractedAttestation",
    "LoadedAttestation",
    # Canonical form
    "canonicalize",
    "canonicalize_attestation",
    # Validation
    "is_attestation",
    "is_signed_attestation",
    "parse_attestation",
    "parse_signed_attestation",
    # Keys and signing
    "KeyPair",
    "generate_key_pair",
    "load_private_key",
    "load_public_key",
    "parse_creator_public_key",
    "public_key_to_creator",
    "sign",
    "sign_attestation",
    "verify_signature",
    # Verification
    "verify_attestation",
    # Building
    "build_attestation",
    "renew_attestation",
    "build_revocation",
    "sign_revocation",
    "verify_revocation",
    # Persisted form
    "parse_signed_attestation_json",
    "serialize_signed_attestation",
    # Sidecar
    "sidecar_path_for",
    "write_sidecar",
    "read_sidecar",
    # Metadata adapters
    "detect_file_format",
    "extract_attestation_from_metadata",
    "embed_attestation_in_metadata",
    "remove_attestation_from_metadata",
    "attested_output_path",
    "embed_attestation_file",
    "load_signed_attestation",
]
