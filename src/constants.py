"""Shared constants for the ARR attestation codec.

All modules reference these constants rather than hard-coding values,
so a protocol revision or a new reserved keyword requires updating only
this file.
"""

# Protocol revision accepted by the verifier
ARR_VERSION = "arr/0.1"

# Signature and creator identifier prefixes
SIGNATURE_PREFIX = "ed25519:"
CREATOR_PUBKEY_PREFIX = "pubkey:ed25519:"

# DER SubjectPublicKeyInfo header for a raw 32-byte Ed25519 key
ED25519_SPKI_PREFIX = bytes.fromhex("302a300506032b6570032100")
ED25519_PUBLIC_KEY_SIZE = 32

# Verification failure reasons
REASON_INVALID_SIGNATURE = "invalid_signature"
REASON_UNSUPPORTED_VERSION = "unsupported_version"
REASON_MALFORMED = "malformed"
REASON_MISSING_PUBLIC_KEY = "missing_public_key"

VERIFY_REASONS = (
    REASON_INVALID_SIGNATURE,
    REASON_UNSUPPORTED_VERSION,
    REASON_MALFORMED,
    REASON_MISSING_PUBLIC_KEY,
)

# Attestation fields: name -> expected kind
REQUIRED_FIELDS = ("version", "id", "created", "creator")
OPTIONAL_FIELDS = {
    "intent": "string",
    "tool": "string",
    "upstream": "string_list",
    "content_hash": "string",
    "expires": "string",
    "revocable": "boolean",
    "license": "string",
    "renews": "string",
    "extensions": "record",
}

# PNG signature and reserved iTXt keyword
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
PNG_ITXT_CHUNK = b"iTXt"
PNG_IEND_CHUNK = b"IEND"
ARR_ITXT_KEYWORD = "arr.attestation"

# JPEG markers
JPEG_SOI = b"\xff\xd8"
JPEG_EOI = b"\xff\xd9"
JPEG_MARKER_PREFIX = 0xFF
JPEG_MARKER_APP1 = 0xE1
JPEG_MARKER_SOS = 0xDA
JPEG_MARKER_EOI = 0xD9
JPEG_MARKER_TEM = 0x01
JPEG_MAX_SEGMENT_LENGTH = 0xFFFF

# XMP packet embedding
XMP_IDENTIFIER = b"http://ns.adobe.com/xap/1.0/\x00"
ARR_XMP_NAMESPACE = "http://arr.protocol/1.0/"
ARR_XMP_ELEMENT = "arr:attestation"

# File formats handled by the metadata adapters
FORMAT_PNG = "png"
FORMAT_JPEG = "jpeg"
FORMAT_UNKNOWN = "unknown"
SUPPORTED_FORMATS = {".png", ".jpg", ".jpeg"}

# Sidecar and attested output naming
SIDECAR_SUFFIX = ".arr"
ATTESTED_INFIX = ".attested"

# User configuration
CONFIG_FILENAME = ".arrrc.json"
MODES = ("auto", "sidecar", "metadata")
INTENT_POLICIES = ("none", "fixed", "filename")
KEY_FILENAMES = ("arr-ed25519-private.pem", "arr-ed25519-public.pem")
