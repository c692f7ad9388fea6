"""Error codes and the single exception type raised by the ARR codec.

Verification never raises; everything else (validators, binary
adapters, sidecar and config readers, the CLI) signals failures with
``ArrError`` carrying one of the codes below, which callers map to
user-facing messages and exit codes.
"""

from __future__ import annotations

from typing import Any

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE_ERROR = 2


class ErrorCodes:
    """ARR error codes."""

    # Attestation payloads
    MALFORMED = "malformed"
    MALFORMED_JSON = "malformed_json"
    INVALID_EXPIRES = "invalid_expires"

    # Binary adapters
    INVALID_PNG = "invalid_png"
    INVALID_JPEG = "invalid_jpeg"
    UNSUPPORTED_ITXT_COMPRESSION = "unsupported_itxt_compression"
    XMP_TOO_LARGE = "xmp_too_large"
    UNSUPPORTED_FORMAT = "unsupported_format"

    # Files and configuration
    ATTESTATION_NOT_FOUND = "attestation_not_found"
    FILE_NOT_FOUND = "file_not_found"
    INVALID_CONFIG = "invalid_config"
    INVALID_KEY = "invalid_key"

    # CLI usage
    MISSING_FLAG = "missing_flag"


class ArrError(Exception):
    """Base exception for ARR codec errors."""

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ArrError(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Return error as dictionary for JSON output."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return error
