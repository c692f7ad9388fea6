"""Low-level utility helpers used across the codec.

Base64url, UTF-8, timestamp and file helpers.  Nothing here imports
from the higher-level modules.
"""

from __future__ import annotations

import base64
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from constants import SUPPORTED_FORMATS
from errors import ArrError, ErrorCodes

_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*={0,2}$")


def encode_base64url(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def decode_base64url(value: str) -> bytes:
    """
    Decode base64url text, with or without padding.

    Args:
        value: Encoded text.

    Returns:
        Decoded bytes.

    Raises:
        ValueError: If the text is not valid base64url.
    """
    if not _BASE64URL_RE.match(value):
        raise ValueError("Invalid base64url value.")

    stripped = value.rstrip("=")
    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except ValueError as exc:
        raise ValueError("Invalid base64url value.") from exc


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 date or date-time into an aware UTC datetime.

    A trailing ``Z`` is accepted; values without an offset are read as UTC.

    Args:
        value: Date string such as ``2026-01-01`` or ``2026-01-01T00:00:00Z``.

    Returns:
        Timezone-aware datetime.

    Raises:
        ValueError: If the value is not a recognisable ISO 8601 date.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid date: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)

    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError as exc:
        # Years 1 and 9999 with an offset can leave the datetime range in UTC.
        raise ValueError(f"Date out of range: {value!r}") from exc


def is_supported_format(file_path: Path) -> bool:
    """
    Check if the file extension belongs to an embeddable image format.

    Args:
        file_path: Path to the file.

    Returns:
        True if the extension is PNG or JPEG, False otherwise.
    """
    return file_path.suffix.lower() in SUPPORTED_FORMATS


def encode_utf8(text: str) -> bytes:
    """
    Encode text as UTF-8.

    Raises:
        ArrError: ``malformed`` if the text holds a lone surrogate.
    """
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ArrError(
            ErrorCodes.MALFORMED,
            "Text contains characters that cannot be encoded as UTF-8.",
            {"position": exc.start},
        ) from exc


def write_atomic(output_path: Path, data: bytes) -> Path:
    """
    Write bytes through a uniquely named temporary sibling, then replace.

    The target is either left untouched or fully written; the temporary
    file is removed when the write or the rename fails.

    Args:
        output_path: Final file location. Parent directories are created.
        data: File contents.

    Returns:
        The output path.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    temp_file = tempfile.NamedTemporaryFile(
        dir=output_path.parent,
        prefix=f".{output_path.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_output = Path(temp_file.name)
    try:
        with temp_file:
            temp_file.write(data)
        os.chmod(temp_output, 0o644)
        temp_output.replace(output_path)
    except OSError:
        temp_output.unlink(missing_ok=True)
        raise
    return output_path
