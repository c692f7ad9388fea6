"""Format detection and dispatch to the PNG/JPEG adapters.

Byte-level functions pick the adapter from the file's magic bytes.  The
path-level helpers read whole files, run the adapter and write the
result through a temporary sibling so a failed embed never leaves a
partial output file behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from constants import ATTESTED_INFIX, FORMAT_JPEG, FORMAT_PNG, FORMAT_UNKNOWN, SIDECAR_SUFFIX
from errors import ArrError, ErrorCodes
from jpeg_adapter import (
    embed_jpeg_attestation,
    extract_jpeg_attestation,
    is_jpeg,
    remove_jpeg_attestation,
)
from models import EmbeddedFormat, ExtractedAttestation, FileFormat, SignedAttestation
from png_adapter import (
    embed_png_attestation,
    extract_png_attestation,
    is_png,
    remove_png_attestation,
)
from sidecar import read_sidecar, sidecar_path_for
from signed import parse_signed_attestation_json
from utils import write_atomic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedAttestation:
    """A signed attestation together with where it was found."""

    signed: SignedAttestation
    source: str
    path: Path
    format: EmbeddedFormat | None = None


def detect_file_format(data: bytes) -> FileFormat:
    """
    Detect the file format from magic bytes.

    Returns:
        ``"png"``, ``"jpeg"``, or ``"unknown"`` (callers fall back to a sidecar).
    """
    if is_png(data):
        return FORMAT_PNG
    if is_jpeg(data):
        return FORMAT_JPEG
    return FORMAT_UNKNOWN


def extract_attestation_from_metadata(data: bytes) -> ExtractedAttestation | None:
    """
    Extract an embedded attestation from PNG or JPEG bytes.

    Returns:
        The attestation and its container format, or None if there is none
        or the format is not supported.
    """
    if is_png(data):
        signed = extract_png_attestation(data)
        return ExtractedAttestation(FORMAT_PNG, signed) if signed else None

    if is_jpeg(data):
        signed = extract_jpeg_attestation(data)
        return ExtractedAttestation(FORMAT_JPEG, signed) if signed else None

    return None


def embed_attestation_in_metadata(
    data: bytes,
    signed: SignedAttestation,
    file_format: FileFormat | None = None,
) -> bytes:
    """
    Embed a signed attestation in PNG or JPEG bytes.

    Args:
        data: Whole file.
        signed: Signed attestation.
        file_format: Format override; detected from ``data`` when omitted.

    Returns:
        New file bytes.

    Raises:
        ArrError: ``unsupported_format`` for anything but PNG/JPEG, or an
            adapter error.
    """
    file_format = file_format or detect_file_format(data)

    if file_format == FORMAT_PNG:
        return embed_png_attestation(data, signed)
    if file_format == FORMAT_JPEG:
        return embed_jpeg_attestation(data, signed)

    raise ArrError(
        ErrorCodes.UNSUPPORTED_FORMAT,
        "Metadata embedding currently supports only PNG and JPEG.",
        {"format": file_format},
    )


def remove_attestation_from_metadata(data: bytes) -> bytes:
    """Strip any embedded attestation from PNG or JPEG bytes."""
    if is_png(data):
        return remove_png_attestation(data)
    if is_jpeg(data):
        return remove_jpeg_attestation(data)

    raise ArrError(
        ErrorCodes.UNSUPPORTED_FORMAT,
        "Metadata removal currently supports only PNG and JPEG.",
    )


def attested_output_path(input_path: Path, output_dir: Path | None = None) -> Path:
    """Default output path for an embedded copy: ``name.attested.ext``."""
    input_path = Path(input_path)
    directory = Path(output_dir) if output_dir is not None else input_path.parent
    return directory / f"{input_path.stem}{ATTESTED_INFIX}{input_path.suffix}"


def embed_attestation_file(
    source_path: Path,
    signed: SignedAttestation,
    output_path: Path | None = None,
) -> Path:
    """
    Embed a signed attestation into an image file.

    Args:
        source_path: PNG or JPEG file.
        signed: Signed attestation.
        output_path: Optional output path. Defaults to ``name.attested.ext``
            next to the source.

    Returns:
        Path to the written file.
    """
    source_path = Path(source_path)
    embedded = embed_attestation_in_metadata(source_path.read_bytes(), signed)

    if output_path is None:
        output_path = attested_output_path(source_path)

    write_atomic(Path(output_path), embedded)
    logger.info("Embedded ARR attestation: %s", output_path)
    return Path(output_path)


def load_signed_attestation(file_path: Path) -> LoadedAttestation:
    """
    Find the signed attestation for a file.

    Lookup order: the file itself when it is a sidecar, then embedded
    PNG/JPEG metadata, then ``<file>.arr``.

    Raises:
        ArrError: ``attestation_not_found`` when nothing is found, or a
            payload/adapter error.
    """
    file_path = Path(file_path)

    if file_path.name.endswith(SIDECAR_SUFFIX):
        raw = file_path.read_text(encoding="utf-8")
        return LoadedAttestation(parse_signed_attestation_json(raw), "sidecar", file_path)

    extracted = extract_attestation_from_metadata(file_path.read_bytes())
    if extracted is not None:
        return LoadedAttestation(extracted.signed, "metadata", file_path, extracted.format)

    logger.debug("No embedded attestation in %s, trying sidecar", file_path)
    if not sidecar_path_for(file_path).exists():
        raise ArrError(
            ErrorCodes.ATTESTATION_NOT_FOUND,
            "No ARR attestation found in metadata and no sidecar file was found.",
            {"path": str(file_path)},
        )

    sidecar_path, signed = read_sidecar(file_path)
    return LoadedAttestation(signed, "sidecar", sidecar_path)
