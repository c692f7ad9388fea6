"""Sidecar files: ``<original>.arr`` next to the attested file.

Used for formats without an embedding adapter, or whenever the caller
prefers to leave the original bytes untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path

from constants import SIDECAR_SUFFIX
from models import SignedAttestation
from signed import parse_signed_attestation_json, serialize_signed_attestation
from utils import encode_utf8, write_atomic

logger = logging.getLogger(__name__)


def sidecar_path_for(original_path: Path) -> Path:
    """
    Derive the sidecar path for a file.

    Args:
        original_path: Attested file, or a path that is already a sidecar.

    Returns:
        ``<original_path>.arr``, or the path itself if it already ends in ``.arr``.
    """
    original_path = Path(original_path)
    if original_path.name.endswith(SIDECAR_SUFFIX):
        return original_path
    return original_path.with_name(original_path.name + SIDECAR_SUFFIX)


def write_sidecar(
    original_path: Path,
    signed: SignedAttestation,
    out_path: Path | None = None,
) -> Path:
    """
    Write a signed attestation to a sidecar file.

    Args:
        original_path: Attested file.
        signed: Signed attestation.
        out_path: Optional explicit sidecar location.

    Returns:
        Path of the written sidecar.
    """
    target = Path(out_path) if out_path is not None else sidecar_path_for(original_path)
    write_atomic(target, encode_utf8(serialize_signed_attestation(signed)))
    logger.info("Wrote ARR sidecar: %s", target)
    return target


def read_sidecar(path_or_original: Path) -> tuple[Path, SignedAttestation]:
    """
    Read and validate a sidecar file.

    Args:
        path_or_original: Sidecar path or the attested file it belongs to.

    Returns:
        Tuple of the sidecar path and the signed attestation.

    Raises:
        FileNotFoundError: If the sidecar does not exist.
        ArrError: ``malformed_json``/``malformed`` for a bad payload.
    """
    target = sidecar_path_for(path_or_original)
    raw = target.read_text(encoding="utf-8")
    return target, parse_signed_attestation_json(raw)
