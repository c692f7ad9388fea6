"""ARR attestation embedding in JPEG files.

A JPEG file is SOI followed by marker segments.  Each marker is
``0xFF`` (plus optional ``0xFF`` fill bytes) and a type byte; RSTn and
TEM stand alone, every other marker carries a 2-byte big-endian length
that counts itself.  Scanning stops at SOS or EOI, and everything from
there on is kept verbatim as the tail.

The attestation lives in an APP1 segment holding the Adobe XMP
identifier and a small XMP packet with an ``<arr:attestation>`` element
in the ``http://arr.protocol/1.0/`` namespace.  The element text is the
persisted-form JSON, XML-escaped.
"""

from __future__ import annotations

import logging
import re
import struct
from typing import NamedTuple

from constants import (
    ARR_XMP_ELEMENT,
    ARR_XMP_NAMESPACE,
    JPEG_EOI,
    JPEG_MARKER_APP1,
    JPEG_MARKER_EOI,
    JPEG_MARKER_PREFIX,
    JPEG_MARKER_SOS,
    JPEG_MARKER_TEM,
    JPEG_MAX_SEGMENT_LENGTH,
    JPEG_SOI,
    XMP_IDENTIFIER,
)
from errors import ArrError, ErrorCodes
from models import SignedAttestation
from signed import parse_signed_attestation_json, serialize_signed_attestation
from utils import encode_utf8

logger = logging.getLogger(__name__)

_ATTESTATION_RE = re.compile(
    rf"<{ARR_XMP_ELEMENT}>(.*?)</{ARR_XMP_ELEMENT}>",
    re.DOTALL,
)

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


class JpegSplit(NamedTuple):
    """SOI, the header segments before the scan, and the untouched tail."""

    soi: bytes
    segments: list[bytes]
    tail: bytes


def is_jpeg(data: bytes) -> bool:
    """Check for the SOI marker."""
    return len(data) >= 4 and data[:2] == JPEG_SOI


def _is_standalone_marker(marker: int) -> bool:
    return marker == JPEG_MARKER_TEM or 0xD0 <= marker <= 0xD7


def split_jpeg(data: bytes) -> JpegSplit:
    """
    Split a JPEG file into SOI, header segments and tail.

    Args:
        data: Whole JPEG file.

    Returns:
        The split; segments keep their marker and length bytes.

    Raises:
        ArrError: ``invalid_jpeg`` for a bad marker stream.
    """
    if not is_jpeg(data):
        raise ArrError(ErrorCodes.INVALID_JPEG, "Input is not a JPEG file.")

    soi = data[:2]
    segments: list[bytes] = []
    offset = 2
    total = len(data)

    while offset < total:
        if data[offset] != JPEG_MARKER_PREFIX:
            raise ArrError(
                ErrorCodes.INVALID_JPEG,
                "Expected marker prefix in JPEG stream.",
                {"offset": offset},
            )

        marker_start = offset
        offset += 1

        while offset < total and data[offset] == JPEG_MARKER_PREFIX:
            offset += 1

        if offset >= total:
            raise ArrError(ErrorCodes.INVALID_JPEG, "Unexpected end of JPEG marker stream.")

        marker = data[offset]
        offset += 1

        if marker in (JPEG_MARKER_SOS, JPEG_MARKER_EOI):
            return JpegSplit(soi, segments, data[marker_start:])

        if _is_standalone_marker(marker):
            segments.append(data[marker_start:offset])
            continue

        if offset + 2 > total:
            raise ArrError(ErrorCodes.INVALID_JPEG, "JPEG segment missing length field.")

        segment_length = struct.unpack(">H", data[offset : offset + 2])[0]
        if segment_length < 2:
            raise ArrError(ErrorCodes.INVALID_JPEG, "JPEG segment has invalid length.")

        segment_end = offset + segment_length
        if segment_end > total:
            raise ArrError(
                ErrorCodes.INVALID_JPEG,
                "JPEG segment length exceeds file bounds.",
                {"offset": marker_start, "length": segment_length},
            )

        segments.append(data[marker_start:segment_end])
        offset = segment_end

    return JpegSplit(soi, segments, JPEG_EOI)


def escape_xml(value: str) -> str:
    """Escape the five XML special characters."""
    for char, entity in _XML_ESCAPES:
        value = value.replace(char, entity)
    return value


def unescape_xml(value: str) -> str:
    """Reverse ``escape_xml``; ``&amp;`` is decoded last."""
    for char, entity in reversed(_XML_ESCAPES):
        value = value.replace(entity, char)
    return value


def build_xmp_packet(signed: SignedAttestation) -> str:
    """Wrap a signed attestation in an XMP packet."""
    escaped = escape_xml(serialize_signed_attestation(signed))
    return "".join(
        [
            '<x:xmpmeta xmlns:x="adobe:ns:meta/">',
            '<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">',
            f'<rdf:Description rdf:about="" xmlns:arr="{ARR_XMP_NAMESPACE}">',
            f"<{ARR_XMP_ELEMENT}>{escaped}</{ARR_XMP_ELEMENT}>",
            "</rdf:Description>",
            "</rdf:RDF>",
            "</x:xmpmeta>",
        ]
    )


def create_app1_segment(signed: SignedAttestation) -> bytes:
    """
    Build the APP1 segment carrying the ARR XMP packet.

    Raises:
        ArrError: ``xmp_too_large`` if the segment would exceed 65535 bytes.
    """
    payload = XMP_IDENTIFIER + encode_utf8(build_xmp_packet(signed))
    segment_length = len(payload) + 2

    if segment_length > JPEG_MAX_SEGMENT_LENGTH:
        raise ArrError(
            ErrorCodes.XMP_TOO_LARGE,
            "ARR XMP payload exceeds JPEG APP1 limits.",
            {"length": segment_length},
        )

    return bytes([JPEG_MARKER_PREFIX, JPEG_MARKER_APP1]) + struct.pack(">H", segment_length) + payload


def _xmp_text(segment: bytes) -> str | None:
    if len(segment) < 4 or segment[0] != JPEG_MARKER_PREFIX or segment[1] != JPEG_MARKER_APP1:
        return None

    payload = segment[4:]
    if not payload.startswith(XMP_IDENTIFIER):
        return None

    return payload[len(XMP_IDENTIFIER) :].decode("utf-8", errors="replace")


def _is_arr_segment(segment: bytes) -> bool:
    xml = _xmp_text(segment)
    return xml is not None and ARR_XMP_NAMESPACE in xml and f"<{ARR_XMP_ELEMENT}>" in xml


def extract_jpeg_attestation(data: bytes) -> SignedAttestation | None:
    """
    Extract the signed attestation from a JPEG file.

    Args:
        data: Whole JPEG file.

    Returns:
        The signed attestation, or None if the file carries none.

    Raises:
        ArrError: ``invalid_jpeg`` for structural errors,
            ``malformed_json``/``malformed`` for a bad payload.
    """
    for segment in split_jpeg(data).segments:
        if not _is_arr_segment(segment):
            continue

        match = _ATTESTATION_RE.search(_xmp_text(segment) or "")
        if match is None:
            logger.debug("ARR XMP segment without a closed attestation element")
            continue

        return parse_signed_attestation_json(unescape_xml(match.group(1).strip()))

    return None


def has_jpeg_attestation(data: bytes) -> bool:
    """Check whether a JPEG file carries an ARR XMP segment."""
    return any(_is_arr_segment(segment) for segment in split_jpeg(data).segments)


def embed_jpeg_attestation(data: bytes, signed: SignedAttestation) -> bytes:
    """
    Embed a signed attestation in a JPEG file.

    Existing ARR segments are dropped; the new APP1 segment follows the
    remaining header segments and precedes the scan data.

    Args:
        data: Whole JPEG file.
        signed: Signed attestation to store.

    Returns:
        New JPEG bytes with exactly one ARR segment.

    Raises:
        ArrError: ``invalid_jpeg`` or ``xmp_too_large``.
    """
    split = split_jpeg(data)
    arr_segment = create_app1_segment(signed)
    kept = [segment for segment in split.segments if not _is_arr_segment(segment)]

    if len(kept) != len(split.segments):
        logger.debug("Dropped %d existing ARR XMP segment(s)", len(split.segments) - len(kept))

    return b"".join([split.soi, *kept, arr_segment, split.tail])


def remove_jpeg_attestation(data: bytes) -> bytes:
    """Return the JPEG file with every ARR XMP segment removed."""
    split = split_jpeg(data)
    kept = [segment for segment in split.segments if not _is_arr_segment(segment)]
    return b"".join([split.soi, *kept, split.tail])
