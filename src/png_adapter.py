"""ARR attestation embedding in PNG files.

A PNG file is the 8-byte signature followed by chunks of
``length(4) type(4) data(length) crc(4)``, ending with ``IEND``.  The
attestation lives in a single uncompressed ``iTXt`` chunk whose keyword
is ``arr.attestation``; its text is the persisted-form JSON.

Embedding drops any existing ``arr.attestation`` chunk and inserts the
new one right before ``IEND``.  All other chunks, including other
``iTXt`` entries, are copied byte for byte.  Truncated chunks, chunk
lengths past the end of the file and a missing ``IEND`` raise
``invalid_png`` instead of producing a damaged file.
"""

from __future__ import annotations

import logging
import struct
from typing import NamedTuple

from constants import ARR_ITXT_KEYWORD, PNG_IEND_CHUNK, PNG_ITXT_CHUNK, PNG_SIGNATURE
from errors import ArrError, ErrorCodes
from models import SignedAttestation
from signed import parse_signed_attestation_json, serialize_signed_attestation
from utils import encode_utf8

logger = logging.getLogger(__name__)


def _make_crc_table() -> tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = 0xEDB88320 ^ (c >> 1) if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


CRC_TABLE = _make_crc_table()


def crc32(data: bytes) -> int:
    """IEEE 802.3 CRC32 as used by PNG chunk trailers."""
    crc = 0xFFFFFFFF
    for byte in data:
        crc = CRC_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ 0xFFFFFFFF


class Chunk(NamedTuple):
    """One PNG chunk; ``raw`` holds the full length+type+data+crc bytes."""

    type: bytes
    data: bytes
    raw: bytes


class ItxtEntry(NamedTuple):
    """Decoded ``iTXt`` header; ``text`` is None for compressed entries."""

    keyword: str
    compressed: bool
    text: str | None


def is_png(data: bytes) -> bool:
    """Check the PNG signature bytes."""
    return data[: len(PNG_SIGNATURE)] == PNG_SIGNATURE


def parse_chunks(data: bytes) -> list[Chunk]:
    """
    Split a PNG file into chunks, stopping after ``IEND``.

    Args:
        data: Whole PNG file.

    Returns:
        Chunks in file order.

    Raises:
        ArrError: ``invalid_png`` for a bad signature or a truncated chunk.
    """
    if not is_png(data):
        raise ArrError(ErrorCodes.INVALID_PNG, "Input is not a PNG file.")

    chunks: list[Chunk] = []
    offset = len(PNG_SIGNATURE)
    total = len(data)

    while offset < total:
        if offset + 12 > total:
            raise ArrError(ErrorCodes.INVALID_PNG, "PNG chunk is truncated.", {"offset": offset})

        length = struct.unpack(">I", data[offset : offset + 4])[0]
        chunk_type = data[offset + 4 : offset + 8]
        data_start = offset + 8
        data_end = data_start + length
        chunk_end = data_end + 4

        if chunk_end > total:
            raise ArrError(
                ErrorCodes.INVALID_PNG,
                "PNG chunk extends past file boundary.",
                {"offset": offset, "length": length},
            )

        chunks.append(Chunk(chunk_type, data[data_start:data_end], data[offset:chunk_end]))
        offset = chunk_end

        if chunk_type == PNG_IEND_CHUNK:
            break

    return chunks


def parse_itxt(chunk_data: bytes) -> ItxtEntry | None:
    """
    Decode an ``iTXt`` payload.

    Layout: ``keyword\\0 flag method language\\0 translated\\0 text``.

    Returns:
        The entry, or None if the payload is not a well-formed iTXt body.
    """
    keyword_end = chunk_data.find(b"\x00")
    if keyword_end < 0:
        return None

    keyword = chunk_data[:keyword_end].decode("latin-1")
    cursor = keyword_end + 1

    if cursor + 2 > len(chunk_data):
        return None

    compression_flag = chunk_data[cursor]
    compression_method = chunk_data[cursor + 1]
    cursor += 2

    language_end = chunk_data.find(b"\x00", cursor)
    if language_end < 0:
        return None

    translated_end = chunk_data.find(b"\x00", language_end + 1)
    if translated_end < 0:
        return None

    if compression_flag != 0 or compression_method != 0:
        return ItxtEntry(keyword, True, None)

    text = chunk_data[translated_end + 1 :].decode("utf-8", errors="replace")
    return ItxtEntry(keyword, False, text)


def encode_itxt(keyword: str, text: str) -> bytes:
    """Build an uncompressed ``iTXt`` payload with empty language and translation."""
    return keyword.encode("latin-1") + b"\x00\x00\x00\x00\x00" + encode_utf8(text)


def create_chunk(chunk_type: bytes, data: bytes) -> bytes:
    """Frame chunk data with its length and CRC."""
    crc = crc32(chunk_type + data)
    return struct.pack(">I", len(data)) + chunk_type + data + struct.pack(">I", crc)


def _is_arr_chunk(chunk: Chunk) -> bool:
    if chunk.type != PNG_ITXT_CHUNK:
        return False
    entry = parse_itxt(chunk.data)
    return entry is not None and entry.keyword == ARR_ITXT_KEYWORD


def extract_png_attestation(data: bytes) -> SignedAttestation | None:
    """
    Extract the signed attestation from a PNG file.

    Args:
        data: Whole PNG file.

    Returns:
        The signed attestation, or None if the file carries none.

    Raises:
        ArrError: ``invalid_png`` for structural errors,
            ``unsupported_itxt_compression`` for a compressed ARR chunk,
            ``malformed_json``/``malformed`` for a bad payload.
    """
    for chunk in parse_chunks(data):
        if chunk.type != PNG_ITXT_CHUNK:
            continue

        entry = parse_itxt(chunk.data)
        if entry is None:
            logger.debug("Skipping malformed iTXt chunk")
            continue
        if entry.keyword != ARR_ITXT_KEYWORD:
            continue
        if entry.compressed:
            raise ArrError(
                ErrorCodes.UNSUPPORTED_ITXT_COMPRESSION,
                "Compressed iTXt chunks are not supported.",
            )

        return parse_signed_attestation_json(entry.text or "")

    return None


def has_png_attestation(data: bytes) -> bool:
    """Check whether a PNG file carries an ARR chunk, without parsing its payload."""
    return any(_is_arr_chunk(chunk) for chunk in parse_chunks(data))


def _rebuild(data: bytes, replacement: bytes | None) -> bytes:
    out = [PNG_SIGNATURE]
    saw_iend = False
    dropped = 0

    for chunk in parse_chunks(data):
        if _is_arr_chunk(chunk):
            dropped += 1
            continue

        if chunk.type == PNG_IEND_CHUNK and not saw_iend:
            if replacement is not None:
                out.append(replacement)
            saw_iend = True

        out.append(chunk.raw)

    if not saw_iend:
        raise ArrError(ErrorCodes.INVALID_PNG, "PNG is missing an IEND chunk.")

    if dropped:
        logger.debug("Dropped %d existing ARR iTXt chunk(s)", dropped)
    return b"".join(out)


def embed_png_attestation(data: bytes, signed: SignedAttestation) -> bytes:
    """
    Embed a signed attestation in a PNG file.

    Args:
        data: Whole PNG file.
        signed: Signed attestation to store.

    Returns:
        New PNG bytes with exactly one ARR chunk, placed before ``IEND``.

    Raises:
        ArrError: ``invalid_png`` if the chunk stream is damaged or lacks ``IEND``.
    """
    payload = encode_itxt(ARR_ITXT_KEYWORD, serialize_signed_attestation(signed))
    return _rebuild(data, create_chunk(PNG_ITXT_CHUNK, payload))


def remove_png_attestation(data: bytes) -> bytes:
    """Return the PNG file with every ARR chunk removed."""
    return _rebuild(data, None)
