"""Tests for utils module."""

import re
from datetime import datetime, timezone
from pathlib import Path

import pytest

from errors import ArrError, ErrorCodes
from utils import (
    decode_base64url,
    encode_base64url,
    encode_utf8,
    is_supported_format,
    parse_timestamp,
    utc_now_iso,
    write_atomic,
)


class TestIsSupportedFormat:
    """Tests for is_supported_format function."""

    def test_png_lowercase(self) -> None:
        assert is_supported_format(Path("image.png")) is True

    def test_png_uppercase(self) -> None:
        assert is_supported_format(Path("image.PNG")) is True

    def test_jpg_lowercase(self) -> None:
        assert is_supported_format(Path("image.jpg")) is True

    def test_jpeg_uppercase(self) -> None:
        assert is_supported_format(Path("image.JPEG")) is True

    def test_unsupported_gif(self) -> None:
        assert is_supported_format(Path("image.gif")) is False

    def test_unsupported_text(self) -> None:
        assert is_supported_format(Path("notes.txt")) is False

    def test_no_extension(self) -> None:
        assert is_supported_format(Path("image")) is False


class TestBase64Url:
    """Tests for base64url helpers."""

    def test_encode_is_unpadded(self) -> None:
        assert encode_base64url(b"\x00") == "AA"

    def test_encode_uses_url_alphabet(self) -> None:
        assert encode_base64url(b"\xfb\xff") == "-_8"

    def test_decode_unpadded(self) -> None:
        assert decode_base64url("AA") == b"\x00"

    def test_decode_padded(self) -> None:
        assert decode_base64url("AA==") == b"\x00"

    def test_decode_empty(self) -> None:
        assert decode_base64url("") == b""

    def test_decode_rejects_standard_alphabet(self) -> None:
        with pytest.raises(ValueError):
            decode_base64url("+/8")

    def test_decode_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            decode_base64url("not base64!")

    def test_decode_restores_32_bytes(self) -> None:
        raw = bytes(range(32))
        assert decode_base64url(encode_base64url(raw)) == raw


class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_utc_now_iso_format(self) -> None:
        value = utc_now_iso()
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", value)

    def test_parse_zulu(self) -> None:
        parsed = parse_timestamp("2026-01-01T00:00:00Z")
        assert parsed == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_parse_milliseconds(self) -> None:
        parsed = parse_timestamp("2026-01-01T00:00:00.500Z")
        assert parsed.microsecond == 500000

    def test_parse_date_only(self) -> None:
        parsed = parse_timestamp("2026-06-30")
        assert parsed == datetime(2026, 6, 30, tzinfo=timezone.utc)

    def test_parse_offset_normalized_to_utc(self) -> None:
        parsed = parse_timestamp("2026-01-01T02:00:00+02:00")
        assert parsed == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert parsed.tzinfo == timezone.utc

    def test_parse_naive_is_utc(self) -> None:
        parsed = parse_timestamp("2026-01-01T00:00:00")
        assert parsed.tzinfo == timezone.utc

    def test_parse_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_timestamp("not-a-date")

    def test_parse_rejects_empty(self) -> None:
        with pytest.raises(ValueError):
            parse_timestamp("")

    def test_parse_offset_before_year_one_in_utc(self) -> None:
        with pytest.raises(ValueError):
            parse_timestamp("0001-01-01T00:00:00+01:00")

    def test_parse_offset_after_year_9999_in_utc(self) -> None:
        with pytest.raises(ValueError):
            parse_timestamp("9999-12-31T23:59:59-01:00")


class TestEncodeUtf8:
    """Tests for encode_utf8 function."""

    def test_encodes_non_ascii(self) -> None:
        assert encode_utf8("Zoë") == b"Zo\xc3\xab"

    def test_lone_surrogate_is_malformed(self) -> None:
        with pytest.raises(ArrError) as exc_info:
            encode_utf8("ab\ud800")
        assert exc_info.value.code == ErrorCodes.MALFORMED
        assert exc_info.value.details == {"position": 2}


class TestWriteAtomic:
    """Tests for write_atomic function."""

    def test_writes_and_creates_parents(self, temp_dir: Path) -> None:
        target = temp_dir / "a" / "b" / "out.bin"
        assert write_atomic(target, b"data") == target
        assert target.read_bytes() == b"data"
        assert list(target.parent.iterdir()) == [target]

    def test_replaces_existing(self, temp_dir: Path) -> None:
        target = temp_dir / "out.bin"
        target.write_bytes(b"old")
        write_atomic(target, b"new")
        assert target.read_bytes() == b"new"

    def test_failed_replace_leaves_nothing(self, temp_dir: Path, monkeypatch) -> None:
        def fail(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail)
        target = temp_dir / "out.bin"
        with pytest.raises(OSError):
            write_atomic(target, b"data")
        assert not target.exists()
        assert list(temp_dir.iterdir()) == []

    def test_failed_replace_keeps_previous_content(self, temp_dir: Path, monkeypatch) -> None:
        target = temp_dir / "out.bin"
        target.write_bytes(b"old")

        def fail(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail)
        with pytest.raises(OSError):
            write_atomic(target, b"new")
        assert target.read_bytes() == b"old"
        assert list(temp_dir.iterdir()) == [target]
