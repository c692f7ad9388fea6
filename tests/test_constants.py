"""Tests for constants module."""

from constants import (
    ARR_ITXT_KEYWORD,
    ARR_VERSION,
    ARR_XMP_NAMESPACE,
    CREATOR_PUBKEY_PREFIX,
    ED25519_SPKI_PREFIX,
    MODES,
    OPTIONAL_FIELDS,
    PNG_SIGNATURE,
    REQUIRED_FIELDS,
    SIGNATURE_PREFIX,
    SUPPORTED_FORMATS,
    VERIFY_REASONS,
    XMP_IDENTIFIER,
)


class TestSupportedFormats:
    """Tests for SUPPORTED_FORMATS constant."""

    def test_contains_png(self) -> None:
        assert ".png" in SUPPORTED_FORMATS

    def test_contains_jpg(self) -> None:
        assert ".jpg" in SUPPORTED_FORMATS

    def test_contains_jpeg(self) -> None:
        assert ".jpeg" in SUPPORTED_FORMATS

    def test_lowercase_only(self) -> None:
        for fmt in SUPPORTED_FORMATS:
            assert fmt == fmt.lower()


class TestProtocolLiterals:
    """Tests for protocol identifiers."""

    def test_version(self) -> None:
        assert ARR_VERSION == "arr/0.1"

    def test_signature_prefix(self) -> None:
        assert SIGNATURE_PREFIX == "ed25519:"

    def test_creator_prefix(self) -> None:
        assert CREATOR_PUBKEY_PREFIX == "pubkey:ed25519:"

    def test_reserved_itxt_keyword(self) -> None:
        assert ARR_ITXT_KEYWORD == "arr.attestation"

    def test_xmp_namespace(self) -> None:
        assert ARR_XMP_NAMESPACE == "http://arr.protocol/1.0/"

    def test_xmp_identifier_is_null_terminated(self) -> None:
        assert XMP_IDENTIFIER == b"http://ns.adobe.com/xap/1.0/\x00"

    def test_png_signature(self) -> None:
        assert PNG_SIGNATURE == b"\x89PNG\r\n\x1a\n"

    def test_spki_prefix_length(self) -> None:
        assert len(ED25519_SPKI_PREFIX) == 12


class TestFieldTables:
    """Tests for the attestation field tables."""

    def test_required_fields(self) -> None:
        assert REQUIRED_FIELDS == ("version", "id", "created", "creator")

    def test_optional_fields_do_not_overlap_required(self) -> None:
        assert not set(OPTIONAL_FIELDS) & set(REQUIRED_FIELDS)

    def test_optional_field_kinds(self) -> None:
        assert OPTIONAL_FIELDS["upstream"] == "string_list"
        assert OPTIONAL_FIELDS["revocable"] == "boolean"
        assert OPTIONAL_FIELDS["extensions"] == "record"

    def test_verify_reasons(self) -> None:
        assert set(VERIFY_REASONS) == {
            "invalid_signature",
            "unsupported_version",
            "malformed",
            "missing_public_key",
        }

    def test_modes(self) -> None:
        assert MODES == ("auto", "sidecar", "metadata")
