"""Tests for validation module."""

import pytest

from errors import ArrError, ErrorCodes
from validation import (
    is_attestation,
    is_signed_attestation,
    parse_attestation,
    parse_signed_attestation,
)

MINIMAL = {
    "version": "arr/0.1",
    "id": "abc",
    "created": "2026-01-01T00:00:00.000Z",
    "creator": "someone",
}


class TestIsAttestation:
    """Tests for is_attestation function."""

    def test_minimal(self) -> None:
        assert is_attestation(dict(MINIMAL)) is True

    def test_full(self, attestation) -> None:
        assert is_attestation(attestation) is True

    @pytest.mark.parametrize("field", ["version", "id", "created", "creator"])
    def test_missing_required(self, field: str) -> None:
        value = dict(MINIMAL)
        del value[field]
        assert is_attestation(value) is False

    def test_required_must_be_string(self) -> None:
        assert is_attestation({**MINIMAL, "id": 42}) is False

    def test_upstream_must_be_string_list(self) -> None:
        assert is_attestation({**MINIMAL, "upstream": ["a", 1]}) is False
        assert is_attestation({**MINIMAL, "upstream": "a"}) is False

    def test_empty_upstream_allowed(self) -> None:
        assert is_attestation({**MINIMAL, "upstream": []}) is True

    def test_revocable_must_be_bool(self) -> None:
        assert is_attestation({**MINIMAL, "revocable": "yes"}) is False

    def test_extensions_must_be_record(self) -> None:
        assert is_attestation({**MINIMAL, "extensions": []}) is False
        assert is_attestation({**MINIMAL, "extensions": {"x": [1]}}) is True

    def test_optional_strings(self) -> None:
        for field in ("intent", "tool", "expires", "license", "content_hash", "renews"):
            assert is_attestation({**MINIMAL, field: 1}) is False

    def test_unknown_fields_pass_through(self) -> None:
        assert is_attestation({**MINIMAL, "future_field": {"any": "thing"}}) is True

    def test_non_dict(self) -> None:
        assert is_attestation(None) is False
        assert is_attestation([MINIMAL]) is False
        assert is_attestation("text") is False


class TestIsSignedAttestation:
    """Tests for is_signed_attestation function."""

    def test_valid(self, signed) -> None:
        assert is_signed_attestation(signed) is True

    def test_missing_signature(self) -> None:
        assert is_signed_attestation({"attestation": dict(MINIMAL)}) is False

    def test_signature_must_be_string(self) -> None:
        assert is_signed_attestation({"attestation": dict(MINIMAL), "signature": 1}) is False

    def test_bad_attestation(self) -> None:
        assert is_signed_attestation({"attestation": {}, "signature": "ed25519:x"}) is False


class TestParse:
    """Tests for the raising parse functions."""

    def test_parse_attestation_returns_value(self) -> None:
        value = dict(MINIMAL)
        assert parse_attestation(value) is value

    def test_parse_attestation_rejects(self) -> None:
        with pytest.raises(ArrError) as exc_info:
            parse_attestation({})
        assert exc_info.value.code == ErrorCodes.MALFORMED

    def test_parse_signed_attestation_rejects(self) -> None:
        with pytest.raises(ArrError) as exc_info:
            parse_signed_attestation({"attestation": dict(MINIMAL)})
        assert exc_info.value.code == ErrorCodes.MALFORMED
