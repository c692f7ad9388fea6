"""Tests for attestation module."""

import re
import uuid

import pytest

from attestation import build_attestation, renew_attestation
from errors import ArrError, ErrorCodes


class TestBuildAttestation:
    """Tests for build_attestation function."""

    def test_defaults(self) -> None:
        attestation = build_attestation("someone")
        assert attestation["version"] == "arr/0.1"
        assert attestation["creator"] == "someone"
        assert attestation["revocable"] is True
        assert uuid.UUID(attestation["id"]).version == 4
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", attestation["created"])

    def test_omits_unset_fields(self) -> None:
        attestation = build_attestation("someone")
        assert set(attestation) == {"version", "id", "created", "creator", "revocable"}

    def test_all_fields(self) -> None:
        attestation = build_attestation(
            "someone",
            intent="poster",
            tool="arr/0.1",
            upstream=["a", "b"],
            content_hash="sha256:abc",
            expires="2030-01-01",
            revocable=False,
            license="MIT",
            renews="old-id",
            extensions={"x-studio": {"project": 7}},
            id="fixed-id",
            created="2026-01-01T00:00:00.000Z",
        )
        assert attestation["id"] == "fixed-id"
        assert attestation["upstream"] == ["a", "b"]
        assert attestation["revocable"] is False
        assert attestation["extensions"] == {"x-studio": {"project": 7}}

    def test_first_keys_in_protocol_order(self) -> None:
        attestation = build_attestation("someone", intent="x")
        assert list(attestation)[:4] == ["version", "id", "created", "creator"]

    def test_upstream_is_copied(self) -> None:
        upstream = ["a"]
        attestation = build_attestation("someone", upstream=upstream)
        upstream.append("b")
        assert attestation["upstream"] == ["a"]

    def test_unique_ids(self) -> None:
        assert build_attestation("someone")["id"] != build_attestation("someone")["id"]

    def test_invalid_expires(self) -> None:
        with pytest.raises(ArrError) as exc_info:
            build_attestation("someone", expires="next tuesday")
        assert exc_info.value.code == ErrorCodes.INVALID_EXPIRES
        assert exc_info.value.details == {"expires": "next tuesday"}

    def test_expires_outside_utc_range(self) -> None:
        with pytest.raises(ArrError) as exc_info:
            build_attestation("someone", expires="9999-12-31T23:59:59-01:00")
        assert exc_info.value.code == ErrorCodes.INVALID_EXPIRES

    def test_wrong_type_is_malformed(self) -> None:
        with pytest.raises(ArrError) as exc_info:
            build_attestation("someone", upstream=["a", 1])
        assert exc_info.value.code == ErrorCodes.MALFORMED


class TestRenewAttestation:
    """Tests for renew_attestation function."""

    def test_sets_renews(self) -> None:
        renewed = renew_attestation("previous-id", "someone", intent="poster")
        assert renewed["renews"] == "previous-id"
        assert renewed["intent"] == "poster"
        assert renewed["id"] != "previous-id"
