"""Tests for sidecar module."""

import json
from pathlib import Path

import pytest

from errors import ArrError, ErrorCodes
from sidecar import read_sidecar, sidecar_path_for, write_sidecar
from signed import serialize_signed_attestation


class TestSidecarPathFor:
    """Tests for sidecar_path_for function."""

    def test_appends_suffix(self) -> None:
        assert sidecar_path_for(Path("/a/model.glb")) == Path("/a/model.glb.arr")

    def test_keeps_existing_suffix(self) -> None:
        assert sidecar_path_for(Path("/a/model.glb.arr")) == Path("/a/model.glb.arr")

    def test_file_without_extension(self) -> None:
        assert sidecar_path_for(Path("README")) == Path("README.arr")


class TestWriteSidecar:
    """Tests for write_sidecar function."""

    def test_writes_persisted_form(self, sample_txt: Path, signed) -> None:
        path = write_sidecar(sample_txt, signed)
        assert path == sample_txt.with_name("notes.txt.arr")
        assert path.read_text(encoding="utf-8") == serialize_signed_attestation(signed)

    def test_explicit_out_path(self, sample_txt: Path, signed, temp_dir: Path) -> None:
        target = temp_dir / "nested" / "custom.arr"
        path = write_sidecar(sample_txt, signed, target)
        assert path == target
        assert json.loads(target.read_text(encoding="utf-8")) == signed

    def test_original_untouched(self, sample_txt: Path, signed) -> None:
        write_sidecar(sample_txt, signed)
        assert sample_txt.read_text(encoding="utf-8") == "plain text\n"

    def test_failed_write_leaves_no_sidecar(self, sample_txt: Path, signed, monkeypatch) -> None:
        def fail(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail)
        with pytest.raises(OSError):
            write_sidecar(sample_txt, signed)
        assert list(sample_txt.parent.iterdir()) == [sample_txt]

    def test_lone_surrogate_is_malformed(self, sample_txt: Path, signed) -> None:
        broken = {
            "attestation": {**signed["attestation"], "intent": "\ud800"},
            "signature": signed["signature"],
        }
        with pytest.raises(ArrError) as exc_info:
            write_sidecar(sample_txt, broken)
        assert exc_info.value.code == ErrorCodes.MALFORMED
        assert not sample_txt.with_name("notes.txt.arr").exists()


class TestReadSidecar:
    """Tests for read_sidecar function."""

    def test_round_trip_from_original(self, sample_txt: Path, signed) -> None:
        written = write_sidecar(sample_txt, signed)
        path, loaded = read_sidecar(sample_txt)
        assert path == written
        assert loaded == signed

    def test_round_trip_from_sidecar_path(self, sample_txt: Path, signed) -> None:
        written = write_sidecar(sample_txt, signed)
        _, loaded = read_sidecar(written)
        assert loaded == signed

    def test_missing(self, sample_txt: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_sidecar(sample_txt)

    def test_malformed_shape(self, sample_txt: Path) -> None:
        sample_txt.with_name("notes.txt.arr").write_text('{"signature": "x"}', encoding="utf-8")
        with pytest.raises(ArrError) as exc_info:
            read_sidecar(sample_txt)
        assert exc_info.value.code == ErrorCodes.MALFORMED
