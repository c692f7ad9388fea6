"""Test configuration and fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

from attestation import build_attestation
from keys import KeyPair, generate_key_pair, sign_attestation
from models import Attestation, SignedAttestation


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_png(temp_dir: Path) -> Path:
    """Create a sample PNG image for testing."""
    img_path = temp_dir / "sample.png"
    img = Image.new("RGB", (100, 100), color="red")
    img.save(img_path, "PNG")
    return img_path


@pytest.fixture
def sample_jpg(temp_dir: Path) -> Path:
    """Create a sample JPG image for testing."""
    img_path = temp_dir / "sample.jpg"
    img = Image.new("RGB", (100, 100), color="blue")
    img.save(img_path, "JPEG")
    return img_path


@pytest.fixture
def sample_png_with_text(temp_dir: Path) -> Path:
    """Create a PNG image carrying an unrelated iTXt entry."""
    from PIL.PngImagePlugin import PngInfo

    img_path = temp_dir / "text_sample.png"
    img = Image.new("RGB", (64, 64), color="green")

    metadata = PngInfo()
    metadata.add_itxt("Description", "A test image for unit tests")
    metadata.add_text("Author", "Test Author")

    img.save(img_path, "PNG", pnginfo=metadata)
    return img_path


@pytest.fixture
def sample_txt(temp_dir: Path) -> Path:
    """Create a plain text file with no embedding adapter."""
    path = temp_dir / "notes.txt"
    path.write_text("plain text\n", encoding="utf-8")
    return path


@pytest.fixture
def key_pair() -> KeyPair:
    """Generate a fresh Ed25519 keypair."""
    return generate_key_pair()


@pytest.fixture
def other_key_pair() -> KeyPair:
    """A second, unrelated keypair."""
    return generate_key_pair()


@pytest.fixture
def attestation(key_pair: KeyPair) -> Attestation:
    """A fully populated attestation by the fixture keypair."""
    return build_attestation(
        key_pair.creator,
        intent="illustration",
        tool="arr-test/1.0",
        upstream=["00000000-0000-4000-8000-000000000001"],
        license="CC-BY-4.0",
        expires="2099-01-01T00:00:00Z",
        id="3f0c6f5e-8f4e-4c55-9a55-0f7c1b8d2a10",
        created="2026-01-01T00:00:00.000Z",
    )


@pytest.fixture
def signed(attestation: Attestation, key_pair: KeyPair) -> SignedAttestation:
    """The fixture attestation signed with the fixture keypair."""
    return sign_attestation(attestation, key_pair.private_key_pem)
