"""Command-line interface for arr-attest.

Provides the ``arr`` entry point with five subcommands:

- ``keygen``   — generate an Ed25519 keypair and creator id
- ``attest``   — sign a new attestation and embed it or write a sidecar
- ``verify``   — verify the attestation attached to a file
- ``extract``  — print the attestation attached to a file
- ``revoke``   — sign a revocation record for an attestation id

Every command accepts ``--json`` for a stable machine-readable envelope
and ``-v/--verbose`` for log output.  Defaults for creator, keys, tool
and mode come from ``.arrrc.json`` (see ``config``).
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Sequence

from adapters import (
    attested_output_path,
    detect_file_format,
    embed_attestation_file,
    load_signed_attestation,
)
from attestation import build_attestation
from config import ArrConfig, load_config, resolve_intent
from constants import FORMAT_UNKNOWN, KEY_FILENAMES, MODES
from errors import EXIT_FAILURE, EXIT_SUCCESS, EXIT_USAGE_ERROR, ArrError, ErrorCodes
from keys import generate_key_pair, sign_attestation
from revocation import sign_revocation
from sidecar import write_sidecar
from signed import serialize_signed_attestation
from utils import encode_utf8, is_supported_format, write_atomic
from verify import verify_attestation

logger = logging.getLogger(__name__)


# ── Output helpers ──────────────────────────────────────────────────

def _emit_json(command: str, data: dict[str, Any]) -> None:
    print(json.dumps({"ok": True, "command": command, "data": data}, indent=2, ensure_ascii=False))


def _emit_error(command: str | None, error: ArrError, as_json: bool) -> None:
    if as_json:
        print(
            json.dumps({"ok": False, "command": command, "error": error.to_dict()}, indent=2),
            file=sys.stderr,
        )
        return
    print(f"Error [{error.code}]: {error.message}", file=sys.stderr)


# ── Argument parser construction ────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    """Construct and return the CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true", help="Emit stable JSON envelopes")
    common.add_argument("-v", "--verbose", action="store_true", help="Print log output")

    parser = argparse.ArgumentParser(
        prog="arr",
        description="Sign, embed, extract and verify ARR creative provenance attestations.",
        epilog="Example: arr attest artwork.png --creator pubkey:ed25519:... --private-key key.pem",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    keygen = subparsers.add_parser("keygen", parents=[common], help="Generate an Ed25519 keypair")
    keygen.add_argument("--out-dir", type=Path, required=True, help="Directory for key files")

    attest = subparsers.add_parser(
        "attest", parents=[common], help="Sign and attach an ARR attestation"
    )
    attest.add_argument("file", type=Path, help="File to attest")
    attest.add_argument("--creator", help="Creator id (default: from config)")
    attest.add_argument("--private-key", type=Path, help="PEM private key (default: from config)")
    attest.add_argument("--intent", help="Creative intent")
    attest.add_argument("--tool", help="Tool marker, e.g. name/version")
    attest.add_argument("--expires", help="Expiry date (YYYY-MM-DD or ISO 8601)")
    attest.add_argument("--license", help="License identifier")
    attest.add_argument(
        "--upstream", action="append", default=None, metavar="ID",
        help="Id of an upstream attestation (repeatable)",
    )
    attest.add_argument("--renews", metavar="ID", help="Id of the attestation this one renews")
    attest.add_argument(
        "--not-revocable", action="store_true", help="Mark the attestation as not revocable"
    )
    attest.add_argument("--mode", choices=MODES, help="Where to store the attestation")
    attest.add_argument("-o", "--out", type=Path, help="Output path")

    verify = subparsers.add_parser("verify", parents=[common], help="Verify ARR metadata or sidecar")
    verify.add_argument("file", type=Path, help="Attested file or sidecar")
    verify.add_argument("--public-key", type=Path, help="Explicit PEM public key")

    extract = subparsers.add_parser(
        "extract", parents=[common], help="Print ARR payload from metadata or sidecar"
    )
    extract.add_argument("file", type=Path, help="Attested file or sidecar")

    revoke = subparsers.add_parser("revoke", parents=[common], help="Sign a revocation record")
    revoke.add_argument("attestation_id", help="Id of the attestation to revoke")
    revoke.add_argument("--private-key", type=Path, help="PEM private key (default: from config)")
    revoke.add_argument("--reason", help="Reason for the revocation")
    revoke.add_argument("-o", "--out", type=Path, help="Write the signed revocation to a file")

    return parser


# ── Shared resolution ───────────────────────────────────────────────

def _require_file(path: Path) -> Path:
    if not path.is_file():
        raise ArrError(ErrorCodes.FILE_NOT_FOUND, f"File not found: {path}")
    return path


def _resolve_private_key(args: argparse.Namespace, config: ArrConfig) -> str:
    key_path = args.private_key or config.private_key_path
    if not key_path:
        raise ArrError(
            ErrorCodes.MISSING_FLAG,
            "Missing required option --private-key. Set privateKeyPath in .arrrc.json for a default.",
        )
    return _require_file(Path(key_path)).read_text(encoding="utf-8")


# ── Command handlers ────────────────────────────────────────────────

def _handle_keygen(args: argparse.Namespace) -> int:
    """Write a new keypair to ``--out-dir``."""
    out_dir: Path = args.out_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    pair = generate_key_pair()
    private_path = out_dir / KEY_FILENAMES[0]
    public_path = out_dir / KEY_FILENAMES[1]

    fd = os.open(private_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(pair.private_key_pem)
    public_path.write_text(pair.public_key_pem, encoding="utf-8")
    logger.info("Wrote keypair to %s", out_dir)

    if args.json:
        _emit_json(
            "keygen",
            {
                "privateKeyPath": str(private_path),
                "publicKeyPath": str(public_path),
                "creator": pair.creator,
            },
        )
        return EXIT_SUCCESS

    print("Generated Ed25519 keypair.")
    print(f"Private key: {private_path}")
    print(f"Public key: {public_path}")
    print(f"Creator ID: {pair.creator}")
    return EXIT_SUCCESS


def _handle_attest(args: argparse.Namespace) -> int:
    """Sign a new attestation for a file and store it."""
    input_path = _require_file(args.file)
    config = load_config()

    creator = args.creator or config.creator
    if not creator:
        raise ArrError(
            ErrorCodes.MISSING_FLAG,
            "Missing required option --creator. Set creator in .arrrc.json for a default.",
        )
    private_key_pem = _resolve_private_key(args, config)
    mode = args.mode or config.default_mode

    attestation = build_attestation(
        creator,
        intent=resolve_intent(config, input_path, args.intent),
        tool=args.tool or config.tool,
        upstream=args.upstream,
        expires=args.expires,
        revocable=not args.not_revocable,
        license=args.license,
        renews=args.renews,
    )
    signed = sign_attestation(attestation, private_key_pem)

    if not is_supported_format(input_path) and mode != "sidecar":
        logger.info("'%s' has no PNG/JPEG extension, detecting by content", input_path)

    file_format = FORMAT_UNKNOWN
    if mode != "sidecar":
        data = input_path.read_bytes()
        file_format = detect_file_format(data)
        if file_format == FORMAT_UNKNOWN and mode == "metadata":
            raise ArrError(
                ErrorCodes.UNSUPPORTED_FORMAT,
                "Metadata mode currently supports only PNG and JPEG files. Use --mode sidecar instead.",
            )

    if file_format == FORMAT_UNKNOWN:
        output_path = write_sidecar(input_path, signed, args.out)
        stored = "sidecar"
    else:
        output_dir = Path(config.output_dir) if config.output_dir else None
        output_path = embed_attestation_file(
            input_path, signed, args.out or attested_output_path(input_path, output_dir)
        )
        stored = "metadata"

    if args.json:
        data_out: dict[str, Any] = {
            "mode": stored,
            "outputPath": str(output_path),
            "signed": signed,
        }
        if stored == "metadata":
            data_out["format"] = file_format
        _emit_json("attest", data_out)
        return EXIT_SUCCESS

    if stored == "sidecar":
        print(f"Wrote ARR sidecar: {output_path}")
    else:
        print(f"Embedded ARR attestation in {file_format.upper()} metadata: {output_path}")
    return EXIT_SUCCESS


def _handle_verify(args: argparse.Namespace) -> int:
    """Verify the attestation attached to a file."""
    loaded = load_signed_attestation(_require_file(args.file))
    config = load_config()

    public_key_pem = None
    public_key_path = args.public_key or config.public_key_path
    if public_key_path:
        public_key_pem = _require_file(Path(public_key_path)).read_text(encoding="utf-8")

    result = verify_attestation(loaded.signed, public_key_pem)
    exit_code = EXIT_SUCCESS if result.valid else EXIT_FAILURE

    if args.json:
        _emit_json(
            "verify",
            {
                "source": {
                    "type": loaded.source,
                    "path": str(loaded.path),
                    "format": loaded.format,
                },
                "result": result.to_dict(),
            },
        )
        return exit_code

    if result.valid:
        suffix = " (expired)" if result.expired else ""
        print(f"ARR verification: valid{suffix}.")
    else:
        print(f"ARR verification failed: {result.reason}.")
    return exit_code


def _handle_extract(args: argparse.Namespace) -> int:
    """Print the attestation attached to a file."""
    loaded = load_signed_attestation(_require_file(args.file))
    rendered = serialize_signed_attestation(loaded.signed)
    encode_utf8(rendered)

    if args.json:
        _emit_json(
            "extract",
            {
                "source": {
                    "type": loaded.source,
                    "path": str(loaded.path),
                    "format": loaded.format,
                },
                "signed": loaded.signed,
            },
        )
        return EXIT_SUCCESS

    sys.stdout.write(rendered)
    return EXIT_SUCCESS


def _handle_revoke(args: argparse.Namespace) -> int:
    """Sign a revocation record."""
    config = load_config()
    private_key_pem = _resolve_private_key(args, config)
    signed = sign_revocation(args.attestation_id, private_key_pem, reason=args.reason)
    rendered = json.dumps(signed, indent=2, ensure_ascii=False) + "\n"

    if args.out:
        write_atomic(args.out, encode_utf8(rendered))

    if args.json:
        data_out: dict[str, Any] = {"revocation": signed}
        if args.out:
            data_out["outputPath"] = str(args.out)
        _emit_json("revoke", data_out)
        return EXIT_SUCCESS

    if args.out:
        print(f"Wrote signed revocation: {args.out}")
    else:
        sys.stdout.write(rendered)
    return EXIT_SUCCESS


_HANDLERS = {
    "keygen": _handle_keygen,
    "attest": _handle_attest,
    "verify": _handle_verify,
    "extract": _handle_extract,
    "revoke": _handle_revoke,
}


# ── Entry point ─────────────────────────────────────────────────────

def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and dispatch to the appropriate command handler."""
    parser = _build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv:
        parser.print_help()
        return EXIT_SUCCESS

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return EXIT_USAGE_ERROR

    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    try:
        return _HANDLERS[args.command](args)
    except ArrError as e:
        _emit_error(args.command, e, args.json)
        return EXIT_FAILURE
    except OSError as e:
        _emit_error(args.command, ArrError(ErrorCodes.FILE_NOT_FOUND, str(e)), args.json)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
