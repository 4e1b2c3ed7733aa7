"""sigident command line interface."""

from __future__ import annotations

import argparse
import base64
import json
import sys
from pathlib import Path

from sigident.dispatch import open_sig, sig_assert_payload, verify_sig
from sigident.keys import load_key


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _read_bytes(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sigident", description="Signature identity and verification")
    subparsers = parser.add_subparsers(dest="command", required=True)

    open_parser = subparsers.add_parser("open", help="Open a signature and print its SigID")
    open_parser.add_argument("signature")
    open_parser.add_argument("--suffix", action="store_true")
    open_parser.add_argument("--json", action="store_true")

    assert_parser = subparsers.add_parser("assert", help="Check signed content without a key")
    assert_parser.add_argument("signature")
    assert_parser.add_argument("payload")
    assert_parser.add_argument("--suffix", action="store_true")
    assert_parser.add_argument("--json", action="store_true")

    verify_parser = subparsers.add_parser("verify", help="Verify a signature against a key")
    verify_parser.add_argument("signature")
    verify_parser.add_argument("--key", default=None)
    verify_parser.add_argument("--suffix", action="store_true")
    verify_parser.add_argument("--json", action="store_true")

    return parser


def _run(args: argparse.Namespace) -> int:
    if args.command == "open":
        opened = open_sig(_read_text(args.signature))
        sig_id = opened.sig_id.to_string(suffix=args.suffix)
        if args.json:
            print(
                json.dumps(
                    {
                        "command": "open",
                        "format": opened.format.value,
                        "sig_id": sig_id,
                        "body_size": len(opened.raw_body),
                    },
                    sort_keys=True,
                )
            )
            return 0
        print(f"format: {opened.format.value}")
        print(f"sigId: {sig_id}")
        print(f"bodySize: {len(opened.raw_body)}")
        return 0

    if args.command == "assert":
        sig_id = sig_assert_payload(_read_text(args.signature), _read_bytes(args.payload))
        if args.json:
            print(json.dumps({"command": "assert", "sig_id": sig_id.to_string(suffix=args.suffix)}, sort_keys=True))
            return 0
        print(f"sigId: {sig_id.to_string(suffix=args.suffix)}")
        return 0

    if args.command == "verify":
        key = load_key(args.key)
        verified = verify_sig(_read_text(args.signature), key)
        sig_id = verified.sig_id.to_string(suffix=args.suffix)
        signer = verified.outcome.signed_by
        if args.json:
            print(
                json.dumps(
                    {
                        "command": "verify",
                        "format": verified.format.value,
                        "sig_id": sig_id,
                        "signer_key_id": signer.key_id,
                        "signer_fingerprint": signer.fingerprint,
                        "signed_content": base64.b64encode(verified.signed_content).decode("ascii"),
                    },
                    sort_keys=True,
                )
            )
            return 0
        print(f"sigId: {sig_id}")
        print(f"signer: {signer.describe()}")
        sys.stdout.flush()
        sys.stdout.buffer.write(verified.signed_content)
        sys.stdout.buffer.flush()
        return 0

    return 1


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        return _run(args)
    except (ValueError, TypeError) as error:
        print(f"{type(error).__name__}: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
