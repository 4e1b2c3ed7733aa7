from __future__ import annotations

import hashlib

import pytest

from sigident.sigid import compute_sig_id_from_sig_body
from sigident.types import SigID


def test_sig_id_is_sha256_of_body() -> None:
    body = b"\x90\x0d\x03\x00\x08signature-bytes"
    sig_id = compute_sig_id_from_sig_body(body)

    assert sig_id.digest == hashlib.sha256(body).digest()
    assert sig_id == compute_sig_id_from_sig_body(bytes(body))


def test_sig_id_differs_for_single_byte_change() -> None:
    assert compute_sig_id_from_sig_body(b"hello") != compute_sig_id_from_sig_body(b"hellp")
    assert compute_sig_id_from_sig_body(b"hello") != compute_sig_id_from_sig_body(b"hello\x00")


def test_sig_id_string_forms() -> None:
    sig_id = compute_sig_id_from_sig_body(b"body")
    plain = sig_id.to_string()

    assert len(plain) == 64
    assert str(sig_id) == plain
    assert sig_id.to_string(suffix=True) == plain + "0f"
    assert SigID.from_string(plain, suffix=False) == sig_id
    assert SigID.from_string(plain.upper() + "0F", suffix=True) == sig_id


def test_sig_id_from_string_rejects_bad_input() -> None:
    plain = compute_sig_id_from_sig_body(b"body").to_string()

    with pytest.raises(ValueError, match="suffix"):
        SigID.from_string(plain, suffix=True)
    with pytest.raises(ValueError, match="length"):
        SigID.from_string(plain[:-2], suffix=False)
    with pytest.raises(ValueError, match="hex"):
        SigID.from_string("zz" * 32, suffix=False)


def test_sig_id_requires_32_bytes() -> None:
    with pytest.raises(ValueError):
        SigID.from_bytes(b"\x00" * 31)
    assert SigID.from_bytes(b"\x01" * 32).to_string() == "01" * 32
