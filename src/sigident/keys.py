"""Verification key bundles and the fingerprint-matching predicate."""

from __future__ import annotations

import binascii
import os
from pathlib import Path

import pgpy
from nacl.exceptions import CryptoError
from nacl.signing import VerifyKey
from pgpy.errors import PGPError

from sigident.types import SignerIdentity

KEY_ENV_VAR = "SIGIDENT_KEY"

NACL_KID_VERSION = 0x01
NACL_KID_TYPE_ED25519 = 0x20
NACL_KID_SUFFIX = 0x0A
NACL_KEY_LEN = 32


def normalize_fingerprint(value: str) -> str:
    return str(value).replace(" ", "").lower()


class PgpKeyBundle:
    """An OpenPGP key (primary plus subkeys) used as the sole candidate verifier."""

    def __init__(self, key: pgpy.PGPKey):
        self.key = key

    @classmethod
    def from_armored(cls, text: str) -> PgpKeyBundle:
        try:
            key, _ = pgpy.PGPKey.from_blob(text)
        except (PGPError, ValueError, TypeError) as error:
            raise ValueError(f"Failed to parse OpenPGP key: {error}") from error
        return cls(key)

    @property
    def public_key(self) -> pgpy.PGPKey:
        return self.key if self.key.is_public else self.key.pubkey

    @property
    def fingerprint(self) -> str:
        return normalize_fingerprint(self.key.fingerprint)

    @property
    def key_id(self) -> str:
        return str(self.key.fingerprint.keyid).upper()

    @property
    def fingerprints(self) -> set[str]:
        out = {self.fingerprint}
        for subkey in self.key.subkeys.values():
            out.add(normalize_fingerprint(subkey.fingerprint))
        return out

    def keys_by_id(self, key_id: str) -> list[pgpy.PGPKey]:
        wanted = key_id.upper()
        ids = {self.key_id} | {str(sub_id).upper() for sub_id in self.key.subkeys}
        return [self.public_key] if wanted in ids else []

    def fingerprint_for_id(self, key_id: str) -> str | None:
        wanted = key_id.upper()
        if wanted == self.key_id:
            return self.fingerprint
        for sub_id, subkey in self.key.subkeys.items():
            if str(sub_id).upper() == wanted:
                return normalize_fingerprint(subkey.fingerprint)
        return None

    def matches_key(self, signer: SignerIdentity) -> bool:
        if not signer.fingerprint:
            return False
        return normalize_fingerprint(signer.fingerprint) in self.fingerprints


class NaclKeyBundle:
    """An Ed25519 verify key addressed by its KID."""

    def __init__(self, verify_key: VerifyKey):
        self.verify_key = verify_key

    @classmethod
    def from_kid(cls, kid: str) -> NaclKeyBundle:
        try:
            raw = binascii.unhexlify(kid.strip())
        except binascii.Error as error:
            raise ValueError(f"KID is not valid hex: {error}") from error
        return cls(VerifyKey(public_key_from_kid(raw)))

    @property
    def kid(self) -> str:
        return kid_from_public_key(bytes(self.verify_key)).hex()

    def matches_key(self, signer: SignerIdentity) -> bool:
        return signer.key_id.lower() == self.kid


def kid_from_public_key(public_key: bytes) -> bytes:
    if len(public_key) != NACL_KEY_LEN:
        raise ValueError("Invalid Ed25519 public key length")
    return bytes([NACL_KID_VERSION, NACL_KID_TYPE_ED25519]) + public_key + bytes([NACL_KID_SUFFIX])


def public_key_from_kid(kid: bytes) -> bytes:
    if len(kid) != NACL_KEY_LEN + 3:
        raise ValueError("Invalid KID length")
    if kid[0] != NACL_KID_VERSION or kid[1] != NACL_KID_TYPE_ED25519 or kid[-1] != NACL_KID_SUFFIX:
        raise ValueError("KID is not an Ed25519 signing KID")
    return kid[2:-1]


def _get_key_path(explicit_path: str | None = None) -> str:
    path = explicit_path or os.environ.get(KEY_ENV_VAR)
    if not path:
        raise ValueError(f"No verification key given. Pass a key path or set {KEY_ENV_VAR}.")
    return path


def load_key(path: str | None = None) -> PgpKeyBundle | NaclKeyBundle:
    key_path = Path(_get_key_path(path))
    if not key_path.exists():
        raise ValueError(f"Verification key not found at {key_path}")

    text = key_path.read_text(encoding="utf-8").strip()
    if text.startswith("-----BEGIN PGP"):
        return PgpKeyBundle.from_armored(text)

    try:
        return NaclKeyBundle.from_kid(text)
    except CryptoError as error:
        raise ValueError(f"Invalid Ed25519 key in {key_path}: {error}") from error
