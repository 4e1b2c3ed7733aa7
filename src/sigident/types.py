"""Shared datatypes for signature identity and verification."""

from __future__ import annotations

import binascii
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

SIG_ID_LEN = 32
SIG_ID_SUFFIX = "0f"


class SignatureFormat(Enum):
    PGP = "pgp"
    NACL = "nacl"


@dataclass(frozen=True)
class SigID:
    """SHA-256 digest of a raw signature body."""

    digest: bytes

    def __post_init__(self) -> None:
        if len(self.digest) != SIG_ID_LEN:
            raise ValueError(f"SigID must be {SIG_ID_LEN} bytes, got {len(self.digest)}")

    @classmethod
    def from_bytes(cls, raw: bytes) -> SigID:
        return cls(bytes(raw))

    @classmethod
    def from_string(cls, text: str, suffix: bool) -> SigID:
        value = text.strip().lower()
        if suffix:
            if not value.endswith(SIG_ID_SUFFIX):
                raise ValueError(f"SigID {text!r} is missing the {SIG_ID_SUFFIX!r} suffix")
            value = value[: -len(SIG_ID_SUFFIX)]
        if len(value) != SIG_ID_LEN * 2:
            raise ValueError(f"SigID {text!r} has the wrong length")
        try:
            return cls(binascii.unhexlify(value))
        except binascii.Error as error:
            raise ValueError(f"SigID {text!r} is not valid hex: {error}") from error

    def to_string(self, suffix: bool = False) -> str:
        out = self.digest.hex()
        return out + SIG_ID_SUFFIX if suffix else out

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class SignerIdentity:
    key_id: str
    fingerprint: str | None = None

    def describe(self) -> str:
        return self.fingerprint or self.key_id


@dataclass(frozen=True)
class VerificationOutcome:
    is_signed: bool
    signed_by: SignerIdentity
    signature_error: str | None = None
    created: datetime | None = None


@dataclass(frozen=True)
class OpenedSignature:
    format: SignatureFormat
    raw_body: bytes
    sig_id: SigID


@dataclass(frozen=True)
class VerifiedSignature:
    format: SignatureFormat
    sig_id: SigID
    signed_content: bytes
    outcome: VerificationOutcome
