"""Streaming-style OpenPGP message reader on top of PGPy.

PGPy parses a message in one go, but callers here follow the streaming
contract of a reader: the signed content is exposed as a stream and the
signature verdict is only resolved once that stream has been read to EOF.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import pgpy
from pgpy.errors import PGPError

from sigident.errors import DecodeError
from sigident.keys import normalize_fingerprint
from sigident.types import SignerIdentity

logger = logging.getLogger(__name__)


class KeyRing(Protocol):
    def keys_by_id(self, key_id: str) -> list[pgpy.PGPKey]: ...

    def fingerprint_for_id(self, key_id: str) -> str | None: ...


class EmptyKeyRing:
    """A key ring with no keys, for reading messages without verifying them."""

    def keys_by_id(self, key_id: str) -> list[pgpy.PGPKey]:
        return []

    def fingerprint_for_id(self, key_id: str) -> str | None:
        return None


class SignatureCheckingReader(io.RawIOBase):
    """Readable stream that calls ``on_eof`` exactly once when fully consumed."""

    def __init__(self, content: bytes, on_eof):
        super().__init__()
        self._buffer = io.BytesIO(content)
        self._on_eof = on_eof
        self._finished = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        count = self._buffer.readinto(buffer)
        if count == 0 and len(buffer) > 0 and not self._finished:
            self._finished = True
            self._on_eof()
        return count


@dataclass
class MessageDetails:
    is_signed: bool
    signed_by: SignerIdentity | None
    unverified_body: io.RawIOBase | None
    created: datetime | None = None
    # Resolved only after unverified_body has been read to EOF.
    signature_error: str | None = None
    signature: pgpy.PGPSignature | None = None


def _literal_bytes(message: pgpy.PGPMessage) -> bytes | None:
    try:
        if message.type != "literal":
            return None
    except NotImplementedError:
        return None

    # PGPy decodes 't'/'u' literals on access; the raw packet bytes are what was signed.
    literal = message._message
    data = getattr(literal, "_contents", None)
    if data is None:
        return None
    data = bytes(data)
    if getattr(literal, "format", "b") == "u":
        try:
            data.decode("utf-8")
        except UnicodeDecodeError as error:
            raise DecodeError(f"Literal data flagged as UTF-8 is not valid UTF-8: {error}") from error
    return data


def _packet_body_length(raw: bytes, offset: int) -> tuple[int, int, bool]:
    """Return (header size, body length, partial) for the length field at ``offset``."""
    first = raw[offset]
    if first < 192:
        return 1, first, False
    if first < 224:
        if offset + 1 >= len(raw):
            raise DecodeError("Truncated OpenPGP packet length")
        return 2, ((first - 192) << 8) + raw[offset + 1] + 192, False
    if first == 255:
        if offset + 4 >= len(raw):
            raise DecodeError("Truncated OpenPGP packet length")
        return 5, int.from_bytes(raw[offset + 1 : offset + 5], "big"), False
    return 1, 1 << (first & 0x1F), True


def check_packet_lengths(raw: bytes) -> None:
    """Raise DecodeError if any top-level packet claims more bytes than are present."""
    offset = 0
    while offset < len(raw):
        tag = raw[offset]
        if not tag & 0x80:
            raise DecodeError(f"Invalid OpenPGP packet tag at offset {offset}")
        offset += 1
        if tag & 0x40:
            partial = True
            while partial:
                if offset >= len(raw):
                    raise DecodeError("Truncated OpenPGP packet header")
                header_size, length, partial = _packet_body_length(raw, offset)
                offset += header_size + length
                if offset > len(raw):
                    raise DecodeError("Truncated OpenPGP packet body")
            continue

        length_type = tag & 0x03
        if length_type == 3:
            # Indeterminate length runs to the end of the data.
            return
        size = 1 << length_type
        if offset + size > len(raw):
            raise DecodeError("Truncated OpenPGP packet header")
        length = int.from_bytes(raw[offset : offset + size], "big")
        offset += size + length
        if offset > len(raw):
            raise DecodeError("Truncated OpenPGP packet body")


def _signer(signature: pgpy.PGPSignature, keyring: KeyRing) -> SignerIdentity | None:
    key_id = str(signature.signer or "").upper()
    if not key_id:
        return None
    fingerprint = normalize_fingerprint(signature.signer_fingerprint or "")
    if not fingerprint:
        fingerprint = keyring.fingerprint_for_id(key_id) or ""
    return SignerIdentity(key_id=key_id, fingerprint=fingerprint or None)


def read_message(raw_body: bytes, keyring: KeyRing) -> MessageDetails:
    """Parse ``raw_body`` as a binary OpenPGP message.

    The first signature on the message decides the reported signer. Keys are
    looked up in ``keyring`` only when the body stream reaches EOF; with no
    matching key neither ``signature_error`` nor ``signature`` gets set.
    """
    check_packet_lengths(bytes(raw_body))
    try:
        message = pgpy.PGPMessage.from_blob(bytes(raw_body))
    except Exception as error:
        raise DecodeError(f"Failed to read OpenPGP message: {error}") from error

    signatures = list(message.signatures)
    first = signatures[0] if signatures else None
    signed_by = _signer(first, keyring) if first is not None else None

    details = MessageDetails(
        is_signed=message.is_signed,
        signed_by=signed_by,
        unverified_body=None,
        created=first.created if first is not None else None,
    )

    def check_signature() -> None:
        if signed_by is None:
            return
        keys = keyring.keys_by_id(signed_by.key_id)
        if not keys:
            return
        try:
            verification = keys[0].verify(message)
        except (PGPError, NotImplementedError, ValueError) as error:
            details.signature_error = str(error)
            return
        if not verification:
            bad = [str(sig.signature.signer) for sig in verification.bad_signatures]
            details.signature_error = f"bad signature from {', '.join(bad) or signed_by.key_id}"
            return
        details.signature = first
        logger.debug("Signature from %s verified", signed_by.describe())

    content = _literal_bytes(message)
    if content is not None:
        details.unverified_body = SignatureCheckingReader(content, check_signature)
    return details
