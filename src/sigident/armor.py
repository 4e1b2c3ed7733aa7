"""Format detection and ASCII-armor unwrapping."""

from __future__ import annotations

import logging

from pgpy.errors import PGPError
from pgpy.types import Armorable

from sigident.errors import DecodeError
from sigident.types import SignatureFormat

logger = logging.getLogger(__name__)

PGP_ARMOR_PREFIX = "-----BEGIN PGP"


def is_pgp(text: str) -> bool:
    return text.startswith(PGP_ARMOR_PREFIX)


def detect_format(text: str) -> SignatureFormat:
    """Classify by prefix only. The remainder is not validated here."""
    return SignatureFormat.PGP if is_pgp(text) else SignatureFormat.NACL


def unarmor(text: str) -> tuple[bytes, dict[str, str]]:
    """Decode an armored PGP block into its binary body and armor headers.

    Raises DecodeError when the armor grammar is invalid, the body cannot be
    base64-decoded, the body is empty, or a present CRC-24 does not match.
    """
    if not Armorable.is_armor(text):
        raise DecodeError("Expected ASCII-armored PGP data")
    try:
        block = Armorable.ascii_unarmor(text)
    except (PGPError, ValueError, TypeError) as error:
        raise DecodeError(f"Failed to decode PGP armor: {error}") from error

    body = bytes(block.get("body") or b"")
    if not body:
        raise DecodeError("PGP armor block has an empty body")

    crc = block.get("crc")
    if crc is not None and Armorable.crc24(bytearray(body)) != crc:
        raise DecodeError("PGP armor checksum mismatch")

    headers = {str(key): str(value) for key, value in (block.get("headers") or {}).items()}
    logger.debug("Unarmored PGP block: %d body bytes, %d headers", len(body), len(headers))
    return body, headers
