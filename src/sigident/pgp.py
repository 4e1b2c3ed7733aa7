"""Armored OpenPGP signatures: opening, payload assertion and key-bound verification."""

from __future__ import annotations

import hmac
import logging

from sigident.armor import unarmor
from sigident.errors import (
    ContentMismatch,
    DecodeError,
    NoSignedContent,
    NotSigned,
    SignatureInvalid,
    SignatureMissing,
    WrongSigner,
)
from sigident.keys import PgpKeyBundle
from sigident.message import EmptyKeyRing, read_message
from sigident.sigid import compute_sig_id_from_sig_body
from sigident.types import SigID, VerificationOutcome

logger = logging.getLogger(__name__)


class ParsedSignature:
    """One opened PGP signature.

    ``raw_body`` is fixed at construction. ``signed_content`` and
    ``verification`` are written once, and only by a call that succeeded
    completely; a failed call leaves them as they were.
    """

    def __init__(self, raw_body: bytes, armor_headers: dict[str, str] | None = None):
        self._raw_body = bytes(raw_body)
        self._armor_headers = dict(armor_headers or {})
        self._signed_content: bytes | None = None
        self._verification: VerificationOutcome | None = None

    @property
    def raw_body(self) -> bytes:
        return self._raw_body

    @property
    def armor_headers(self) -> dict[str, str]:
        return dict(self._armor_headers)

    @property
    def signed_content(self) -> bytes | None:
        return self._signed_content

    @property
    def verification(self) -> VerificationOutcome | None:
        return self._verification

    def id(self) -> SigID:
        return compute_sig_id_from_sig_body(self._raw_body)

    def assert_payload(self, expected: bytes) -> None:
        """Check that the signed content equals ``expected``.

        No key is consulted, so this proves content integrity only, never
        authorship. Use :meth:`verify` to bind the content to a key.
        """
        md = read_message(self._raw_body, EmptyKeyRing())
        if md.unverified_body is None:
            raise DecodeError("Signature does not contain a literal data packet")
        data = md.unverified_body.read()
        if not hmac.compare_digest(data, bytes(expected)):
            raise ContentMismatch("Signature did not contain expected text")
        if self._signed_content is None:
            self._signed_content = data

    def verify(self, key: PgpKeyBundle) -> VerificationOutcome:
        if self._verification is not None:
            raise ValueError("Signature has already been verified")

        md = read_message(self._raw_body, key)
        if not md.is_signed or md.signed_by is None:
            raise NotSigned("Message wasn't signed")
        if not key.matches_key(md.signed_by):
            logger.debug("Signer %s does not match key %s", md.signed_by.describe(), key.fingerprint)
            raise WrongSigner(md.signed_by.describe())
        if md.unverified_body is None:
            raise NoSignedContent("no signed material found")

        # The verdict is only filled in once the body has been read to EOF.
        literal_data = md.unverified_body.read()

        if md.signature_error is not None:
            logger.debug("Signature from %s is invalid: %s", md.signed_by.describe(), md.signature_error)
            raise SignatureInvalid(md.signature_error)
        if md.signature is None:
            raise SignatureMissing("No available signature after checking signature")

        outcome = VerificationOutcome(
            is_signed=True,
            signed_by=md.signed_by,
            signature_error=None,
            created=md.created,
        )
        self._signed_content = literal_data
        self._verification = outcome
        return outcome


def pgp_open_sig(armored: str) -> ParsedSignature:
    body, headers = unarmor(armored)
    return ParsedSignature(body, headers)


def sig_assert_pgp_payload(armored: str, expected: bytes) -> SigID:
    parsed = pgp_open_sig(armored)
    parsed.assert_payload(expected)
    return parsed.id()
