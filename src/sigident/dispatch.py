"""Format-routing entry points for armored PGP and compact NaCl signatures."""

from __future__ import annotations

import logging

from sigident.armor import detect_format
from sigident.keys import NaclKeyBundle, PgpKeyBundle
from sigident.naclsig import kb_open_sig, sig_assert_kb_payload, verify_nacl
from sigident.pgp import pgp_open_sig, sig_assert_pgp_payload
from sigident.sigid import compute_sig_id_from_sig_body
from sigident.types import OpenedSignature, SigID, SignatureFormat, VerifiedSignature

logger = logging.getLogger(__name__)


def open_sig(armored: str) -> OpenedSignature:
    """Open the envelope of a PGP or NaCl signature and derive its SigID.

    Both formats derive the SigID the same way, over the raw signature bytes.
    Decode errors from either path propagate unchanged.
    """
    sig_format = detect_format(armored)
    logger.debug("Opening %s signature", sig_format.value)
    if sig_format is SignatureFormat.PGP:
        raw_body = pgp_open_sig(armored).raw_body
    else:
        raw_body = kb_open_sig(armored)
    return OpenedSignature(
        format=sig_format,
        raw_body=raw_body,
        sig_id=compute_sig_id_from_sig_body(raw_body),
    )


def sig_assert_payload(armored: str, expected: bytes) -> SigID:
    """Confirm the signed content equals ``expected`` without checking any key.

    This is a content-integrity check only. It says nothing about who signed.
    """
    if detect_format(armored) is SignatureFormat.PGP:
        return sig_assert_pgp_payload(armored, expected)
    return sig_assert_kb_payload(armored, expected)


def verify_sig(armored: str, key: PgpKeyBundle | NaclKeyBundle) -> VerifiedSignature:
    """Verify that ``key`` produced the signature and return its signed content."""
    sig_format = detect_format(armored)
    logger.debug("Verifying %s signature", sig_format.value)

    if sig_format is SignatureFormat.PGP:
        if not isinstance(key, PgpKeyBundle):
            raise TypeError("PGP signatures must be verified with a PgpKeyBundle")
        parsed = pgp_open_sig(armored)
        outcome = parsed.verify(key)
        return VerifiedSignature(
            format=sig_format,
            sig_id=parsed.id(),
            signed_content=parsed.signed_content or b"",
            outcome=outcome,
        )

    if not isinstance(key, NaclKeyBundle):
        raise TypeError("NaCl signatures must be verified with a NaclKeyBundle")
    raw = kb_open_sig(armored)
    outcome, payload = verify_nacl(raw, key)
    return VerifiedSignature(
        format=sig_format,
        sig_id=compute_sig_id_from_sig_body(raw),
        signed_content=payload,
        outcome=outcome,
    )
