"""Compact NaCl signature envelope.

The envelope is the standard base64 encoding of a msgpack map::

    {"body": {"key": <kid>, "payload": <bytes>, "sig": <bytes>, "sig_type": <int>},
     "tag": 514, "version": 1}

where ``kid`` is ``01 20 <ed25519 public key> 0a``. The SigID of an envelope is
the SHA-256 of the packed (base64-decoded) bytes.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import logging
import re
from dataclasses import dataclass

import msgpack
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey

from sigident.errors import ContentMismatch, DecodeError, NotSigned, SignatureInvalid, WrongSigner
from sigident.keys import NaclKeyBundle, kid_from_public_key
from sigident.sigid import compute_sig_id_from_sig_body
from sigident.types import SigID, SignerIdentity, VerificationOutcome

logger = logging.getLogger(__name__)

PACKET_TAG_SIGNATURE = 514
PACKET_VERSION = 1
SIGNATURE_LEN = 64

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class NaclSigInfo:
    kid: bytes
    payload: bytes
    sig: bytes
    sig_type: int = 0

    @property
    def signer(self) -> SignerIdentity:
        hex_kid = self.kid.hex()
        return SignerIdentity(key_id=hex_kid, fingerprint=hex_kid)


def encode_packet(info: NaclSigInfo) -> bytes:
    return msgpack.packb(
        {
            "body": {
                "key": info.kid,
                "payload": info.payload,
                "sig": info.sig,
                "sig_type": info.sig_type,
            },
            "tag": PACKET_TAG_SIGNATURE,
            "version": PACKET_VERSION,
        },
        use_bin_type=True,
    )


def sign_compact(signing_key: SigningKey, payload: bytes, sig_type: int = 0) -> str:
    """Sign ``payload`` and return the base64 envelope."""
    signature = signing_key.sign(bytes(payload)).signature
    info = NaclSigInfo(
        kid=kid_from_public_key(bytes(signing_key.verify_key)),
        payload=bytes(payload),
        sig=signature,
        sig_type=sig_type,
    )
    return base64.b64encode(encode_packet(info)).decode("ascii")


def kb_open_sig(armored: str) -> bytes:
    compact = _WHITESPACE.sub("", armored)
    if not compact:
        raise DecodeError("Empty signature envelope")
    try:
        return base64.b64decode(compact.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as error:
        raise DecodeError(f"Failed to decode signature envelope: {error}") from error


def decode_packet(raw: bytes) -> NaclSigInfo:
    try:
        packet = msgpack.unpackb(raw, raw=False)
    except (msgpack.UnpackException, ValueError, TypeError) as error:
        raise DecodeError(f"Failed to unpack signature envelope: {error}") from error

    if not isinstance(packet, dict):
        raise DecodeError("Signature envelope is not a map")
    if packet.get("tag") != PACKET_TAG_SIGNATURE:
        raise DecodeError(f"Unexpected packet tag {packet.get('tag')!r}")
    if packet.get("version") != PACKET_VERSION:
        raise DecodeError(f"Unsupported packet version {packet.get('version')!r}")

    body = packet.get("body")
    if not isinstance(body, dict):
        raise DecodeError("Signature envelope body is missing")

    kid = body.get("key")
    payload = body.get("payload")
    sig = body.get("sig", b"")
    sig_type = body.get("sig_type", 0)
    if not isinstance(kid, bytes) or not isinstance(payload, bytes):
        raise DecodeError("Signature envelope key and payload must be binary")
    if not isinstance(sig, bytes) or not isinstance(sig_type, int):
        raise DecodeError("Signature envelope sig must be binary and sig_type an integer")
    return NaclSigInfo(kid=kid, payload=payload, sig=sig, sig_type=sig_type)


def sig_assert_kb_payload(armored: str, expected: bytes) -> SigID:
    raw = kb_open_sig(armored)
    info = decode_packet(raw)
    if not hmac.compare_digest(info.payload, bytes(expected)):
        raise ContentMismatch("Signature did not contain expected text")
    return compute_sig_id_from_sig_body(raw)


def verify_nacl(raw: bytes, key: NaclKeyBundle) -> tuple[VerificationOutcome, bytes]:
    info = decode_packet(raw)
    if not info.sig:
        raise NotSigned("Envelope carries no signature")

    signer = info.signer
    if not key.matches_key(signer):
        logger.debug("Signer %s does not match key %s", signer.key_id, key.kid)
        raise WrongSigner(signer.key_id)

    if len(info.sig) != SIGNATURE_LEN:
        raise SignatureInvalid(f"signature must be {SIGNATURE_LEN} bytes, got {len(info.sig)}")
    try:
        key.verify_key.verify(info.payload, info.sig)
    except BadSignatureError as error:
        raise SignatureInvalid(str(error) or "bad Ed25519 signature") from error

    outcome = VerificationOutcome(is_signed=True, signed_by=signer)
    return outcome, info.payload
