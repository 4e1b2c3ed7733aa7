"""sigident: content-derived IDs and verification for PGP and NaCl signatures."""

from sigident.armor import detect_format, is_pgp, unarmor
from sigident.dispatch import open_sig, sig_assert_payload, verify_sig
from sigident.errors import (
    ContentMismatch,
    DecodeError,
    NoSignedContent,
    NotSigned,
    SignatureError,
    SignatureInvalid,
    SignatureMissing,
    WrongSigner,
)
from sigident.keys import NaclKeyBundle, PgpKeyBundle, load_key
from sigident.naclsig import sign_compact
from sigident.pgp import ParsedSignature, pgp_open_sig, sig_assert_pgp_payload
from sigident.sigid import compute_sig_id_from_sig_body
from sigident.types import (
    OpenedSignature,
    SigID,
    SignatureFormat,
    SignerIdentity,
    VerificationOutcome,
    VerifiedSignature,
)

__all__ = [
    "ContentMismatch",
    "DecodeError",
    "NaclKeyBundle",
    "NoSignedContent",
    "NotSigned",
    "OpenedSignature",
    "ParsedSignature",
    "PgpKeyBundle",
    "SigID",
    "SignatureError",
    "SignatureFormat",
    "SignatureInvalid",
    "SignatureMissing",
    "SignerIdentity",
    "VerificationOutcome",
    "VerifiedSignature",
    "WrongSigner",
    "compute_sig_id_from_sig_body",
    "detect_format",
    "is_pgp",
    "load_key",
    "open_sig",
    "pgp_open_sig",
    "sig_assert_payload",
    "sig_assert_pgp_payload",
    "sign_compact",
    "unarmor",
    "verify_sig",
]

__version__ = "0.0.1"
