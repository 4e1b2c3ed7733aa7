"""Typed failures raised while opening and verifying signatures."""

from __future__ import annotations


class SignatureError(ValueError):
    """Base class for every signature failure raised by sigident."""


class DecodeError(SignatureError):
    """Armor, envelope or message syntax could not be decoded."""


class ContentMismatch(SignatureError):
    """Signed content differs from the expected payload."""


class NotSigned(SignatureError):
    pass


class WrongSigner(SignatureError):
    def __init__(self, fingerprint: str, message: str | None = None):
        super().__init__(message or f"Got wrong SignedBy key {fingerprint}")
        self.fingerprint = fingerprint


class NoSignedContent(SignatureError):
    pass


class SignatureInvalid(SignatureError):
    def __init__(self, detail: str):
        super().__init__(f"Signature verification failed: {detail}")
        self.detail = detail


class SignatureMissing(SignatureError):
    pass
