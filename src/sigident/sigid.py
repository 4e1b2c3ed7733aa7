"""Content-derived signature identifiers."""

from __future__ import annotations

import hashlib

from sigident.types import SigID


def compute_sig_id_from_sig_body(body: bytes) -> SigID:
    return SigID(hashlib.sha256(body).digest())
