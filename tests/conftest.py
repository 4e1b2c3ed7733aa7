from __future__ import annotations

import pgpy
import pytest
from nacl.signing import SigningKey
from pgpy.constants import (
    CompressionAlgorithm,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)

from sigident.keys import NaclKeyBundle, PgpKeyBundle


def _new_pgp_key(name: str) -> pgpy.PGPKey:
    key = pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
    uid = pgpy.PGPUID.new(name, email=f"{name.lower()}@example.com")
    key.add_uid(
        uid,
        usage={KeyFlags.Sign, KeyFlags.Certify},
        hashes=[HashAlgorithm.SHA256],
        ciphers=[SymmetricKeyAlgorithm.AES256],
        compression=[CompressionAlgorithm.Uncompressed],
    )
    return key


def new_message(payload: bytes) -> pgpy.PGPMessage:
    return pgpy.PGPMessage.new(payload, compression=CompressionAlgorithm.Uncompressed)


def sign_message(key: pgpy.PGPKey, payload: bytes) -> pgpy.PGPMessage:
    message = new_message(payload)
    message |= key.sign(message)
    return message


@pytest.fixture(scope="session")
def alice_key() -> pgpy.PGPKey:
    return _new_pgp_key("Alice")


@pytest.fixture(scope="session")
def bob_key() -> pgpy.PGPKey:
    return _new_pgp_key("Bob")


@pytest.fixture(scope="session")
def alice_bundle(alice_key) -> PgpKeyBundle:
    return PgpKeyBundle(alice_key.pubkey)


@pytest.fixture(scope="session")
def bob_bundle(bob_key) -> PgpKeyBundle:
    return PgpKeyBundle(bob_key.pubkey)


@pytest.fixture(scope="session")
def hello_message(alice_key) -> pgpy.PGPMessage:
    return sign_message(alice_key, b"hello")


@pytest.fixture(scope="session")
def hello_armored(hello_message) -> str:
    return str(hello_message)


@pytest.fixture
def nacl_signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture
def nacl_bundle(nacl_signing_key) -> NaclKeyBundle:
    return NaclKeyBundle(nacl_signing_key.verify_key)
