from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from rsagreet.keystore import KeyConfig, KeyStore
from rsagreet.provisioner import KeyPair, generate


@pytest.fixture(scope="session")
def key_pair() -> KeyPair:
    return generate(2048)


@pytest.fixture(scope="session")
def other_key_pair() -> KeyPair:
    return generate(2048)


@pytest.fixture(scope="session")
def public_key(key_pair: KeyPair) -> rsa.RSAPublicKey:
    return KeyStore(KeyConfig(public_key_pem=key_pair.public_key)).load_public_key()


@pytest.fixture(scope="session")
def private_key(key_pair: KeyPair) -> rsa.RSAPrivateKey:
    return KeyStore(KeyConfig(private_key_pem=key_pair.private_key)).load_private_key()


@pytest.fixture(scope="session")
def other_private_key(other_key_pair: KeyPair) -> rsa.RSAPrivateKey:
    return KeyStore(KeyConfig(private_key_pem=other_key_pair.private_key)).load_private_key()


@pytest.fixture(scope="session")
def other_public_key(other_key_pair: KeyPair) -> rsa.RSAPublicKey:
    return KeyStore(KeyConfig(public_key_pem=other_key_pair.public_key)).load_public_key()
