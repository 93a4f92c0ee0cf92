from __future__ import annotations

import base64
import hashlib

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from rsagreet import codec
from rsagreet.codec import (
    decrypt_as_recipient,
    encrypt_for_recipient,
    max_oaep_plaintext,
    max_pkcs1_plaintext,
    open_with_public_key,
    sign_encrypt_with_private_key,
)
from rsagreet.errors import CryptoError, DecryptionError, InvalidPlaintextError, PlaintextTooLargeError

# DER prefix of DigestInfo for SHA-256 (RFC 8017, section 9.2)
SHA256_DIGEST_INFO = bytes.fromhex("3031300d060960864801650304020105000420")

SAMPLES = ["Alice", "", "Zoë Ångström", "名前", "a" * 100]


def _flip_byte(ciphertext: str, index: int) -> str:
    raw = bytearray(base64.b64decode(ciphertext))
    raw[index] ^= 0x01
    return base64.b64encode(bytes(raw)).decode()


def test_size_limits_for_2048_bit_key(public_key: rsa.RSAPublicKey) -> None:
    assert max_oaep_plaintext(public_key) == 190
    assert max_pkcs1_plaintext(public_key) == 245


class TestOaepDirection:
    @pytest.mark.parametrize("plaintext", SAMPLES)
    def test_round_trip(
        self, plaintext: str, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        ciphertext = encrypt_for_recipient(plaintext, public_key)
        assert decrypt_as_recipient(ciphertext, private_key) == plaintext

    def test_largest_plaintext_round_trips(
        self, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        plaintext = "x" * 190
        assert decrypt_as_recipient(encrypt_for_recipient(plaintext, public_key), private_key) == plaintext

    def test_ciphertext_is_one_modulus_of_base64(self, public_key: rsa.RSAPublicKey) -> None:
        assert len(base64.b64decode(encrypt_for_recipient("Alice", public_key))) == 256

    def test_encryption_is_randomized(
        self, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        first = encrypt_for_recipient("Alice", public_key)
        second = encrypt_for_recipient("Alice", public_key)

        assert first != second
        assert decrypt_as_recipient(first, private_key) == "Alice"
        assert decrypt_as_recipient(second, private_key) == "Alice"

    def test_oversize_plaintext_rejected(self, public_key: rsa.RSAPublicKey) -> None:
        with pytest.raises(PlaintextTooLargeError) as exc_info:
            encrypt_for_recipient("x" * 191, public_key)
        assert exc_info.value.size == 191
        assert exc_info.value.limit == 190

    def test_limit_counts_utf8_bytes_not_characters(self, public_key: rsa.RSAPublicKey) -> None:
        # 96 characters, 192 bytes
        with pytest.raises(PlaintextTooLargeError):
            encrypt_for_recipient("é" * 96, public_key)

    def test_wrong_private_key_fails(
        self, public_key: rsa.RSAPublicKey, other_private_key: rsa.RSAPrivateKey
    ) -> None:
        ciphertext = encrypt_for_recipient("Alice", public_key)
        with pytest.raises(DecryptionError):
            decrypt_as_recipient(ciphertext, other_private_key)

    @pytest.mark.parametrize("index", [0, 100, 255])
    def test_tampered_ciphertext_fails(
        self, index: int, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        ciphertext = _flip_byte(encrypt_for_recipient("Alice", public_key), index)
        with pytest.raises(DecryptionError):
            decrypt_as_recipient(ciphertext, private_key)

    @pytest.mark.parametrize("ciphertext", ["", "not base64!", base64.b64encode(b"short").decode()])
    def test_malformed_ciphertext_fails(self, ciphertext: str, private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(DecryptionError):
            decrypt_as_recipient(ciphertext, private_key)

    def test_pkcs1_ciphertext_is_not_accepted(
        self, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        ciphertext = sign_encrypt_with_private_key("Alice", private_key)
        with pytest.raises(DecryptionError):
            decrypt_as_recipient(ciphertext, private_key)


class TestPkcs1Direction:
    @pytest.mark.parametrize("plaintext", SAMPLES)
    def test_round_trip(
        self, plaintext: str, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        ciphertext = sign_encrypt_with_private_key(plaintext, private_key)
        assert open_with_public_key(ciphertext, public_key) == plaintext

    def test_largest_plaintext_round_trips(
        self, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        plaintext = "y" * 245
        assert open_with_public_key(sign_encrypt_with_private_key(plaintext, private_key), public_key) == plaintext

    def test_is_deterministic(self, private_key: rsa.RSAPrivateKey) -> None:
        assert sign_encrypt_with_private_key("Hello Alice", private_key) == sign_encrypt_with_private_key(
            "Hello Alice", private_key
        )

    def test_oversize_plaintext_rejected(self, private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(PlaintextTooLargeError) as exc_info:
            sign_encrypt_with_private_key("y" * 246, private_key)
        assert exc_info.value.limit == 245

    def test_wrong_public_key_fails(
        self, private_key: rsa.RSAPrivateKey, other_public_key: rsa.RSAPublicKey
    ) -> None:
        ciphertext = sign_encrypt_with_private_key("Hello Alice", private_key)
        with pytest.raises(DecryptionError):
            open_with_public_key(ciphertext, other_public_key)

    @pytest.mark.parametrize("index", [0, 128, 255])
    def test_tampered_ciphertext_fails(
        self, index: int, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        ciphertext = _flip_byte(sign_encrypt_with_private_key("Hello Alice", private_key), index)
        with pytest.raises(DecryptionError):
            open_with_public_key(ciphertext, public_key)

    def test_malformed_ciphertext_fails(self, public_key: rsa.RSAPublicKey) -> None:
        with pytest.raises(DecryptionError):
            open_with_public_key("%%%", public_key)

    def test_private_transform_matches_standard_pkcs1_signature(self, private_key: rsa.RSAPrivateKey) -> None:
        # A PKCS#1 v1.5 signature is the same transform applied to DigestInfo || digest,
        # so both must produce identical bytes.
        digest = hashlib.sha256(b"payload").digest()
        expected = private_key.sign(digest, padding.PKCS1v15(), Prehashed(hashes.SHA256()))

        block = codec._pad_type1(SHA256_DIGEST_INFO + digest, 256)
        assert codec._private_transform(private_key, block) == expected

    def test_public_key_holder_can_read_response(
        self, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey
    ) -> None:
        ciphertext = sign_encrypt_with_private_key("Hello Alice", private_key)
        raw = base64.b64decode(ciphertext)

        assert public_key.recover_data_from_signature(raw, padding.PKCS1v15(), None) == b"Hello Alice"


def test_crypto_errors_share_a_base_class() -> None:
    assert issubclass(DecryptionError, CryptoError)
    assert issubclass(PlaintextTooLargeError, CryptoError)


class TestUnencodablePlaintext:
    # A lone surrogate is what Python puts in argv for undecodable bytes
    def test_oaep_rejects_lone_surrogate(self, public_key: rsa.RSAPublicKey) -> None:
        with pytest.raises(InvalidPlaintextError):
            encrypt_for_recipient("\udcff", public_key)

    def test_pkcs1_rejects_lone_surrogate(self, private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(InvalidPlaintextError):
            sign_encrypt_with_private_key("Hello \udcff", private_key)

    def test_is_a_crypto_error(self) -> None:
        assert issubclass(InvalidPlaintextError, CryptoError)
