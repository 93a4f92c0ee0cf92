# codec.py
"""RSA encryption in both directions.

Requests go public key -> private key with OAEP/SHA-256, which is real
confidential encryption. Responses go private key -> public key with PKCS#1
v1.5 block type 1: anyone holding the public key can open them, so they
prove where a message came from but do not hide it.

Ciphertexts cross the wire as standard base64 text.
"""
import base64
import binascii
import math
import secrets

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .errors import DecryptionError, InvalidPlaintextError, PlaintextTooLargeError

# PKCS#1 v1.5 needs at least 8 bytes of padding plus 3 framing bytes
PKCS1_OVERHEAD = 11


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def _modulus_bytes(key) -> int:
    return math.ceil(key.key_size / 8)


def max_oaep_plaintext(key) -> int:
    """Largest plaintext, in bytes, that OAEP/SHA-256 fits in one block (190 for 2048 bits)."""
    return _modulus_bytes(key) - 2 * hashes.SHA256.digest_size - 2


def max_pkcs1_plaintext(key) -> int:
    """Largest plaintext, in bytes, for PKCS#1 v1.5 (245 for 2048 bits)."""
    return _modulus_bytes(key) - PKCS1_OVERHEAD


def _encode(plaintext: str, limit: int) -> bytes:
    try:
        data = plaintext.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidPlaintextError("Plaintext is not valid Unicode text") from exc
    if len(data) > limit:
        raise PlaintextTooLargeError(len(data), limit)
    return data


def _b64decode(ciphertext: str) -> bytes:
    try:
        return base64.b64decode(ciphertext, validate=True)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise DecryptionError("Ciphertext is not valid base64") from exc


# --- Public key -> private key (OAEP) ---

def encrypt_for_recipient(plaintext: str, public_key: rsa.RSAPublicKey) -> str:
    data = _encode(plaintext, max_oaep_plaintext(public_key))
    return base64.b64encode(public_key.encrypt(data, _oaep())).decode("ascii")


def decrypt_as_recipient(ciphertext: str, private_key: rsa.RSAPrivateKey) -> str:
    raw = _b64decode(ciphertext)
    try:
        return private_key.decrypt(raw, _oaep()).decode("utf-8")
    except ValueError as exc:
        # Covers wrong length, bad padding, wrong key and invalid UTF-8
        raise DecryptionError("Decryption failed") from exc


# --- Private key -> public key (PKCS#1 v1.5, block type 1) ---

def _pad_type1(data: bytes, k: int) -> bytes:
    return b"\x00\x01" + b"\xff" * (k - 3 - len(data)) + b"\x00" + data


def _private_transform(private_key: rsa.RSAPrivateKey, block: bytes) -> bytes:
    """Raw RSA private-key operation (m^d mod n) using CRT and blinding."""
    numbers = private_key.private_numbers()
    public = numbers.public_numbers
    n, e = public.n, public.e
    k = _modulus_bytes(private_key)

    m = int.from_bytes(block, "big")

    # Blinding keeps the timing of the exponentiation independent of m;
    # the unblinded result is the same for every r.
    while True:
        r = secrets.randbelow(n - 2) + 2
        if math.gcd(r, n) == 1:
            break
    blinded = (m * pow(r, e, n)) % n

    m1 = pow(blinded, numbers.dmp1, numbers.p)
    m2 = pow(blinded, numbers.dmq1, numbers.q)
    h = (numbers.iqmp * (m1 - m2)) % numbers.p
    s = ((m2 + h * numbers.q) * pow(r, -1, n)) % n

    # A faulty CRT result would leak a factor of n
    if pow(s, e, n) != m:
        raise RuntimeError("RSA private-key operation produced an inconsistent result")
    return s.to_bytes(k, "big")


def sign_encrypt_with_private_key(plaintext: str, private_key: rsa.RSAPrivateKey) -> str:
    """Apply the private-key transform to a PKCS#1 v1.5 type-1 block.

    This is not a signature: nothing is hashed and there is no DigestInfo, so
    the public-key holder recovers the plaintext itself. The output is
    deterministic for a given key and plaintext.
    """
    k = _modulus_bytes(private_key)
    data = _encode(plaintext, k - PKCS1_OVERHEAD)
    encrypted = _private_transform(private_key, _pad_type1(data, k))
    return base64.b64encode(encrypted).decode("ascii")


def open_with_public_key(ciphertext: str, public_key: rsa.RSAPublicKey) -> str:
    raw = _b64decode(ciphertext)
    try:
        # With no hash algorithm the library strips the type-1 padding
        # and returns the embedded bytes unchanged.
        data = public_key.recover_data_from_signature(raw, padding.PKCS1v15(), None)
        return data.decode("utf-8")
    except (InvalidSignature, ValueError) as exc:
        raise DecryptionError("Decryption failed") from exc
