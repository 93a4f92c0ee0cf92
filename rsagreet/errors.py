# errors.py
"""Exception hierarchy shared by the service and the client.

Cryptographic and transport failures live in separate branches so that an
``except CryptoError`` never swallows a network problem and the other way
round.
"""


class GreetingError(Exception):
    """Base class for every error raised by rsagreet."""


# --- Key configuration ---

class KeyConfigError(GreetingError):
    pass


class MissingKeyError(KeyConfigError):
    """The expected key material is absent or empty."""


class InvalidKeyError(KeyConfigError):
    """Key material is present but is not a usable RSA key."""


# --- Cryptography ---

class CryptoError(GreetingError):
    pass


class PlaintextTooLargeError(CryptoError):
    """The plaintext does not fit in a single RSA block."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Plaintext is {size} bytes, the limit for this key and padding is {limit} bytes")
        self.size = size
        self.limit = limit


class InvalidPlaintextError(CryptoError):
    """The plaintext cannot be encoded as UTF-8, e.g. it holds a lone surrogate."""


class DecryptionError(CryptoError):
    """Ciphertext could not be decoded, unpadded or decrypted."""


# --- Transport ---

class TransportError(GreetingError):
    """The request did not produce a well-formed response from the server."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
