# protocol.py
import logging

from cryptography.hazmat.primitives.asymmetric import rsa

from .codec import decrypt_as_recipient, sign_encrypt_with_private_key

logger = logging.getLogger(__name__)


def build_greeting(name: str) -> str:
    return f"Hello {name}"


class GreetingProtocol:
    """Service side of the exchange. Needs the private key only."""

    def __init__(self, private_key: rsa.RSAPrivateKey):
        self._private_key = private_key

    @property
    def key_size(self) -> int:
        return self._private_key.key_size

    def respond(self, encrypted_name: str) -> str:
        """Decrypt a name, greet it and return the greeting for the client.

        Raises DecryptionError when the request cannot be opened with our key,
        and PlaintextTooLargeError if the greeting no longer fits one block.
        """
        name = decrypt_as_recipient(encrypted_name, self._private_key)
        greeting = build_greeting(name)
        logger.debug("Built greeting of %d characters", len(greeting))
        return sign_encrypt_with_private_key(greeting, self._private_key)
