# keystore.py
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from dotenv import dotenv_values

from config import PRIVATE_KEY_ENV, PUBLIC_KEY_ENV
from .errors import InvalidKeyError, MissingKeyError

logger = logging.getLogger(__name__)


def unescape_pem(value: str) -> str:
    """Turn a single-line configuration value back into multi-line PEM."""
    value = value.strip()
    # Tolerate a value copied together with its surrounding quotes
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return value.replace("\\n", "\n").strip() + "\n"


@dataclass(frozen=True)
class KeyConfig:
    """Raw PEM text for each role. Either side may be left out."""

    public_key_pem: Optional[str] = None
    private_key_pem: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, Optional[str]]] = None) -> "KeyConfig":
        if environ is None:
            environ = os.environ
        return cls(
            public_key_pem=environ.get(PUBLIC_KEY_ENV),
            private_key_pem=environ.get(PRIVATE_KEY_ENV),
        )

    @classmethod
    def from_env_file(cls, path) -> "KeyConfig":
        # dotenv_values reads the file without exporting it to os.environ
        if not Path(path).exists():
            raise MissingKeyError(f"Key file {path} does not exist")
        return cls.from_env(dotenv_values(path))

    def __repr__(self) -> str:
        return (
            f"KeyConfig(public_key_pem={'set' if self.public_key_pem else None}, "
            f"private_key_pem={'set' if self.private_key_pem else None})"
        )


class KeyStore:
    """Parses the key material of one role.

    The service only ever calls load_private_key() and the client only
    load_public_key(); neither role needs the counterpart key.
    """

    def __init__(self, config: KeyConfig):
        self._config = config

    def load_public_key(self) -> rsa.RSAPublicKey:
        pem = self._require(self._config.public_key_pem, PUBLIC_KEY_ENV)
        try:
            key = serialization.load_pem_public_key(pem.encode("utf-8"))
        except (ValueError, TypeError) as exc:
            raise InvalidKeyError(f"{PUBLIC_KEY_ENV} is not a valid PEM public key") from exc
        if not isinstance(key, rsa.RSAPublicKey):
            raise InvalidKeyError(f"{PUBLIC_KEY_ENV} is not an RSA key")
        logger.debug("Loaded %d-bit RSA public key", key.key_size)
        return key

    def load_private_key(self) -> rsa.RSAPrivateKey:
        pem = self._require(self._config.private_key_pem, PRIVATE_KEY_ENV)
        try:
            key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
        except (ValueError, TypeError) as exc:
            # Never include the PEM itself in the message
            raise InvalidKeyError(f"{PRIVATE_KEY_ENV} is not a valid unencrypted PEM private key") from exc
        if not isinstance(key, rsa.RSAPrivateKey):
            raise InvalidKeyError(f"{PRIVATE_KEY_ENV} is not an RSA key")
        logger.debug("Loaded %d-bit RSA private key", key.key_size)
        return key

    @staticmethod
    def _require(value: Optional[str], name: str) -> str:
        if value is None or not value.strip():
            raise MissingKeyError(f"{name} must be set in the environment or .env file")
        return unescape_pem(value)
