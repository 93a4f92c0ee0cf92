# provisioner.py
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from config import PRIVATE_KEY_ENV, PUBLIC_KEY_ENV

logger = logging.getLogger(__name__)

MIN_MODULUS_BITS = 2048


@dataclass(frozen=True)
class KeyPair:
    public_key: str
    # Kept out of repr so the private key never ends up in a log line
    private_key: str = field(repr=False)


def generate(modulus_bits: int = 2048) -> KeyPair:
    """Generate a fresh RSA key pair as SPKI / PKCS#8 PEM text."""
    if modulus_bits < MIN_MODULUS_BITS:
        raise ValueError(f"RSA keys must be at least {MIN_MODULUS_BITS} bits, got {modulus_bits}")

    private_key_obj = rsa.generate_private_key(
        public_exponent=65537,
        key_size=modulus_bits,
    )
    public_key_obj = private_key_obj.public_key()

    private_pem = private_key_obj.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode("ascii")
    public_pem = public_key_obj.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("ascii")

    logger.info("Generated %d-bit RSA key pair", modulus_bits)
    return KeyPair(public_key=public_pem, private_key=private_pem)


# --- Distribution through dotenv files ---

def escape_pem(pem: str) -> str:
    """Fold PEM onto one line, writing each newline as a literal \\n."""
    return pem.replace("\r\n", "\n").replace("\n", "\\n")


def public_env_line(public_pem: str) -> str:
    """The single configuration line a public-key-only client needs."""
    return f'{PUBLIC_KEY_ENV}="{escape_pem(public_pem)}"'


def render_env(key_pair: KeyPair) -> str:
    return (
        "# RSA Public Key (PEM format)\n"
        f"{public_env_line(key_pair.public_key)}\n"
        "\n"
        "# RSA Private Key (PEM format)\n"
        "# Keep this secret and never commit it to version control!\n"
        f'{PRIVATE_KEY_ENV}="{escape_pem(key_pair.private_key)}"\n'
    )


def write_env_file(key_pair: KeyPair, path, overwrite: bool = False) -> Path:
    path = Path(path)
    if path.exists() and not overwrite:
        raise FileExistsError(f"{path} already exists")

    # Create with owner-only permissions before any key material is written
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(render_env(key_pair))
    os.chmod(path, 0o600)

    logger.info("Wrote key pair to %s", path)
    return path
