# client.py
"""Client side of the exchange, holding the public key only.

It can encrypt names for the server and open the server's responses, but
it cannot read anything encrypted for the server.
"""
import logging
from typing import Optional

import httpx
from cryptography.hazmat.primitives.asymmetric import rsa

from config import GREETING_PATH, REQUEST_TIMEOUT, SERVER_URL
from .codec import encrypt_for_recipient, open_with_public_key
from .errors import TransportError

logger = logging.getLogger(__name__)


class GreetingClient:

    def __init__(
        self,
        public_key: rsa.RSAPublicKey,
        base_url: str = SERVER_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._public_key = public_key
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def greet(self, name: str) -> str:
        """Send an encrypted name and return the decrypted greeting.

        PlaintextTooLargeError is raised before anything is sent.
        TransportError covers the network, non-2xx answers and bad JSON;
        DecryptionError means the response could not be opened.
        """
        encrypted_name = encrypt_for_recipient(name, self._public_key)
        encrypted_greeting = await self._post(encrypted_name)
        return open_with_public_key(encrypted_greeting, self._public_key)

    async def _post(self, encrypted_name: str) -> str:
        url = f"{self._base_url}{GREETING_PATH}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json={"name": encrypted_name})
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                f"Server error {response.status_code}: {_server_error(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError("Server returned malformed JSON", status_code=response.status_code) from exc

        encrypted_greeting = data.get("encryptedGreeting") if isinstance(data, dict) else None
        if not isinstance(encrypted_greeting, str) or not encrypted_greeting:
            raise TransportError("Response is missing encryptedGreeting", status_code=response.status_code)

        logger.debug("Received %s", data.get("message", "response"))
        return encrypted_greeting


def _server_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return "Unknown error"
