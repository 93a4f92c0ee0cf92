# routes.py
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from config import GREETING_PATH
from .errors import DecryptionError
from .protocol import GreetingProtocol

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Greeting"])


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    content = {"error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


# --- Dependency for the protocol loaded at startup ---
def get_protocol(request: Request) -> GreetingProtocol:
    protocol = getattr(request.app.state, "protocol", None)
    if protocol is None:
        raise RuntimeError("Server private key not loaded.")
    return protocol


# --- Metadata Endpoint ---
@router.get("/")
async def root():
    return {
        "meta": {
            "serverName": "rsagreet",
            "implementationName": "rsagreet",
            "implementationVersion": "1.0.0"
        },
        "endpoints": [GREETING_PATH],
    }


# Plain def: RSA work is CPU bound, FastAPI runs it in the threadpool
@router.post(GREETING_PATH)
def encrypt_greeting(data: Dict[str, Any] = Body(...), protocol: GreetingProtocol = Depends(get_protocol)):
    encrypted_name = data.get("name")

    # Reject before any decryption is attempted
    if not encrypted_name or not isinstance(encrypted_name, str):
        return error_response(400, 'Missing "name" field in request body')

    try:
        encrypted_greeting = protocol.respond(encrypted_name)
    except DecryptionError as e:
        # The cause stays in the local log only
        logger.warning("Rejected request: %s (%r)", e, e.__cause__)
        return error_response(400, "Failed to decrypt request")
    except Exception:
        logger.exception("Error processing request")
        return error_response(500, "Failed to process encrypted data")

    return {
        "encryptedGreeting": encrypted_greeting,
        "message": "Greeting encrypted successfully",
    }
