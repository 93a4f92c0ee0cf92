import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from config import (CORS_ALLOW_CREDENTIALS, CORS_ALLOWED_HEADERS,
                    CORS_ALLOWED_METHODS, CORS_ALLOWED_ORIGINS, HOST,
                    LOG_LEVEL, PORT)
from rsagreet.keystore import KeyConfig, KeyStore
from rsagreet.logger_config import setup_logging
from rsagreet.protocol import GreetingProtocol
from rsagreet.routes import error_response
from rsagreet.routes import router as greeting_router

logger = logging.getLogger(__name__)


def create_app(key_config: Optional[KeyConfig] = None) -> FastAPI:
    # --- Lifespan manager for startup events ---
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Load the private key on startup; a KeyConfigError aborts the server
        config = key_config if key_config is not None else KeyConfig.from_env()
        try:
            private_key = KeyStore(config).load_private_key()
        except Exception:
            logger.critical("Failed to load RSA private key from configuration")
            raise
        app.state.protocol = GreetingProtocol(private_key)
        logger.info("Private key loaded successfully (%d bits)", private_key.key_size)
        yield
        app.state.protocol = None

    app = FastAPI(lifespan=lifespan)

    # --- Middleware for CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=CORS_ALLOW_CREDENTIALS,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
    )

    # --- Error bodies use {"error": ...} instead of FastAPI's {"detail": ...} ---
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return error_response(500, "Failed to process encrypted data")

    # --- Include the greeting router ---
    app.include_router(greeting_router)
    return app


app = create_app()


def run(host: str = HOST, port: int = PORT):
    import uvicorn
    log_level = setup_logging(LOG_LEVEL)
    uvicorn.run(app, host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    run()
