# config.py
import os
from pathlib import Path

from dotenv import load_dotenv

# Dotenv file holding the RSA keys (see `rsagreet keygen`)
# Relative to the working directory; values already present in the
# process environment take precedence
ENV_FILE = Path(os.getenv("RSAGREET_ENV_FILE", ".env"))
load_dotenv(ENV_FILE)

# Names of the configuration values carrying the PEM keys
# Newlines inside the PEM are written as a literal "\n"
PUBLIC_KEY_ENV = "RSA_PUBLIC_KEY"
PRIVATE_KEY_ENV = "RSA_PRIVATE_KEY"

# Server listening host
# "127.0.0.1" means only accessible from the local machine
# "0.0.0.0" means accessible from other machines on the network
HOST = os.getenv("RSAGREET_HOST", "localhost")

# Server listening port
PORT = int(os.getenv("RSAGREET_PORT", "3000"))

# Base URL the client sends its requests to
SERVER_URL = os.getenv("RSAGREET_SERVER_URL", f"http://{HOST}:{PORT}")

# Path of the encrypted greeting endpoint
GREETING_PATH = "/encrypt-greeting"

# Client request timeout in seconds
REQUEST_TIMEOUT = float(os.getenv("RSAGREET_REQUEST_TIMEOUT", "10"))

# Logging level for Uvicorn and the application
# Options: "debug", "info", "warning", "error", "critical"
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")
LOG_LEVEL = os.getenv("RSAGREET_LOG_LEVEL", "info")

# CORS configuration
# The browser client is served from a separate dev server
CORS_ALLOWED_ORIGINS = ["http://localhost:8080"]

# Allow credentials in CORS
CORS_ALLOW_CREDENTIALS = True
# Allowed methods for CORS
CORS_ALLOWED_METHODS = ["GET", "POST"]
# Allowed headers for CORS
CORS_ALLOWED_HEADERS = ["*"]
