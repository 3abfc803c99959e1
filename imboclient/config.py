# -*- coding: utf-8 -*-
"""Configuration for imboclient.

Constants used throughout the package. Environment variables can override
the defaults for deployment; most functions also accept keyword overrides.
"""
import os


def _flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


# -------------------- WORKERS --------------------
# Allow hashing in a background worker process
USE_WORKERS = _flag("IMBOCLIENT_USE_WORKERS", True)

# -------------------- READERS --------------------
# Timeout in seconds when fetching a remote URL
URL_TIMEOUT = float(os.getenv("IMBOCLIENT_URL_TIMEOUT", "30"))

# Read size for streams and HTTP bodies
CHUNK_SIZE = 65536

# -------------------- ALGORITHMS --------------------
DIGEST_ALGORITHM = "md5"
SIGNATURE_ALGORITHM = "sha256"

# -------------------- AUTHENTICATION --------------------
SIGNATURE_HEADER = "X-Imbo-Authenticate-Signature"
TIMESTAMP_HEADER = "X-Imbo-Authenticate-Timestamp"
ACCESS_TOKEN_PARAM = "accessToken"
EXPIRES_PARAM = "expires"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
