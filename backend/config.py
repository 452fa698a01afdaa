"""
Single place for default game configuration.
Each value can be overridden with an environment variable of the same name prefixed BACKGAMMON_.
"""

import os

# Variant id from data/variants/<id>.json used when a new game names no variant.
DEFAULT_VARIANT = os.environ.get("BACKGAMMON_DEFAULT_VARIANT", "casual")

# Share tokens longer than this are rejected before decompression. The decompressed
# payload is capped at MAX_TOKEN_LENGTH * 16 bytes.
MAX_TOKEN_LENGTH = int(os.environ.get("BACKGAMMON_MAX_TOKEN_LENGTH", "16384"))

# Comma separated origins allowed by the HTTP API.
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "BACKGAMMON_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000",
    ).split(",")
    if origin.strip()
]
