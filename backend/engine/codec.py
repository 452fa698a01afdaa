"""
Share-token codec.
A token is the full GameState as compact JSON, zlib-compressed, then URL-safe
base64 without padding, so it can sit in a link path or query string.
"""

import base64
import binascii
import json
import logging
import zlib

from backend.config import MAX_TOKEN_LENGTH
from backend.engine.definitions import load_variants
from backend.engine.errors import DecodeError, ParseError
from backend.engine.state import GameState

logger = logging.getLogger(__name__)

# Decompressed JSON may not exceed this many bytes per token character
MAX_EXPANSION = 16


def encode(state: GameState) -> str:
    """Serialize a state into a deterministic, URL-safe token."""
    payload = json.dumps(state.to_dict(), separators=(",", ":"), sort_keys=True)
    compressed = zlib.compress(payload.encode("utf-8"), 9)
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def _decompress(token: str) -> str:
    if not isinstance(token, str) or not token:
        raise DecodeError("Token is empty")
    if len(token) > MAX_TOKEN_LENGTH:
        raise DecodeError(f"Token is {len(token)} characters, limit is {MAX_TOKEN_LENGTH}")
    try:
        padded = token + "=" * (-len(token) % 4)
        compressed = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
        raise DecodeError(f"Token is not valid base64: {exc}") from exc

    limit = len(token) * MAX_EXPANSION
    inflater = zlib.decompressobj()
    try:
        raw = inflater.decompress(compressed, limit)
    except zlib.error as exc:
        raise DecodeError(f"Token cannot be decompressed: {exc}") from exc
    if inflater.unconsumed_tail:
        raise DecodeError("Token expands beyond the size limit")
    if not inflater.eof:
        raise DecodeError("Token is truncated")
    if inflater.unused_data:
        raise DecodeError("Token has trailing data after the compressed payload")

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError("Token payload is not UTF-8 text") from exc


def decode(token: str) -> GameState:
    """
    Restore a state from a token.

    Raises:
        DecodeError: the token is not base64, not zlib data, or too large
        ParseError: the payload is not JSON or not a structurally valid state
    """
    try:
        text = _decompress(token)
    except DecodeError as exc:
        logger.warning("Rejected share token: %s", exc)
        raise

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        logger.warning("Share token payload is not JSON: %s", exc)
        raise ParseError(f"Token payload is not JSON: {exc}") from exc

    try:
        state = GameState.from_dict(data)
        if state.variant not in load_variants():
            raise ParseError(f"state.variant: unknown variant {state.variant!r}")
    except ParseError as exc:
        logger.warning("Share token payload is not a valid state: %s", exc)
        raise
    except (TypeError, ValueError, KeyError, AttributeError, RecursionError) as exc:
        logger.warning("Share token payload is not a valid state: %s", exc)
        raise ParseError(f"Token payload is not a valid state: {exc}") from exc
    return state
