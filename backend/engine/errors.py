"""
Engine exceptions.
All derive from ValueError so callers that only catch ValueError keep working.
"""


class EngineError(ValueError):
    """Base class for every error raised by the engine."""


class IllegalMove(EngineError):
    """The requested action is not legal in the current state."""


class PieceNotFound(EngineError):
    """A move names a piece that is not in its declared source container."""

    def __init__(self, piece_id: str, source: str):
        super().__init__(f"Piece {piece_id} not found on {source}")
        self.piece_id = piece_id
        self.source = source


class CodecError(EngineError):
    """Base class for token failures."""


class DecodeError(CodecError):
    """Token cannot be decoded from its transport encoding or decompressed."""


class ParseError(CodecError):
    """Decoded payload is not a structurally valid game state."""


class UnknownVariant(EngineError):
    """No variant definition exists under the requested id."""
