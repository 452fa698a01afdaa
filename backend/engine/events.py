"""
Game events for UI hooks and logging.
Events describe what happened during action processing.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

# Turn events
DICE_ROLLED = "dice_rolled"
TURN_ENDED = "turn_ended"
TURN_PASSED = "turn_passed"

# Movement events
PIECE_MOVED = "piece_moved"
PIECE_ENTERED = "piece_entered"
PIECE_HIT = "piece_hit"
PIECE_BORNE_OFF = "piece_borne_off"

# Game events
GAME_WON = "game_won"


# ===== Event Factory Functions =====

def dice_rolled(side: str, values: list[int]) -> GameEvent:
    return GameEvent(DICE_ROLLED, {
        "side": side,
        "values": values,
        "double": len(values) == 4,
    })


def turn_ended(side: str, next_side: str) -> GameEvent:
    """Emitted when every die of the turn has been used."""
    return GameEvent(TURN_ENDED, {
        "side": side,
        "next_side": next_side,
    })


def turn_passed(side: str, unused_values: list[int]) -> GameEvent:
    """Emitted when a side cannot use its remaining dice and forfeits them."""
    return GameEvent(TURN_PASSED, {
        "side": side,
        "unused_values": unused_values,
    })


def piece_moved(
    side: str,
    piece_id: str,
    source: dict[str, Any],
    destination: dict[str, Any],
    die_value: int,
    kind: str,
) -> GameEvent:
    return GameEvent(PIECE_MOVED, {
        "side": side,
        "piece_id": piece_id,
        "source": source,
        "destination": destination,
        "die_value": die_value,
        "kind": kind,
    })


def piece_entered(side: str, piece_id: str, point: int) -> GameEvent:
    return GameEvent(PIECE_ENTERED, {
        "side": side,
        "piece_id": piece_id,
        "point": point,
    })


def piece_hit(side: str, piece_id: str, point: int, hit_by: str) -> GameEvent:
    """Emitted for the piece that was sent to the bar, not for the mover."""
    return GameEvent(PIECE_HIT, {
        "side": side,
        "piece_id": piece_id,
        "point": point,
        "hit_by": hit_by,
    })


def piece_borne_off(side: str, piece_id: str, borne_off: int) -> GameEvent:
    return GameEvent(PIECE_BORNE_OFF, {
        "side": side,
        "piece_id": piece_id,
        "borne_off": borne_off,  # total borne off by this side, including this piece
    })


def game_won(winner: str, score: dict[str, int]) -> GameEvent:
    """
    Emitted when a side bears off its last piece.

    Args:
        winner: The winning side ("WHITE" or "BLACK")
        score: Cumulative score after this game, {side: wins}
    """
    return GameEvent(GAME_WON, {
        "winner": winner,
        "score": score,
    })
