"""
Action definitions for the game.
Actions are immutable, deterministic instructions.
"""

from dataclasses import dataclass

from backend.engine.state import Move


@dataclass(frozen=True)
class Action:
    """Base action class. All actions have a type, side, and payload."""
    type: str  # "roll_dice", "move_piece" or "pass_turn"
    side: str  # side performing the action
    payload: dict  # Action-specific data


def roll_dice(side: str, values: tuple[int, ...] | list[int], timestamp: int) -> Action:
    """
    Record a dice roll for the side to move.
    values are already rolled and expanded (see dice.roll); the reducer holds no RNG.

    Example: roll_dice("WHITE", (3, 5), 1700000000000)
    """
    return Action(
        type="roll_dice",
        side=side,
        payload={"values": tuple(values), "timestamp": timestamp},
    )


def move_piece(side: str, move: Move, piece_id: str) -> Action:
    """
    Move one piece using one die.
    move must be one of movement.legal_moves(state); piece_id names the piece
    taken from move.source (any piece of the side on that point or bar).
    """
    return Action(
        type="move_piece",
        side=side,
        payload={"move": move, "piece_id": piece_id},
    )


def pass_turn(side: str) -> Action:
    """Forfeit the remaining dice. Only valid when no legal move exists."""
    return Action(
        type="pass_turn",
        side=side,
        payload={},
    )
