"""
Utility functions for the game engine.
"""

import random
import time
import uuid
from typing import Callable

from backend.engine import BLACK, POINT_COUNT, SIDES, WHITE
from backend.engine.definitions import VariantDefinition
from backend.engine.state import Board, Dice, GameState, PerSide, Piece

Clock = Callable[[], int]


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds (the token's timestamp unit)."""
    return int(time.time() * 1000)


def generate_piece_id(rng: random.Random, taken: set[str]) -> str:
    """Short hex id, unique among ids already issued for this board."""
    while True:
        piece_id = f"{rng.getrandbits(32):08x}"
        if piece_id not in taken:
            taken.add(piece_id)
            return piece_id


def generate_game_id(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def build_board(variant: VariantDefinition, rng: random.Random) -> Board:
    """Place every side's pieces on the variant's starting points."""
    points: list[tuple[Piece, ...]] = [() for _ in range(POINT_COUNT)]
    taken: set[str] = set()
    for side in SIDES:
        for index, count in sorted(variant.starting_points[side].items()):
            points[index] = tuple(
                Piece(id=generate_piece_id(rng, taken), owner=side) for _ in range(count)
            )
    return Board(points=tuple(points))


def initialize_game_state(
    variant: VariantDefinition,
    rng: random.Random,
    clock: Clock = now_ms,
    score: PerSide | None = None,
) -> GameState:
    """
    Create an initial game state for a variant.

    Args:
        variant: Variant definition with the starting layout
        rng: Random source for piece ids, game id and the opening side
        clock: Returns the current time in epoch milliseconds
        score: Cumulative score to carry over from a previous game
    """
    return GameState(
        variant=variant.id,
        board=build_board(variant, rng),
        turn=rng.choice(SIDES),
        dice=Dice(),
        game_id=generate_game_id(rng),
        timestamp=clock(),
        score=score if score is not None else PerSide(0, 0),
    )


# ===== Text rendering =====

_MARKS = {WHITE: "W", BLACK: "B"}


def _point_label(pieces: tuple[Piece, ...]) -> str:
    if not pieces:
        return " . "
    return f"{_MARKS[pieces[0].owner]}{len(pieces):<2}"


def format_board(state: GameState) -> str:
    """
    Render the board as text. Top row shows points 12..23, bottom row 11..0,
    so WHITE travels counter-clockwise from bottom right to top right.
    """
    board = state.board
    top = range(12, 24)
    bottom = range(11, -1, -1)
    lines = [
        " ".join(f"{i:>3}" for i in top),
        " ".join(f"{_point_label(board.points[i]):>3}" for i in top),
        "",
        " ".join(f"{_point_label(board.points[i]):>3}" for i in bottom),
        " ".join(f"{i:>3}" for i in bottom),
        "",
        "Bar: " + ", ".join(f"{side} {len(board.bar[side])}" for side in SIDES)
        + " | Off: " + ", ".join(f"{side} {len(board.outside[side])}" for side in SIDES),
    ]
    return "\n".join(lines)


def format_dice(dice: Dice) -> str:
    if not dice.rolled:
        return "not rolled"
    return " ".join(
        f"[{v}]" if i in dice.used else str(v) for i, v in enumerate(dice.values)
    )


def print_game_state(state: GameState) -> None:
    """Pretty-print the current game state."""
    print(f"\n{'='*60}")
    print(f"{state.variant} | To move: {state.turn} | Dice: {format_dice(state.dice)}")
    print(f"Score: WHITE {state.score[WHITE]} - BLACK {state.score[BLACK]}")
    if state.winner:
        print(f"*** {state.winner} WINS ***")
    print(f"{'='*60}")
    print(format_board(state))
    print()
