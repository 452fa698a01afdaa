"""
Query functions over the board.
Structural questions the move generator and UIs ask without mutating game state.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any

from backend.engine import HOME_QUADRANT, PIECES_PER_SIDE, POINT_COUNT, SIDES, opponent
from backend.engine.state import Board, GameState, Location, Move, Piece


@dataclass
class ValidationResult:
    """Result of move validation."""
    valid: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "error": self.error}


# ===== Board Structure =====

def point_owner(board: Board, index: int) -> str | None:
    """Owner of the pieces on a point, or None if it is empty."""
    point = board.points[index]
    return point[0].owner if point else None


def is_blocked(board: Board, index: int, mover: str) -> bool:
    """A point is blocked for the mover when it holds two or more opposing pieces."""
    point = board.points[index]
    return len(point) >= 2 and all(p.owner == opponent(mover) for p in point)


def is_blot(board: Board, index: int, mover: str) -> bool:
    """True when the point holds exactly one opposing piece, which the mover may hit."""
    point = board.points[index]
    return len(point) == 1 and point[0].owner != mover


def has_bar_pieces(board: Board, side: str) -> bool:
    return len(board.bar[side]) > 0


def occupied_points(board: Board, side: str) -> list[int]:
    """Indices of points holding the side's pieces, in board order."""
    return [i for i in range(POINT_COUNT) if point_owner(board, i) == side]


def can_bear_off(board: Board, side: str) -> bool:
    """Bear-off eligibility: nothing on the bar and every on-board piece in the home quadrant."""
    if has_bar_pieces(board, side):
        return False
    home = HOME_QUADRANT[side]
    return all(i in home for i in occupied_points(board, side))


def pieces_on_board(board: Board, side: str) -> int:
    return sum(len(board.points[i]) for i in occupied_points(board, side))


def count_pieces(board: Board, side: str) -> int:
    """Pieces of a side across points, bar and outside. Always PIECES_PER_SIDE in a valid state."""
    on_points = sum(1 for point in board.points for p in point if p.owner == side)
    return on_points + len(board.bar[side]) + len(board.outside[side])


def borne_off(board: Board, side: str) -> int:
    return len(board.outside[side])


def find_piece(board: Board, piece_id: str) -> tuple[Piece | None, Location | None]:
    """Locate a piece anywhere on the board. Returns (piece, location) or (None, None)."""
    for index, point in enumerate(board.points):
        for piece in point:
            if piece.id == piece_id:
                return piece, Location.point(index)
    for side in SIDES:
        for piece in board.bar[side]:
            if piece.id == piece_id:
                return piece, Location.bar()
        for piece in board.outside[side]:
            if piece.id == piece_id:
                return piece, Location.off()
    return None, None


def check_invariants(state: GameState) -> list[str]:
    """
    Check the structural invariants of a state.
    Returns a list of human-readable violations (empty when the state is consistent):
    - each side has exactly PIECES_PER_SIDE pieces across points, bar and outside
    - no point mixes owners
    - bar and outside stacks only hold their own side's pieces
    - piece ids are unique
    """
    board = state.board
    problems = []
    for side in SIDES:
        total = count_pieces(board, side)
        if total != PIECES_PER_SIDE:
            problems.append(f"{side} has {total} pieces, expected {PIECES_PER_SIDE}")
        for container, stack in (("bar", board.bar[side]), ("outside", board.outside[side])):
            strangers = [p.id for p in stack if p.owner != side]
            if strangers:
                problems.append(f"{side} {container} holds foreign pieces: {', '.join(strangers)}")
    for index, point in enumerate(board.points):
        if len({p.owner for p in point}) > 1:
            problems.append(f"point {index} mixes owners")

    ids = Counter(p.id for point in board.points for p in point)
    for side in SIDES:
        ids.update(p.id for p in board.bar[side])
        ids.update(p.id for p in board.outside[side])
    duplicates = sorted(pid for pid, n in ids.items() if n > 1)
    if duplicates:
        problems.append(f"duplicate piece ids: {', '.join(duplicates)}")
    return problems


# ===== Move Validation =====

def validate_move(state: GameState, move: Move, piece_id: str) -> ValidationResult:
    """
    Validate a move without applying it.
    Mirrors the checks the reducer makes before executing a move_piece action.
    """
    # Imported here: movement depends on this module
    from backend.engine.movement import legal_moves

    if state.winner is not None:
        return ValidationResult(False, f"Game is over. {state.winner} has won.")
    if not state.dice.rolled:
        return ValidationResult(False, "Dice have not been rolled")
    if not any(move.same_as(candidate) for candidate in legal_moves(state)):
        return ValidationResult(False, f"Move {move} is not legal")
    stack = state.board.stack(move.source, state.turn)
    if not any(p.id == piece_id and p.owner == state.turn for p in stack):
        return ValidationResult(False, f"Piece {piece_id} not found on {move.source}")
    return ValidationResult(True)
