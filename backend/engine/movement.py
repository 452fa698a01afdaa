"""
Move generation.
Enumerates the legal single-die moves for the side to move, given the dice not yet used.
Call again after every executed move: the result reflects only the current unused dice.
"""

from backend.engine import DIRECTION, POINT_COUNT
from backend.engine.queries import (
    can_bear_off,
    has_bar_pieces,
    is_blocked,
    is_blot,
    occupied_points,
    point_owner,
)
from backend.engine.state import BEAR_OFF, ENTER, HIT, MOVE, Board, GameState, Location, Move


def entry_point(side: str, die_value: int) -> int:
    """Point a piece enters on from the bar. WHITE enters at 0..5, BLACK at 23..18."""
    if DIRECTION[side] > 0:
        return die_value - 1
    return POINT_COUNT - die_value


def _on_board(index: int) -> bool:
    return 0 <= index < POINT_COUNT


def _is_nearest_to_edge(board: Board, side: str, source: int) -> bool:
    """
    True when no piece of the side sits between source and its bear-off edge.
    Such a piece may bear off with a die larger than the exact distance.
    """
    ahead = range(source + 1, POINT_COUNT) if DIRECTION[side] > 0 else range(source - 1, -1, -1)
    return all(point_owner(board, i) != side for i in ahead)


def _is_exact_bear_off(side: str, source: int, die_value: int) -> bool:
    if DIRECTION[side] > 0:
        return source == POINT_COUNT - die_value
    return source == die_value - 1


def _unused_dice(state: GameState) -> list[tuple[int, int]]:
    """(die_index, die_value) pairs not yet consumed this turn."""
    dice = state.dice
    return [(i, dice.values[i]) for i in dice.unused_indices()]


def _entry_moves(state: GameState) -> list[Move]:
    board, side = state.board, state.turn
    moves = []
    for die_index, die_value in _unused_dice(state):
        target = entry_point(side, die_value)
        if is_blocked(board, target, side):
            continue
        moves.append(Move(
            source=Location.bar(),
            destination=Location.point(target),
            die_index=die_index,
            die_value=die_value,
            kind=HIT if is_blot(board, target, side) else ENTER,
        ))
    return moves


def _board_moves(state: GameState) -> list[Move]:
    board, side = state.board, state.turn
    direction = DIRECTION[side]
    bearing_off = can_bear_off(board, side)
    moves = []
    for source in occupied_points(board, side):
        for die_index, die_value in _unused_dice(state):
            target = source + direction * die_value
            if _on_board(target):
                if is_blocked(board, target, side):
                    continue
                moves.append(Move(
                    source=Location.point(source),
                    destination=Location.point(target),
                    die_index=die_index,
                    die_value=die_value,
                    kind=HIT if is_blot(board, target, side) else MOVE,
                ))
            elif bearing_off and (
                _is_exact_bear_off(side, source, die_value)
                or _is_nearest_to_edge(board, side, source)
            ):
                moves.append(Move(
                    source=Location.point(source),
                    destination=Location.off(),
                    die_index=die_index,
                    die_value=die_value,
                    kind=BEAR_OFF,
                ))
    return moves


def legal_moves(state: GameState) -> list[Move]:
    """
    All legal single-die moves for the side to move.

    Pieces on the bar must re-enter first: while any remain, only entry moves are
    returned, and an empty list means the side cannot move this step.
    Otherwise every (point, unused die slot) pair that lands on an open point, or
    bears off under the bear-off rules, is returned in board order then die order.
    """
    if state.winner is not None or not state.dice.rolled:
        return []
    if has_bar_pieces(state.board, state.turn):
        return _entry_moves(state)
    return _board_moves(state)


def has_legal_moves(state: GameState) -> bool:
    return len(legal_moves(state)) > 0


def moves_from(state: GameState, source: Location) -> list[Move]:
    """Legal moves starting at one location (for highlighting a selected stack)."""
    return [m for m in legal_moves(state) if m.source == source]


def movable_sources(state: GameState) -> list[Location]:
    """Distinct locations that have at least one legal move, in generation order."""
    sources: list[Location] = []
    for move in legal_moves(state):
        if move.source not in sources:
            sources.append(move.source)
    return sources


def unique_moves(moves: list[Move]) -> list[Move]:
    """
    Collapse moves that differ only in die slot.
    On doubles every unused slot yields its own copy of the same move; UIs show one.
    """
    seen = set()
    result = []
    for move in moves:
        key = (move.source, move.destination, move.die_value, move.kind)
        if key in seen:
            continue
        seen.add(key)
        result.append(move)
    return result
