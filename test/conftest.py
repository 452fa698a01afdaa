"""
Shared fixtures: build arbitrary board positions without going through setup.
"""

import random

import pytest

from backend.engine import BLACK, PIECES_PER_SIDE, POINT_COUNT, SIDES, WHITE
from backend.engine.state import Board, Dice, GameState, PerSide, Piece


def _pieces(side: str, count: int, counter: dict[str, int]) -> tuple[Piece, ...]:
    pieces = []
    for _ in range(count):
        counter[side] += 1
        pieces.append(Piece(id=f"{side[0].lower()}{counter[side]:02d}", owner=side))
    return tuple(pieces)


def build_state(
    points: dict[int, tuple[str, int]],
    turn: str = WHITE,
    dice: tuple[int, ...] = (),
    used: tuple[int, ...] = (),
    bar: dict[str, int] | None = None,
    outside: dict[str, int] | None = None,
    fill_outside: bool = True,
    variant: str = "casual",
) -> GameState:
    """
    Build a state from {point_index: (side, count)}.
    With fill_outside, each side's missing pieces are placed borne off so totals stay at 15.
    Piece ids are w01, w02, ... and b01, b02, ... in placement order (points, then bar, then outside).
    """
    counter = {WHITE: 0, BLACK: 0}
    board_points: list[tuple[Piece, ...]] = [() for _ in range(POINT_COUNT)]
    for index, (side, count) in sorted(points.items()):
        board_points[index] = _pieces(side, count, counter)

    bar = bar or {}
    bar_stacks = {side: _pieces(side, bar.get(side, 0), counter) for side in SIDES}

    outside = dict(outside or {})
    if fill_outside:
        for side in SIDES:
            placed = counter[side]
            outside.setdefault(side, PIECES_PER_SIDE - placed)
    outside_stacks = {side: _pieces(side, outside.get(side, 0), counter) for side in SIDES}

    return GameState(
        variant=variant,
        board=Board(
            points=tuple(board_points),
            bar=PerSide(bar_stacks[WHITE], bar_stacks[BLACK]),
            outside=PerSide(outside_stacks[WHITE], outside_stacks[BLACK]),
        ),
        turn=turn,
        dice=Dice(values=tuple(dice), rolled=bool(dice), used=tuple(used)),
        game_id="00000000-0000-4000-8000-000000000000",
        timestamp=1_700_000_000_000,
    )


@pytest.fixture
def make_state():
    return build_state


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fixed_clock():
    return lambda: 1_800_000_000_000
