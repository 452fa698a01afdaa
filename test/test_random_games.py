"""
Seeded random games: every state reached must keep the board consistent,
respect bar priority and bear-off gating, and survive a token round trip.
"""

import random

import pytest

from backend.engine import HOME_QUADRANT, PIECES_PER_SIDE
from backend.engine.codec import decode, encode
from backend.engine.game import apply_move, legal_moves, new_game, roll_dice
from backend.engine.queries import can_bear_off, check_invariants, count_pieces
from backend.engine.state import BEAR_OFF
from main import play_random_game


def _check_moves(state):
    moves = legal_moves(state)
    side = state.turn
    if state.board.bar[side]:
        assert all(m.source.is_bar for m in moves)
    if any(m.kind == BEAR_OFF for m in moves):
        assert can_bear_off(state.board, side)
        assert all(
            index in HOME_QUADRANT[side]
            for index, point in enumerate(state.board.points)
            if point and point[0].owner == side
        )
    unused = set(state.dice.unused_indices())
    assert all(m.die_index in unused for m in moves)
    return moves


@pytest.mark.parametrize("seed", [1, 2, 3, 11, 42])
def test_random_game_keeps_invariants(seed):
    rng = random.Random(seed)
    state = new_game("casual", rng, clock=lambda: 0)
    for _ in range(3000):
        if state.winner is not None:
            break
        side = state.turn
        state = roll_dice(state, rng, clock=lambda: 0)
        while state.turn == side and state.winner is None:
            before = state.to_dict()
            moves = _check_moves(state)
            # A rolled turn with nothing to play has already passed
            assert moves
            move = rng.choice(moves)
            piece = state.board.stack(move.source, side)[-1]
            new_state = apply_move(state, move, piece.id)
            assert state.to_dict() == before
            state = new_state
            assert check_invariants(state) == []
            assert decode(encode(state)) == state

    assert state.winner is not None
    assert count_pieces(state.board, state.winner) == PIECES_PER_SIDE
    assert len(state.board.outside[state.winner]) == PIECES_PER_SIDE
    assert state.score[state.winner] == 1


@pytest.mark.parametrize("variant", ["casual", "tapa", "gulbara"])
def test_demo_game_finishes(variant):
    state = play_random_game(variant, seed=7, verbose=False)
    assert state.winner is not None
    assert check_invariants(state) == []
