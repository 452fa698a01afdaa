"""
Public game operations.
The only surface collaborators (UI, routing, sharing) use: build a game, roll,
list legal moves, apply a move, and convert states to and from share tokens.
Every function returns a new state; none modifies its input.
"""

import logging
import random

from backend.engine import actions
from backend.engine.codec import decode, encode
from backend.engine.definitions import load_variant
from backend.engine.dice import roll
from backend.engine.errors import CodecError
from backend.engine.movement import legal_moves
from backend.engine.reducer import apply_action
from backend.engine.state import GameState, Move
from backend.engine.utils import Clock, initialize_game_state, now_ms

__all__ = [
    "new_game",
    "roll_dice",
    "legal_moves",
    "apply_move",
    "pass_turn",
    "next_game",
    "encode",
    "decode",
    "load_or_new",
]

logger = logging.getLogger(__name__)


def new_game(
    variant: str | None = None,
    rng: random.Random | None = None,
    clock: Clock = now_ms,
) -> GameState:
    """Build the opening position of a variant (the configured default when None)."""
    definition = load_variant(variant)
    state = initialize_game_state(definition, rng or random.Random(), clock)
    logger.debug("New %s game %s, %s to move", state.variant, state.game_id, state.turn)
    return state


def roll_dice(
    state: GameState,
    rng: random.Random | None = None,
    clock: Clock = now_ms,
) -> GameState:
    """
    Roll for the side to move. Raises IllegalMove if dice are already pending.
    When no die can be played the returned state already belongs to the opponent.
    """
    values = roll(rng or random.Random())
    new_state, _ = apply_action(state, actions.roll_dice(state.turn, values, clock()))
    logger.debug("%s rolled %s", state.turn, values)
    return new_state


def apply_move(state: GameState, move: Move, piece_id: str) -> GameState:
    """
    Execute one legal move with the named piece.
    Raises IllegalMove or PieceNotFound; the input state is left untouched either way.
    """
    new_state, events = apply_action(state, actions.move_piece(state.turn, move, piece_id))
    for event in events:
        logger.debug("%s %s", event.type, event.payload)
    return new_state


def pass_turn(state: GameState) -> GameState:
    """Give up the remaining dice when no legal move exists."""
    new_state, _ = apply_action(state, actions.pass_turn(state.turn))
    logger.debug("%s passed", state.turn)
    return new_state


def next_game(
    state: GameState,
    rng: random.Random | None = None,
    clock: Clock = now_ms,
) -> GameState:
    """Start a fresh board of the same variant, keeping the cumulative score."""
    definition = load_variant(state.variant)
    return initialize_game_state(definition, rng or random.Random(), clock, score=state.score)


def load_or_new(
    token: str | None,
    variant: str | None = None,
    rng: random.Random | None = None,
    clock: Clock = now_ms,
) -> GameState:
    """
    Restore a shared game, or start a new one when the token is missing or unusable.
    Bad tokens come from outside and are expected, so they are not errors here.
    """
    if token:
        try:
            return decode(token)
        except CodecError as exc:
            logger.info("Starting a new game instead of token: %s", exc)
    return new_game(variant, rng, clock)
