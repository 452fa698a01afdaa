"""
Main entry point for the Backgammon Rules Engine.
Demonstrates core functionality by playing a complete game with random legal moves.
Run: python main.py [variant] [seed]
"""

import random
import sys

from backend.engine.codec import decode, encode
from backend.engine.game import apply_move, legal_moves, new_game, roll_dice
from backend.engine.queries import check_invariants
from backend.engine.utils import format_dice, print_game_state


def play_random_game(variant: str, seed: int, max_turns: int = 2000, verbose: bool = True):
    """
    Play one game to completion, each side picking uniformly among legal moves.
    Returns the final state.
    """
    rng = random.Random(seed)
    state = new_game(variant, rng)
    if verbose:
        print("\n[INITIAL STATE]")
        print_game_state(state)

    for turn in range(1, max_turns + 1):
        side = state.turn
        state = roll_dice(state, rng)
        if verbose:
            if state.turn == side:
                print(f"Turn {turn}: {side} rolls {format_dice(state.dice)}")
            else:
                print(f"Turn {turn}: {side} cannot move and passes")

        while state.turn == side and state.winner is None:
            move = rng.choice(legal_moves(state))
            piece = state.board.stack(move.source, side)[-1]
            state = apply_move(state, move, piece.id)
            if verbose:
                print(f"  {move}")

        problems = check_invariants(state)
        if problems:
            raise RuntimeError(f"Invariant broken after turn {turn}: {problems}")

        if state.winner is not None:
            break

    return state


def main():
    print("Backgammon Rules Engine")
    print("=" * 60)

    variant = sys.argv[1] if len(sys.argv) > 1 else "casual"
    seed = int(sys.argv[2]) if len(sys.argv) > 2 else 7

    state = play_random_game(variant, seed)

    print("\n[FINAL STATE]")
    print_game_state(state)
    print(f"Moves played: {len(state.history)}")

    # ===== Share token round trip =====
    token = encode(state)
    print(f"\nShare token ({len(token)} chars):")
    print(token)
    restored = decode(token)
    print(f"✓ Token restores the same state: {restored == state}")


if __name__ == "__main__":
    main()
