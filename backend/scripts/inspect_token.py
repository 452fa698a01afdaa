#!/usr/bin/env python3
"""
Decode a share token and print the game it holds, its legal moves, and any broken
board invariants. Use to look into a link someone reports as wrong. Usage (from repo root):
  python -m backend.scripts.inspect_token <token>
  python -m backend.scripts.inspect_token --json <token>
Exit status: 0 for a consistent state, 1 for usage errors, 2 for an unreadable token,
3 when the state decodes but breaks an invariant.
"""
import json
import sys
import os

# Run from repo root so backend is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from backend.engine.codec import decode
from backend.engine.errors import CodecError
from backend.engine.movement import legal_moves
from backend.engine.queries import check_invariants
from backend.engine.utils import print_game_state


def main():
    args = sys.argv[1:]
    as_json = "--json" in args
    args = [a for a in args if a != "--json"]
    if len(args) != 1:
        print("Usage: python -m backend.scripts.inspect_token [--json] <token>")
        sys.exit(1)

    try:
        state = decode(args[0].strip())
    except CodecError as e:
        print(f"{type(e).__name__}: {e}")
        sys.exit(2)

    problems = check_invariants(state)
    if as_json:
        print(json.dumps(state.to_dict(), indent=2))
    else:
        print_game_state(state)
        print(f"Game id: {state.game_id}")
        print(f"History: {len(state.history)} moves")
        moves = legal_moves(state)
        print(f"Legal moves ({len(moves)}):")
        for move in moves:
            print(f"  {move}")

    for problem in problems:
        print(f"INVARIANT: {problem}", file=sys.stderr)
    sys.exit(3 if problems else 0)


if __name__ == "__main__":
    main()
