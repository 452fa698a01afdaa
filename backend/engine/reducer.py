"""
Main game reducer.
Applies actions to state, enforcing rules and producing new state.
Returns (new_state, events) where events describe what happened.
The input state is never modified; a rejected action raises before any new state exists.
"""

from dataclasses import replace

from backend.engine import DIE_SIDES, PIECES_PER_SIDE, opponent
from backend.engine.actions import Action
from backend.engine.errors import IllegalMove, PieceNotFound
from backend.engine.events import (
    GameEvent,
    dice_rolled,
    game_won,
    piece_borne_off,
    piece_entered,
    piece_hit,
    piece_moved,
    turn_ended,
    turn_passed,
)
from backend.engine.movement import legal_moves
from backend.engine.state import (
    BEAR_OFF,
    ENTER,
    HIT,
    Board,
    Dice,
    GameState,
    Location,
    Move,
    MoveRecord,
    Piece,
)


def apply_action(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    Validates:
    - Game is not over
    - Action side matches the side to move

    Args:
        state: Current game state
        action: Action to apply

    Returns:
        Tuple of (new_state, events) where events describe what happened

    Raises:
        IllegalMove: the action is not allowed now
        PieceNotFound: a move names a piece missing from its source
    """
    if state.winner is not None:
        raise IllegalMove(f"Game is over. {state.winner} has won.")

    if action.side != state.turn:
        raise IllegalMove(f"Action side {action.side} does not match side to move {state.turn}")

    if action.type == "roll_dice":
        return _handle_roll_dice(state, action)
    if action.type == "move_piece":
        return _handle_move_piece(state, action)
    if action.type == "pass_turn":
        return _handle_pass_turn(state, action)

    raise IllegalMove(f"Unknown action type: {action.type}")


def _handle_roll_dice(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Store the turn's dice.
    Validates:
    - Dice are not already rolled with moves pending
    - Values are 2 distinct dice or 4 equal dice, each in 1..DIE_SIDES
    """
    if state.dice.rolled and not state.dice.all_used:
        raise IllegalMove("Dice already rolled; use or pass the remaining dice first")

    values = tuple(action.payload.get("values", ()))
    if any(not isinstance(v, int) or not 1 <= v <= DIE_SIDES for v in values):
        raise IllegalMove(f"Invalid die values: {values}")
    if not (
        (len(values) == 2 and values[0] != values[1])
        or (len(values) == 4 and len(set(values)) == 1)
    ):
        raise IllegalMove(f"Dice must be two distinct values or four equal values, got {values}")

    new_state = replace(
        state,
        dice=Dice(values=values, rolled=True, used=()),
        timestamp=action.payload.get("timestamp", state.timestamp),
    )
    events = [dice_rolled(state.turn, list(values))]
    return _pass_if_stuck(new_state, events)


def _find_legal(state: GameState, move: Move) -> Move:
    for candidate in legal_moves(state):
        if move.same_as(candidate):
            return candidate
    raise IllegalMove(f"Move {move} is not legal for {state.turn}")


def _take_piece(state: GameState, source: Location, piece_id: str) -> tuple[Board, Piece]:
    """Remove a piece of the side to move from its source."""
    board = state.board
    stack = board.stack(source, state.turn)
    for position, piece in enumerate(stack):
        if piece.id == piece_id and piece.owner == state.turn:
            remaining = stack[:position] + stack[position + 1:]
            return board.with_stack(source, state.turn, remaining), piece
    raise PieceNotFound(piece_id, str(source))


def _handle_move_piece(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Execute one single-die move.
    Validates:
    - Dice are rolled
    - The move is in the current legal set
    - The named piece sits in the move's source container
    """
    if not state.dice.rolled:
        raise IllegalMove("Dice have not been rolled")

    move = _find_legal(state, action.payload["move"])
    piece_id = action.payload["piece_id"]
    side = state.turn
    events: list[GameEvent] = []

    board, piece = _take_piece(state, move.source, piece_id)

    if move.kind == BEAR_OFF:
        board = board.with_stack(move.destination, side, board.outside[side] + (piece,))
        events.append(piece_borne_off(side, piece.id, len(board.outside[side])))
    elif move.kind == HIT:
        # The lone occupant goes to its own bar; the mover takes the point alone
        victim = board.stack(move.destination, side)[0]
        board = board.with_stack(Location.bar(), victim.owner, board.bar[victim.owner] + (victim,))
        board = board.with_stack(move.destination, side, (piece,))
        events.append(piece_hit(victim.owner, victim.id, move.destination.index, side))
    else:
        target = board.stack(move.destination, side)
        board = board.with_stack(move.destination, side, target + (piece,))
        if move.kind == ENTER:
            events.append(piece_entered(side, piece.id, move.destination.index))

    events.insert(0, piece_moved(
        side,
        piece.id,
        move.source.to_dict(),
        move.destination.to_dict(),
        move.die_value,
        move.kind,
    ))

    record = MoveRecord(
        piece_id=piece.id,
        source=move.source,
        destination=move.destination,
        die_index=move.die_index,
        kind=move.kind,
    )
    new_state = replace(
        state,
        board=board,
        dice=state.dice.use(move.die_index),
        history=state.history + (record,),
    )

    if len(board.outside[side]) == PIECES_PER_SIDE:
        score = new_state.score.set(side, new_state.score[side] + 1)
        new_state = replace(new_state, score=score, winner=side, dice=Dice())
        events.append(game_won(side, score.to_dict()))
        return new_state, events

    if new_state.dice.all_used:
        new_state = _end_turn(new_state)
        events.append(turn_ended(side, new_state.turn))
        return new_state, events

    return _pass_if_stuck(new_state, events)


def _handle_pass_turn(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Forfeit the remaining dice when none of them can be played.
    Roll and move already pass automatically; this covers states built elsewhere.
    Validates:
    - Dice are rolled
    - No legal move exists for the remaining dice
    """
    if not state.dice.rolled:
        raise IllegalMove("Dice have not been rolled")
    if legal_moves(state):
        raise IllegalMove(f"{state.turn} has legal moves and cannot pass")

    return _forfeit(state, [])


def _pass_if_stuck(state: GameState, events: list[GameEvent]) -> tuple[GameState, list[GameEvent]]:
    """Forced pass: a rolled turn with no legal move for any remaining die ends at once."""
    if legal_moves(state):
        return state, events
    return _forfeit(state, events)


def _forfeit(state: GameState, events: list[GameEvent]) -> tuple[GameState, list[GameEvent]]:
    unused = [state.dice.values[i] for i in state.dice.unused_indices()]
    new_state = _end_turn(state)
    return new_state, events + [turn_passed(state.turn, unused), turn_ended(state.turn, new_state.turn)]


def _end_turn(state: GameState) -> GameState:
    return replace(state, dice=Dice(), turn=opponent(state.turn))


def replay_from_actions(
    initial_state: GameState,
    actions: list[Action],
) -> tuple[GameState, list[GameEvent]]:
    """
    Replay a series of actions from an initial state.
    Event sourcing: state is derived from action log.

    Args:
        initial_state: Starting game state
        actions: List of actions to apply in sequence

    Returns:
        Tuple of (final_state, all_events) after all actions applied
    """
    current_state = initial_state
    all_events: list[GameEvent] = []

    for action in actions:
        current_state, events = apply_action(current_state, action)
        all_events.extend(events)

    return current_state, all_events
