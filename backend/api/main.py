"""
FastAPI backend for the backgammon engine.
Stateless: the share token is the game. Every endpoint decodes the token it is
given, applies one action, and returns the new state together with its new token.
"""

import logging
import random

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend.config import CORS_ORIGINS
from backend.engine import actions, game
from backend.engine.definitions import list_variants
from backend.engine.dice import roll
from backend.engine.errors import CodecError, IllegalMove, PieceNotFound, UnknownVariant
from backend.engine.movement import legal_moves
from backend.engine.queries import check_invariants
from backend.engine.reducer import apply_action
from backend.engine.state import LOCATION_KINDS, MOVE_KINDS, POINT, GameState, Location, Move
from backend.engine.utils import now_ms

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Backgammon API",
    description="Stateless backgammon rules engine: every game travels as a share token",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared across requests; dice carry no security requirement
rng = random.Random()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("[500] %s %s", request.method, request.url.path)
        raise
    if response.status_code >= 500:
        logger.error("[%d] %s %s", response.status_code, request.method, request.url.path)
    return response


# ===== Error mapping =====

@app.exception_handler(CodecError)
async def codec_error_handler(request: Request, exc: CodecError):
    return JSONResponse(status_code=400, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(UnknownVariant)
async def unknown_variant_handler(request: Request, exc: UnknownVariant):
    return JSONResponse(status_code=404, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(PieceNotFound)
async def piece_not_found_handler(request: Request, exc: PieceNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(IllegalMove)
async def illegal_move_handler(request: Request, exc: IllegalMove):
    return JSONResponse(status_code=409, content={"detail": str(exc), "error": type(exc).__name__})


# ===== Pydantic Models =====

class NewGameRequest(BaseModel):
    """Variant id from GET /variants. Omitted = backend.config.DEFAULT_VARIANT."""
    variant: str | None = None


class LocationModel(BaseModel):
    kind: str
    index: int | None = Field(default=None, ge=0, le=23)

    def to_location(self) -> Location:
        if self.kind not in LOCATION_KINDS:
            raise HTTPException(status_code=422, detail=f"Unknown location kind: {self.kind}")
        if self.kind == POINT:
            if self.index is None:
                raise HTTPException(status_code=422, detail="Point locations need an index")
            return Location.point(self.index)
        return Location(self.kind)


class MoveRequest(BaseModel):
    source: LocationModel
    destination: LocationModel
    die_index: int = Field(ge=0, le=3)
    kind: str
    piece_id: str


# ===== Helper Functions =====

def state_response(state: GameState, events: list | None = None, strict: bool = False) -> dict:
    """State, its token, and the moves available right now."""
    body = {
        "token": game.encode(state),
        "state": state.to_dict(),
        "legal_moves": [m.to_dict() for m in legal_moves(state)],
        "events": [e.to_dict() for e in events or []],
    }
    if strict:
        body["invariant_violations"] = check_invariants(state)
    return body


def requested_move(state: GameState, request: MoveRequest) -> Move:
    if request.kind not in MOVE_KINDS:
        raise HTTPException(status_code=422, detail=f"Unknown move kind: {request.kind}")
    values = state.dice.values
    return Move(
        source=request.source.to_location(),
        destination=request.destination.to_location(),
        die_index=request.die_index,
        die_value=values[request.die_index] if request.die_index < len(values) else 0,
        kind=request.kind,
    )


# ===== Endpoints =====

@app.get("/")
def root():
    return {"message": "Backgammon API", "version": "1.0.0"}


@app.get("/variants")
def get_variants():
    """List available variants (id, display_name, description). Use id in POST /games."""
    return {"variants": list_variants()}


@app.post("/games")
def create_game(request: NewGameRequest):
    state = game.new_game(request.variant, rng)
    return state_response(state)


@app.get("/games/{token}")
def get_game(token: str, strict: bool = False):
    """Decode a shared game. strict=true adds a report of broken board invariants."""
    return state_response(game.decode(token), strict=strict)


@app.post("/games/{token}/roll")
def do_roll(token: str):
    state = game.decode(token)
    action = actions.roll_dice(state.turn, roll(rng), now_ms())
    new_state, events = apply_action(state, action)
    return state_response(new_state, events)


@app.post("/games/{token}/move")
def do_move(token: str, request: MoveRequest):
    """Move one piece with one die. The move must be one of the state's legal_moves."""
    state = game.decode(token)
    action = actions.move_piece(state.turn, requested_move(state, request), request.piece_id)
    new_state, events = apply_action(state, action)
    return state_response(new_state, events)


@app.post("/games/{token}/pass")
def do_pass(token: str):
    """Forfeit the remaining dice. Rejected with 409 while any legal move exists."""
    state = game.decode(token)
    new_state, events = apply_action(state, actions.pass_turn(state.turn))
    return state_response(new_state, events)


@app.post("/games/{token}/next")
def do_next_game(token: str):
    """Start the next game of the match once the current one has a winner."""
    state = game.decode(token)
    if state.winner is None:
        raise HTTPException(status_code=409, detail="Current game has no winner yet")
    return state_response(game.next_game(state, rng))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
