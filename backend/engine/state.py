"""
Game state representation.
All state is immutable: frozen dataclasses over tuples. Transforms build new values
with dataclasses.replace instead of copying and mutating.
Includes dict serialization for the share token.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from backend.engine import BLACK, DIE_SIDES, POINT_COUNT, SIDES, WHITE
from backend.engine.errors import ParseError

# Location kinds
POINT = "point"
BAR = "bar"
OFF = "off"
LOCATION_KINDS = (POINT, BAR, OFF)

# Move kinds
MOVE = "move"
HIT = "hit"
ENTER = "enter"
BEAR_OFF = "bear_off"
MOVE_KINDS = (MOVE, HIT, ENTER, BEAR_OFF)


# ===== Strict parsing helpers =====

def _field(data: Any, key: str, expected: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(data, dict):
        raise ParseError(f"{where}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise ParseError(f"{where}: missing '{key}'")
    value = data[key]
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and bool not in (expected if isinstance(expected, tuple) else (expected,)):
        raise ParseError(f"{where}.{key}: unexpected boolean")
    if not isinstance(value, expected):
        raise ParseError(f"{where}.{key}: unexpected type {type(value).__name__}")
    return value


def _side(value: Any, where: str) -> str:
    if value not in SIDES:
        raise ParseError(f"{where}: unknown side {value!r}")
    return value


def _list(data: Any, key: str, where: str) -> list:
    return _field(data, key, list, where)


# ===== Value types =====

@dataclass(frozen=True)
class Location:
    """Where a piece sits: a board point, its side's bar, or borne off."""
    kind: str
    index: int | None = None  # set only for POINT

    @classmethod
    def point(cls, index: int) -> "Location":
        return cls(POINT, index)

    @classmethod
    def bar(cls) -> "Location":
        return cls(BAR)

    @classmethod
    def off(cls) -> "Location":
        return cls(OFF)

    @property
    def is_point(self) -> bool:
        return self.kind == POINT

    @property
    def is_bar(self) -> bool:
        return self.kind == BAR

    @property
    def is_off(self) -> bool:
        return self.kind == OFF

    def __str__(self) -> str:
        return f"point {self.index}" if self.is_point else self.kind

    def to_dict(self) -> dict[str, Any]:
        if self.is_point:
            return {"kind": POINT, "index": self.index}
        return {"kind": self.kind}

    @classmethod
    def from_dict(cls, data: Any, where: str = "location") -> "Location":
        kind = _field(data, "kind", str, where)
        if kind not in LOCATION_KINDS:
            raise ParseError(f"{where}: unknown location kind {kind!r}")
        if kind != POINT:
            return cls(kind)
        index = _field(data, "index", int, where)
        if not 0 <= index < POINT_COUNT:
            raise ParseError(f"{where}: point index {index} out of range")
        return cls.point(index)


@dataclass(frozen=True)
class Piece:
    """A single checker. Identity is stable for the whole game."""
    id: str
    owner: str  # WHITE or BLACK

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "owner": self.owner}

    @classmethod
    def from_dict(cls, data: Any, where: str = "piece") -> "Piece":
        piece_id = _field(data, "id", str, where)
        if not piece_id:
            raise ParseError(f"{where}: empty piece id")
        return cls(id=piece_id, owner=_side(_field(data, "owner", str, where), f"{where}.owner"))


def _pieces_to_list(pieces: tuple[Piece, ...]) -> list[dict[str, Any]]:
    return [p.to_dict() for p in pieces]


def _pieces_from_list(raw: Any, where: str) -> tuple[Piece, ...]:
    if not isinstance(raw, list):
        raise ParseError(f"{where}: expected a list of pieces")
    return tuple(Piece.from_dict(p, f"{where}[{i}]") for i, p in enumerate(raw))


@dataclass(frozen=True)
class PerSide:
    """One value per side (bar stacks, borne-off stacks, scores)."""
    white: Any
    black: Any

    def __getitem__(self, side: str) -> Any:
        if side == WHITE:
            return self.white
        if side == BLACK:
            return self.black
        raise KeyError(side)

    def set(self, side: str, value: Any) -> "PerSide":
        if side == WHITE:
            return replace(self, white=value)
        if side == BLACK:
            return replace(self, black=value)
        raise KeyError(side)

    def to_dict(self, convert=lambda v: v) -> dict[str, Any]:
        return {WHITE: convert(self.white), BLACK: convert(self.black)}


@dataclass(frozen=True)
class Board:
    """24 points plus per-side bar and outside (borne off) stacks."""
    points: tuple[tuple[Piece, ...], ...]
    bar: PerSide = field(default_factory=lambda: PerSide((), ()))
    outside: PerSide = field(default_factory=lambda: PerSide((), ()))

    @classmethod
    def empty(cls) -> "Board":
        return cls(points=tuple(() for _ in range(POINT_COUNT)))

    def stack(self, location: Location, side: str) -> tuple[Piece, ...]:
        """Pieces in a container. Bar and outside are per side; points are shared."""
        if location.is_point:
            return self.points[location.index]
        if location.is_bar:
            return self.bar[side]
        return self.outside[side]

    def with_stack(self, location: Location, side: str, pieces: tuple[Piece, ...]) -> "Board":
        if location.is_point:
            points = list(self.points)
            points[location.index] = pieces
            return replace(self, points=tuple(points))
        if location.is_bar:
            return replace(self, bar=self.bar.set(side, pieces))
        return replace(self, outside=self.outside.set(side, pieces))

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": [_pieces_to_list(point) for point in self.points],
            "bar": self.bar.to_dict(_pieces_to_list),
            "outside": self.outside.to_dict(_pieces_to_list),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Board":
        raw_points = _list(data, "points", "board")
        if len(raw_points) != POINT_COUNT:
            raise ParseError(f"board.points: expected {POINT_COUNT} points, got {len(raw_points)}")
        bar = _field(data, "bar", dict, "board")
        outside = _field(data, "outside", dict, "board")
        return cls(
            points=tuple(
                _pieces_from_list(point, f"board.points[{i}]") for i, point in enumerate(raw_points)
            ),
            bar=PerSide(
                _pieces_from_list(bar.get(WHITE), "board.bar.WHITE"),
                _pieces_from_list(bar.get(BLACK), "board.bar.BLACK"),
            ),
            outside=PerSide(
                _pieces_from_list(outside.get(WHITE), "board.outside.WHITE"),
                _pieces_from_list(outside.get(BLACK), "board.outside.BLACK"),
            ),
        )


@dataclass(frozen=True)
class Dice:
    """Dice for the current turn. values has 2 entries, or 4 on a double."""
    values: tuple[int, ...] = ()
    rolled: bool = False
    used: tuple[int, ...] = ()  # consumed die-slot indices, in the order they were used

    def unused_indices(self) -> list[int]:
        return [i for i in range(len(self.values)) if i not in self.used]

    @property
    def all_used(self) -> bool:
        return self.rolled and len(self.used) == len(self.values)

    def use(self, die_index: int) -> "Dice":
        return replace(self, used=self.used + (die_index,))

    def to_dict(self) -> dict[str, Any]:
        return {"values": list(self.values), "rolled": self.rolled, "used": list(self.used)}

    @classmethod
    def from_dict(cls, data: Any) -> "Dice":
        values = _list(data, "values", "dice")
        used = _list(data, "used", "dice")
        rolled = _field(data, "rolled", bool, "dice")
        for v in values:
            if isinstance(v, bool) or not isinstance(v, int) or not 1 <= v <= DIE_SIDES:
                raise ParseError(f"dice.values: invalid die value {v!r}")
        if len(values) not in (0, 2, 4):
            raise ParseError(f"dice.values: expected 0, 2 or 4 values, got {len(values)}")
        if len(values) == 2 and values[0] == values[1]:
            raise ParseError(f"dice.values: a double must have four values, got {values}")
        if len(values) == 4 and len(set(values)) != 1:
            raise ParseError(f"dice.values: four values must all be equal, got {values}")
        for i in used:
            if isinstance(i, bool) or not isinstance(i, int) or not 0 <= i < len(values):
                raise ParseError(f"dice.used: invalid die index {i!r}")
        if len(set(used)) != len(used):
            raise ParseError("dice.used: repeated die index")
        return cls(values=tuple(values), rolled=rolled, used=tuple(used))


@dataclass(frozen=True)
class Move:
    """A candidate single-die move produced by the move generator."""
    source: Location
    destination: Location
    die_index: int
    die_value: int
    kind: str  # MOVE, HIT, ENTER or BEAR_OFF

    def same_as(self, other: "Move") -> bool:
        """Equality on what the player chose; die_value follows from die_index."""
        return (
            self.source == other.source
            and self.destination == other.destination
            and self.die_index == other.die_index
            and self.kind == other.kind
        )

    def __str__(self) -> str:
        return f"{self.source} -> {self.destination} ({self.die_value}, {self.kind})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.to_dict(),
            "destination": self.destination.to_dict(),
            "die_index": self.die_index,
            "die_value": self.die_value,
            "kind": self.kind,
        }


@dataclass(frozen=True)
class MoveRecord:
    """One executed move in the game history."""
    piece_id: str
    source: Location
    destination: Location
    die_index: int
    kind: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "piece_id": self.piece_id,
            "source": self.source.to_dict(),
            "destination": self.destination.to_dict(),
            "die_index": self.die_index,
            "kind": self.kind,
        }

    @classmethod
    def from_dict(cls, data: Any, where: str = "history") -> "MoveRecord":
        kind = _field(data, "kind", str, where)
        if kind not in MOVE_KINDS:
            raise ParseError(f"{where}: unknown move kind {kind!r}")
        return cls(
            piece_id=_field(data, "piece_id", str, where),
            source=Location.from_dict(data.get("source"), f"{where}.source"),
            destination=Location.from_dict(data.get("destination"), f"{where}.destination"),
            die_index=_field(data, "die_index", int, where),
            kind=kind,
        )


@dataclass(frozen=True)
class GameState:
    """Complete game state. Everything needed to continue a game travels in the token."""
    variant: str
    board: Board
    turn: str  # side to move
    dice: Dice
    game_id: str
    timestamp: int  # epoch milliseconds of the last roll (or of setup)
    history: tuple[MoveRecord, ...] = ()
    score: PerSide = field(default_factory=lambda: PerSide(0, 0))
    # Side that has borne off all its pieces; None while the game is running
    winner: str | None = None

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert GameState to a dictionary for JSON serialization."""
        return {
            "variant": self.variant,
            "board": self.board.to_dict(),
            "turn": self.turn,
            "dice": self.dice.to_dict(),
            "history": [record.to_dict() for record in self.history],
            "game_id": self.game_id,
            "timestamp": self.timestamp,
            "score": self.score.to_dict(),
            "winner": self.winner,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "GameState":
        """
        Create GameState from a dictionary.
        Raises ParseError on any structural problem; piece-count invariants are not checked here.
        """
        score = _field(data, "score", dict, "state")
        white_score, black_score = score.get(WHITE), score.get(BLACK)
        for side, value in ((WHITE, white_score), (BLACK, black_score)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ParseError(f"state.score.{side}: invalid score {value!r}")
        winner = data.get("winner")
        return cls(
            variant=_field(data, "variant", str, "state"),
            board=Board.from_dict(data.get("board")),
            turn=_side(_field(data, "turn", str, "state"), "state.turn"),
            dice=Dice.from_dict(data.get("dice")),
            history=tuple(
                MoveRecord.from_dict(r, f"history[{i}]")
                for i, r in enumerate(_list(data, "history", "state"))
            ),
            game_id=_field(data, "game_id", str, "state"),
            timestamp=_field(data, "timestamp", int, "state"),
            score=PerSide(white_score, black_score),
            winner=None if winner is None else _side(winner, "state.winner"),
        )
