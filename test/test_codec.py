"""
Share tokens: round trip, URL safety, and the two failure classes.
"""

import base64
import json
import random
import re
import zlib
from dataclasses import replace

import pytest

from backend.config import MAX_TOKEN_LENGTH
from backend.engine import BLACK, WHITE, codec
from backend.engine.codec import decode, encode
from backend.engine.errors import CodecError, DecodeError, ParseError
from backend.engine.game import apply_move, load_or_new, new_game, roll_dice
from backend.engine.movement import legal_moves
from backend.engine.queries import check_invariants

URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def _pack(text: str) -> str:
    """Wrap arbitrary text the way encode wraps JSON."""
    compressed = zlib.compress(text.encode("utf-8"), 9)
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def _played_state():
    """A few moves into a casual game, with history and a hit-free board."""
    rng = random.Random(77)
    state = new_game("casual", rng, clock=lambda: 1_700_000_000_000)
    state = roll_dice(state, rng, clock=lambda: 1_700_000_001_000)
    move = legal_moves(state)[0]
    piece_id = state.board.stack(move.source, state.turn)[-1].id
    return apply_move(state, move, piece_id)


def test_round_trip_new_game():
    state = new_game("casual", random.Random(5))
    assert decode(encode(state)) == state


def test_round_trip_mid_turn():
    state = _played_state()
    assert state.history
    restored = decode(encode(state))
    assert restored == state
    assert legal_moves(restored) == legal_moves(state)


def test_round_trip_bar_and_borne_off(make_state):
    state = make_state({20: (WHITE, 3), 1: (BLACK, 4)}, turn=BLACK, bar={BLACK: 2}, dice=(6, 6, 6, 6), used=(0, 2))
    state = replace(state, score=state.score.set(WHITE, 3))
    assert decode(encode(state)) == state


def test_encoding_is_deterministic():
    state = _played_state()
    assert encode(state) == encode(state)
    assert encode(state) == encode(decode(encode(state)))


def test_token_is_url_safe():
    for seed in range(10):
        assert URL_SAFE.match(encode(new_game("casual", random.Random(seed))))


@pytest.mark.parametrize("token", ["not base64!!", "", "AAAA", "a+b/"])
def test_undecodable_tokens(token):
    with pytest.raises(DecodeError):
        decode(token)


def test_truncated_token_is_a_decode_error():
    token = encode(_played_state())
    with pytest.raises(DecodeError):
        decode(token[: len(token) // 2])


def test_oversized_token_is_a_decode_error():
    with pytest.raises(DecodeError):
        decode("A" * (MAX_TOKEN_LENGTH + 1))


def test_non_json_payload_is_a_parse_error():
    with pytest.raises(ParseError):
        decode(_pack("this is not json"))


@pytest.mark.parametrize("payload", ["[]", "{}", '{"variant": "casual"}', "null"])
def test_structurally_invalid_payload_is_a_parse_error(payload):
    with pytest.raises(ParseError):
        decode(_pack(payload))


def _tamper(state, **changes):
    data = state.to_dict()
    for path, value in changes.items():
        target = data
        keys = path.split("__")
        for key in keys[:-1]:
            target = target[int(key)] if isinstance(target, list) else target[key]
        target[keys[-1]] = value
    return _pack(json.dumps(data))


@pytest.mark.parametrize("changes", [
    {"variant": "chouette"},
    {"turn": "RED"},
    {"dice__values": [7, 1]},
    {"dice__values": [1, 2, 3]},
    {"dice__values": [3, 3]},
    {"dice__values": [1, 2, 1, 2]},
    {"dice__used": [0, 0]},
    {"dice__rolled": "yes"},
    {"board__points": []},
    {"score__WHITE": -1},
    {"timestamp": "soon"},
    {"winner": "NOBODY"},
])
def test_bad_fields_are_parse_errors(changes):
    state = new_game("casual", random.Random(8))
    with pytest.raises(ParseError):
        decode(_tamper(state, **changes))


def test_decode_accepts_inconsistent_board(make_state):
    # 14 white pieces in total: structurally fine, but breaks the piece count
    state = make_state({0: (WHITE, 2)}, outside={WHITE: 12})
    restored = decode(encode(state))
    assert restored == state
    assert any("WHITE has 14 pieces" in p for p in check_invariants(restored))


def test_error_classes_are_distinguishable():
    with pytest.raises(CodecError) as bad_transport:
        decode("AAAA")
    with pytest.raises(CodecError) as bad_payload:
        decode(_pack("[1, 2]"))
    assert isinstance(bad_transport.value, DecodeError)
    assert not isinstance(bad_transport.value, ParseError)
    assert isinstance(bad_payload.value, ParseError)
    assert not isinstance(bad_payload.value, DecodeError)


def test_load_or_new_falls_back_to_a_new_game(fixed_clock):
    state = load_or_new("garbage!", "casual", random.Random(1), fixed_clock)
    assert state.history == ()
    assert state.timestamp == 1_800_000_000_000

    fresh = load_or_new(None, "tapa", random.Random(1), fixed_clock)
    assert fresh.variant == "tapa"


def test_load_or_new_restores_valid_token():
    state = _played_state()
    assert load_or_new(encode(state)) == state


def test_trailing_bytes_after_stream_are_rejected():
    state = new_game("casual", random.Random(5))
    payload = json.dumps(state.to_dict(), separators=(",", ":"), sort_keys=True)
    compressed = zlib.compress(payload.encode("utf-8"), 9) + b"\x00" * 8
    token = base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")
    with pytest.raises(DecodeError):
        decode(token)
    with pytest.raises(DecodeError):
        decode(encode(state) + "AAAAAAAA")


def _deeply_nested(monkeypatch):
    # Raise the expansion cap so the nesting, not the size limit, is what fails
    monkeypatch.setattr(codec, "MAX_EXPANSION", 2000)
    return _pack("[" * 100_000)


def test_deeply_nested_payload_is_a_parse_error(monkeypatch):
    with pytest.raises(ParseError):
        decode(_deeply_nested(monkeypatch))


def test_load_or_new_survives_deeply_nested_payload(monkeypatch, fixed_clock):
    state = load_or_new(_deeply_nested(monkeypatch), "casual", random.Random(1), fixed_clock)
    assert state.variant == "casual"
    assert state.history == ()


def test_unexpected_failure_in_state_parsing_is_a_parse_error(monkeypatch):
    def explode(data):
        raise TypeError("unhashable type")

    monkeypatch.setattr(codec.GameState, "from_dict", explode)
    with pytest.raises(ParseError):
        decode(encode(new_game("casual", random.Random(5))))
