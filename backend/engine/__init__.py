"""
Backgammon Rules Engine
Pure state transforms: no web framework, storage, or UI.
"""

POINT_COUNT = 24
PIECES_PER_SIDE = 15
DIE_SIDES = 6
HOME_SIZE = 6

WHITE = "WHITE"
BLACK = "BLACK"
SIDES = (WHITE, BLACK)

# WHITE travels 0 -> 23 and bears off past 23; BLACK travels 23 -> 0.
DIRECTION = {WHITE: 1, BLACK: -1}
HOME_QUADRANT = {WHITE: range(POINT_COUNT - HOME_SIZE, POINT_COUNT), BLACK: range(0, HOME_SIZE)}


def opponent(side: str) -> str:
    return BLACK if side == WHITE else WHITE
