"""Manual enclosure validation.

A player submits an ordered list of grid points as a capture boundary. The
path is checked in stages (size, connectivity, closure), every cell inside
the polygon is classified, and the capture is valid only when at least one
opponent stone is inside. Evaluation is pure; ``apply_enclosure`` performs
the board mutation once the caller has decided to accept the result.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from tarama.errors import InvalidEnclosure
from .board import DISABLED, Board
from .geometry import Point, cells_inside, is_closed_loop, is_connected

MIN_PATH_POINTS = 4

TOO_FEW_POINTS = 'too few points'
REPEATED_POINT = 'path visits a point twice'
NOT_CONNECTED = 'path is not connected'
NOT_CLOSED = 'path is not a closed loop'
NO_OPPONENT_STONES = 'no opponent stones enclosed'


@dataclass
class EnclosureResult:
    player: int
    path: List[Point]
    # (point, previous occupant) for every cell the capture removes from play
    enclosed: List[Tuple[Point, Optional[int]]] = field(default_factory=list)
    score_delta: int = 0

    def disabled_points(self):
        return [{'x': p.x, 'y': p.y, 'player': owner} for p, owner in self.enclosed]


def normalize_path(board: Board, points: Iterable) -> List[Point]:
    path = [Point(*p) for p in points]
    if len(path) > 1 and path[-1] == path[0]:
        path = path[:-1]
    for p in path:
        board.require_in_bounds(p)
    if len(set(path)) != len(path):
        raise InvalidEnclosure(REPEATED_POINT)
    return path


def evaluate_enclosure(board: Board, points: Iterable, player: int) -> EnclosureResult:
    """Validate a boundary for ``player`` without touching the board.

    Raises InvalidEnclosure with the first failing stage's reason.
    """
    path = normalize_path(board, points)
    if len(path) < MIN_PATH_POINTS:
        raise InvalidEnclosure(TOO_FEW_POINTS)
    if not is_connected(path):
        raise InvalidEnclosure(NOT_CONNECTED)
    if not is_closed_loop(path):
        raise InvalidEnclosure(NOT_CLOSED)

    opponent = 1 - player
    result = EnclosureResult(player=player, path=path)
    for cell in cells_inside(path, board.size):
        value = board.get(cell)
        if value == DISABLED:
            continue
        if value == opponent:
            result.score_delta += 1
        result.enclosed.append((cell, value))

    if result.score_delta == 0:
        raise InvalidEnclosure(NO_OPPONENT_STONES)
    return result


def apply_enclosure(board: Board, result: EnclosureResult) -> int:
    """Disable every enclosed cell; returns how many cells actually changed."""
    changed = 0
    for cell, owner in result.enclosed:
        if board.disable(cell, owner):
            changed += 1
    return changed
