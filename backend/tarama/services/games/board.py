from typing import Dict, List, Optional

from tarama.errors import CellDisabled, CellOccupied, ValidationError
from .geometry import Point

EMPTY = None
DISABLED = -1

# Row-major scan directions for five-in-a-row: right, down, down-right, down-left
WIN_DIRECTIONS = ((1, 0), (0, 1), (1, 1), (-1, 1))

SURROUND_DIRECTIONS = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
)


class Board:
    """Square grid of cells: EMPTY, a player index (0/1), or DISABLED.

    A disabled cell keeps its classification (the occupant it had when it was
    disabled) in ``disabled`` so clients can render what was captured.
    """

    def __init__(self, size: int = 20, win_length: int = 5):
        if size < 1:
            raise ValueError('board size must be positive')
        self.size = size
        self.win_length = win_length
        self.cells: List[List[Optional[int]]] = [[EMPTY] * size for _ in range(size)]
        self.disabled: Dict[Point, Optional[int]] = {}

    def in_bounds(self, point: Point) -> bool:
        return 0 <= point.x < self.size and 0 <= point.y < self.size

    def get(self, point: Point) -> Optional[int]:
        return self.cells[point.y][point.x]

    def is_disabled(self, point: Point) -> bool:
        return self.get(point) == DISABLED

    def require_in_bounds(self, point: Point) -> None:
        if not self.in_bounds(point):
            raise ValidationError(f'Point ({point.x}, {point.y}) is outside the {self.size}x{self.size} board')

    def place(self, point: Point, player_index: int) -> None:
        self.require_in_bounds(point)
        value = self.get(point)
        if value == DISABLED:
            raise CellDisabled()
        if value is not EMPTY:
            raise CellOccupied()
        self.cells[point.y][point.x] = player_index

    def disable(self, point: Point, classification: Optional[int] = None) -> bool:
        """Remove a cell from play. Returns False if it was already disabled."""
        self.require_in_bounds(point)
        if self.get(point) == DISABLED:
            return False
        self.cells[point.y][point.x] = DISABLED
        self.disabled[point] = classification
        return True

    def check_winner(self) -> Optional[int]:
        n = self.size
        k = self.win_length
        for y in range(n):
            for x in range(n):
                player = self.cells[y][x]
                if player is EMPTY or player == DISABLED:
                    continue
                for dx, dy in WIN_DIRECTIONS:
                    end_x = x + dx * (k - 1)
                    end_y = y + dy * (k - 1)
                    if not (0 <= end_x < n and 0 <= end_y < n):
                        continue
                    if all(self.cells[y + dy * i][x + dx * i] == player for i in range(k)):
                        return player
        return None

    def surround_capture(self, point: Point, player_index: int) -> List[Point]:
        """Cells captured by a stone just placed at ``point`` (surround mode).

        In each of the 8 directions, opponent and empty cells are collected
        until the walk reaches one of the player's own stones; then the run is
        captured. Hitting a disabled cell or the edge captures nothing.
        """
        captured: List[Point] = []
        for dx, dy in SURROUND_DIRECTIONS:
            run = []
            x, y = point.x + dx, point.y + dy
            while 0 <= x < self.size and 0 <= y < self.size:
                value = self.cells[y][x]
                if value == player_index:
                    for p in run:
                        if p not in captured:
                            captured.append(p)
                    break
                if value == DISABLED:
                    break
                run.append(Point(x, y))
                x += dx
                y += dy
        return captured

    def disabled_points(self):
        return [{'x': p.x, 'y': p.y, 'player': owner} for p, owner in self.disabled.items()]

    def to_dict(self):
        return {
            'size': self.size,
            'cells': [list(row) for row in self.cells],
            'disabledPoints': self.disabled_points(),
        }
