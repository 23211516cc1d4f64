"""Grid geometry helpers used by the enclosure engine.

Points are ``(x, y)`` pairs where ``x`` is the column and ``y`` the row.
Adjacency is 8-directional: two points are neighbours when they differ by at
most one step on each axis (Euclidean distance 1 or sqrt(2)).
"""

from typing import Iterable, List, NamedTuple, Sequence


class Point(NamedTuple):
    x: int
    y: int

    def to_dict(self):
        return {'x': self.x, 'y': self.y}


def are_neighbors(a: Point, b: Point) -> bool:
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    return max(dx, dy) == 1


def neighbor_counts(points: Sequence[Point]) -> List[int]:
    """Number of in-path neighbours for each point, in path order."""
    counts = []
    for i, p in enumerate(points):
        counts.append(sum(1 for j, q in enumerate(points) if i != j and are_neighbors(p, q)))
    return counts


def is_connected(points: Sequence[Point]) -> bool:
    """Every point touches at least one other point of the path."""
    if len(points) < 2:
        return False
    return all(c >= 1 for c in neighbor_counts(points))


def is_closed_loop(points: Sequence[Point]) -> bool:
    """Every point has two or more in-path neighbours, so the path has no loose ends."""
    if len(points) < 2:
        return False
    return all(c >= 2 for c in neighbor_counts(points))


def point_in_polygon(x: int, y: int, polygon: Sequence[Point]) -> bool:
    """Ray-casting test: a horizontal ray from (x, y) crosses an odd number of edges."""
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def cells_inside(polygon: Sequence[Point], size: int) -> Iterable[Point]:
    """Yield grid cells strictly inside the polygon in row-major order.

    Polygon vertices are boundary, never interior.
    """
    vertices = set(polygon)
    for y in range(size):
        for x in range(size):
            p = Point(x, y)
            if p in vertices:
                continue
            if point_in_polygon(x, y, polygon):
                yield p
