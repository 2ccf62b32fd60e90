"""Internal cubic Bezier flattening algorithms.

This is an internal module containing helper functions for the ring
assembler. Not intended for public use.
"""

from collections.abc import Iterator

from atlasify.domain import Coordinate

CubicCurve = tuple[Coordinate, Coordinate, Coordinate, Coordinate]

DEFAULT_TOLERANCE = 0.01
DEFAULT_MAX_DEPTH = 24


def _midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    return Coordinate((a.x + b.x) / 2, (a.y + b.y) / 2)


def flatness(start: Coordinate, c1: Coordinate, c2: Coordinate, end: Coordinate) -> float:
    """Measure how far a cubic deviates from its chord.

    Returns the sum of the per-axis maxima of the squared control point
    offsets `(3*c1 - 2*start - end)` and `(3*c2 - 2*end - start)`.
    """
    ux = (3.0 * c1.x - 2.0 * start.x - end.x) ** 2
    uy = (3.0 * c1.y - 2.0 * start.y - end.y) ** 2
    vx = (3.0 * c2.x - 2.0 * end.x - start.x) ** 2
    vy = (3.0 * c2.y - 2.0 * end.y - start.y) ** 2
    return max(ux, vx) + max(uy, vy)


def is_sufficiently_flat(
    start: Coordinate,
    c1: Coordinate,
    c2: Coordinate,
    end: Coordinate,
    tolerance: float = DEFAULT_TOLERANCE,
) -> bool:
    """Check if a cubic can be replaced by its chord."""
    return flatness(start, c1, c2, end) <= tolerance


def split_cubic(
    start: Coordinate, c1: Coordinate, c2: Coordinate, end: Coordinate
) -> tuple[CubicCurve, CubicCurve]:
    """Split a cubic at t=0.5 using De Casteljau's algorithm.

    Returns:
        Left and right halves as (start, c1, c2, end) tuples
    """
    # First level
    mid1 = _midpoint(start, c1)
    mid2 = _midpoint(c1, c2)
    mid3 = _midpoint(c2, end)

    # Second level
    mid12 = _midpoint(mid1, mid2)
    mid23 = _midpoint(mid2, mid3)

    # Third level (point on the curve)
    mid123 = _midpoint(mid12, mid23)

    return (start, mid1, mid12, mid123), (mid123, mid23, mid3, end)


def subdivide_cubic(
    start: Coordinate,
    c1: Coordinate,
    c2: Coordinate,
    end: Coordinate,
    tolerance: float = DEFAULT_TOLERANCE,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Iterator[CubicCurve]:
    """Yield the sub-curves accepted as flat, left to right.

    A sub-curve is accepted once it passes the flatness test or once
    `max_depth` subdivisions have been spent on it.
    """
    if max_depth <= 0 or is_sufficiently_flat(start, c1, c2, end, tolerance):
        yield (start, c1, c2, end)
        return

    left, right = split_cubic(start, c1, c2, end)
    yield from subdivide_cubic(*left, tolerance=tolerance, max_depth=max_depth - 1)
    yield from subdivide_cubic(*right, tolerance=tolerance, max_depth=max_depth - 1)


def flatten_cubic(
    start: Coordinate,
    c1: Coordinate,
    c2: Coordinate,
    end: Coordinate,
    tolerance: float = DEFAULT_TOLERANCE,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Coordinate]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Args:
        start: Current point the curve starts from
        c1: First control point
        c2: Second control point
        end: End point
        tolerance: Flatness bound, see `flatness()`
        max_depth: Subdivision depth bound for degenerate input

    Returns:
        Points approximating the curve, ending at `end`, excluding `start`
    """
    return [
        curve[3]
        for curve in subdivide_cubic(start, c1, c2, end, tolerance=tolerance, max_depth=max_depth)
    ]


def reflect(point: Coordinate, mirror: Coordinate) -> Coordinate:
    """Reflect `point` through `mirror`.

    Used to synthesize the first control point of a smooth curve from the
    previous curve's second control point.
    """
    dx = abs(mirror.x - point.x)
    dy = abs(mirror.y - point.y)
    return Coordinate(
        mirror.x + (dx if mirror.x >= point.x else -dx),
        mirror.y + (dy if mirror.y >= point.y else -dy),
    )
