"""Core geometric value types.

This module defines the fundamental geometric types used throughout atlasify:
- Coordinate: An immutable 2D coordinate
- Envelope: An axis-aligned bounding box used to calibrate projection
- Ring: A closed, immutable sequence of coordinates
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from atlasify.exceptions import EmptyEnvelopeError


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A point in 2D space.

    Immutable and hashable for use in sets/dicts. Equality is exact.
    A NaN axis is only meaningful inside an unresolved path command, where it
    means "keep the current point's value on this axis".

    Attributes:
        x: X coordinate (drawing units or degrees longitude)
        y: Y coordinate (drawing units or degrees latitude)
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Coordinate":
        """Deserialize from dictionary."""
        return cls(x=data["x"], y=data["y"])


@dataclass(frozen=True, slots=True)
class Envelope:
    """Axis-aligned bounding box.

    Attributes:
        min_x: Smallest x value
        max_x: Largest x value
        min_y: Smallest y value
        max_y: Largest y value
    """

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def is_degenerate(self) -> bool:
        """Check if the envelope has no extent on either axis."""
        return self.width <= 0.0 or self.height <= 0.0

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[Coordinate]) -> "Envelope":
        """Build the smallest envelope covering the given coordinates.

        Raises:
            EmptyEnvelopeError: If no coordinates are given
        """
        points = list(coordinates)
        if not points:
            raise EmptyEnvelopeError()

        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "min_x": self.min_x,
            "max_x": self.max_x,
            "min_y": self.min_y,
            "max_y": self.max_y,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Envelope":
        """Deserialize from dictionary."""
        return cls(
            min_x=data["min_x"],
            max_x=data["max_x"],
            min_y=data["min_y"],
            max_y=data["max_y"],
        )


@dataclass(frozen=True, slots=True)
class Ring:
    """A closed sequence of coordinates.

    The first and last coordinates are always equal. Use `Ring.closed()` to
    build a ring from points that may not repeat their first point.

    Attributes:
        points: Coordinates of the ring, first == last
    """

    points: tuple[Coordinate, ...]

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ValueError(f"A ring needs at least 2 points, got {len(self.points)}")
        if self.points[0] != self.points[-1]:
            raise ValueError("A ring must end at its first point")

    @classmethod
    def closed(cls, points: Sequence[Coordinate]) -> "Ring":
        """Build a ring, appending the first point if the sequence is open.

        Args:
            points: At least 2 coordinates

        Returns:
            Ring whose last point equals its first
        """
        if len(points) >= 2 and points[0] != points[-1]:
            return cls(points=(*points, points[0]))
        return cls(points=tuple(points))

    def __len__(self) -> int:
        return len(self.points)

    @property
    def first(self) -> Coordinate:
        return self.points[0]

    @property
    def last(self) -> Coordinate:
        return self.points[-1]

    def is_degenerate(self) -> bool:
        """Check if the ring cannot bound an area.

        A ring needs 4 coordinates (3 distinct corners plus the closing
        repeat) to be turned into a polygon boundary.
        """
        return len(self.points) < 4 or len(set(self.points)) < 3

    def outline_key(self) -> tuple[tuple[float, float], ...]:
        """The point cycle of the ring, independent of start vertex and direction.

        Two rings tracing the same outline share a key.
        """
        cycle = [p.to_tuple() for p in self.points[:-1]]
        lowest = min(cycle)
        rotations = [
            tuple(seq[i:] + seq[:i])
            for seq in (cycle, cycle[::-1])
            for i, point in enumerate(seq)
            if point == lowest
        ]
        return min(rotations)

    def coords(self) -> list[tuple[float, float]]:
        """Coordinates as plain tuples for shapely."""
        return [p.to_tuple() for p in self.points]

    @classmethod
    def from_coords(cls, coords: Iterable[tuple[float, float]]) -> "Ring":
        """Build a ring from (x, y) tuples, closing it if needed."""
        return cls.closed([Coordinate(float(x), float(y)) for x, y in coords])

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"points": [list(p.to_tuple()) for p in self.points]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ring":
        """Deserialize from dictionary."""
        return cls(points=tuple(Coordinate(x, y) for x, y in data["points"]))
