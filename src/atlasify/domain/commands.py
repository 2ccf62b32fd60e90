"""Drawing-space path commands.

A path is an ordered list of `PathCommand` values. Each command carries a
`CommandKind` tag; the fields that matter depend on the kind:

- MOVE_TO / LINE_TO: `end`
- CUBIC_CURVE: `c1` (None for a smooth continuation), `c2`, `end`
- CLOSE_PATH: no coordinates

Relative commands are stored as written and resolved by the ring assembler.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from atlasify.domain.geometry import Coordinate


class CommandKind(Enum):
    """Path command tag."""

    MOVE_TO = "move_to"
    LINE_TO = "line_to"
    CUBIC_CURVE = "cubic_curve"
    CLOSE_PATH = "close_path"


@dataclass(frozen=True, slots=True)
class PathCommand:
    """A single path command.

    Attributes:
        kind: Which command this is
        end: End point (None for CLOSE_PATH); an axis may be NaN to inherit
            the current point's value
        c1: First control point of a curve, None when it must be reflected
            from the previous curve
        c2: Second control point of a curve
        is_relative: Coordinates are offsets from the current point
    """

    kind: CommandKind
    end: Coordinate | None = None
    c1: Coordinate | None = None
    c2: Coordinate | None = None
    is_relative: bool = False

    def __post_init__(self) -> None:
        if self.kind is CommandKind.CLOSE_PATH:
            return
        if self.end is None:
            raise ValueError(f"{self.kind.value} command requires an end point")
        if self.kind is CommandKind.CUBIC_CURVE and self.c2 is None:
            raise ValueError("cubic_curve command requires a second control point")

    @classmethod
    def move_to(cls, x: float, y: float, relative: bool = False) -> "PathCommand":
        return cls(CommandKind.MOVE_TO, end=Coordinate(x, y), is_relative=relative)

    @classmethod
    def line_to(cls, x: float, y: float, relative: bool = False) -> "PathCommand":
        return cls(CommandKind.LINE_TO, end=Coordinate(x, y), is_relative=relative)

    @classmethod
    def curve_to(
        cls,
        c1: tuple[float, float] | None,
        c2: tuple[float, float],
        end: tuple[float, float],
        relative: bool = False,
    ) -> "PathCommand":
        return cls(
            CommandKind.CUBIC_CURVE,
            end=Coordinate(*end),
            c1=Coordinate(*c1) if c1 is not None else None,
            c2=Coordinate(*c2),
            is_relative=relative,
        )

    @classmethod
    def close(cls) -> "PathCommand":
        return cls(CommandKind.CLOSE_PATH)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "kind": self.kind.value,
            "end": self.end.to_dict() if self.end else None,
            "c1": self.c1.to_dict() if self.c1 else None,
            "c2": self.c2.to_dict() if self.c2 else None,
            "relative": self.is_relative,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PathCommand":
        """Deserialize from dictionary."""

        def _coord(value: dict[str, Any] | None) -> Coordinate | None:
            return Coordinate.from_dict(value) if value is not None else None

        return cls(
            kind=CommandKind(data["kind"]),
            end=_coord(data["end"]),
            c1=_coord(data["c1"]),
            c2=_coord(data["c2"]),
            is_relative=data["relative"],
        )
