"""Shape elements and named regions.

A `ShapeElement` is one drawable element of the source map, already reduced
to either path commands or a precomputed outline. A `Region` is the combined
geographic geometry of every shape sharing a name.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from shapely.geometry.base import BaseGeometry

from atlasify.domain.commands import PathCommand
from atlasify.domain.geometry import Coordinate


class ShapeKind(Enum):
    """Kind of drawing primitive a shape came from."""

    PATH = "path"
    POLYGON = "polygon"
    RECTANGLE = "rectangle"


@dataclass
class ShapeElement:
    """A single shape element of the drawing.

    Designed for efficient serialization for parallel processing.

    Attributes:
        index: Position of the element in document order
        name: Region name the shape contributes to
        kind: Drawing primitive kind
        element_id: Raw id of the naming element (for diagnostics)
        commands: Path commands (PATH only)
        points: Outline points (POLYGON and RECTANGLE only)
    """

    index: int
    name: str
    kind: ShapeKind
    element_id: str = ""
    commands: list[PathCommand] = field(default_factory=list)
    points: list[Coordinate] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Check if the shape carries no geometry."""
        if self.kind is ShapeKind.PATH:
            return len(self.commands) == 0
        return len(self.points) == 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "index": self.index,
            "name": self.name,
            "kind": self.kind.value,
            "element_id": self.element_id,
            "commands": [c.to_dict() for c in self.commands],
            "points": [p.to_dict() for p in self.points],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShapeElement":
        """Deserialize from dictionary."""
        return cls(
            index=data["index"],
            name=data["name"],
            kind=ShapeKind(data["kind"]),
            element_id=data.get("element_id", ""),
            commands=[PathCommand.from_dict(c) for c in data["commands"]],
            points=[Coordinate.from_dict(p) for p in data["points"]],
        )


@dataclass
class Region:
    """All geometry contributed under one name.

    Attributes:
        name: Region identifier (e.g., a country name)
        geometry: Polygon or MultiPolygon in degrees longitude/latitude
        shape_count: Number of source shapes merged into this region
        polygon_count: Number of polygons built before the union
    """

    name: str
    geometry: BaseGeometry
    shape_count: int = 0
    polygon_count: int = 0

    def is_empty(self) -> bool:
        return self.geometry.is_empty
