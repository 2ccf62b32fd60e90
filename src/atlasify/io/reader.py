"""Map reader for loading SVG drawings.

This module provides the MapReader class for loading an SVG world map and
extracting its rim and named shapes into domain models.
"""

from collections.abc import Iterator
from pathlib import Path
from xml.etree import ElementTree as ET

from atlasify.config import DocumentConfig
from atlasify.domain import Coordinate, ShapeElement, ShapeKind
from atlasify.exceptions import DocumentFormatError, DocumentLoadError, ShapeError
from atlasify.io.naming import naming_id, resolve_region_name
from atlasify.io.path_data import parse_path_data, parse_points

SHAPE_TAGS = ("path", "polygon", "rect")


def local_name(tag: str) -> str:
    """Strip the XML namespace from a tag."""
    return tag.rsplit("}", 1)[-1]


def _length(value: str | None) -> float:
    if not value:
        return 0.0
    return float(value.strip().removesuffix("px"))


class MapReader:
    """Loads SVG map drawings and extracts shape elements.

    Example:
        reader = MapReader(Path("world.svg"))
        reader.load()
        envelope_shapes = reader.rim_shapes()
        for shape in reader.iter_shapes():
            print(shape.name)
    """

    def __init__(self, path: Path, config: DocumentConfig | None = None) -> None:
        """Initialize the map reader.

        Args:
            path: Path to the SVG file
            config: Where rim and shape groups live in the drawing
        """
        self.path = path
        self.config = config or DocumentConfig()
        self._root: ET.Element | None = None
        self.rejected: list[tuple[str, str]] = []

    def load(self) -> None:
        """Parse the drawing.

        Raises:
            FileNotFoundError: If the file does not exist
            DocumentLoadError: If the file is not well-formed XML
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Map file not found: {self.path}")

        try:
            self._root = ET.parse(self.path).getroot()
        except ET.ParseError as e:
            raise DocumentLoadError(str(self.path), str(e)) from e

    @property
    def root(self) -> ET.Element:
        if self._root is None:
            raise RuntimeError("Map not loaded. Call load() first.")
        return self._root

    def find_by_id(self, element_id: str) -> ET.Element | None:
        """First element carrying the given id, in document order."""
        for element in self.root.iter():
            if element.get("id") == element_id:
                return element
        return None

    def rim_shapes(self) -> list[ShapeElement]:
        """Shapes outlining the projected globe.

        The rim is either a single shape or a group of shapes.

        Raises:
            DocumentFormatError: If no element carries the rim id
        """
        rim = self.find_by_id(self.config.rim_id)
        if rim is None:
            raise DocumentFormatError(
                str(self.path), f"no element with id '{self.config.rim_id}'"
            )

        shapes: list[ShapeElement] = []
        for element in rim.iter():
            if local_name(element.tag) in SHAPE_TAGS:
                shapes.append(
                    self._to_shape(element, len(shapes), self.config.rim_id, self.config.rim_id)
                )
        return shapes

    def _walk(
        self, element: ET.Element, ancestors: list[str]
    ) -> Iterator[tuple[ET.Element, list[str]]]:
        """Yield shape elements below `element` with their id chain, innermost first."""
        for child in element:
            chain = [child.get("id", ""), *ancestors]
            if local_name(child.tag) in SHAPE_TAGS:
                yield child, chain
            else:
                yield from self._walk(child, chain)

    def iter_shapes(self) -> Iterator[ShapeElement]:
        """Iterate over the named shapes of every shape group.

        Shapes are yielded in document order with consecutive indices.
        Shapes without a usable name, or with an excluded naming id, are
        skipped silently. Shapes whose geometry cannot be parsed are
        recorded in `rejected` and skipped.

        Yields:
            ShapeElement domain models
        """
        self.rejected = []
        index = 0

        for group_id in self.config.group_ids:
            group = self.find_by_id(group_id)
            if group is None:
                continue

            for element, chain in self._walk(group, []):
                name = resolve_region_name(chain, self.config)
                if name is None:
                    continue

                element_id = naming_id(chain, self.config) or ""
                try:
                    shape = self._to_shape(element, index, name, element_id)
                except (ShapeError, ValueError) as e:
                    self.rejected.append((element_id, str(e)))
                    continue

                yield shape
                index += 1

    def region_names(self) -> list[str]:
        """Distinct region names in order of first appearance."""
        names: dict[str, None] = {}
        for shape in self.iter_shapes():
            names.setdefault(shape.name, None)
        return list(names)

    def _to_shape(
        self, element: ET.Element, index: int, name: str, element_id: str
    ) -> ShapeElement:
        tag = local_name(element.tag)

        if tag == "path":
            return ShapeElement(
                index=index,
                name=name,
                kind=ShapeKind.PATH,
                element_id=element_id,
                commands=parse_path_data(element.get("d", "")),
            )

        if tag == "polygon":
            return ShapeElement(
                index=index,
                name=name,
                kind=ShapeKind.POLYGON,
                element_id=element_id,
                points=parse_points(element.get("points", "")),
            )

        if tag == "rect":
            x = _length(element.get("x"))
            y = _length(element.get("y"))
            width = _length(element.get("width"))
            height = _length(element.get("height"))
            return ShapeElement(
                index=index,
                name=name,
                kind=ShapeKind.RECTANGLE,
                element_id=element_id,
                points=[
                    Coordinate(x, y),
                    Coordinate(x + width, y),
                    Coordinate(x + width, y + height),
                    Coordinate(x, y + height),
                ],
            )

        raise ValueError(f"Unsupported shape element: {tag}")
