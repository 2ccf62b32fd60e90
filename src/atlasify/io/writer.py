"""GeoJSON writer for converted regions.

This module provides the GeoJsonWriter class for writing regions as a
GeoJSON FeatureCollection, optionally cleaned by the mapshaper CLI.
"""

import json
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from shapely.geometry import MultiPolygon, Polygon, mapping
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient

from atlasify.domain import Region
from atlasify.exceptions import OutputWriteError, PostProcessError


def rewind(geometry: BaseGeometry) -> BaseGeometry:
    """Orient shells counter-clockwise and holes clockwise.

    GeoJSON (RFC 7946) expects this winding; the projection's y flip
    reverses the winding of the drawing.
    """
    if isinstance(geometry, Polygon):
        return orient(geometry, sign=1.0)
    if isinstance(geometry, MultiPolygon):
        return MultiPolygon([orient(part, sign=1.0) for part in geometry.geoms])
    return geometry


def region_to_feature(region: Region) -> dict[str, Any]:
    """Serialize one region as a GeoJSON feature."""
    return {
        "type": "Feature",
        "properties": {"id": region.name},
        "geometry": mapping(rewind(region.geometry)),
    }


def run_mapshaper(
    source: Path,
    destination: Path,
    command: str = "mapshaper",
    args: Sequence[str] = (),
) -> None:
    """Run mapshaper on a GeoJSON file.

    Raises:
        PostProcessError: If mapshaper is missing or exits with an error
    """
    argv = [command, str(source), *args, "-o", str(destination), "format=geojson"]
    try:
        subprocess.run(argv, check=True, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise PostProcessError(command, "executable not found") from e
    except subprocess.CalledProcessError as e:
        raise PostProcessError(command, (e.stderr or "").strip() or f"exit code {e.returncode}") from e


class GeoJsonWriter:
    """Writes regions as a GeoJSON FeatureCollection.

    Example:
        writer = GeoJsonWriter(Path("world.geojson"))
        writer.write(regions)
    """

    def __init__(self, output_path: Path, indent: int | None = 2) -> None:
        """Initialize the writer.

        Args:
            output_path: Path where the GeoJSON file will be saved
            indent: JSON indentation (None for compact output)
        """
        self._output_path = output_path
        self._indent = indent

    @property
    def output_path(self) -> Path:
        return self._output_path

    @staticmethod
    def to_feature_collection(regions: Sequence[Region]) -> dict[str, Any]:
        """Build the FeatureCollection, one feature per non-empty region in order."""
        return {
            "type": "FeatureCollection",
            "features": [
                region_to_feature(region) for region in regions if not region.is_empty()
            ],
        }

    def write(self, regions: Sequence[Region], path: Path | None = None) -> Path:
        """Write regions to the output path (or `path` if given).

        Raises:
            OutputWriteError: If the file cannot be written
        """
        target = path or self._output_path
        collection = self.to_feature_collection(regions)
        try:
            with open(target, "w", encoding="utf-8") as f:
                json.dump(collection, f, indent=self._indent, ensure_ascii=False)
        except OSError as e:
            raise OutputWriteError(str(target), str(e)) from e
        return target

    def write_cleaned(
        self,
        regions: Sequence[Region],
        command: str = "mapshaper",
        args: Sequence[str] = (),
    ) -> Path:
        """Write regions through mapshaper.

        The raw collection goes to a temporary file next to the output, which
        is removed afterwards.

        Raises:
            OutputWriteError: If the temporary file cannot be written
            PostProcessError: If mapshaper fails
        """
        directory = self._output_path.parent if self._output_path.parent.exists() else None
        with tempfile.TemporaryDirectory(dir=directory) as tmp:
            raw = self.write(regions, path=Path(tmp) / "raw.geojson")
            run_mapshaper(raw, self._output_path, command=command, args=args)
        return self._output_path

    @staticmethod
    def get_output_path(input_path: Path) -> Path:
        """Generate output path next to the input.

        Converts: world.svg -> world.geojson
        """
        return input_path.with_suffix(".geojson")
