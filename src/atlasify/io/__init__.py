"""Map I/O layer for atlasify.

This module handles reading SVG drawings and writing GeoJSON. It provides
a clean abstraction layer between the file formats and the domain models.

Key responsibilities:
- Load SVG drawings and locate the rim and shape groups
- Parse path data and point lists into domain models
- Decode region names from exported element ids
- Write GeoJSON, optionally cleaned by mapshaper

Key classes:
- MapReader: Load drawings and extract shapes
- GeoJsonWriter: Save regions as GeoJSON
"""

from atlasify.io.naming import decode_id, resolve_region_name
from atlasify.io.path_data import parse_path_data, parse_points
from atlasify.io.reader import MapReader
from atlasify.io.writer import GeoJsonWriter, run_mapshaper

__all__ = [
    "GeoJsonWriter",
    "MapReader",
    "decode_id",
    "parse_path_data",
    "parse_points",
    "resolve_region_name",
    "run_mapshaper",
]
