"""Domain models for atlasify.

This module contains the core domain models representing drawing geometry,
path commands, shapes and regions. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Independent of the SVG representation

Key classes:
- Coordinate: An immutable 2D coordinate
- Envelope: Bounding box used for projection calibration
- Ring: A closed coordinate sequence
- PathCommand: A move/line/cubic/close command
- ShapeElement: One drawing element reduced to commands or points
- Region: Combined geometry of one named area
- Diagnostic: A recoverable condition reported with a result
"""

from atlasify.domain.commands import CommandKind, PathCommand
from atlasify.domain.diagnostics import Diagnostic, DiagnosticCode
from atlasify.domain.geometry import Coordinate, Envelope, Ring
from atlasify.domain.shape import Region, ShapeElement, ShapeKind

__all__: list[str] = [
    # Enums
    "CommandKind",
    "DiagnosticCode",
    "ShapeKind",
    # Core types
    "Coordinate",
    "Envelope",
    "Ring",
    "PathCommand",
    "ShapeElement",
    "Region",
    "Diagnostic",
]
