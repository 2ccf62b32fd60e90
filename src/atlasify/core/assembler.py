"""Ring assembly from drawing-space path commands.

This module turns the commands of a shape into closed rings:
1. Resolve relative and axis-shorthand coordinates to absolute ones
2. Split the command stream into subpaths at each move
3. Flatten curves and collect the points of each subpath
4. Drop subpaths with fewer than 2 points and close the rest

It also dispatches over shape kinds and calibrates the projection envelope
from the reference boundary shape.
"""

import math
from collections.abc import Iterable, Sequence

from atlasify.config import FlattenConfig
from atlasify.core._bezier import flatten_cubic, reflect
from atlasify.domain import (
    CommandKind,
    Coordinate,
    Diagnostic,
    DiagnosticCode,
    Envelope,
    PathCommand,
    Ring,
    ShapeElement,
    ShapeKind,
)

ORIGIN = Coordinate(0.0, 0.0)


def _resolve_axis(value: float, relative: bool, current: float) -> float:
    if math.isnan(value):
        return current
    if relative:
        return value + current
    return value


def to_absolute(point: Coordinate, relative: bool, current: Coordinate) -> Coordinate:
    """Resolve a command coordinate against the current point.

    A NaN axis inherits the current point's axis (horizontal/vertical line
    shorthand); a present axis is offset by the current point when relative.
    """
    return Coordinate(
        _resolve_axis(point.x, relative, current.x),
        _resolve_axis(point.y, relative, current.y),
    )


def resolve_commands(commands: Iterable[PathCommand]) -> list[PathCommand]:
    """Convert every command to absolute coordinates.

    The current point starts at the origin. Curve control points are resolved
    against the curve's start point; an absent first control point stays
    absent. After a close the current point returns to the subpath start.
    """
    current = ORIGIN
    subpath_start = ORIGIN
    result: list[PathCommand] = []

    for command in commands:
        if command.kind is CommandKind.CLOSE_PATH:
            result.append(command)
            current = subpath_start
            continue

        end = to_absolute(command.end, command.is_relative, current)

        if command.kind is CommandKind.CUBIC_CURVE:
            c1 = (
                to_absolute(command.c1, command.is_relative, current)
                if command.c1 is not None
                else None
            )
            c2 = to_absolute(command.c2, command.is_relative, current)
            result.append(PathCommand(CommandKind.CUBIC_CURVE, end=end, c1=c1, c2=c2))
        else:
            result.append(PathCommand(command.kind, end=end))
            if command.kind is CommandKind.MOVE_TO:
                subpath_start = end

        current = end

    return result


def split_subpaths(commands: Sequence[PathCommand]) -> list[list[PathCommand]]:
    """Split a command stream so that each move starts a new subpath.

    Commands before the first move form a leading subpath of their own.
    """
    subpaths: list[list[PathCommand]] = []
    chunk: list[PathCommand] = []

    for command in commands:
        if command.kind is CommandKind.MOVE_TO and chunk:
            subpaths.append(chunk)
            chunk = []
        chunk.append(command)

    if chunk:
        subpaths.append(chunk)

    return subpaths


class RingAssembler:
    """Assembles closed rings from path commands.

    The assembler is stateless and safe for use in parallel processing.
    """

    def __init__(self, config: FlattenConfig | None = None) -> None:
        self.config = config or FlattenConfig()

    def assemble(self, commands: Sequence[PathCommand]) -> list[Ring]:
        """Assemble the rings described by a command stream.

        Args:
            commands: Path commands, possibly relative

        Returns:
            One closed ring per subpath with at least 2 points
        """
        rings, _ = self.assemble_with_diagnostics(commands)
        return rings

    def assemble_with_diagnostics(
        self, commands: Sequence[PathCommand]
    ) -> tuple[list[Ring], list[Diagnostic]]:
        """Assemble rings and report the subpaths that were dropped."""
        rings: list[Ring] = []
        diagnostics: list[Diagnostic] = []

        for idx, subpath in enumerate(split_subpaths(resolve_commands(commands))):
            points = self.flatten_subpath(subpath)
            if len(points) < 2:
                diagnostics.append(
                    Diagnostic(
                        DiagnosticCode.DEGENERATE_RING,
                        f"subpath {idx} has {len(points)} point(s)",
                    )
                )
                continue
            rings.append(Ring.closed(points))

        return rings, diagnostics

    def flatten_subpath(self, subpath: Sequence[PathCommand]) -> list[Coordinate]:
        """Collect the points of one absolute subpath.

        Args:
            subpath: Absolute commands, the first one opens the subpath

        Returns:
            Points in drawing order; curves contribute their flattened points
        """
        if not subpath:
            return []

        first_point = subpath[0].end if subpath[0].end is not None else ORIGIN
        start = ORIGIN
        previous: PathCommand | None = None
        points: list[Coordinate] = []

        for command in subpath:
            if command.kind is CommandKind.CLOSE_PATH:
                points.append(first_point)
                end = first_point
            elif command.kind is CommandKind.CUBIC_CURVE:
                c1 = command.c1
                if c1 is None:
                    if previous is not None and previous.kind is CommandKind.CUBIC_CURVE:
                        c1 = reflect(previous.c2, start)
                    else:
                        c1 = start
                points.extend(
                    flatten_cubic(
                        start,
                        c1,
                        command.c2,
                        command.end,
                        tolerance=self.config.tolerance,
                        max_depth=self.config.max_depth,
                    )
                )
                end = command.end
            else:
                points.append(command.end)
                end = command.end

            start = end
            previous = command

        return points

    def shape_to_rings(self, shape: ShapeElement) -> tuple[list[Ring], list[Diagnostic]]:
        """Convert a shape element of any kind to rings.

        Args:
            shape: Shape element from the drawing

        Returns:
            Tuple of (rings, diagnostics)
        """
        if shape.kind is ShapeKind.PATH:
            return self.assemble_with_diagnostics(shape.commands)

        if shape.kind in (ShapeKind.POLYGON, ShapeKind.RECTANGLE):
            if len(shape.points) < 2:
                return [], [
                    Diagnostic(
                        DiagnosticCode.DEGENERATE_RING,
                        f"{shape.kind.value} has {len(shape.points)} point(s)",
                    )
                ]
            return [Ring.closed(shape.points)], []

        raise ValueError(f"Unknown shape kind: {shape.kind}")

    def envelope_from_shapes(self, shapes: Iterable[ShapeElement]) -> Envelope:
        """Calibrate an envelope from the flattened points of boundary shapes.

        Raises:
            EmptyEnvelopeError: If the shapes yield no points
        """
        coordinates: list[Coordinate] = []
        for shape in shapes:
            rings, _ = self.shape_to_rings(shape)
            for ring in rings:
                coordinates.extend(ring.points)
        return Envelope.from_coordinates(coordinates)
