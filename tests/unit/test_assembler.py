"""Tests for ring assembly from path commands."""

import math

import pytest

from atlasify.config import FlattenConfig
from atlasify.core.assembler import (
    RingAssembler,
    resolve_commands,
    split_subpaths,
    to_absolute,
)
from atlasify.domain import (
    CommandKind,
    Coordinate,
    DiagnosticCode,
    PathCommand,
    ShapeElement,
    ShapeKind,
)
from atlasify.exceptions import EmptyEnvelopeError


@pytest.fixture
def assembler() -> RingAssembler:
    return RingAssembler(FlattenConfig())


def square(x: float = 0, y: float = 0, size: float = 10) -> list[PathCommand]:
    return [
        PathCommand.move_to(x, y),
        PathCommand.line_to(x + size, y),
        PathCommand.line_to(x + size, y + size),
        PathCommand.line_to(x, y + size),
        PathCommand.close(),
    ]


class TestToAbsolute:
    """Tests for coordinate resolution."""

    def test_absolute_is_unchanged(self) -> None:
        assert to_absolute(Coordinate(3, 4), False, Coordinate(10, 10)) == Coordinate(3, 4)

    def test_relative_is_offset(self) -> None:
        assert to_absolute(Coordinate(3, 4), True, Coordinate(10, 10)) == Coordinate(13, 14)

    def test_nan_axis_inherits_current(self) -> None:
        assert to_absolute(Coordinate(math.nan, 4), False, Coordinate(7, 1)) == Coordinate(7, 4)
        assert to_absolute(Coordinate(2, math.nan), True, Coordinate(7, 1)) == Coordinate(9, 1)


class TestResolveCommands:
    """Tests for resolving relative commands."""

    def test_relative_move_starts_at_origin(self) -> None:
        resolved = resolve_commands([PathCommand.move_to(5, 5, relative=True)])
        assert resolved[0].end == Coordinate(5, 5)

    def test_relative_chain(self) -> None:
        resolved = resolve_commands(
            [
                PathCommand.move_to(10, 10),
                PathCommand.line_to(5, 0, relative=True),
                PathCommand.line_to(0, 5, relative=True),
            ]
        )
        assert [c.end for c in resolved] == [
            Coordinate(10, 10),
            Coordinate(15, 10),
            Coordinate(15, 15),
        ]
        assert not any(c.is_relative for c in resolved)

    def test_relative_after_close_uses_subpath_start(self) -> None:
        resolved = resolve_commands(
            [
                PathCommand.move_to(10, 10),
                PathCommand.line_to(20, 10),
                PathCommand.line_to(20, 20),
                PathCommand.close(),
                PathCommand.move_to(1, 1, relative=True),
            ]
        )
        assert resolved[-1].end == Coordinate(11, 11)

    def test_relative_curve_controls(self) -> None:
        resolved = resolve_commands(
            [
                PathCommand.move_to(10, 10),
                PathCommand.curve_to((1, 2), (3, 4), (5, 6), relative=True),
            ]
        )
        curve = resolved[1]
        assert curve.c1 == Coordinate(11, 12)
        assert curve.c2 == Coordinate(13, 14)
        assert curve.end == Coordinate(15, 16)

    def test_smooth_curve_keeps_absent_control(self) -> None:
        resolved = resolve_commands(
            [PathCommand.move_to(0, 0), PathCommand.curve_to(None, (1, 1), (2, 0))]
        )
        assert resolved[1].c1 is None


class TestSplitSubpaths:
    """Tests for splitting at moves."""

    def test_split_at_each_move(self) -> None:
        chunks = split_subpaths(square() + square(20, 20))
        assert len(chunks) == 2
        assert all(chunk[0].kind is CommandKind.MOVE_TO for chunk in chunks)

    def test_leading_commands_form_subpath(self) -> None:
        chunks = split_subpaths([PathCommand.line_to(1, 1)] + square())
        assert len(chunks) == 2
        assert chunks[0][0].kind is CommandKind.LINE_TO


class TestRingAssembler:
    """Tests for RingAssembler."""

    def test_square_is_closed(self, assembler: RingAssembler) -> None:
        rings = assembler.assemble(square())
        assert len(rings) == 1
        ring = rings[0]
        assert ring.first == ring.last == Coordinate(0, 0)
        assert len(ring) == 5

    def test_open_subpath_is_closed(self, assembler: RingAssembler) -> None:
        rings = assembler.assemble(
            [PathCommand.move_to(0, 0), PathCommand.line_to(4, 0), PathCommand.line_to(4, 4)]
        )
        assert rings[0].coords() == [(0, 0), (4, 0), (4, 4), (0, 0)]

    def test_one_ring_per_subpath(self, assembler: RingAssembler) -> None:
        rings = assembler.assemble(square() + square(20, 20) + square(40, 40))
        assert len(rings) == 3
        assert rings[1].first == Coordinate(20, 20)

    def test_horizontal_and_vertical_lines(self, assembler: RingAssembler) -> None:
        rings = assembler.assemble(
            [
                PathCommand.move_to(0, 0),
                PathCommand.line_to(10, math.nan),
                PathCommand.line_to(math.nan, 10),
                PathCommand.line_to(-10, math.nan, relative=True),
                PathCommand.close(),
            ]
        )
        assert rings[0].coords() == [(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)]

    def test_single_point_subpath_dropped(self, assembler: RingAssembler) -> None:
        rings, diagnostics = assembler.assemble_with_diagnostics(
            [PathCommand.move_to(5, 5)] + square()
        )
        assert len(rings) == 1
        assert len(diagnostics) == 1
        assert diagnostics[0].code is DiagnosticCode.DEGENERATE_RING

    def test_curve_is_flattened(self, assembler: RingAssembler) -> None:
        rings = assembler.assemble(
            [
                PathCommand.move_to(0, 0),
                PathCommand.curve_to((0, 10), (10, 10), (10, 0)),
                PathCommand.close(),
            ]
        )
        ring = rings[0]
        assert len(ring) > 4
        assert Coordinate(10, 0) in ring.points
        assert all(0 <= p.y <= 7.5 for p in ring.points)

    def test_smooth_curve_reflects_previous_control(self) -> None:
        """A smooth curve mirrors the previous curve's second control point."""
        assembler = RingAssembler(FlattenConfig(max_depth=0))
        explicit = assembler.assemble(
            [
                PathCommand.move_to(0, 0),
                PathCommand.curve_to((0, 5), (5, 5), (5, 0)),
                PathCommand.curve_to((5, -5), (10, -5), (10, 0)),
            ]
        )
        smooth = assembler.assemble(
            [
                PathCommand.move_to(0, 0),
                PathCommand.curve_to((0, 5), (5, 5), (5, 0)),
                PathCommand.curve_to(None, (10, -5), (10, 0)),
            ]
        )
        assert explicit == smooth

        fine = RingAssembler(FlattenConfig())
        explicit_points = fine.assemble(
            [
                PathCommand.move_to(0, 0),
                PathCommand.curve_to((0, 5), (5, 5), (5, 0)),
                PathCommand.curve_to((5, -5), (10, -5), (10, 0)),
            ]
        )
        smooth_points = fine.assemble(
            [
                PathCommand.move_to(0, 0),
                PathCommand.curve_to((0, 5), (5, 5), (5, 0)),
                PathCommand.curve_to(None, (10, -5), (10, 0)),
            ]
        )
        assert explicit_points == smooth_points

    def test_smooth_curve_without_previous_curve(self, assembler: RingAssembler) -> None:
        """Without a preceding curve the first control point is the start point."""
        explicit = assembler.assemble(
            [
                PathCommand.move_to(0, 0),
                PathCommand.line_to(5, 0),
                PathCommand.curve_to((5, 0), (10, 5), (10, 10)),
            ]
        )
        smooth = assembler.assemble(
            [
                PathCommand.move_to(0, 0),
                PathCommand.line_to(5, 0),
                PathCommand.curve_to(None, (10, 5), (10, 10)),
            ]
        )
        assert explicit == smooth

    def test_close_maps_to_first_point(self, assembler: RingAssembler) -> None:
        rings = assembler.assemble(
            [
                PathCommand.move_to(1, 1),
                PathCommand.line_to(5, 1),
                PathCommand.line_to(5, 5),
                PathCommand.close(),
                PathCommand.line_to(9, 9),
            ]
        )
        assert rings[0].coords() == [(1, 1), (5, 1), (5, 5), (1, 1), (9, 9), (1, 1)]

    def test_empty_commands(self, assembler: RingAssembler) -> None:
        assert assembler.assemble([]) == []


class TestShapeToRings:
    """Tests for shape kind dispatch."""

    def test_polygon_shape(self, assembler: RingAssembler) -> None:
        shape = ShapeElement(
            index=0,
            name="A",
            kind=ShapeKind.POLYGON,
            points=[Coordinate(0, 0), Coordinate(4, 0), Coordinate(0, 4)],
        )
        rings, diagnostics = assembler.shape_to_rings(shape)
        assert diagnostics == []
        assert rings[0].coords() == [(0, 0), (4, 0), (0, 4), (0, 0)]

    def test_rectangle_shape(self, assembler: RingAssembler) -> None:
        shape = ShapeElement(
            index=0,
            name="A",
            kind=ShapeKind.RECTANGLE,
            points=[Coordinate(0, 0), Coordinate(2, 0), Coordinate(2, 1), Coordinate(0, 1)],
        )
        rings, _ = assembler.shape_to_rings(shape)
        assert len(rings[0]) == 5

    def test_single_point_polygon_is_degenerate(self, assembler: RingAssembler) -> None:
        shape = ShapeElement(index=0, name="A", kind=ShapeKind.POLYGON, points=[Coordinate(1, 1)])
        rings, diagnostics = assembler.shape_to_rings(shape)
        assert rings == []
        assert diagnostics[0].code is DiagnosticCode.DEGENERATE_RING

    def test_path_shape(self, assembler: RingAssembler) -> None:
        shape = ShapeElement(index=0, name="A", kind=ShapeKind.PATH, commands=square())
        rings, _ = assembler.shape_to_rings(shape)
        assert len(rings) == 1


class TestEnvelopeFromShapes:
    """Tests for envelope calibration."""

    def test_envelope_covers_flattened_points(self, assembler: RingAssembler) -> None:
        rim = ShapeElement(
            index=0,
            name="Rim",
            kind=ShapeKind.PATH,
            commands=[
                PathCommand.move_to(0, 50),
                PathCommand.curve_to((0, -16.6667), (100, -16.6667), (100, 50)),
                PathCommand.curve_to((100, 116.6667), (0, 116.6667), (0, 50)),
                PathCommand.close(),
            ],
        )
        envelope = assembler.envelope_from_shapes([rim])
        assert envelope.min_x == 0
        assert envelope.max_x == 100
        # Extremes come from flattened points, not from the control points
        assert envelope.min_y == pytest.approx(0.0, abs=1e-3)
        assert envelope.max_y == pytest.approx(100.0, abs=1e-3)

    def test_no_shapes_raises(self, assembler: RingAssembler) -> None:
        with pytest.raises(EmptyEnvelopeError):
            assembler.envelope_from_shapes([])
