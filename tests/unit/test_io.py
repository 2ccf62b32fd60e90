"""Tests for the SVG reading and GeoJSON writing layer."""

import json
import math
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from shapely.geometry import MultiPolygon, Polygon

from atlasify.config import DocumentConfig
from atlasify.domain import CommandKind, Coordinate, PathCommand, Region, ShapeKind
from atlasify.exceptions import (
    DocumentFormatError,
    DocumentLoadError,
    PathDataError,
    PostProcessError,
    UnsupportedCommandError,
)
from atlasify.io import (
    GeoJsonWriter,
    MapReader,
    decode_id,
    parse_path_data,
    parse_points,
    resolve_region_name,
    run_mapshaper,
)

SAMPLE_SVG = """<?xml version="1.0" encoding="utf-8"?>
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 400 200">
  <g id="Rim">
    <path d="M0,0 H400 V200 H0 Z"/>
  </g>
  <g id="Country_Shapes">
    <g id="France_1_">
      <path id="_x3C_Path_x3E_" d="M190,60 l10,0 0,10 -10,0 z"/>
      <polygon points="205,60 215,60 215,70"/>
    </g>
    <path id="Cote_d_x27_Ivoire" d="M180,100 L185,100 L185,105 Z"/>
    <rect id="Georgia__x28_country_x29_" x="230" y="50" width="5" height="4"/>
    <path id="Disputed_x2B_" d="M0,0 L1,0 L1,1 Z"/>
    <path d="M0,0 L1,0 L1,1 Z"/>
    <path id="Broken" d="M0,0 Q5,5 10,0"/>
  </g>
  <g id="Substate_Shapes">
    <g id="Islands_3_">
      <path id="Texas" d="M100,60 h5 v5 h-5 z"/>
    </g>
  </g>
</svg>
"""


@pytest.fixture
def sample_svg(tmp_path: Path) -> Path:
    path = tmp_path / "world.svg"
    path.write_text(SAMPLE_SVG, encoding="utf-8")
    return path


class TestParsePathData:
    """Tests for parse_path_data."""

    def test_move_line_close(self) -> None:
        commands = parse_path_data("M10,20 L30,40 Z")
        assert [c.kind for c in commands] == [
            CommandKind.MOVE_TO,
            CommandKind.LINE_TO,
            CommandKind.CLOSE_PATH,
        ]
        assert commands[1].end == Coordinate(30, 40)

    def test_implicit_line_after_move(self) -> None:
        commands = parse_path_data("m1 2 3 4 5 6")
        assert [c.kind for c in commands] == [
            CommandKind.MOVE_TO,
            CommandKind.LINE_TO,
            CommandKind.LINE_TO,
        ]
        assert all(c.is_relative for c in commands)

    def test_horizontal_and_vertical(self) -> None:
        h, v = parse_path_data("H5v-3")
        assert h.end is not None and v.end is not None
        assert h.end.x == 5 and math.isnan(h.end.y)
        assert math.isnan(v.end.x) and v.end.y == -3
        assert v.is_relative

    def test_cubic_and_smooth(self) -> None:
        curve, smooth = parse_path_data("C1,2 3,4 5,6 S7,8 9,10")
        assert curve.c1 == Coordinate(1, 2)
        assert curve.c2 == Coordinate(3, 4)
        assert curve.end == Coordinate(5, 6)
        assert smooth.c1 is None
        assert smooth.c2 == Coordinate(7, 8)
        assert smooth.end == Coordinate(9, 10)

    def test_compact_numbers(self) -> None:
        commands = parse_path_data("M.5.5-1e1-2")
        assert commands[0].end == Coordinate(0.5, 0.5)
        assert commands[1].end == Coordinate(-10, -2)

    def test_repeated_curve_parameters(self) -> None:
        commands = parse_path_data("M0 0 c1 1 2 2 3 3 4 4 5 5 6 6")
        assert [c.kind for c in commands[1:]] == [CommandKind.CUBIC_CURVE] * 2

    def test_quadratic_rejected(self) -> None:
        with pytest.raises(UnsupportedCommandError):
            parse_path_data("M0,0 Q5,5 10,0")

    def test_arc_rejected(self) -> None:
        with pytest.raises(UnsupportedCommandError):
            parse_path_data("M0,0 a5 5 0 0 1 10 0")

    @pytest.mark.parametrize(
        "data",
        ["10,20", "M10", "M1,2 L", "M1,2 Z 3", "M1,2 #", "M1,2 X3,4"],
    )
    def test_malformed(self, data: str) -> None:
        with pytest.raises(PathDataError):
            parse_path_data(data)

    def test_empty(self) -> None:
        assert parse_path_data("") == []


class TestParsePoints:
    """Tests for parse_points."""

    def test_points(self) -> None:
        assert parse_points("0,0 10,0 10 10") == [
            Coordinate(0, 0),
            Coordinate(10, 0),
            Coordinate(10, 10),
        ]

    def test_odd_count(self) -> None:
        with pytest.raises(PathDataError):
            parse_points("0,0 10")


class TestNaming:
    """Tests for region name decoding."""

    @pytest.mark.parametrize(
        ("element_id", "expected"),
        [
            ("France", "France"),
            ("France_2_", "France"),
            ("United_States", "United States"),
            ("Cote_d_x27_Ivoire", "Cote d'Ivoire"),
            ("Georgia__x28_country_x29_", "Georgia"),
            ("Bosnia_and_Herzegovina_12_", "Bosnia and Herzegovina"),
        ],
    )
    def test_decode_id(self, element_id: str, expected: str) -> None:
        assert decode_id(element_id) == expected

    def test_innermost_usable_id_wins(self) -> None:
        config = DocumentConfig()
        ids = ["", "_x3C_Path_x3E_", "Spain_1_", "Europe"]
        assert resolve_region_name(ids, config) == "Spain"

    def test_ignored_prefixes_skipped(self) -> None:
        config = DocumentConfig()
        assert resolve_region_name(["Islands_2_", "Mainland_", "Chile"], config) == "Chile"

    def test_no_usable_id(self) -> None:
        assert resolve_region_name(["", "_x2A_Hidden"], DocumentConfig()) is None

    def test_excluded_suffix(self) -> None:
        assert resolve_region_name(["Disputed_x2B_"], DocumentConfig()) is None


class TestMapReader:
    """Tests for MapReader."""

    def test_missing_file(self, tmp_path: Path) -> None:
        reader = MapReader(tmp_path / "missing.svg")
        with pytest.raises(FileNotFoundError):
            reader.load()

    def test_malformed_xml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.svg"
        path.write_text("<svg><g></svg>", encoding="utf-8")
        with pytest.raises(DocumentLoadError):
            MapReader(path).load()

    def test_not_loaded(self, sample_svg: Path) -> None:
        with pytest.raises(RuntimeError):
            MapReader(sample_svg).rim_shapes()

    def test_rim_shapes(self, sample_svg: Path) -> None:
        reader = MapReader(sample_svg)
        reader.load()
        rim = reader.rim_shapes()
        assert len(rim) == 1
        assert rim[0].kind is ShapeKind.PATH
        assert len(rim[0].commands) == 5

    def test_missing_rim(self, sample_svg: Path) -> None:
        reader = MapReader(sample_svg, DocumentConfig(rim_id="Globe"))
        reader.load()
        with pytest.raises(DocumentFormatError):
            reader.rim_shapes()

    def test_iter_shapes(self, sample_svg: Path) -> None:
        reader = MapReader(sample_svg)
        reader.load()
        shapes = list(reader.iter_shapes())

        assert [s.name for s in shapes] == [
            "France",
            "France",
            "Cote d'Ivoire",
            "Georgia",
            "Texas",
        ]
        assert [s.index for s in shapes] == [0, 1, 2, 3, 4]
        assert [s.kind for s in shapes] == [
            ShapeKind.PATH,
            ShapeKind.POLYGON,
            ShapeKind.PATH,
            ShapeKind.RECTANGLE,
            ShapeKind.PATH,
        ]
        assert shapes[0].element_id == "France_1_"

    def test_rectangle_corners(self, sample_svg: Path) -> None:
        reader = MapReader(sample_svg)
        reader.load()
        georgia = next(s for s in reader.iter_shapes() if s.name == "Georgia")
        assert georgia.points == [
            Coordinate(230, 50),
            Coordinate(235, 50),
            Coordinate(235, 54),
            Coordinate(230, 54),
        ]

    def test_unsupported_geometry_is_rejected(self, sample_svg: Path) -> None:
        reader = MapReader(sample_svg)
        reader.load()
        list(reader.iter_shapes())
        assert len(reader.rejected) == 1
        element_id, reason = reader.rejected[0]
        assert element_id == "Broken"
        assert "Q" in reason

    def test_region_names(self, sample_svg: Path) -> None:
        reader = MapReader(sample_svg)
        reader.load()
        assert reader.region_names() == ["France", "Cote d'Ivoire", "Georgia", "Texas"]


class TestGeoJsonWriter:
    """Tests for GeoJsonWriter."""

    @pytest.fixture
    def regions(self) -> list[Region]:
        # Clockwise shell, as produced by the y flip
        shell = Polygon([(0, 0), (0, 10), (10, 10), (10, 0)])
        return [
            Region(name="Alpha", geometry=shell, shape_count=1, polygon_count=1),
            Region(
                name="Beta",
                geometry=MultiPolygon(
                    [
                        Polygon([(20, 0), (30, 0), (30, 10)]),
                        Polygon([(40, 0), (50, 0), (50, 10)]),
                    ]
                ),
                shape_count=2,
                polygon_count=2,
            ),
        ]

    def test_feature_collection(self, regions: list[Region]) -> None:
        collection = GeoJsonWriter.to_feature_collection(regions)
        assert collection["type"] == "FeatureCollection"
        assert [f["properties"]["id"] for f in collection["features"]] == ["Alpha", "Beta"]
        assert collection["features"][0]["geometry"]["type"] == "Polygon"
        assert collection["features"][1]["geometry"]["type"] == "MultiPolygon"

    def test_empty_region_skipped(self, regions: list[Region]) -> None:
        empty = Region(name="Gamma", geometry=Polygon())
        collection = GeoJsonWriter.to_feature_collection([*regions, empty])
        assert [f["properties"]["id"] for f in collection["features"]] == ["Alpha", "Beta"]

    def test_shells_are_counter_clockwise(self, regions: list[Region]) -> None:
        collection = GeoJsonWriter.to_feature_collection(regions)
        shell = Polygon(collection["features"][0]["geometry"]["coordinates"][0])
        assert shell.exterior.is_ccw

    def test_write(self, tmp_path: Path, regions: list[Region]) -> None:
        output = tmp_path / "world.geojson"
        GeoJsonWriter(output).write(regions)

        with open(output, encoding="utf-8") as f:
            data = json.load(f)
        assert len(data["features"]) == 2

    def test_write_preserves_unicode(self, tmp_path: Path) -> None:
        output = tmp_path / "world.geojson"
        region = Region(name="Curaçao", geometry=Polygon([(0, 0), (1, 0), (1, 1)]))
        GeoJsonWriter(output, indent=None).write([region])
        assert "Curaçao" in output.read_text(encoding="utf-8")

    def test_output_path(self) -> None:
        assert GeoJsonWriter.get_output_path(Path("maps/world.svg")) == Path("maps/world.geojson")

    def test_mapshaper_missing(self, tmp_path: Path) -> None:
        with patch("atlasify.io.writer.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(PostProcessError, match="not found"):
                run_mapshaper(tmp_path / "a.geojson", tmp_path / "b.geojson")

    def test_mapshaper_arguments(self, tmp_path: Path) -> None:
        with patch("atlasify.io.writer.subprocess.run") as mock_run:
            run_mapshaper(
                tmp_path / "a.geojson",
                tmp_path / "b.geojson",
                args=["-clean", "rewind"],
            )
        argv = mock_run.call_args.args[0]
        assert argv == [
            "mapshaper",
            str(tmp_path / "a.geojson"),
            "-clean",
            "rewind",
            "-o",
            str(tmp_path / "b.geojson"),
            "format=geojson",
        ]


FAKE_MAPSHAPER = """#!/bin/sh
printf '%s\\n' "$@" > "$(dirname "$0")/argv.txt"
ls "$(dirname "$1")" > "$(dirname "$0")/tmpdir.txt"
if [ -n "$MAPSHAPER_FAIL" ]; then
    echo "Error: bad input" >&2
    exit 2
fi
while [ "$#" -gt 0 ]; do
    if [ "$1" = "-o" ]; then
        shift
        cp "$SOURCE" "$1"
    fi
    [ -z "$SOURCE" ] && SOURCE="$1"
    shift
done
"""


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
class TestMapshaperExecutable:
    """Run write_cleaned against a stand-in mapshaper on PATH."""

    @pytest.fixture
    def fake_bin(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        script = bin_dir / "mapshaper"
        script.write_text(FAKE_MAPSHAPER, encoding="utf-8")
        script.chmod(0o755)
        monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
        return bin_dir

    @pytest.fixture
    def region(self) -> Region:
        return Region(name="Alpha", geometry=Polygon([(0, 0), (10, 0), (10, 10)]))

    def test_write_cleaned(self, tmp_path: Path, fake_bin: Path, region: Region) -> None:
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        output = out_dir / "world.geojson"

        GeoJsonWriter(output).write_cleaned([region], args=["-clean", "rewind"])

        argv = (fake_bin / "argv.txt").read_text(encoding="utf-8").splitlines()
        assert argv[0].endswith("raw.geojson")
        assert argv[1:] == ["-clean", "rewind", "-o", str(output), "format=geojson"]
        assert (fake_bin / "tmpdir.txt").read_text(encoding="utf-8").split() == ["raw.geojson"]

        with open(output, encoding="utf-8") as f:
            data = json.load(f)
        assert [feature["properties"]["id"] for feature in data["features"]] == ["Alpha"]
        # Only the result is left behind
        assert [p.name for p in out_dir.iterdir()] == ["world.geojson"]

    def test_failure_reports_stderr(
        self,
        tmp_path: Path,
        fake_bin: Path,
        region: Region,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("MAPSHAPER_FAIL", "1")
        out_dir = tmp_path / "out"
        out_dir.mkdir()

        with pytest.raises(PostProcessError, match="bad input"):
            GeoJsonWriter(out_dir / "world.geojson").write_cleaned([region])

        assert list(out_dir.iterdir()) == []


class TestPathCommandsFromSvg:
    """Parsed paths feed the assembler unchanged."""

    def test_relative_square(self) -> None:
        commands = parse_path_data("M190,60 l10,0 0,10 -10,0 z")
        assert commands[1] == PathCommand.line_to(10, 0, relative=True)
        assert commands[-1].kind is CommandKind.CLOSE_PATH
