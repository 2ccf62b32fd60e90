"""Parallel processing orchestration for the map conversion pipeline.

This module coordinates the full conversion workflow with parallel processing
using ProcessPoolExecutor, in two rounds:

1. Shapes: assemble rings in drawing space and invert the projection
2. Regions: nest the rings of each region into polygons, repair and union them

Key components:
- process_shape: Top-level picklable function for the shape round
- process_region: Top-level picklable function for the region round
- MapProcessor: Main orchestrator class for map processing
"""

import time
import traceback
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any

from shapely.geometry import Polygon, mapping, shape
from shapely.ops import unary_union

from atlasify.config import AtlasifySettings
from atlasify.core.assembler import RingAssembler
from atlasify.core.forest import build_forest
from atlasify.core.projection import WinkelTripelProjector
from atlasify.core.repair import is_simple_ring, repair, unloop
from atlasify.domain import (
    Diagnostic,
    DiagnosticCode,
    Envelope,
    Region,
    Ring,
    ShapeElement,
)
from atlasify.exceptions import DocumentFormatError, EmptyEnvelopeError
from atlasify.io import GeoJsonWriter, MapReader
from atlasify.utils import ProcessingLogger, ProcessingStats, configure_logging

# (stage, completed, total, key, success); stage is "shapes" or "regions"
ProgressCallback = Callable[[str, int, int, str, bool], None]


def process_shape(
    shape_dict: dict[str, Any],
    envelope_dict: dict[str, Any],
    settings_dict: dict[str, Any],
) -> dict[str, Any]:
    """Turn one shape element into geographic rings.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.

    Args:
        shape_dict: Serialized shape (from ShapeElement.to_dict())
        envelope_dict: Serialized calibration envelope
        settings_dict: Serialized settings (from AtlasifySettings.model_dump())

    Returns:
        Dictionary containing either:
        - Success: {"index", "name", "rings", "diagnostics", "duration_ms"}
        - Error: {"error", "index", "shape_name", "traceback", "duration_ms"}
    """
    start_time = time.time()

    try:
        element = ShapeElement.from_dict(shape_dict)
        envelope = Envelope.from_dict(envelope_dict)
        settings = AtlasifySettings.model_validate(settings_dict)

        assembler = RingAssembler(settings.flatten)
        projector = WinkelTripelProjector(settings.projection)

        drawing_rings, diagnostics = assembler.shape_to_rings(element)

        rings: list[Ring] = []
        for ring in drawing_rings:
            geo_ring, ring_diagnostics = projector.unproject_ring(ring, envelope)
            diagnostics.extend(ring_diagnostics)

            if settings.processing.unloop_rings and not is_simple_ring(geo_ring):
                geo_ring = unloop(geo_ring)
                diagnostics.append(
                    Diagnostic(
                        DiagnosticCode.SELF_INTERSECTING_RING,
                        f"ring of {len(ring)} points reduced to its largest face",
                    )
                )
            rings.append(geo_ring)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "index": element.index,
            "name": element.name,
            "rings": [r.to_dict() for r in rings],
            "diagnostics": [d.to_dict() for d in diagnostics],
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        return {
            "error": str(e),
            "index": shape_dict.get("index", -1),
            "shape_name": shape_dict.get("name", "unknown"),
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


def process_region(name: str, ring_dicts: list[dict[str, Any]]) -> dict[str, Any]:
    """Combine the geographic rings of one region into a single geometry.

    Rings repeating an earlier outline are dropped, from whatever vertex and
    in whichever direction they were drawn, as are rings too small to bound
    an area. The rest are nested by containment, paired into polygons, repaired
    where they cross themselves and unioned.

    Args:
        name: Region name
        ring_dicts: Serialized rings in shape order

    Returns:
        Dictionary containing either:
        - Success: {"name", "geometry", "polygon_count", "diagnostics", "duration_ms"},
          geometry is a GeoJSON-like mapping or None when nothing has area
        - Error: {"error", "name", "traceback", "duration_ms"}
    """
    start_time = time.time()

    try:
        diagnostics: list[Diagnostic] = []

        rings: list[Ring] = []
        seen: set[tuple[tuple[float, float], ...]] = set()
        for ring_dict in ring_dicts:
            ring = Ring.from_dict(ring_dict)
            key = ring.outline_key()
            if key in seen:
                diagnostics.append(
                    Diagnostic(
                        DiagnosticCode.DUPLICATE_RING,
                        f"duplicate ring of {len(ring)} points",
                    )
                )
                continue
            seen.add(key)
            if ring.is_degenerate():
                diagnostics.append(
                    Diagnostic(
                        DiagnosticCode.DEGENERATE_RING,
                        f"ring of {len(ring)} points bounds no area",
                    )
                )
                continue
            rings.append(ring)

        forest, forest_diagnostics = build_forest(rings)
        diagnostics.extend(forest_diagnostics)

        parts = []
        polygons = forest.to_polygons()
        for idx, polygon in enumerate(polygons):
            if not polygon.is_valid:
                diagnostics.append(
                    Diagnostic(
                        DiagnosticCode.SELF_INTERSECTING_RING,
                        f"polygon {idx} repaired",
                    )
                )
                parts.append(repair(polygon))
            else:
                parts.append(polygon)

        geometry = unary_union(parts) if parts else Polygon()

        duration_ms = (time.time() - start_time) * 1000
        return {
            "name": name,
            "geometry": None if geometry.is_empty else mapping(geometry),
            "polygon_count": len(polygons),
            "diagnostics": [d.to_dict() for d in diagnostics],
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        return {
            "error": str(e),
            "name": name,
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


class MapProcessor:
    """Orchestrates parallel map conversion.

    Manages the complete workflow:
    1. Load the drawing and calibrate the envelope from the rim
    2. Collect the named shapes of every shape group
    3. Process shapes in parallel (rings in degrees)
    4. Group rings by region in first-appearance order
    5. Process regions in parallel (nesting, repair, union)
    6. Write GeoJSON, optionally cleaned by mapshaper

    Example:
        settings = AtlasifySettings()
        processor = MapProcessor(settings)
        stats = processor.process(
            input_path=Path("world.svg"),
            output_path=Path("world.geojson"),
            max_workers=4
        )
    """

    def __init__(self, config: AtlasifySettings, quiet: bool = False) -> None:
        """Initialize map processor with configuration.

        Args:
            config: Atlasify settings
            quiet: Suppress console logging except errors
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=quiet,
        )
        self.assembler = RingAssembler(config.flatten)
        self.regions: list[Region] = []
        self.stats: ProcessingStats | None = None

    def process(
        self,
        input_path: Path,
        output_path: Path | None = None,
        max_workers: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> ProcessingStats:
        """Convert a map drawing to a GeoJSON file.

        Args:
            input_path: Path to the SVG drawing
            output_path: Path for the GeoJSON output (auto-generated if None)
            max_workers: Maximum worker processes (None = config default)
            progress_callback: Optional callback(stage, completed, total, key, success)
                for progress updates

        Returns:
            ProcessingStats with counts, timing, and error details

        Raises:
            FileNotFoundError: If the drawing does not exist
            DocumentLoadError: If the drawing cannot be parsed
            DocumentFormatError: If the drawing has no usable rim
            OutputError: If the result cannot be written
            KeyboardInterrupt: If processing is cancelled by user
        """
        stats = ProcessingStats()
        stats.start_time = time.time()
        self.stats = stats

        if max_workers is None:
            max_workers = self.config.processing.max_workers

        if output_path is None:
            output_path = GeoJsonWriter.get_output_path(input_path)

        self.logger.info(
            "Starting map processing",
            input=str(input_path),
            output=str(output_path),
            max_workers=max_workers,
        )

        reader = MapReader(input_path, self.config.document)
        reader.load()

        envelope = self.calibrate(reader)
        shapes = list(reader.iter_shapes())

        processing_logger = ProcessingLogger(self.logger, stats)
        for element_id, reason in reader.rejected:
            processing_logger.log_shape_skipped(element_id, reason)

        self.logger.info(
            "Drawing loaded",
            envelope=envelope.to_dict(),
            shapes=len(shapes),
            regions=len(reader.region_names()),
            rejected=len(reader.rejected),
        )

        self.regions = self.convert(
            shapes,
            envelope,
            max_workers=max_workers,
            stats=stats,
            progress_callback=progress_callback,
        )

        writer = GeoJsonWriter(output_path, indent=self.config.output.indent)
        if self.config.output.run_mapshaper:
            writer.write_cleaned(
                self.regions,
                command=self.config.output.mapshaper_command,
                args=self.config.output.mapshaper_args,
            )
        else:
            writer.write(self.regions)

        self.logger.info(
            "GeoJSON written",
            output=str(output_path),
            features=len(self.regions),
            cleaned=self.config.output.run_mapshaper,
        )

        stats.end_time = time.time()

        self.logger.info(
            "Processing complete",
            processed=stats.processed_count,
            skipped=stats.skipped_count,
            errors=stats.error_count,
            regions=stats.region_count,
            diagnostics=stats.diagnostic_total,
            duration_seconds=round(stats.duration_seconds, 2),
        )

        return stats

    def calibrate(self, reader: MapReader) -> Envelope:
        """Compute the drawing envelope from the rim shapes.

        Raises:
            DocumentFormatError: If the rim has no points or no extent
        """
        rim = reader.rim_shapes()
        try:
            envelope = self.assembler.envelope_from_shapes(rim)
        except EmptyEnvelopeError as e:
            raise DocumentFormatError(str(reader.path), "rim has no points") from e

        if envelope.is_degenerate():
            raise DocumentFormatError(
                str(reader.path),
                f"rim envelope has no extent: {envelope.to_dict()}",
            )
        return envelope

    def convert(
        self,
        shapes: Sequence[ShapeElement],
        envelope: Envelope,
        max_workers: int | None = None,
        stats: ProcessingStats | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> list[Region]:
        """Run both processing rounds without touching the file system.

        Args:
            shapes: Named shapes in document order
            envelope: Calibration envelope of the drawing
            max_workers: Maximum worker processes
            stats: Statistics object to update (a new one if None)
            progress_callback: Optional progress callback, called for shapes
                and then for regions

        Returns:
            Regions in order of first appearance in the drawing
        """
        if stats is None:
            stats = ProcessingStats()
        processing_logger = ProcessingLogger(self.logger, stats)

        results = self._process_shapes_parallel(
            shapes,
            envelope,
            max_workers=max_workers,
            processing_logger=processing_logger,
            progress_callback=progress_callback,
        )

        grouped = self._group_rings(results)
        shape_counts: dict[str, int] = {}
        for result in results:
            shape_counts[result["name"]] = shape_counts.get(result["name"], 0) + 1

        return self._process_regions_parallel(
            grouped,
            shape_counts,
            max_workers=max_workers,
            processing_logger=processing_logger,
            progress_callback=progress_callback,
        )

    def _run_parallel(
        self,
        stage: str,
        tasks: dict[str, tuple[Callable[..., dict[str, Any]], tuple[Any, ...]]],
        max_workers: int | None,
        processing_logger: ProcessingLogger,
        on_result: Callable[[str, dict[str, Any]], bool],
        on_failure: Callable[[str, Exception, str], None],
        progress_callback: ProgressCallback | None,
    ) -> None:
        """Submit tasks and feed results back in completion order."""
        total = len(tasks)
        completed = 0
        pending_futures: dict[Future, str] = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for key, (func, args) in tasks.items():
                pending_futures[executor.submit(func, *args)] = key

            try:
                for future in as_completed(list(pending_futures)):
                    key = pending_futures.pop(future)
                    success = False

                    try:
                        success = on_result(key, future.result())
                    except Exception as e:
                        # Executor-level error
                        on_failure(key, e, traceback.format_exc())

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(stage, completed, total, key, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                processing_logger.stats.was_cancelled = True
                processing_logger.stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise

    def _process_shapes_parallel(
        self,
        shapes: Sequence[ShapeElement],
        envelope: Envelope,
        max_workers: int | None,
        processing_logger: ProcessingLogger,
        progress_callback: ProgressCallback | None = None,
    ) -> list[dict[str, Any]]:
        """Process shapes in parallel.

        Returns:
            Successful shape results sorted by document index
        """
        settings_dict = self.config.model_dump()
        envelope_dict = envelope.to_dict()

        tasks: dict[str, tuple[Callable[..., dict[str, Any]], tuple[Any, ...]]] = {}
        for element in shapes:
            if element.is_empty():
                processing_logger.log_shape_skipped(element.name, "empty shape")
                continue
            key = f"{element.name}#{element.index}"
            processing_logger.log_shape_start(element.name, element.index)
            tasks[key] = (process_shape, (element.to_dict(), envelope_dict, settings_dict))

        self.logger.info(
            "Starting shape processing",
            shape_count=len(tasks),
            max_workers=max_workers,
        )

        results: list[dict[str, Any]] = []

        def on_result(key: str, result: dict[str, Any]) -> bool:
            if "error" in result:
                processing_logger.log_shape_error(
                    shape_name=result["shape_name"],
                    error=Exception(result["error"]),
                    traceback=result.get("traceback"),
                )
                return False

            for diagnostic in result["diagnostics"]:
                processing_logger.log_diagnostic(key, Diagnostic.from_dict(diagnostic))
            processing_logger.log_shape_complete(
                shape_name=result["name"],
                index=result["index"],
                ring_count=len(result["rings"]),
                duration_ms=result.get("duration_ms", 0.0),
            )
            results.append(result)
            return True

        def on_failure(key: str, error: Exception, tb: str) -> None:
            processing_logger.log_shape_error(shape_name=key, error=error, traceback=tb)

        if tasks:
            self._run_parallel(
                "shapes",
                tasks,
                max_workers,
                processing_logger,
                on_result,
                on_failure,
                progress_callback,
            )

        # Completion order is arbitrary; restore document order
        results.sort(key=lambda r: r["index"])
        return results

    @staticmethod
    def _group_rings(results: Sequence[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
        """Group serialized rings by region name in first-appearance order."""
        grouped: dict[str, list[dict[str, Any]]] = {}
        for result in results:
            grouped.setdefault(result["name"], []).extend(result["rings"])
        return grouped

    def _process_regions_parallel(
        self,
        grouped: dict[str, list[dict[str, Any]]],
        shape_counts: dict[str, int],
        max_workers: int | None,
        processing_logger: ProcessingLogger,
        progress_callback: ProgressCallback | None = None,
    ) -> list[Region]:
        """Process regions in parallel.

        Returns:
            Non-empty regions in the order of `grouped`
        """
        tasks: dict[str, tuple[Callable[..., dict[str, Any]], tuple[Any, ...]]] = {
            name: (process_region, (name, ring_dicts))
            for name, ring_dicts in grouped.items()
        }

        self.logger.info(
            "Starting region processing",
            region_count=len(tasks),
            max_workers=max_workers,
        )

        built: dict[str, Region] = {}

        def on_result(name: str, result: dict[str, Any]) -> bool:
            if "error" in result:
                processing_logger.log_region_error(
                    region_name=name,
                    error=Exception(result["error"]),
                    traceback=result.get("traceback"),
                )
                return False

            for diagnostic in result["diagnostics"]:
                processing_logger.log_diagnostic(name, Diagnostic.from_dict(diagnostic))

            if result["geometry"] is None:
                processing_logger.log_region_skipped(name, "region has no area")
                return False

            region = Region(
                name=name,
                geometry=shape(result["geometry"]),
                shape_count=shape_counts.get(name, 0),
                polygon_count=result["polygon_count"],
            )

            processing_logger.log_region_complete(
                region_name=name,
                shape_count=region.shape_count,
                polygon_count=region.polygon_count,
                duration_ms=result.get("duration_ms", 0.0),
            )
            built[name] = region
            return True

        def on_failure(name: str, error: Exception, tb: str) -> None:
            processing_logger.log_region_error(region_name=name, error=error, traceback=tb)

        if tasks:
            self._run_parallel(
                "regions",
                tasks,
                max_workers,
                processing_logger,
                on_result,
                on_failure,
                progress_callback,
            )

        return [built[name] for name in grouped if name in built]
