"""Core conversion logic for atlasify.

This module contains the main conversion pipeline:

- Ring assembly: flatten path commands into closed rings
- Projection: invert the Winkel Tripel projection
- Containment forest: nest rings into shells and holes
- Repair: remove self-intersections from rings and polygons
- Processor: orchestrate the pipeline with parallel processing
"""

from atlasify.core._bezier import flatten_cubic, subdivide_cubic
from atlasify.core.assembler import RingAssembler, resolve_commands, split_subpaths
from atlasify.core.forest import ContainmentForest, build_forest, rings_to_polygons
from atlasify.core.processor import MapProcessor, process_region, process_shape
from atlasify.core.projection import ProjectionResult, WinkelTripelProjector
from atlasify.core.repair import clean_ring, is_simple_ring, repair, unloop

__all__ = [
    # Flattening and assembly
    "flatten_cubic",
    "subdivide_cubic",
    "RingAssembler",
    "resolve_commands",
    "split_subpaths",
    # Projection
    "ProjectionResult",
    "WinkelTripelProjector",
    # Nesting and repair
    "ContainmentForest",
    "build_forest",
    "rings_to_polygons",
    "clean_ring",
    "is_simple_ring",
    "repair",
    "unloop",
    # Orchestration
    "MapProcessor",
    "process_region",
    "process_shape",
]
