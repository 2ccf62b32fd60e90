"""Containment forest for turning loose rings into nested polygons.

Rings arrive as an unordered set: outlines of land, outlines of lakes inside
that land, islands inside those lakes, and so on. This module finds, for every
ring, the smallest ring that encloses it and pairs shells with their holes:

- Rings at even depth (0, 2, 4, ...) are shells
- Rings at odd depth are holes of their parent shell

The forest is an arena of rings addressed by index with a parent-index array,
built once and then walked top-down.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import shapely
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.prepared import prep

from atlasify.domain import Diagnostic, DiagnosticCode, Ring


@dataclass
class ContainmentForest:
    """Rings with their smallest enclosing ring.

    Attributes:
        rings: Ring arena, addressed by index
        parents: Index of the smallest enclosing ring (None for roots)
    """

    rings: list[Ring]
    parents: list[int | None]
    _children: dict[int, list[int]] | None = field(default=None, repr=False, init=False)

    def __len__(self) -> int:
        return len(self.rings)

    def roots(self) -> list[int]:
        """Indices of rings without an enclosing ring."""
        return [idx for idx, parent in enumerate(self.parents) if parent is None]

    def children(self, idx: int) -> list[int]:
        """Indices of rings whose smallest enclosing ring is `idx`."""
        if self._children is None:
            children: dict[int, list[int]] = {}
            for child, parent in enumerate(self.parents):
                if parent is not None:
                    children.setdefault(parent, []).append(child)
            self._children = children
        return self._children.get(idx, [])

    def depth(self, idx: int) -> int:
        """Nesting depth of a ring (0 for roots)."""
        depth = 0
        parent = self.parents[idx]
        while parent is not None:
            depth += 1
            parent = self.parents[parent]
        return depth

    def to_polygons(self) -> list[Polygon]:
        """Pair every shell with its holes.

        Each root becomes a shell whose holes are its children. Rings inside
        those holes start new shells one level deeper.

        Returns:
            Polygons ordered by root index, each followed by the islands
            inside its holes
        """
        polygons: list[Polygon] = []
        for root in self.roots():
            self._collect_polygons(root, polygons)
        return polygons

    def _collect_polygons(self, shell: int, polygons: list[Polygon]) -> None:
        holes = self.children(shell)
        polygons.append(
            Polygon(
                self.rings[shell].coords(),
                [self.rings[hole].coords() for hole in holes],
            )
        )
        for hole in holes:
            for island in self.children(hole):
                self._collect_polygons(island, polygons)


def ring_area(ring: Ring) -> BaseGeometry:
    """Area bounded by a ring, with no holes.

    Self-intersecting rings are made valid first so that they can take part
    in containment tests before repair.
    """
    polygon = Polygon(ring.coords())
    if polygon.is_valid:
        return polygon

    valid = shapely.make_valid(polygon)
    parts = [
        part
        for part in getattr(valid, "geoms", [valid])
        if isinstance(part, (Polygon, MultiPolygon)) and not part.is_empty
    ]
    if not parts:
        return Polygon()
    return unary_union(parts)


def _find_containers(areas: Sequence[BaseGeometry]) -> list[set[int]]:
    """For every ring, the set of rings that strictly contain it."""
    prepared = [prep(area) for area in areas]
    bounds = [area.bounds if not area.is_empty else None for area in areas]
    contains: list[set[int]] = [set() for _ in areas]

    for outer, outer_area in enumerate(areas):
        if bounds[outer] is None:
            continue
        ominx, ominy, omaxx, omaxy = bounds[outer]  # type: ignore[misc]
        for inner, inner_area in enumerate(areas):
            if inner == outer or bounds[inner] is None:
                continue
            iminx, iminy, imaxx, imaxy = bounds[inner]  # type: ignore[misc]
            if iminx < ominx or iminy < ominy or imaxx > omaxx or imaxy > omaxy:
                continue
            if prepared[outer].contains(inner_area):
                contains[inner].add(outer)

    # Identical point sets contain each other; neither encloses the other
    mutual = [
        (inner, outer)
        for inner, outers in enumerate(contains)
        for outer in outers
        if inner in contains[outer]
    ]
    for inner, outer in mutual:
        contains[inner].discard(outer)

    return contains


def build_forest(rings: Sequence[Ring]) -> tuple[ContainmentForest, list[Diagnostic]]:
    """Find the smallest enclosing ring of every ring.

    For each ring the set of containing rings is computed. With no container
    the ring is a root, with one that ring is the parent. With several, the
    candidates are resolved among themselves first and the candidate that is
    not the parent of another candidate is chosen.

    If the candidates do not reduce to exactly one innermost ring, the
    smallest-area candidate wins (lowest index on equal area) and an
    AMBIGUOUS_CONTAINMENT diagnostic is reported.

    Args:
        rings: Non-degenerate closed rings in a common coordinate space

    Returns:
        Tuple of (forest, diagnostics)

    Raises:
        ValueError: If a ring is degenerate
    """
    for idx, ring in enumerate(rings):
        if ring.is_degenerate():
            raise ValueError(f"Ring {idx} is degenerate and cannot bound an area")

    areas = [ring_area(ring) for ring in rings]
    containers = _find_containers(areas)
    sizes = [area.area for area in areas]

    parents: dict[int, int | None] = {}
    diagnostics: list[Diagnostic] = []

    def resolve(indices: Sequence[int]) -> None:
        members = set(indices)
        for idx in indices:
            if idx in parents:
                continue

            candidates = sorted(containers[idx] & members)
            if not candidates:
                parents[idx] = None
            elif len(candidates) == 1:
                parents[idx] = candidates[0]
            else:
                resolve(candidates)
                innermost = [
                    candidate
                    for candidate in candidates
                    if not any(
                        parents.get(other) == candidate
                        for other in candidates
                        if other != candidate
                    )
                ]
                if len(innermost) == 1:
                    parents[idx] = innermost[0]
                else:
                    pool = innermost or candidates
                    chosen = min(pool, key=lambda i: (sizes[i], i))
                    parents[idx] = chosen
                    diagnostics.append(
                        Diagnostic(
                            DiagnosticCode.AMBIGUOUS_CONTAINMENT,
                            f"ring {idx} has {len(innermost)} innermost containers "
                            f"among {candidates}, chose {chosen}",
                        )
                    )

    resolve(list(range(len(rings))))

    forest = ContainmentForest(
        rings=list(rings),
        parents=[parents[idx] for idx in range(len(rings))],
    )
    return forest, diagnostics


def rings_to_polygons(rings: Sequence[Ring]) -> list[Polygon]:
    """Convenience wrapper: build the forest and return its polygons."""
    forest, _ = build_forest(rings)
    return forest.to_polygons()
