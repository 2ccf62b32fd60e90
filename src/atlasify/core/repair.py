"""Repair of self-intersecting rings via planar subdivision.

A ring that crosses itself bounds several lobes. Noding the ring's linework
and polygonizing it yields those lobes as simple faces, which are then either
unioned (repair) or reduced to the largest one (unloop).
"""

from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import polygonize, unary_union

from atlasify.domain import Ring


def _faces(coords: list[tuple[float, float]]) -> list[Polygon]:
    """Simple faces implied by a closed line's self-intersections."""
    line = LineString(coords)
    # Union with a point on the line forces noding at every crossing
    noded = line.union(Point(coords[0]))
    lines = [
        part
        for part in getattr(noded, "geoms", [noded])
        if part.geom_type in ("LineString", "LinearRing")
    ]
    return [face for face in polygonize(lines) if not face.is_empty]


def clean_ring(coords: list[tuple[float, float]]) -> BaseGeometry:
    """Union of all faces bounded by a possibly self-intersecting ring."""
    faces = _faces(coords)
    if not faces:
        return Polygon()
    return unary_union(faces)


def repair(polygon: Polygon) -> BaseGeometry:
    """Remove self-intersections from a polygon.

    Valid polygons are returned unchanged. Otherwise the shell and every hole
    are cleaned independently; the result is the cleaned shell minus each
    cleaned hole, in hole order.

    Args:
        polygon: Polygon whose rings may cross themselves

    Returns:
        Polygon or MultiPolygon covering the repaired area
    """
    if polygon.is_valid:
        return polygon

    result = clean_ring(list(polygon.exterior.coords))
    for interior in polygon.interiors:
        result = result.difference(clean_ring(list(interior.coords)))
    return result


def is_simple_ring(ring: Ring) -> bool:
    """Check if a ring does not cross or touch itself."""
    return LineString(ring.coords()).is_simple


def unloop(ring: Ring) -> Ring:
    """Collapse a self-crossing ring to the outline of its largest face.

    Rings that yield no face (collinear or otherwise degenerate) are
    returned unchanged.
    """
    if ring.is_degenerate():
        return ring

    faces = _faces(ring.coords())
    if not faces:
        return ring

    largest = max(faces, key=lambda face: face.area)
    return Ring.from_coords(largest.exterior.coords)
