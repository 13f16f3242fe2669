"""Visual center of a polygon.

A cheap local search for a point well inside a polygon: start from a
guaranteed-interior point and probe its eight compass neighbours once,
keeping any interior candidate that lies farther from the boundary. This
is a heuristic, not an exact pole-of-inaccessibility solver.

Holes count as boundary, so the result never lands inside a courtyard.
"""

import logging
from typing import Union

from shapely.geometry import LineString, Point, Polygon
from shapely.prepared import prep

from .geodesy import GeometryComputationError, LocalFrame, LonLat

logger = logging.getLogger(__name__)

# Probe step in degrees (~11m of latitude)
PROBE_STEP_DEG = 0.0001

COMPASS_OFFSETS = [
    (1, 0), (-1, 0), (0, 1), (0, -1),
    (1, 1), (-1, 1), (1, -1), (-1, -1),
]

Outline = Union[Polygon, list[LonLat]]


def _as_polygon(outline: Outline) -> Polygon:
    if isinstance(outline, Polygon):
        return outline
    return Polygon(outline)


def boundary_distance(point: LonLat, outline: Outline, frame: LocalFrame | None = None) -> float:
    """Minimum ground distance (m) from a point to an outline's edges.

    A Polygon outline includes its interior rings; a bare ring is treated
    as a single closed edge loop.
    """
    frame = frame or LocalFrame(point)
    if isinstance(outline, Polygon):
        edges = frame.to_local(outline.boundary)
    else:
        edges = LineString(frame.coords_to_local(outline))
    return Point(frame.point_to_local(*point)).distance(edges)


def find_visual_center(outline: Outline, step: float = PROBE_STEP_DEG) -> LonLat:
    """Find a point inside a polygon, away from its boundary and holes.

    Args:
        outline: Polygon (holes respected) or closed exterior ring as
            (lon, lat) tuples
        step: Probe step in degrees

    Returns:
        (lon, lat) of the chosen point. Falls back to the centroid, or to a
        representative point when the centroid falls outside, if the search
        cannot run.

    Raises:
        GeometryComputationError: If the polygon has no interior at all
    """
    polygon = _as_polygon(outline)
    try:
        if polygon.is_empty or polygon.area <= 0:
            raise GeometryComputationError("Outline encloses no area")

        start = polygon.representative_point()
        best = (start.x, start.y)

        frame = LocalFrame(best)
        best_distance = boundary_distance(best, polygon, frame)

        prepared = prep(polygon)
        for dx, dy in COMPASS_OFFSETS:
            candidate = (best[0] + dx * step, best[1] + dy * step)
            if not prepared.contains(Point(candidate)):
                continue
            distance = boundary_distance(candidate, polygon, frame)
            if distance > best_distance:
                best = candidate
                best_distance = distance

        return best
    except Exception as e:
        logger.warning(f"Error calculating visual center, falling back to centroid: {e}")
        return _interior_fallback(polygon)


def _interior_fallback(polygon: Polygon) -> LonLat:
    try:
        centroid = polygon.centroid
        if centroid.is_empty:
            raise GeometryComputationError("Outline has no centroid")
        if not polygon.contains(centroid):
            # Centroids of rings and concave outlines can sit outside
            centroid = polygon.representative_point()
    except GeometryComputationError:
        raise
    except Exception as e:
        raise GeometryComputationError(f"Centroid of outline failed: {e}") from e
    return (centroid.x, centroid.y)
