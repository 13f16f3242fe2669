"""Containment checks for building footprints and positions within the developable area."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shapely.geometry import MultiPolygon, Point
from shapely.prepared import prep

from .geodesy import LonLat, bearing, destination, geodesic_area, ground_distance
from .polygon_ops import PolygonLike, largest_part, polygon_parts

logger = logging.getLogger(__name__)

# Bisection limits for pulling a position back inside the area
MAX_SEARCH_ITERATIONS = 10
SEARCH_TOLERANCE = 1.0  # meters
SAFETY_BUFFER = 2.0  # meters
INITIAL_SEARCH_FRACTION = 0.8


class ContainmentStatus(Enum):
    """Status of containment check."""
    FULLY_CONTAINED = "fully_contained"
    PARTIALLY_OUTSIDE = "partially_outside"
    FULLY_OUTSIDE = "fully_outside"
    INVALID_GEOMETRY = "invalid_geometry"


@dataclass
class ContainmentResult:
    """Result of a containment check."""

    status: ContainmentStatus
    overlap_ratio: float  # 0.0 to 1.0, fraction of footprint inside the area
    outside_area: float   # Ground area of footprint outside the area (m²)
    message: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """Check if footprint is valid (fully contained)."""
        return self.status == ContainmentStatus.FULLY_CONTAINED


def check_containment(
    footprint: PolygonLike,
    area: PolygonLike,
    tolerance: float = 0.01,
) -> ContainmentResult:
    """Check if a footprint is fully contained within the developable area.

    Args:
        footprint: Building footprint polygon (lon/lat)
        area: Developable area polygon (lon/lat)
        tolerance: Outside area (m²) still treated as contained

    Returns:
        ContainmentResult with status and metrics
    """
    if footprint is None or footprint.is_empty:
        return ContainmentResult(
            status=ContainmentStatus.INVALID_GEOMETRY,
            overlap_ratio=0.0,
            outside_area=0.0,
            message="Footprint geometry is empty",
        )

    if area is None or area.is_empty:
        return ContainmentResult(
            status=ContainmentStatus.INVALID_GEOMETRY,
            overlap_ratio=0.0,
            outside_area=geodesic_area(footprint),
            message="Developable area geometry is empty",
        )

    if not footprint.is_valid or not area.is_valid:
        return ContainmentResult(
            status=ContainmentStatus.INVALID_GEOMETRY,
            overlap_ratio=0.0,
            outside_area=0.0,
            message="Invalid geometry",
        )

    prepared_area = prep(area)

    if prepared_area.contains(footprint):
        return ContainmentResult(
            status=ContainmentStatus.FULLY_CONTAINED,
            overlap_ratio=1.0,
            outside_area=0.0,
        )

    footprint_area = geodesic_area(footprint)

    if not prepared_area.intersects(footprint):
        return ContainmentResult(
            status=ContainmentStatus.FULLY_OUTSIDE,
            overlap_ratio=0.0,
            outside_area=footprint_area,
        )

    intersection = footprint.intersection(area)
    overlap_area = geodesic_area(intersection)

    overlap_ratio = overlap_area / footprint_area if footprint_area > 0 else 0.0
    outside_area = max(footprint_area - overlap_area, 0.0)

    if outside_area < tolerance:
        return ContainmentResult(
            status=ContainmentStatus.FULLY_CONTAINED,
            overlap_ratio=1.0,
            outside_area=0.0,
        )

    return ContainmentResult(
        status=ContainmentStatus.PARTIALLY_OUTSIDE,
        overlap_ratio=overlap_ratio,
        outside_area=outside_area,
        message=f"Footprint {outside_area:.2f}m² outside developable area",
    )


def check_point_in_area(point: LonLat, area: PolygonLike | None) -> bool:
    """Quick check if a lon/lat point is within the developable area."""
    if area is None or area.is_empty:
        return False
    return area.contains(Point(point))


def clip_to_area(
    footprint: PolygonLike,
    area: PolygonLike,
    keep_all_parts: bool = False,
) -> PolygonLike:
    """Trim a footprint so it lies inside the developable area.

    Footprints already inside are returned unchanged. Otherwise only the
    largest polygon of the intersection is kept, unless ``keep_all_parts``
    is set, in which case every polygonal piece survives (as a
    MultiPolygon when there is more than one). An empty Polygon means
    nothing of the footprint was inside.
    """
    if check_containment(footprint, area).is_valid:
        return footprint

    intersection = footprint.intersection(area)
    if keep_all_parts:
        parts = polygon_parts(intersection)
        clipped = None
        if parts:
            clipped = parts[0] if len(parts) == 1 else MultiPolygon(parts)
    else:
        clipped = largest_part(intersection)

    if clipped is None:
        logger.warning("Footprint lies entirely outside the developable area")
        return type(footprint)()

    logger.debug(
        f"Clipped footprint to developable area "
        f"({geodesic_area(footprint):.1f}m² -> {geodesic_area(clipped):.1f}m²)"
    )
    return clipped


def _search_inside(
    point: LonLat,
    anchor: LonLat,
    area: PolygonLike,
    max_iterations: int,
    tolerance: float,
    safety_buffer: float,
) -> Optional[LonLat]:
    """Bisect along anchor→point for the farthest interior position."""
    heading = bearing(anchor, point)
    inside_dist = 0.0
    outside_dist = ground_distance(anchor, point)
    current = outside_dist * INITIAL_SEARCH_FRACTION

    for _ in range(max_iterations):
        candidate = destination(anchor, current, heading)
        if check_point_in_area(candidate, area):
            inside_dist = current
            current = (current + outside_dist) / 2
        else:
            outside_dist = current
            current = (inside_dist + current) / 2

        if outside_dist - inside_dist < tolerance:
            break

    final_dist = max(inside_dist - safety_buffer, 0.0)
    corrected = destination(anchor, final_dist, heading)
    if check_point_in_area(corrected, area):
        return corrected
    return None


def pull_point_inside(
    point: LonLat,
    center: LonLat,
    area: PolygonLike,
    max_iterations: int = MAX_SEARCH_ITERATIONS,
    tolerance: float = SEARCH_TOLERANCE,
    safety_buffer: float = SAFETY_BUFFER,
) -> LonLat:
    """Move an outside point back toward the center until it is inside the area.

    Bisects along the center→point line for the farthest interior distance
    (starting at 80% of the original distance), then steps a safety buffer
    further toward the center. Points already inside are returned unchanged.

    The result is always inside the area. When the line from the center
    finds nothing (the center itself may sit in a hole or outside a
    concave outline) the search is repeated from a representative point
    of the area, and that point is the last resort.

    Args:
        point: (lon, lat) position to correct
        center: (lon, lat) preferred interior reference point
        area: Developable area polygon
        max_iterations: Bisection iteration limit
        tolerance: Stop once the search bracket is narrower than this (m)
        safety_buffer: Extra pull toward the anchor (m), never past it

    Returns:
        Corrected (lon, lat) inside the area
    """
    if check_point_in_area(point, area):
        return point

    search = (max_iterations, tolerance, safety_buffer)
    corrected = _search_inside(point, center, area, *search)
    if corrected is not None:
        return corrected

    if check_point_in_area(center, area):
        logger.warning(f"Could not pull {point} inside developable area, using center")
        return center

    interior = area.representative_point()
    anchor = (interior.x, interior.y)
    logger.warning(f"Center {center} is outside the developable area, searching from {anchor}")
    corrected = _search_inside(point, anchor, area, *search)
    return corrected if corrected is not None else anchor
