"""Polygon operations on lon/lat footprints using Shapely.

Provides ring scaling about a center point, ground-measured dimensions and
areas, and helpers for splitting multi-part developable areas.
"""

from __future__ import annotations

import logging
import math

from shapely import affinity
from shapely.geometry import MultiPolygon, Polygon

from .geodesy import LonLat, geodesic_area, ground_distance
from .visual_center import find_visual_center

logger = logging.getLogger(__name__)

# Type aliases
Coords = list[tuple[float, float]]
PolygonLike = Polygon | MultiPolygon


def polygon_to_coords(polygon: Polygon) -> Coords:
    """Extract exterior coordinates from Shapely Polygon.

    Args:
        polygon: Shapely Polygon

    Returns:
        List of (lon, lat) tuples (closed ring)
    """
    return list(polygon.exterior.coords)


def polygon_parts(geometry: PolygonLike | None) -> list[Polygon]:
    """Split a polygon-like geometry into its non-empty polygon parts."""
    if geometry is None or geometry.is_empty:
        return []
    if isinstance(geometry, Polygon):
        return [geometry]
    if isinstance(geometry, MultiPolygon):
        return [p for p in geometry.geoms if not p.is_empty]
    # GeometryCollection from an intersection
    return [
        g for g in getattr(geometry, "geoms", [])
        if isinstance(g, Polygon) and not g.is_empty
    ]


def largest_part(geometry: PolygonLike | None) -> Polygon | None:
    """Get the part with the largest ground area, or None if there is none."""
    parts = polygon_parts(geometry)
    if not parts:
        return None
    return max(parts, key=geodesic_area)


def scale_ring(ring: Coords, center: LonLat, scale_factor: float) -> Coords:
    """Scale every vertex of a ring toward (or away from) a center point.

    Each vertex becomes ``center + (vertex - center) * scale_factor``, so the
    enclosed area scales by ``scale_factor ** 2``.

    Args:
        ring: Ring coordinates (open or closed)
        center: (lon, lat) fixed point of the scaling
        scale_factor: Linear scale factor, must be positive

    Returns:
        New ring with the same number of vertices

    Raises:
        ValueError: If scale_factor is not positive
    """
    if scale_factor <= 0:
        raise ValueError(f"Scale factor must be positive, got {scale_factor}")

    cx, cy = center
    return [
        (cx + (x - cx) * scale_factor, cy + (y - cy) * scale_factor)
        for x, y in ring
    ]


def scale_polygon(
    geometry: PolygonLike,
    scale_factor: float,
    center: LonLat | None = None,
) -> PolygonLike:
    """Scale a polygon or multipolygon about a center.

    Without an explicit center each part is scaled about its own visual
    center, which keeps every part inside its original outline for
    convex shapes.

    Args:
        geometry: Polygon or MultiPolygon in lon/lat
        scale_factor: Linear scale factor, must be positive
        center: Optional shared (lon, lat) center for all parts

    Returns:
        Scaled geometry of the same type
    """
    def _scale_part(part: Polygon) -> Polygon:
        part_center = center or find_visual_center(part)
        exterior = scale_ring(list(part.exterior.coords), part_center, scale_factor)
        holes = [
            scale_ring(list(interior.coords), part_center, scale_factor)
            for interior in part.interiors
        ]
        return Polygon(exterior, holes)

    if isinstance(geometry, MultiPolygon):
        return MultiPolygon([_scale_part(p) for p in geometry.geoms])
    return _scale_part(geometry)


def translate_polygon(geometry: PolygonLike, offset: tuple[float, float]) -> PolygonLike:
    """Shift a geometry by a (d_lon, d_lat) offset."""
    return affinity.translate(geometry, xoff=offset[0], yoff=offset[1])


def ground_dimensions(geometry: PolygonLike) -> tuple[float, float, float]:
    """Measure the bounding box of a lon/lat geometry on the ground.

    Width is the west-east distance across the middle of the box, height
    the south-north distance.

    Returns:
        Tuple of (width_m, height_m, max_dimension_m); zeros on failure
    """
    try:
        min_x, min_y, max_x, max_y = geometry.bounds
        mid_x = (min_x + max_x) / 2
        mid_y = (min_y + max_y) / 2
        width = ground_distance((min_x, mid_y), (max_x, mid_y))
        height = ground_distance((mid_x, min_y), (mid_x, max_y))
    except Exception as e:
        logger.error(f"Error calculating polygon dimensions: {e}")
        return (0.0, 0.0, 0.0)

    return (width, height, max(width, height))


def aspect_ratio(width: float, height: float) -> float:
    """Ratio of the longer to the shorter side (inf for a zero-width box)."""
    shorter = min(width, height)
    if shorter <= 0:
        return math.inf
    return max(width, height) / shorter


def calculate_building_height(
    gfa: float,
    footprint_area: float,
    floor_to_floor_height: float,
) -> float:
    """Height needed to deliver a GFA on a footprint.

    Args:
        gfa: Target gross floor area (m^2)
        footprint_area: Footprint area (m^2)
        floor_to_floor_height: Storey height (m)

    Returns:
        ceil(gfa / footprint_area) * floor_to_floor_height, or 0 without a footprint
    """
    if not footprint_area:
        return 0.0
    floors = math.ceil(gfa / footprint_area)
    return floors * floor_to_floor_height
