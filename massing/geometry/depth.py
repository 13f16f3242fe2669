"""Building depth checks against a maximum permitted depth.

Depth is measured either as the footprint's largest ground dimension or,
when a road/frontage line is supplied, as the farthest distance of any
part of the footprint from that line.
"""

import logging
import math

import numpy as np
import shapely
from shapely.geometry import LineString, MultiLineString, Polygon
from shapely.geometry.base import BaseGeometry

from ..models.site import RoadBoundary
from .geodesy import LocalFrame, LonLat, point_to_line_distance
from .polygon_ops import Coords, PolygonLike, ground_dimensions, polygon_parts

logger = logging.getLogger(__name__)

# Interior sampling spacing in meters
DEPTH_SAMPLE_SPACING = 2.0

RoadLike = RoadBoundary | LineString | MultiLineString


def _as_line(road: RoadLike | None) -> BaseGeometry | None:
    if road is None:
        return None
    if isinstance(road, RoadBoundary):
        return road.to_shapely()
    if isinstance(road, (LineString, MultiLineString)):
        return road
    return None


def distance_to_road_boundary(point: LonLat | None, road: RoadLike | None) -> float:
    """Ground distance (m) from a lon/lat point to the road boundary.

    Returns inf when either input is missing, the road is not a line, or
    the computation fails.
    """
    line = _as_line(road)
    if line is None or point is None:
        return math.inf

    try:
        return point_to_line_distance(point, line)
    except Exception as e:
        logger.error(f"Error calculating distance to road boundary: {e}")
        return math.inf


def sample_interior_points(local_polygon: BaseGeometry, spacing: float = DEPTH_SAMPLE_SPACING) -> np.ndarray:
    """Regular grid of points inside a polygon given in a metric frame.

    Args:
        local_polygon: Polygon or MultiPolygon in meters
        spacing: Grid spacing in meters

    Returns:
        (N, 2) array of interior points (N may be 0)
    """
    min_x, min_y, max_x, max_y = local_polygon.bounds
    xs = np.arange(min_x, max_x + 1e-9, spacing)
    ys = np.arange(min_y, max_y + 1e-9, spacing)
    if xs.size == 0 or ys.size == 0:
        return np.empty((0, 2))

    grid_x, grid_y = np.meshgrid(xs, ys)
    grid_x = grid_x.ravel()
    grid_y = grid_y.ravel()
    inside = shapely.contains_xy(local_polygon, grid_x, grid_y)
    return np.column_stack([grid_x[inside], grid_y[inside]])


def exceeds_max_depth(
    footprint: Coords | PolygonLike,
    max_depth: float,
    road_boundary: RoadLike | None = None,
) -> bool:
    """Check whether a footprint extends beyond the maximum building depth.

    Args:
        footprint: Footprint ring or polygon in lon/lat
        max_depth: Maximum permitted depth in meters
        road_boundary: Optional frontage line depth is measured from

    Returns:
        True if the footprint is too deep. Errors are logged and treated
        as not exceeding.
    """
    if footprint is None:
        return False
    if not isinstance(footprint, BaseGeometry) and len(footprint) == 0:
        return False

    try:
        polygon = footprint if isinstance(footprint, BaseGeometry) else Polygon(footprint)
        if polygon.is_empty:
            return False

        road = _as_line(road_boundary)
        if road is None:
            _, _, max_dimension = ground_dimensions(polygon)
            return max_dimension > max_depth

        frame = LocalFrame.for_geometry(polygon)
        samples = sample_interior_points(frame.to_local(polygon))

        if samples.shape[0] == 0:
            # Too small for the grid, fall back to the vertices
            for part in polygon_parts(polygon):
                for vertex in part.exterior.coords:
                    if distance_to_road_boundary(vertex, road) > max_depth:
                        return True
            return False

        local_road = frame.to_local(road)
        distances = shapely.distance(shapely.points(samples), local_road)
        return bool(np.any(distances > max_depth))
    except Exception as e:
        logger.error(f"Error checking building depth from road: {e}")
        return False
