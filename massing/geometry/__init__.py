"""Geometry operations for building massing using Shapely and pyproj."""

from .clearance import (
    SeparationViolation,
    are_too_close,
    check_separation_violations,
    compute_pairwise_distances,
    get_minimum_separation,
)
from .containment import (
    ContainmentResult,
    ContainmentStatus,
    check_containment,
    check_point_in_area,
    clip_to_area,
    pull_point_inside,
)
from .depth import (
    distance_to_road_boundary,
    exceeds_max_depth,
)
from .geodesy import (
    GeometryComputationError,
    LocalFrame,
    bearing,
    destination,
    geodesic_area,
    ground_distance,
    point_to_line_distance,
)
from .polygon_ops import (
    calculate_building_height,
    ground_dimensions,
    largest_part,
    polygon_to_coords,
    scale_polygon,
    scale_ring,
)
from .visual_center import find_visual_center

__all__ = [
    # Geodesic primitives
    "GeometryComputationError",
    "LocalFrame",
    "bearing",
    "destination",
    "geodesic_area",
    "ground_distance",
    "point_to_line_distance",
    # Polygon operations
    "polygon_to_coords",
    "scale_ring",
    "scale_polygon",
    "largest_part",
    "ground_dimensions",
    "calculate_building_height",
    "find_visual_center",
    # Depth checks
    "exceeds_max_depth",
    "distance_to_road_boundary",
    # Containment checks
    "check_containment",
    "check_point_in_area",
    "clip_to_area",
    "pull_point_inside",
    "ContainmentResult",
    "ContainmentStatus",
    # Separation calculations
    "are_too_close",
    "compute_pairwise_distances",
    "check_separation_violations",
    "get_minimum_separation",
    "SeparationViolation",
]
