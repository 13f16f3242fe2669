"""Multi-building placement on a circular layout.

Buildings start evenly spaced on a circle around the site's visual center.
Pairs closer than the minimum separation are pushed apart, the building
count is reduced when that fails, and positions outside the developable
area are pulled back inside. Every loop is bounded, and the solver returns
best-effort placements instead of raising.
"""

import logging
import math
from dataclasses import dataclass, field, replace

from ..geometry.clearance import SeparationViolation, are_too_close, check_separation_violations
from ..geometry.containment import check_point_in_area, pull_point_inside
from ..geometry.geodesy import LonLat, bearing, destination, ground_distance
from ..geometry.polygon_ops import PolygonLike

logger = logging.getLogger(__name__)

MAX_BUILDINGS = 8
MIN_BUILDINGS = 2

# Divisor for the aspect-ratio-derived building count
ASPECT_RATIO_PER_BUILDING = 3.0

# Per-building scale reduction when depth is the constraint
DEPTH_SCALE_WHEN_UNDER_SPLIT = 0.8
DEPTH_SCALE_DEFAULT = 0.6


@dataclass
class PlacementSolverConfig:
    """Iteration limits for the placement solver."""

    # Separation repair passes
    max_repair_passes: int = 10

    # Extra distance added to each repair move (meters)
    repair_buffer: float = 0.5

    # Repair/contain/reduce rounds (one building can be dropped per round)
    max_rounds: int = MAX_BUILDINGS


@dataclass
class BuildingPlacement:
    """Transient position of one building during placement."""

    index: int
    angle: float  # Radians, counter-clockwise from east
    position: LonLat
    scale_factor: float


@dataclass
class PlacementResult:
    """Result from the placement solver."""

    placements: list[BuildingPlacement]
    center: LonLat
    initial_count: int
    repair_passes: int = 0
    reductions: int = 0
    residual_violations: list[SeparationViolation] = field(default_factory=list)

    @property
    def building_count(self) -> int:
        return len(self.placements)

    @property
    def is_fully_separated(self) -> bool:
        return not self.residual_violations


def depth_based_count(max_dimension: float, max_depth: float, depth_limited: bool) -> int:
    """Buildings needed so none is deeper than the maximum depth."""
    if not depth_limited or max_depth <= 0:
        return 1
    return max(1, math.ceil(max_dimension / max_depth))


def compute_building_count(
    aspect_ratio: float,
    max_dimension: float,
    site_diameter: float,
    max_depth: float,
    min_separation: float,
    aspect_limited: bool,
    depth_limited: bool,
) -> int:
    """Number of buildings for a multi-building layout.

    The count needed to fix the aspect ratio or depth is raised to at least
    two, then capped by how many buildings of maximum depth plus separation
    fit across the site, and by eight.

    Args:
        aspect_ratio: Footprint aspect ratio
        max_dimension: Largest footprint ground dimension (m)
        site_diameter: Largest developable-area ground dimension (m)
        max_depth: Maximum building depth (m)
        min_separation: Minimum building separation (m)
        aspect_limited: Aspect ratio triggered the split
        depth_limited: Depth triggered the split

    Returns:
        Building count; below two means the site cannot hold separate buildings
    """
    by_aspect = math.ceil(aspect_ratio / ASPECT_RATIO_PER_BUILDING) if aspect_limited else 1
    desired = max(by_aspect, depth_based_count(max_dimension, max_depth, depth_limited))

    site_capacity = max(1, math.floor(site_diameter / (max_depth + min_separation)))
    return min(max(desired, MIN_BUILDINGS), site_capacity, MAX_BUILDINGS)


def building_scale_factor(count: int, depth_limited: bool, depth_count: int) -> float:
    """Linear scale of each building relative to the combined footprint.

    Buildings share the footprint area equally; depth-limited layouts use
    narrower buildings.
    """
    base = 1 / math.sqrt(count)
    if not depth_limited:
        return base
    return base * (DEPTH_SCALE_WHEN_UNDER_SPLIT if depth_count > count else DEPTH_SCALE_DEFAULT)


def placement_radius(site_diameter: float, min_separation: float, count: int) -> float:
    """Circle radius that spreads buildings across the site at the minimum separation."""
    if count < 2:
        return 0.0
    return max(site_diameter / 4, min_separation / (2 * math.sin(math.pi / count)))


def initial_placements(
    center: LonLat,
    count: int,
    radius: float,
    scale_factor: float,
) -> list[BuildingPlacement]:
    """Evenly space buildings on a circle around the center."""
    placements = []
    for i in range(count):
        angle = 2 * math.pi * i / count
        # Counter-clockwise from east -> compass bearing
        heading = 90.0 - math.degrees(angle)
        placements.append(BuildingPlacement(
            index=i,
            angle=angle,
            position=destination(center, radius, heading),
            scale_factor=scale_factor,
        ))
    return placements


def has_separation_violation(placements: list[BuildingPlacement], min_separation: float) -> bool:
    positions = [p.position for p in placements]
    return bool(check_separation_violations(positions, min_separation))


def repair_separation(
    placements: list[BuildingPlacement],
    min_separation: float,
    max_passes: int = 10,
    buffer: float = 0.5,
) -> tuple[list[BuildingPlacement], int]:
    """Push apart pairs of buildings that are too close.

    Each violating pair moves in opposite directions along its connecting
    bearing by half the deficit plus a buffer. Stops early once a pass
    makes no change.

    Args:
        placements: Current placements (not modified)
        min_separation: Required separation (m)
        max_passes: Pass limit
        buffer: Extra distance per move (m)

    Returns:
        Tuple of (repaired placements, passes run)
    """
    repaired = [replace(p) for p in placements]
    passes = 0

    for _ in range(max_passes):
        passes += 1
        adjusted = False

        for i in range(len(repaired)):
            for j in range(i + 1, len(repaired)):
                p1 = repaired[i].position
                p2 = repaired[j].position
                if not are_too_close(p1, p2, min_separation):
                    continue

                heading = bearing(p1, p2)
                deficit = min_separation - ground_distance(p1, p2)
                step = deficit / 2 + buffer

                repaired[i].position = destination(p1, step, heading - 180)
                repaired[j].position = destination(p2, step, heading)
                adjusted = True

        if not adjusted:
            break

    return repaired, passes


def reduce_building_count(placements: list[BuildingPlacement]) -> list[BuildingPlacement]:
    """Drop the last placement, never going below two buildings."""
    if len(placements) <= MIN_BUILDINGS:
        return list(placements)
    logger.info(
        f"Reducing building count from {len(placements)} to {len(placements) - 1} "
        f"due to spacing constraints"
    )
    return list(placements[:-1])


def correct_containment(
    placements: list[BuildingPlacement],
    center: LonLat,
    area: PolygonLike,
) -> list[BuildingPlacement]:
    """Pull any placement outside the developable area back inside."""
    corrected = []
    for p in placements:
        if check_point_in_area(p.position, area):
            corrected.append(p)
            continue
        logger.debug(f"Building {p.index} outside developable area, adjusting position")
        corrected.append(replace(p, position=pull_point_inside(p.position, center, area)))
    return corrected


def solve_placements(
    placements: list[BuildingPlacement],
    center: LonLat,
    area: PolygonLike,
    min_separation: float,
    config: PlacementSolverConfig | None = None,
) -> PlacementResult:
    """Repair separation, reduce the count if needed, and clamp into the area.

    Each round repairs separation, pulls stray placements back inside the
    area, and drops the last building if a pair is still too close. Rounds
    stop once every pair is separated or only two buildings remain. With
    two buildings left, remaining violations are reported, not fixed.

    Args:
        placements: Initial placements
        center: Layout center, normally inside the area
        area: Developable area polygon
        min_separation: Required separation (m)
        config: Iteration limits

    Returns:
        PlacementResult with final placements and solver statistics
    """
    config = config or PlacementSolverConfig()
    result = PlacementResult(
        placements=list(placements),
        center=center,
        initial_count=len(placements),
    )

    current = list(placements)
    for round_num in range(config.max_rounds):
        current, passes = repair_separation(
            current, min_separation, config.max_repair_passes, config.repair_buffer
        )
        result.repair_passes += passes
        current = correct_containment(current, center, area)

        if not has_separation_violation(current, min_separation):
            break
        if len(current) <= MIN_BUILDINGS:
            break

        current = reduce_building_count(current)
        result.reductions += 1
        logger.debug(f"Placement round {round_num + 1} left violations, retrying")

    result.placements = current
    result.residual_violations = check_separation_violations(
        [p.position for p in current], min_separation
    )
    for violation in result.residual_violations:
        logger.info(f"{violation} after placement adjustments")

    return result
