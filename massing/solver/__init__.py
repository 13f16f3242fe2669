"""Massing decision, multi-building placement and step-back composition."""

from .decision import (
    MAX_ASPECT_RATIO,
    MAX_SINGLE_BUILDING_FLOORS,
    MassingDecision,
    decide_massing,
)
from .placement import (
    BuildingPlacement,
    PlacementResult,
    PlacementSolverConfig,
    building_scale_factor,
    compute_building_count,
    initial_placements,
    placement_radius,
    repair_separation,
    solve_placements,
)
from .setback import (
    SETBACK_FLOOR_THRESHOLD,
    SETBACK_SCALE_FACTOR,
    compose_sections,
    create_setback_footprint,
)

__all__ = [
    # Decision
    "MAX_ASPECT_RATIO",
    "MAX_SINGLE_BUILDING_FLOORS",
    "MassingDecision",
    "decide_massing",
    # Placement
    "BuildingPlacement",
    "PlacementResult",
    "PlacementSolverConfig",
    "building_scale_factor",
    "compute_building_count",
    "initial_placements",
    "placement_radius",
    "repair_separation",
    "solve_placements",
    # Step-backs
    "SETBACK_FLOOR_THRESHOLD",
    "SETBACK_SCALE_FACTOR",
    "compose_sections",
    "create_setback_footprint",
]
