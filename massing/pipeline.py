"""Building massing pipeline.

Turns a developable area and site parameters into a BuildingConfig:
1. Scale the developable area down to the site-efficiency footprint
2. Measure aspect ratio and building depth
3. Decide between one building and several
4. Place, size and clip multiple buildings, or keep a single one
5. Split tall buildings into base and stepped-back top sections

Degenerate input anywhere in the pipeline yields None rather than a
partial result.
"""

import logging
import math
import time
import uuid
from typing import Any, Dict, Optional, Union

from shapely.geometry.base import BaseGeometry

from .export.geojson import config_to_geojson
from .geometry.containment import clip_to_area
from .geometry.depth import exceeds_max_depth
from .geometry.geodesy import GeometryComputationError, geodesic_area
from .geometry.polygon_ops import (
    PolygonLike,
    aspect_ratio,
    ground_dimensions,
    largest_part,
    scale_polygon,
    translate_polygon,
)
from .geometry.visual_center import find_visual_center
from .models.building import BuildingConfig, BuildingSection
from .models.parameters import SiteParameters
from .models.site import DevelopableArea
from .rules.loader import load_ruleset
from .solver.decision import MassingDecision, decide_massing
from .solver.placement import (
    PlacementSolverConfig,
    building_scale_factor,
    compute_building_count,
    depth_based_count,
    initial_placements,
    placement_radius,
    solve_placements,
)
from .solver.setback import compose_sections
from .tools.massing_tools import MassingRequest, MassingResponse, SectionSummary

logger = logging.getLogger(__name__)

AreaInput = Union[DevelopableArea, Dict[str, Any], BaseGeometry]

# Smaller areas are treated as degenerate (m²)
MIN_DEVELOPABLE_AREA = 1.0


def generate_building_footprint(
    area: PolygonLike,
    efficiency_ratio: float,
) -> Optional[PolygonLike]:
    """Shrink the developable area to the site-efficiency footprint.

    Each part is scaled about its visual center by sqrt(efficiency_ratio),
    so the footprint covers that fraction of a convex area. Concave areas
    can push the scaled outline past the boundary; those footprints are
    clipped back to the area, keeping every piece that remains.

    Args:
        area: Developable area in lon/lat
        efficiency_ratio: Target coverage in (0, 1]

    Returns:
        Footprint geometry inside the area, or None for empty input
    """
    if area is None or area.is_empty:
        return None
    footprint = scale_polygon(area, math.sqrt(efficiency_ratio))
    return clip_to_area(footprint, area, keep_all_parts=True)


def _coerce_area(developable_area: AreaInput) -> PolygonLike:
    if isinstance(developable_area, BaseGeometry):
        return developable_area
    if isinstance(developable_area, dict):
        developable_area = DevelopableArea.from_geojson(developable_area)
    return developable_area.to_shapely()


def _coerce_parameters(parameters: Union[SiteParameters, Dict[str, Any], None]) -> SiteParameters:
    if parameters is None:
        return SiteParameters()
    if isinstance(parameters, dict):
        return SiteParameters().merge_override(parameters)
    return parameters


def calculate_building_config(
    developable_area: AreaInput,
    parameters: Union[SiteParameters, Dict[str, Any], None] = None,
    solver_config: Optional[PlacementSolverConfig] = None,
) -> Optional[BuildingConfig]:
    """Compute the building massing for a developable area.

    Args:
        developable_area: DevelopableArea, GeoJSON dict or Shapely geometry
        parameters: SiteParameters, a dict of overrides on the defaults, or None
        solver_config: Optional placement solver limits

    Returns:
        BuildingConfig, or None if massing is unavailable for the input
    """
    start_time = time.time()

    try:
        area = _coerce_area(developable_area)
        params = _coerce_parameters(parameters)
    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid massing input: {e}")
        return None

    if area is None or area.is_empty or geodesic_area(area) < MIN_DEVELOPABLE_AREA:
        logger.info("Developable area has no area, no massing generated")
        return None

    max_floors = params.max_floors_from_height
    if max_floors < 1:
        logger.info(
            f"Height limit {params.max_building_height}m is below one floor "
            f"({params.floor_to_floor_height}m), no massing generated"
        )
        return None

    try:
        config = _assemble(area, params, max_floors, solver_config)
    except (GeometryComputationError, ValueError) as e:
        logger.warning(f"Massing failed on degenerate geometry: {e}")
        return None
    except Exception as e:
        logger.error(f"Unexpected error computing massing: {e}", exc_info=True)
        return None

    if config is not None:
        logger.info(
            f"Massing: {config.building_count} building(s), {len(config.sections)} section(s), "
            f"max height {config.max_building_height:.1f}m "
            f"in {time.time() - start_time:.3f}s"
        )
    return config


def _assemble(
    area: PolygonLike,
    params: SiteParameters,
    max_floors: int,
    solver_config: Optional[PlacementSolverConfig],
) -> Optional[BuildingConfig]:
    footprint = generate_building_footprint(area, params.site_efficiency_ratio)
    footprint_area = geodesic_area(footprint) if footprint is not None else 0.0
    if footprint_area <= 0:
        logger.info("Building footprint has no area, no massing generated")
        return None

    width, height, max_dimension = ground_dimensions(footprint)
    ratio = aspect_ratio(width, height)
    depth_exceeded = exceeds_max_depth(
        footprint, params.max_building_depth, params.road_boundary
    )
    decision = decide_massing(ratio, max_floors, depth_exceeded)

    logger.debug(
        f"Footprint {footprint_area:.1f}m², {width:.1f}m x {height:.1f}m, "
        f"aspect ratio {ratio:.2f}, depth exceeded: {depth_exceeded}"
    )

    if decision.use_multiple_buildings:
        _, _, site_diameter = ground_dimensions(largest_part(area))
        count = compute_building_count(
            aspect_ratio=ratio,
            max_dimension=max_dimension,
            site_diameter=site_diameter,
            max_depth=params.max_building_depth,
            min_separation=params.min_building_separation,
            aspect_limited=decision.aspect_limited,
            depth_limited=decision.depth_limited,
        )
        if count >= 2:
            logger.info(
                f"Using {count} buildings ({', '.join(decision.reasons)})"
            )
            return _assemble_multiple(
                area, footprint, params, decision, count,
                max_floors, site_diameter, max_dimension, solver_config,
            )
        logger.info("Site too small for separate buildings, massing as a single building")

    return _assemble_single(footprint, footprint_area, params, decision, max_floors)


def _assemble_single(
    footprint: PolygonLike,
    footprint_area: float,
    params: SiteParameters,
    decision: MassingDecision,
    max_floors: int,
) -> BuildingConfig:
    floors = decision.single_building_floors
    sections = compose_sections(
        footprint, floors, params.floor_to_floor_height, params.gba_to_gfa_ratio
    )
    return BuildingConfig(
        building_count=1,
        sections=sections,
        is_single_building=True,
        height_limit=params.max_building_height,
        calculated_gfa=floors * footprint_area * params.gba_to_gfa_ratio,
        max_building_height=max(s.top_height for s in sections),
        depth_limited=decision.depth_limited,
        max_allowed_floors=max_floors,
    )


def _assemble_multiple(
    area: PolygonLike,
    footprint: PolygonLike,
    params: SiteParameters,
    decision: MassingDecision,
    count: int,
    max_floors: int,
    site_diameter: float,
    max_dimension: float,
    solver_config: Optional[PlacementSolverConfig],
) -> Optional[BuildingConfig]:
    # Placement runs on the largest part of a multi-part area
    placement_area = largest_part(area)
    base_footprint = largest_part(footprint)
    if placement_area is None or base_footprint is None:
        return None

    footprint_area = geodesic_area(footprint)
    max_gfa = max_floors * footprint_area * params.gba_to_gfa_ratio

    center = find_visual_center(placement_area)
    scale = building_scale_factor(
        count,
        decision.depth_limited,
        depth_based_count(max_dimension, params.max_building_depth, decision.depth_limited),
    )
    radius = placement_radius(site_diameter, params.min_building_separation, count)

    result = solve_placements(
        initial_placements(center, count, radius, scale),
        center,
        placement_area,
        params.min_building_separation,
        solver_config,
    )
    final_count = result.building_count

    sections: list[BuildingSection] = []
    tallest = 0.0
    for placement in result.placements:
        offset = (
            placement.position[0] - center[0],
            placement.position[1] - center[1],
        )
        building = translate_polygon(
            scale_polygon(base_footprint, placement.scale_factor, center), offset
        )
        building = clip_to_area(building, placement_area)
        building_area = geodesic_area(building)
        if building_area <= 0:
            logger.warning(
                f"Building {placement.index + 1} has no footprint inside the area, skipped"
            )
            continue

        building_index = len({s.building_index for s in sections}) + 1
        gfa_target = max_gfa / final_count / params.gba_to_gfa_ratio
        floors = min(math.ceil(gfa_target / building_area), max_floors)

        building_sections = compose_sections(
            building,
            floors,
            params.floor_to_floor_height,
            params.gba_to_gfa_ratio,
            building_index=building_index,
        )
        tallest = max(tallest, max(s.top_height for s in building_sections))
        sections.extend(building_sections)

    if not sections:
        logger.warning("No buildings could be placed inside the developable area")
        return None

    building_count = len({s.building_index for s in sections})
    return BuildingConfig(
        building_count=building_count,
        sections=sections,
        is_single_building=building_count == 1,
        height_limit=params.max_building_height,
        calculated_gfa=max_gfa,
        max_building_height=tallest,
        depth_limited=decision.depth_limited,
        max_allowed_floors=max_floors,
    )


def generate_massing(request: MassingRequest) -> MassingResponse:
    """Run massing for an MCP request.

    Loads the requested ruleset, applies overrides and the road boundary,
    and packages the result with optional GeoJSON.

    Args:
        request: MassingRequest

    Returns:
        MassingResponse; status "unavailable" when no massing fits the input

    Raises:
        FileNotFoundError: If the ruleset doesn't exist
    """
    job_id = str(uuid.uuid4())[:8]
    start_time = time.time()

    override = dict(request.parameters_override or {})
    if request.road_boundary is not None:
        override["road_boundary"] = request.road_boundary
    params = load_ruleset(request.ruleset, override or None)

    area = DevelopableArea.from_geojson(request.developable_area)
    config = calculate_building_config(area, params)
    elapsed = time.time() - start_time
    logger.info(f"[{job_id}] Massing with ruleset '{request.ruleset}' in {elapsed:.3f}s")

    statistics = {
        "job_id": job_id,
        "elapsed_seconds": round(elapsed, 3),
        "developable_area_m2": geodesic_area(area.to_shapely()),
        "parameters": params.model_dump(mode="json", exclude_none=True),
    }

    if config is None:
        return MassingResponse(
            status="unavailable",
            message="No massing could be generated for this developable area",
            ruleset=request.ruleset,
            statistics=statistics,
        )

    geojson = None
    if request.include_geojson:
        geojson, _ = config_to_geojson(
            config, developable_area=area, include_labels=request.include_labels
        )

    return MassingResponse(
        status="completed",
        ruleset=request.ruleset,
        building_count=config.building_count,
        is_single_building=config.is_single_building,
        height_limit=config.height_limit,
        max_building_height=config.max_building_height,
        max_allowed_floors=config.max_allowed_floors,
        calculated_gfa=config.calculated_gfa,
        total_gfa=config.total_gfa,
        depth_limited=config.depth_limited,
        sections=[
            SectionSummary(
                building_index=s.building_index,
                floors=s.floors,
                height=s.height,
                base_height=s.base_height_offset,
                footprint_area=s.footprint_area,
                gfa=s.gfa,
                is_base_section=s.is_base_section,
                is_top_of_stack=s.is_top_of_stack,
            )
            for s in config.sections
        ],
        geojson=geojson,
        statistics=statistics,
    )
