"""Step-back composition of building sections.

Buildings taller than the threshold are split into a base section and a
top section whose footprint is pulled in by a uniform scale.
"""

import logging

from shapely.geometry import MultiPolygon, Polygon, mapping

from ..geometry.geodesy import geodesic_area
from ..geometry.polygon_ops import PolygonLike, polygon_parts, scale_ring
from ..models.building import BuildingSection

logger = logging.getLogger(__name__)

# Floors in the base section before the building steps back
SETBACK_FLOOR_THRESHOLD = 4

# Linear scale of the top footprint relative to the base
SETBACK_SCALE_FACTOR = 0.85

HEIGHT_PRECISION = 6


def create_setback_footprint(
    footprint: PolygonLike,
    scale_factor: float = SETBACK_SCALE_FACTOR,
) -> PolygonLike:
    """Scale each part of a footprint about its own centroid.

    Args:
        footprint: Base footprint in lon/lat
        scale_factor: Linear scale applied to every ring

    Returns:
        Reduced footprint of the same type
    """
    scaled = []
    for part in polygon_parts(footprint):
        centroid = part.centroid
        center = (centroid.x, centroid.y)
        exterior = scale_ring(list(part.exterior.coords), center, scale_factor)
        holes = [scale_ring(list(r.coords), center, scale_factor) for r in part.interiors]
        scaled.append(Polygon(exterior, holes))

    if isinstance(footprint, MultiPolygon):
        return MultiPolygon(scaled)
    return scaled[0]


def _section(
    footprint: PolygonLike,
    floors: int,
    floor_to_floor_height: float,
    gba_to_gfa_ratio: float,
    building_index: int,
    is_base_section: bool,
    is_top_of_stack: bool,
    base_height_offset: float,
) -> BuildingSection:
    area = geodesic_area(footprint)
    return BuildingSection(
        footprint=mapping(footprint),
        floors=floors,
        height=round(floors * floor_to_floor_height, HEIGHT_PRECISION),
        footprint_area=area,
        gfa=area * floors * gba_to_gfa_ratio,
        building_index=building_index,
        is_base_section=is_base_section,
        is_top_of_stack=is_top_of_stack,
        base_height_offset=round(base_height_offset, HEIGHT_PRECISION),
    )


def compose_sections(
    footprint: PolygonLike,
    floors: int,
    floor_to_floor_height: float,
    gba_to_gfa_ratio: float,
    building_index: int = 1,
) -> list[BuildingSection]:
    """Build the vertical sections of one building.

    Up to four floors the building is a single section. Above that it is a
    four-floor base plus a top section carrying the remaining floors on a
    footprint scaled by 0.85.

    Args:
        footprint: Building footprint in lon/lat
        floors: Total floors
        floor_to_floor_height: Storey height (m)
        gba_to_gfa_ratio: GBA to GFA efficiency
        building_index: 1-based building index shared by all sections

    Returns:
        One or two BuildingSection objects, base first

    Raises:
        ValueError: If floors < 1 or the footprint has no area
    """
    if floors < 1:
        raise ValueError(f"Building must have at least one floor, got {floors}")
    if footprint is None or footprint.is_empty or geodesic_area(footprint) <= 0:
        raise ValueError(f"Building {building_index} footprint has no area")

    if floors <= SETBACK_FLOOR_THRESHOLD:
        return [_section(
            footprint, floors, floor_to_floor_height, gba_to_gfa_ratio,
            building_index, is_base_section=True, is_top_of_stack=True,
            base_height_offset=0.0,
        )]

    base = _section(
        footprint, SETBACK_FLOOR_THRESHOLD, floor_to_floor_height, gba_to_gfa_ratio,
        building_index, is_base_section=True, is_top_of_stack=False,
        base_height_offset=0.0,
    )
    top = _section(
        create_setback_footprint(footprint),
        floors - SETBACK_FLOOR_THRESHOLD,
        floor_to_floor_height,
        gba_to_gfa_ratio,
        building_index,
        is_base_section=False,
        is_top_of_stack=True,
        base_height_offset=SETBACK_FLOOR_THRESHOLD * floor_to_floor_height,
    )
    logger.debug(
        f"Building {building_index}: {floors} floors split into "
        f"{base.floors}-floor base and {top.floors}-floor top"
    )
    return [base, top]
