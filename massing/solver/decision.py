"""Single- vs multi-building massing decision."""

from dataclasses import dataclass

# Footprints more elongated than this are split into several buildings
MAX_ASPECT_RATIO = 3.0

# Tallest single building before the height budget is spread across buildings
MAX_SINGLE_BUILDING_FLOORS = 30


@dataclass(frozen=True)
class MassingDecision:
    """Outcome of the massing decision and the constraints that drove it."""

    use_multiple_buildings: bool
    aspect_limited: bool
    height_limited: bool
    depth_limited: bool
    single_building_floors: int

    @property
    def reasons(self) -> list[str]:
        reasons = []
        if self.aspect_limited:
            reasons.append("aspect_ratio")
        if self.height_limited:
            reasons.append("floor_count")
        if self.depth_limited:
            reasons.append("building_depth")
        return reasons


def decide_massing(
    aspect_ratio: float,
    implied_floors: int,
    depth_exceeded: bool,
) -> MassingDecision:
    """Choose between one building and several.

    Multiple buildings are used when the footprint is too elongated, the
    height limit implies more than 30 floors, or the footprint is too deep.
    A single building is capped at 30 floors whatever the height budget.

    Args:
        aspect_ratio: Longer over shorter footprint dimension
        implied_floors: Floors permitted by the height limit
        depth_exceeded: Result of the depth check

    Returns:
        MassingDecision
    """
    aspect_limited = aspect_ratio > MAX_ASPECT_RATIO
    height_limited = implied_floors > MAX_SINGLE_BUILDING_FLOORS

    return MassingDecision(
        use_multiple_buildings=aspect_limited or height_limited or depth_exceeded,
        aspect_limited=aspect_limited,
        height_limited=height_limited,
        depth_limited=depth_exceeded,
        single_building_floors=min(implied_floors, MAX_SINGLE_BUILDING_FLOORS),
    )
