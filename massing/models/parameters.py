"""Site and planning parameters that drive building massing."""

import re
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .site import RoadBoundary


class SiteParameters(BaseModel):
    """Planning and site parameters for a massing run.

    Defaults follow common residential feasibility assumptions. Parameters
    can be overridden at request time via JSON merge patch. Both snake_case
    and camelCase field names are accepted on input.
    """

    site_efficiency_ratio: float = Field(
        default=0.6,
        gt=0.0,
        le=1.0,
        validation_alias=AliasChoices("site_efficiency_ratio", "siteEfficiencyRatio"),
        description="Proportion of the developable area covered by building footprint",
    )
    floor_to_floor_height: float = Field(
        default=3.1,
        gt=0.0,
        validation_alias=AliasChoices("floor_to_floor_height", "floorToFloorHeight"),
        description="Storey height in meters",
    )
    gba_to_gfa_ratio: float = Field(
        default=0.85,
        gt=0.0,
        le=1.0,
        validation_alias=AliasChoices("gba_to_gfa_ratio", "gbaToGfaRatio"),
        description="Efficiency ratio converting gross building area to gross floor area",
    )
    max_building_height: float = Field(
        default=100.0,
        gt=0.0,
        validation_alias=AliasChoices("max_building_height", "maxBuildingHeight"),
        description="Maximum building height in meters (HoB limit)",
    )
    min_building_separation: float = Field(
        default=6.0,
        ge=0.0,
        validation_alias=AliasChoices("min_building_separation", "minBuildingSeparation"),
        description="Minimum distance between building positions in meters",
    )
    max_building_depth: float = Field(
        default=18.0,
        gt=0.0,
        validation_alias=AliasChoices("max_building_depth", "maxBuildingDepth"),
        description="Maximum building depth in meters (from the road boundary when given)",
    )
    road_boundary: Optional[RoadBoundary] = Field(
        default=None,
        validation_alias=AliasChoices("road_boundary", "roadBoundary"),
        description="Optional road/frontage line building depth is measured from",
    )

    @field_validator("road_boundary", mode="before")
    @classmethod
    def coerce_road_boundary(cls, v: Any) -> Any:
        """Accept raw GeoJSON lines and Features as well as RoadBoundary dicts."""
        if isinstance(v, dict):
            return RoadBoundary.from_geojson(v)
        return v

    @property
    def max_floors_from_height(self) -> int:
        """Whole floors that fit under the height limit."""
        # Small epsilon so 15.5 / 3.1 counts as 5 floors
        return int(self.max_building_height / self.floor_to_floor_height + 1e-9)

    def merge_override(self, override: Dict) -> "SiteParameters":
        """Merge override dict into these parameters (JSON merge patch semantics)."""
        import json
        base = json.loads(self.model_dump_json())
        override = {to_snake_case(k): v for k, v in override.items()}

        # Road boundaries are replaced wholesale, never merged point by point
        if "road_boundary" in override:
            base["road_boundary"] = override.pop("road_boundary")

        _deep_merge(base, override)
        return SiteParameters(**base)


def to_snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _deep_merge(base: Dict, override: Dict) -> None:
    """Deep merge override into base dict (modifies base in place)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
