"""MCP tool request/response schemas."""

from typing import Any

from pydantic import BaseModel, Field


class MassingRequest(BaseModel):
    """Complete request for building massing."""

    developable_area: dict[str, Any] = Field(
        ...,
        description="Developable area as GeoJSON Polygon/MultiPolygon, Feature, "
        "or single-feature FeatureCollection in lon/lat",
    )
    ruleset: str = Field(
        default="default",
        description="Name of the parameter ruleset to start from",
    )
    parameters_override: dict[str, Any] | None = Field(
        default=None,
        description="Override ruleset parameters (snake_case or camelCase keys)",
    )
    road_boundary: dict[str, Any] | None = Field(
        default=None,
        description="Optional road/frontage line (GeoJSON LineString or Feature) "
        "building depth is measured from",
    )
    include_geojson: bool = Field(
        default=True,
        description="Include a GeoJSON FeatureCollection of the sections",
    )
    include_labels: bool = Field(
        default=True,
        description="Include label points in the GeoJSON output",
    )


class SectionSummary(BaseModel):
    """Summary of one building section."""

    building_index: int
    floors: int
    height: float
    base_height: float
    footprint_area: float
    gfa: float
    is_base_section: bool
    is_top_of_stack: bool


class MassingResponse(BaseModel):
    """Response from building massing."""

    status: str  # "completed", "unavailable", "failed"
    message: str | None = None
    ruleset: str = "default"
    building_count: int = 0
    is_single_building: bool = False
    height_limit: float | None = None
    max_building_height: float = 0.0
    max_allowed_floors: int = 0
    calculated_gfa: float = 0.0
    total_gfa: float = 0.0
    depth_limited: bool = False
    sections: list[SectionSummary] = Field(default_factory=list)
    geojson: dict[str, Any] | None = None
    statistics: dict[str, Any] = Field(default_factory=dict)
