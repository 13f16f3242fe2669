"""Building section and massing result models."""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .site import GeoJSONMultiPolygon, GeoJSONPolygon


class BuildingSection(BaseModel):
    """One vertical section of a building (the whole building, its base, or its stepped-back top).

    A logical building contributes one or two sections sharing a
    ``building_index``.
    """

    model_config = ConfigDict(frozen=True)

    footprint: GeoJSONPolygon | GeoJSONMultiPolygon = Field(
        ..., discriminator="type", description="Section footprint in lon/lat"
    )
    floors: int = Field(..., ge=1, description="Number of floors in this section")
    height: float = Field(..., gt=0, description="Section height in meters")
    footprint_area: float = Field(..., gt=0, description="Footprint ground area in m²")
    gfa: float = Field(..., ge=0, description="Gross floor area of this section in m²")
    building_index: int = Field(..., ge=1, description="1-based index of the building")
    is_base_section: bool = Field(default=True, description="Section starts at ground level")
    is_top_of_stack: bool = Field(default=True, description="Nothing is stacked above this section")
    base_height_offset: float = Field(
        default=0.0, ge=0, description="Height in meters at which this section starts"
    )

    @property
    def top_height(self) -> float:
        """Height of the top of this section above ground."""
        return self.base_height_offset + self.height

    def to_shapely(self):
        """Convert footprint to Shapely geometry."""
        return self.footprint.to_shapely()


class BuildingConfig(BaseModel):
    """Complete massing result for a developable area."""

    model_config = ConfigDict(frozen=True)

    building_count: int = Field(..., ge=1, description="Number of distinct buildings")
    sections: list[BuildingSection] = Field(
        ..., min_length=1, description="Flat list of sections, keyed by building_index"
    )
    is_single_building: bool = Field(..., description="Massed as one building")
    height_limit: float = Field(..., gt=0, description="Height limit applied (m)")
    calculated_gfa: float = Field(..., ge=0, description="Maximum GFA from the height limit (m²)")
    max_building_height: float = Field(
        ..., ge=0, description="Height of the tallest building (m)"
    )
    depth_limited: bool = Field(
        default=False, description="Maximum building depth was a limiting constraint"
    )
    max_allowed_floors: int = Field(..., ge=0, description="Floors permitted by the height limit")

    @computed_field
    @property
    def building_indices(self) -> list[int]:
        """Distinct building indices in ascending order."""
        return sorted({s.building_index for s in self.sections})

    @computed_field
    @property
    def total_gfa(self) -> float:
        """Sum of section GFAs."""
        return sum(s.gfa for s in self.sections)

    def sections_for(self, building_index: int) -> list[BuildingSection]:
        """Sections of one building, base first."""
        return sorted(
            (s for s in self.sections if s.building_index == building_index),
            key=lambda s: s.base_height_offset,
        )
