"""Developable area and road boundary models (GeoJSON, lon/lat)."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Position = tuple[float, float]


def _validate_ring(ring: list[Position]) -> None:
    if len(ring) < 4:
        raise ValueError("Ring must have at least 4 points (closed polygon)")
    if tuple(ring[0]) != tuple(ring[-1]):
        raise ValueError("Ring must be closed (first point == last point)")


class GeoJSONPolygon(BaseModel):
    """GeoJSON Polygon geometry.

    Coordinates are a list of linear rings (first is exterior, rest are holes).
    Each ring is a list of [lon, lat] coordinate pairs.
    """

    type: Literal["Polygon"] = "Polygon"
    coordinates: list[list[Position]] = Field(
        ..., description="List of rings, each ring is a list of [lon, lat] coordinates"
    )

    @field_validator("coordinates")
    @classmethod
    def validate_rings(cls, v: list[list[Position]]) -> list[list[Position]]:
        """Validate that at least one ring exists and rings are closed."""
        if not v:
            raise ValueError("Polygon must have at least one ring (exterior)")
        for ring in v:
            _validate_ring(ring)
        return v

    @property
    def exterior(self) -> list[Position]:
        """Get exterior ring coordinates."""
        return self.coordinates[0]

    @property
    def interiors(self) -> list[list[Position]]:
        """Get interior rings (holes) if any."""
        return self.coordinates[1:] if len(self.coordinates) > 1 else []

    def to_shapely(self):
        from shapely.geometry import Polygon

        return Polygon(self.exterior, self.interiors)


class GeoJSONMultiPolygon(BaseModel):
    """GeoJSON MultiPolygon geometry (list of polygons, each a list of rings)."""

    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: list[list[list[Position]]] = Field(
        ..., description="List of polygons, each a list of [lon, lat] rings"
    )

    @field_validator("coordinates")
    @classmethod
    def validate_polygons(cls, v: list[list[list[Position]]]) -> list[list[list[Position]]]:
        if not v:
            raise ValueError("MultiPolygon must have at least one polygon")
        for polygon in v:
            if not polygon:
                raise ValueError("Polygon must have at least one ring (exterior)")
            for ring in polygon:
                _validate_ring(ring)
        return v

    def to_shapely(self):
        from shapely.geometry import MultiPolygon, Polygon

        return MultiPolygon([Polygon(rings[0], rings[1:]) for rings in self.coordinates])


class GeoJSONLineString(BaseModel):
    """GeoJSON LineString geometry."""

    type: Literal["LineString"] = "LineString"
    coordinates: list[Position] = Field(..., min_length=2)

    def to_shapely(self):
        from shapely.geometry import LineString

        return LineString(self.coordinates)


class GeoJSONMultiLineString(BaseModel):
    """GeoJSON MultiLineString geometry."""

    type: Literal["MultiLineString"] = "MultiLineString"
    coordinates: list[list[Position]] = Field(..., min_length=1)

    @field_validator("coordinates")
    @classmethod
    def validate_lines(cls, v: list[list[Position]]) -> list[list[Position]]:
        for line in v:
            if len(line) < 2:
                raise ValueError("Each line must have at least 2 points")
        return v

    def to_shapely(self):
        from shapely.geometry import MultiLineString

        return MultiLineString(self.coordinates)


def extract_geometry(data: dict[str, Any]) -> dict[str, Any]:
    """Get the geometry dict from a GeoJSON geometry, Feature or single-feature collection."""
    if not isinstance(data, dict):
        raise ValueError(f"Expected a GeoJSON object, got {type(data).__name__}")

    kind = data.get("type")
    if kind == "FeatureCollection":
        features = data.get("features") or []
        if len(features) != 1:
            raise ValueError(
                f"FeatureCollection must contain exactly one feature, got {len(features)}"
            )
        return extract_geometry(features[0])
    if kind == "Feature":
        geometry = data.get("geometry")
        if not geometry:
            raise ValueError("Feature has no geometry")
        return geometry
    if "geometry" in data and "coordinates" not in data:
        return data["geometry"]
    return data


class DevelopableArea(BaseModel):
    """Buildable land extent as a lon/lat polygon or multipolygon.

    Immutable input to the massing engine.
    """

    model_config = ConfigDict(frozen=True)

    geometry: GeoJSONPolygon | GeoJSONMultiPolygon = Field(
        ..., discriminator="type", description="Developable area geometry"
    )
    name: str | None = Field(default=None, description="Optional label for the area")

    @classmethod
    def from_geojson(cls, data: dict[str, Any]) -> "DevelopableArea":
        """Build from a GeoJSON geometry, Feature, or one-feature FeatureCollection."""
        geometry = extract_geometry(data)
        properties = data.get("properties") or {}
        return cls(geometry=geometry, name=properties.get("name"))

    @property
    def is_multi(self) -> bool:
        return self.geometry.type == "MultiPolygon"

    def to_shapely(self):
        """Convert to Shapely Polygon or MultiPolygon."""
        return self.geometry.to_shapely()


class RoadBoundary(BaseModel):
    """Road/frontage line building depth is measured from."""

    model_config = ConfigDict(frozen=True)

    geometry: GeoJSONLineString | GeoJSONMultiLineString = Field(
        ..., discriminator="type", description="Road boundary line geometry"
    )

    @classmethod
    def from_geojson(cls, data: dict[str, Any]) -> "RoadBoundary":
        return cls(geometry=extract_geometry(data))

    def to_shapely(self):
        """Convert to Shapely LineString or MultiLineString."""
        return self.geometry.to_shapely()
