"""Pydantic models for the massing engine."""

from .building import BuildingConfig, BuildingSection
from .parameters import SiteParameters
from .site import (
    DevelopableArea,
    GeoJSONLineString,
    GeoJSONMultiLineString,
    GeoJSONMultiPolygon,
    GeoJSONPolygon,
    RoadBoundary,
)

__all__ = [
    # Site
    "DevelopableArea",
    "RoadBoundary",
    "GeoJSONPolygon",
    "GeoJSONMultiPolygon",
    "GeoJSONLineString",
    "GeoJSONMultiLineString",
    # Parameters
    "SiteParameters",
    # Result
    "BuildingSection",
    "BuildingConfig",
]
