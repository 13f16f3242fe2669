"""Export utilities for massing results."""

from .geojson import (
    config_to_geojson,
    filter_geojson_by_layer,
    section_to_feature,
)
from .labels import (
    LabelLayout,
    LabelRect,
    LabelStyle,
    find_label_position,
)

__all__ = [
    "config_to_geojson",
    "section_to_feature",
    "filter_geojson_by_layer",
    "find_label_position",
    "LabelLayout",
    "LabelRect",
    "LabelStyle",
]
