"""GeoJSON export utilities for building massing results."""

from typing import Any

from shapely.geometry import Point, mapping

from ..geometry.geodesy import LocalFrame
from ..geometry.polygon_ops import PolygonLike
from ..models.building import BuildingConfig, BuildingSection
from ..models.site import DevelopableArea
from .labels import LabelLayout, LabelStyle, find_label_position


def config_to_geojson(
    config: BuildingConfig,
    developable_area: DevelopableArea | PolygonLike | None = None,
    include_labels: bool = True,
    label_layout: LabelLayout | None = None,
    label_style: LabelStyle | None = None,
) -> tuple[dict[str, Any], LabelLayout]:
    """Convert a massing result to a GeoJSON FeatureCollection.

    Args:
        config: BuildingConfig to export
        developable_area: Optional developable area to include as a site feature
        include_labels: Include one label point per building
        label_layout: Space already taken by labels from earlier exports
        label_style: Label dimensions in meters

    Returns:
        Tuple of (GeoJSON FeatureCollection dict, updated label layout)
    """
    features = []
    layout = label_layout or LabelLayout()

    area = None
    if developable_area is not None:
        area = (
            developable_area.to_shapely()
            if isinstance(developable_area, DevelopableArea)
            else developable_area
        )
        features.append({
            "type": "Feature",
            "geometry": mapping(area),
            "properties": {
                "kind": "developable_area",
                "layer": "site",
            },
        })

    # Lower sections first so renderers extrude in stacking order
    for section in sorted(config.sections, key=lambda s: (s.building_index, s.base_height_offset)):
        features.append(section_to_feature(section))

    if include_labels:
        label_features, layout = _label_features(config, area, layout, label_style)
        features.extend(label_features)

    collection = {
        "type": "FeatureCollection",
        "features": features,
        "properties": {
            "building_count": config.building_count,
            "is_single_building": config.is_single_building,
            "height_limit": config.height_limit,
            "calculated_gfa": config.calculated_gfa,
            "total_gfa": config.total_gfa,
            "max_building_height": config.max_building_height,
            "depth_limited": config.depth_limited,
            "max_allowed_floors": config.max_allowed_floors,
        },
    }
    return collection, layout


def section_to_feature(section: BuildingSection) -> dict[str, Any]:
    """Convert a BuildingSection to a GeoJSON Feature.

    Args:
        section: Section to convert

    Returns:
        GeoJSON Feature dict with extrusion properties
    """
    return {
        "type": "Feature",
        "geometry": section.footprint.model_dump(mode="json"),
        "properties": {
            "kind": "building_section",
            "layer": "massing",
            "building_index": section.building_index,
            "floors": section.floors,
            "height": section.height,
            "base_height": section.base_height_offset,
            "top_height": section.top_height,
            "footprint_area": section.footprint_area,
            "gfa": section.gfa,
            "is_base_section": section.is_base_section,
            "is_top_of_stack": section.is_top_of_stack,
        },
    }


def _label_features(
    config: BuildingConfig,
    area: PolygonLike | None,
    layout: LabelLayout,
    style: LabelStyle | None,
) -> tuple[list[dict[str, Any]], LabelLayout]:
    """Place one label per building in a local metric frame."""
    style = style or LabelStyle()
    reference = area if area is not None else config.sections[0].to_shapely()
    frame = LocalFrame.for_geometry(reference)
    bounds = frame.to_local(area).bounds if area is not None else None

    features = []
    for building_index in config.building_indices:
        sections = config.sections_for(building_index)
        base = sections[0]
        anchor = frame.to_local(base.to_shapely()).representative_point()

        (x, y), layout = find_label_position((anchor.x, anchor.y), layout, style, bounds)
        label_center = frame.to_geographic(Point(x + style.width / 2, y + style.height / 2))
        total_floors = sum(s.floors for s in sections)

        features.append({
            "type": "Feature",
            "geometry": mapping(label_center),
            "properties": {
                "kind": "label",
                "layer": "labels",
                "building_index": building_index,
                "text": f"Building {building_index}: {total_floors} floors",
                "floors": total_floors,
                "height": max(s.top_height for s in sections),
                "anchor": list(frame.point_to_geographic(anchor.x, anchor.y)),
            },
        })

    return features, layout


def filter_geojson_by_layer(
    geojson: dict[str, Any],
    layers: list[str],
) -> dict[str, Any]:
    """Filter GeoJSON features by layer.

    Args:
        geojson: GeoJSON FeatureCollection
        layers: Layers to include

    Returns:
        Filtered GeoJSON FeatureCollection
    """
    features = [
        f for f in geojson.get("features", [])
        if f.get("properties", {}).get("layer") in layers
    ]
    return {
        "type": "FeatureCollection",
        "features": features,
    }
