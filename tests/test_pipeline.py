"""Integration tests for the massing pipeline.

Tests the full pipeline from developable area to BuildingConfig on sample
sites, including the reference scenarios.
"""

import math

import pytest
from shapely.geometry import MultiPolygon, Polygon, mapping

from massing.geometry.geodesy import geodesic_area
from massing.models.building import BuildingConfig
from massing.models.parameters import SiteParameters
from massing.models.site import DevelopableArea
from massing.pipeline import (
    calculate_building_config,
    generate_building_footprint,
    generate_massing,
)
from massing.tools.massing_tools import MassingRequest

from conftest import line_site, rect_site, to_lonlat


# ============================================================================
# Helpers
# ============================================================================


def area_from(polygon) -> DevelopableArea:
    return DevelopableArea.from_geojson(mapping(polygon))


def assert_config_invariants(config: BuildingConfig, params: SiteParameters, site):
    """Properties every massing result must satisfy."""
    indices = {s.building_index for s in config.sections}
    assert config.building_count == len(indices)
    assert sorted(indices) == list(range(1, config.building_count + 1))

    for index in indices:
        sections = config.sections_for(index)
        assert 1 <= len(sections) <= 2
        if len(sections) == 2:
            base, top = sections
            assert base.floors == 4
            assert top.footprint_area < base.footprint_area

    for section in config.sections:
        assert section.footprint_area > 0
        assert section.height == pytest.approx(section.floors * params.floor_to_floor_height)
        assert section.top_height <= params.max_building_height + 1e-6
        if section.is_base_section:
            # Ground footprints stay inside the developable area
            assert site.buffer(1e-7).contains(section.to_shapely())

    assert config.max_building_height == pytest.approx(
        max(s.top_height for s in config.sections)
    )


# ============================================================================
# Reference scenarios
# ============================================================================


class TestScenarios:
    """Reference scenarios A-D."""

    def test_scenario_a_elongated_site_splits(self, long_site):
        """100m x 20m site, aspect ratio 5 -> multiple buildings."""
        params = SiteParameters(
            site_efficiency_ratio=0.6,
            max_building_height=40.0,
            floor_to_floor_height=3.1,
        )
        config = calculate_building_config(area_from(long_site), params)

        assert config is not None
        assert not config.is_single_building
        assert config.building_count >= 2
        assert config.max_allowed_floors == 12
        assert_config_invariants(config, params, long_site)

    def test_scenario_b_four_floors_no_setback(self, square_site):
        """30m x 30m, 12.4m height limit -> one 4-floor section."""
        params = SiteParameters(
            site_efficiency_ratio=0.5,
            max_building_height=12.4,
            floor_to_floor_height=3.1,
        )
        config = calculate_building_config(area_from(square_site), params)

        assert config is not None
        assert config.is_single_building
        assert config.building_count == 1
        assert len(config.sections) == 1
        assert config.sections[0].floors == 4
        assert config.sections[0].height == pytest.approx(12.4)
        assert config.max_building_height == pytest.approx(12.4)
        assert_config_invariants(config, params, square_site)

    def test_scenario_c_five_floors_steps_back(self, square_site):
        """Same site, 15.5m height limit -> 4-floor base plus 1-floor top."""
        params = SiteParameters(
            site_efficiency_ratio=0.5,
            max_building_height=15.5,
            floor_to_floor_height=3.1,
        )
        config = calculate_building_config(area_from(square_site), params)

        assert config is not None
        assert config.building_count == 1
        base, top = config.sections_for(1)
        assert base.floors == 4
        assert base.height == pytest.approx(12.4)
        assert top.floors == 1
        assert top.height == pytest.approx(3.1)
        assert top.base_height_offset == pytest.approx(12.4)
        assert top.footprint_area == pytest.approx(0.85 ** 2 * base.footprint_area, rel=1e-3)
        assert config.max_building_height == pytest.approx(15.5)

    def test_scenario_d_zero_area(self):
        """Zero-area developable area -> None."""
        degenerate = DevelopableArea.from_geojson({
            "type": "Polygon",
            "coordinates": [[
                list(to_lonlat(0, 0)),
                list(to_lonlat(10, 0)),
                list(to_lonlat(20, 0)),
                list(to_lonlat(0, 0)),
            ]],
        })
        assert calculate_building_config(degenerate) is None


# ============================================================================
# Single building
# ============================================================================


class TestSingleBuilding:
    """Single-building massing."""

    def test_footprint_matches_efficiency(self, square_site):
        footprint = generate_building_footprint(square_site, 0.6)
        assert geodesic_area(footprint) == pytest.approx(0.6 * geodesic_area(square_site), rel=1e-3)
        assert square_site.contains(footprint)

    def test_calculated_gfa(self):
        site = rect_site(16, 16)
        params = SiteParameters(max_building_height=31.0, max_building_depth=30.0)
        config = calculate_building_config(site, params)

        assert config.is_single_building
        footprint_area = sum(s.footprint_area for s in config.sections if s.is_base_section)
        assert config.calculated_gfa == pytest.approx(10 * footprint_area * 0.85)

    def test_tall_limit_on_small_site_stays_single_and_capped(self):
        """A site too small to split keeps one building of at most 30 floors."""
        site = rect_site(16, 16)
        params = SiteParameters(max_building_height=150.0, max_building_depth=30.0)
        config = calculate_building_config(site, params)

        assert config.is_single_building
        assert sum(s.floors for s in config.sections) == 30
        assert config.max_allowed_floors == 48

    def test_depth_limited_recorded_on_fallback(self, square_site):
        """Depth exceeded but no room for two buildings -> single, flagged."""
        config = calculate_building_config(square_site, {"maxBuildingHeight": 12.4})
        assert config.is_single_building
        assert config.depth_limited

    def test_concave_site_footprint_stays_inside(self, u_shaped_site):
        """Scaling a U about its visual center overhangs the notch; the overhang is trimmed."""
        params = SiteParameters(max_building_height=12.4, max_building_depth=200.0)
        config = calculate_building_config(u_shaped_site, params)

        assert config.is_single_building
        for section in config.sections:
            assert u_shaped_site.buffer(1e-7).contains(section.to_shapely())

        footprint = generate_building_footprint(u_shaped_site, params.site_efficiency_ratio)
        assert geodesic_area(footprint) <= params.site_efficiency_ratio * geodesic_area(u_shaped_site) + 1.0


# ============================================================================
# Multiple buildings
# ============================================================================


class TestMultipleBuildings:
    """Multi-building massing."""

    def test_height_limited_large_site(self, large_site):
        """Default 100m limit implies 32 floors -> split into several buildings."""
        params = SiteParameters()
        config = calculate_building_config(large_site, params)

        assert config is not None
        assert not config.is_single_building
        assert 2 <= config.building_count <= 8
        assert config.max_allowed_floors == 32
        assert_config_invariants(config, params, large_site)

    def test_calculated_gfa_from_height_cap(self, large_site):
        params = SiteParameters(max_building_height=62.0)
        config = calculate_building_config(large_site, params)
        footprint = generate_building_footprint(large_site, params.site_efficiency_ratio)
        assert config.calculated_gfa == pytest.approx(20 * geodesic_area(footprint) * 0.85)

    def test_l_shaped_site(self, l_shaped_site):
        params = SiteParameters(max_building_height=24.8)
        config = calculate_building_config(l_shaped_site, params)
        assert config is not None
        assert_config_invariants(config, params, l_shaped_site)

    def test_road_boundary_depth(self):
        """Depth from the road flags a deep site even with a compact footprint."""
        site = rect_site(60, 60, cy=30)
        road = line_site([(-40, 0), (40, 0)])
        params = SiteParameters(
            max_building_height=18.6,
            max_building_depth=18.0,
            road_boundary={"type": "LineString", "coordinates": [list(c) for c in road.coords]},
        )
        config = calculate_building_config(site, params)
        assert config is not None
        assert config.depth_limited
        assert_config_invariants(config, params, site)

    def test_multipolygon_area(self):
        site = MultiPolygon([rect_site(100, 20), rect_site(10, 10, cx=200)])
        params = SiteParameters(max_building_height=40.0)
        config = calculate_building_config(site, params)
        assert config is not None
        assert config.building_count >= 1
        for section in config.sections:
            assert site.buffer(1e-7).contains(section.to_shapely())

    def test_courtyard_site(self, courtyard_site):
        """A hole under the area's centroid still yields buildings on the site."""
        params = SiteParameters()
        config = calculate_building_config(courtyard_site, params)

        assert config is not None
        assert config.building_count >= 1
        assert_config_invariants(config, params, courtyard_site)


# ============================================================================
# Inputs and edge cases
# ============================================================================


class TestInputs:
    """Input coercion and degenerate input handling."""

    def test_accepts_geojson_feature(self, square_site):
        feature = {
            "type": "Feature",
            "properties": {"name": "Lot 7"},
            "geometry": mapping(square_site),
        }
        assert calculate_building_config(feature) is not None

    def test_camel_case_parameters(self, square_site):
        config = calculate_building_config(
            square_site, {"maxBuildingHeight": 15.5, "siteEfficiencyRatio": 0.5}
        )
        assert config.max_allowed_floors == 5
        assert config.height_limit == 15.5

    def test_height_below_one_floor(self, square_site):
        params = SiteParameters(max_building_height=3.0, floor_to_floor_height=3.1)
        assert calculate_building_config(square_site, params) is None

    def test_invalid_geojson(self):
        assert calculate_building_config({"type": "Polygon", "coordinates": [[[0, 0], [1, 1]]]}) is None

    def test_invalid_parameters(self, square_site):
        assert calculate_building_config(square_site, {"site_efficiency_ratio": 1.5}) is None

    def test_empty_polygon(self):
        assert calculate_building_config(Polygon()) is None

    def test_idempotent(self, long_site):
        params = SiteParameters(max_building_height=40.0)
        first = calculate_building_config(area_from(long_site), params)
        second = calculate_building_config(area_from(long_site), params)
        assert first.model_dump() == second.model_dump()

    def test_result_is_immutable(self, square_site):
        config = calculate_building_config(square_site)
        with pytest.raises(Exception):
            config.building_count = 5


# ============================================================================
# Request-level entry point
# ============================================================================


class TestGenerateMassing:
    """MCP request handling."""

    def test_completed_with_geojson(self, long_site):
        request = MassingRequest(
            developable_area=mapping(long_site),
            parameters_override={"maxBuildingHeight": 40},
        )
        response = generate_massing(request)

        assert response.status == "completed"
        assert response.building_count >= 2
        assert response.geojson["type"] == "FeatureCollection"
        kinds = {f["properties"]["kind"] for f in response.geojson["features"]}
        assert {"developable_area", "building_section", "label"} <= kinds
        assert response.statistics["parameters"]["max_building_height"] == 40

    def test_ruleset_applied(self, square_site):
        request = MassingRequest(developable_area=mapping(square_site), ruleset="low_rise")
        response = generate_massing(request)
        assert response.ruleset == "low_rise"
        assert response.max_allowed_floors == 4

    def test_unavailable(self):
        request = MassingRequest(developable_area={
            "type": "Polygon",
            "coordinates": [[[151.2, -33.87], [151.201, -33.87], [151.202, -33.87], [151.2, -33.87]]],
        })
        response = generate_massing(request)
        assert response.status == "unavailable"
        assert response.building_count == 0

    def test_unknown_ruleset(self, square_site):
        request = MassingRequest(developable_area=mapping(square_site), ruleset="missing")
        with pytest.raises(FileNotFoundError):
            generate_massing(request)

    def test_without_geojson(self, square_site):
        request = MassingRequest(developable_area=mapping(square_site), include_geojson=False)
        response = generate_massing(request)
        assert response.geojson is None
        assert len(response.sections) >= 1
        assert math.isclose(
            response.total_gfa, sum(s.gfa for s in response.sections), rel_tol=1e-9
        )
