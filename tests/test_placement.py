"""Tests for the multi-building placement solver."""

import math

import pytest
from shapely.geometry import Point

from massing.geometry.clearance import check_separation_violations, get_minimum_separation
from massing.geometry.containment import pull_point_inside
from massing.geometry.geodesy import destination, ground_distance
from massing.geometry.visual_center import find_visual_center
from massing.solver.placement import (
    MAX_BUILDINGS,
    BuildingPlacement,
    PlacementSolverConfig,
    building_scale_factor,
    compute_building_count,
    correct_containment,
    initial_placements,
    placement_radius,
    reduce_building_count,
    repair_separation,
    solve_placements,
)

from conftest import ORIGIN, rect_site, to_lonlat


def _placements_at(points: list[tuple[float, float]]) -> list[BuildingPlacement]:
    return [
        BuildingPlacement(index=i, angle=0.0, position=to_lonlat(x, y), scale_factor=0.5)
        for i, (x, y) in enumerate(points)
    ]


class TestBuildingCount:
    """Test compute_building_count."""

    def test_aspect_limited(self):
        """Aspect ratio 5 needs two buildings."""
        count = compute_building_count(
            aspect_ratio=5.0, max_dimension=77.0, site_diameter=100.0,
            max_depth=18.0, min_separation=6.0,
            aspect_limited=True, depth_limited=False,
        )
        assert count == 2

    def test_depth_limited_capped_by_site(self):
        """ceil(77/18) = 5 buildings wanted, but only floor(100/24) = 4 fit."""
        count = compute_building_count(
            aspect_ratio=5.0, max_dimension=77.0, site_diameter=100.0,
            max_depth=18.0, min_separation=6.0,
            aspect_limited=True, depth_limited=True,
        )
        assert count == 4

    def test_height_limited_minimum_two(self):
        count = compute_building_count(
            aspect_ratio=1.0, max_dimension=90.0, site_diameter=120.0,
            max_depth=18.0, min_separation=6.0,
            aspect_limited=False, depth_limited=False,
        )
        assert count == 2

    def test_never_more_than_eight(self):
        count = compute_building_count(
            aspect_ratio=40.0, max_dimension=900.0, site_diameter=1000.0,
            max_depth=18.0, min_separation=6.0,
            aspect_limited=True, depth_limited=True,
        )
        assert count == MAX_BUILDINGS

    def test_small_site_below_two(self):
        """A site narrower than depth plus separation can't hold two buildings."""
        count = compute_building_count(
            aspect_ratio=1.0, max_dimension=21.0, site_diameter=30.0,
            max_depth=18.0, min_separation=6.0,
            aspect_limited=False, depth_limited=True,
        )
        assert count == 1


class TestScaleAndRadius:
    """Test per-building scale factor and circle radius."""

    def test_scale_shares_area(self):
        assert building_scale_factor(4, False, 1) == pytest.approx(0.5)

    def test_depth_limited_scale(self):
        assert building_scale_factor(4, True, 5) == pytest.approx(0.5 * 0.8)
        assert building_scale_factor(4, True, 3) == pytest.approx(0.5 * 0.6)

    def test_radius_from_site(self):
        assert placement_radius(100.0, 6.0, 4) == pytest.approx(25.0)

    def test_radius_from_separation(self):
        # Chord between neighbours equals the separation
        radius = placement_radius(8.0, 10.0, 6)
        assert radius == pytest.approx(10.0 / (2 * math.sin(math.pi / 6)))

    def test_radius_single_building(self):
        assert placement_radius(100.0, 6.0, 1) == 0.0


class TestInitialPlacements:
    """Test circle layout."""

    def test_evenly_spaced_on_circle(self):
        placements = initial_placements(ORIGIN, 4, 25.0, 0.5)
        assert len(placements) == 4
        for p in placements:
            assert ground_distance(ORIGIN, p.position) == pytest.approx(25.0, abs=1e-6)
        # Square of side 25 * sqrt(2)
        assert get_minimum_separation([p.position for p in placements]) == pytest.approx(
            25.0 * math.sqrt(2), abs=0.01
        )

    def test_first_building_due_east(self):
        placements = initial_placements(ORIGIN, 3, 20.0, 0.5)
        east = destination(ORIGIN, 20.0, 90.0)
        assert placements[0].position[0] == pytest.approx(east[0])
        assert placements[0].position[1] == pytest.approx(east[1])
        assert [p.index for p in placements] == [0, 1, 2]


class TestRepairSeparation:
    """Test pushing apart close pairs."""

    def test_pair_pushed_apart(self):
        placements = _placements_at([(0, 0), (2, 0)])
        repaired, passes = repair_separation(placements, 6.0)
        # Each moves (6 - 2) / 2 + 0.5 = 2.5m, leaving 7m
        assert ground_distance(repaired[0].position, repaired[1].position) == pytest.approx(
            7.0, abs=0.01
        )
        assert passes == 2

    def test_input_not_modified(self):
        placements = _placements_at([(0, 0), (2, 0)])
        original = [p.position for p in placements]
        repair_separation(placements, 6.0)
        assert [p.position for p in placements] == original

    def test_already_separated_is_unchanged(self):
        placements = _placements_at([(0, 0), (20, 0), (0, 20)])
        repaired, passes = repair_separation(placements, 6.0)
        assert [p.position for p in repaired] == [p.position for p in placements]
        assert passes == 1

    def test_pass_limit(self):
        placements = _placements_at([(0, 0), (0.5, 0), (1.0, 0), (1.5, 0)])
        _, passes = repair_separation(placements, 6.0, max_passes=3)
        assert passes <= 3


class TestReduceAndContain:
    """Test count reduction and containment correction."""

    def test_reduce_drops_last(self):
        placements = _placements_at([(0, 0), (1, 0), (2, 0)])
        reduced = reduce_building_count(placements)
        assert [p.index for p in reduced] == [0, 1]

    def test_reduce_never_below_two(self):
        placements = _placements_at([(0, 0), (1, 0)])
        assert len(reduce_building_count(placements)) == 2

    def test_outside_placement_pulled_inside(self):
        site = rect_site(40, 40)
        center = to_lonlat(0, 0)
        placements = _placements_at([(5, 0), (60, 0)])
        corrected = correct_containment(placements, center, site)
        assert corrected[0].position == placements[0].position
        assert site.contains(Point(corrected[1].position))

    def test_pull_respects_safety_buffer(self):
        """Point ends at least 2m inside the 20m half-width, less bracket tolerance."""
        site = rect_site(40, 40)
        center = to_lonlat(0, 0)
        pulled = pull_point_inside(to_lonlat(50, 0), center, site)
        distance = ground_distance(center, pulled)
        assert 16.0 <= distance <= 18.0 + 1e-6

    def test_pull_from_center_in_hole(self, courtyard_site):
        """A center inside the courtyard can't anchor the search; result is still inside."""
        center = to_lonlat(0, 0)
        assert not courtyard_site.contains(Point(center))
        pulled = pull_point_inside(to_lonlat(0, 20), center, courtyard_site)
        assert courtyard_site.contains(Point(pulled))


class TestSolvePlacements:
    """Test the full repair/reduce/contain loop."""

    def test_well_spaced_layout_kept(self, long_site):
        center = to_lonlat(0, 0)
        placements = initial_placements(center, 4, 25.0, 0.4)
        result = solve_placements(placements, center, long_site, 6.0)
        assert result.building_count == 4
        assert result.is_fully_separated
        for p in result.placements:
            assert long_site.contains(Point(p.position))

    def test_crowded_layout_reduced(self):
        """Eight buildings 50m apart can't fit on a 60m square site."""
        site = rect_site(60, 60)
        center = to_lonlat(0, 0)
        placements = initial_placements(center, 8, 5.0, 0.3)
        result = solve_placements(placements, center, site, 50.0)

        assert result.initial_count == 8
        assert result.building_count < 8
        assert result.reductions >= 1
        assert result.is_fully_separated or result.building_count == 2
        for p in result.placements:
            assert site.contains(Point(p.position))

    def test_residual_violations_reported(self):
        site = rect_site(20, 20)
        center = to_lonlat(0, 0)
        placements = initial_placements(center, 2, 1.0, 0.5)
        result = solve_placements(placements, center, site, 100.0)
        assert result.building_count == 2
        assert result.residual_violations == check_separation_violations(
            [p.position for p in result.placements], 100.0
        )
        assert not result.is_fully_separated

    def test_round_limit(self):
        site = rect_site(60, 60)
        center = to_lonlat(0, 0)
        placements = initial_placements(center, 8, 5.0, 0.3)
        result = solve_placements(
            placements, center, site, 50.0, PlacementSolverConfig(max_rounds=1)
        )
        assert result.reductions == 1
        assert result.building_count == 7

    def test_deterministic(self, long_site):
        center = to_lonlat(0, 0)
        first = solve_placements(initial_placements(center, 5, 10.0, 0.4), center, long_site, 12.0)
        second = solve_placements(initial_placements(center, 5, 10.0, 0.4), center, long_site, 12.0)
        assert [p.position for p in first.placements] == [p.position for p in second.placements]

    def test_courtyard_positions_stay_inside(self, courtyard_site):
        center = find_visual_center(courtyard_site)
        placements = initial_placements(center, 4, 30.0, 0.4)
        result = solve_placements(placements, center, courtyard_site, 6.0)
        assert result.building_count >= 2
        for p in result.placements:
            assert courtyard_site.contains(Point(p.position))

    def test_center_in_hole_positions_stay_inside(self, courtyard_site):
        """Every placement starts in the courtyard and is moved onto the site."""
        center = to_lonlat(0, 0)
        placements = initial_placements(center, 3, 10.0, 0.4)
        result = solve_placements(placements, center, courtyard_site, 6.0)
        for p in result.placements:
            assert courtyard_site.contains(Point(p.position))
