"""Shared site fixtures in lon/lat around a fixed origin.

Sites are laid out in meters in a local frame and projected to lon/lat so
ground dimensions in the tests are exact.
"""

import pytest
from shapely.geometry import LineString, Polygon

from massing.geometry.geodesy import LocalFrame

ORIGIN = (151.2, -33.87)

_FRAME = LocalFrame(ORIGIN)


def to_lonlat(x: float, y: float) -> tuple[float, float]:
    """Local meters (east, north of ORIGIN) to lon/lat."""
    return _FRAME.point_to_geographic(x, y)


def rect_site(width: float, height: float, cx: float = 0.0, cy: float = 0.0) -> Polygon:
    """Axis-aligned rectangle of width x height meters centered at (cx, cy)."""
    hw, hh = width / 2, height / 2
    corners = [
        (cx - hw, cy - hh),
        (cx + hw, cy - hh),
        (cx + hw, cy + hh),
        (cx - hw, cy + hh),
    ]
    return Polygon([to_lonlat(x, y) for x, y in corners])


def courtyard(outer: float, hole: float) -> Polygon:
    """Square of side ``outer`` meters with a centered square hole of side ``hole``."""
    shell = rect_site(outer, outer)
    inner = rect_site(hole, hole)
    return Polygon(shell.exterior.coords, [inner.exterior.coords])


def polygon_site(points: list[tuple[float, float]]) -> Polygon:
    """Polygon from a list of local (x, y) meter coordinates."""
    return Polygon([to_lonlat(x, y) for x, y in points])


def line_site(points: list[tuple[float, float]]) -> LineString:
    """LineString from local (x, y) meter coordinates."""
    return LineString([to_lonlat(x, y) for x, y in points])


@pytest.fixture
def origin():
    return ORIGIN


@pytest.fixture
def square_site():
    """30m x 30m site."""
    return rect_site(30, 30)


@pytest.fixture
def long_site():
    """100m x 20m site (aspect ratio 5)."""
    return rect_site(100, 20)


@pytest.fixture
def large_site():
    """120m x 120m site."""
    return rect_site(120, 120)


@pytest.fixture
def l_shaped_site():
    """L-shaped site, 80m legs and 30m wide arms."""
    return polygon_site([(0, 0), (80, 0), (80, 30), (30, 30), (30, 80), (0, 80)])


@pytest.fixture
def u_shaped_site():
    """60m x 60m site with a 30m x 30m notch cut into the top edge."""
    return polygon_site([
        (0, 0), (60, 0), (60, 60), (45, 60), (45, 30), (15, 30), (15, 60), (0, 60),
    ])


@pytest.fixture
def courtyard_site():
    """120m x 120m site around a 70m x 70m courtyard hole."""
    return courtyard(120, 70)
