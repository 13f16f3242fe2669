"""Geodesic primitives for lon/lat geometry.

Ground measurements (distance, bearing, destination, area) use pyproj's
WGS84 ellipsoid. Planar measurements near a site (point-to-line distance,
interior sampling) run in a local azimuthal-equidistant frame so Shapely
can work in meters.
"""

from __future__ import annotations

import logging
import math

import numpy as np
import shapely
from pyproj import Geod, Transformer
from shapely.geometry import LineString, MultiLineString, Point
from shapely.geometry.base import BaseGeometry

logger = logging.getLogger(__name__)

# Type aliases
LonLat = tuple[float, float]

WGS84 = Geod(ellps="WGS84")


class GeometryComputationError(Exception):
    """A geometry primitive could not be evaluated (degenerate or invalid input)."""


def ground_distance(p1: LonLat, p2: LonLat) -> float:
    """Geodesic distance between two lon/lat points.

    Args:
        p1: (lon, lat) of the first point
        p2: (lon, lat) of the second point

    Returns:
        Distance in meters

    Raises:
        GeometryComputationError: If the distance cannot be computed
    """
    try:
        _, _, dist = WGS84.inv(p1[0], p1[1], p2[0], p2[1])
    except Exception as e:
        raise GeometryComputationError(f"Distance between {p1} and {p2} failed: {e}") from e

    if not math.isfinite(dist):
        raise GeometryComputationError(f"Non-finite distance between {p1} and {p2}")
    return dist


def bearing(p1: LonLat, p2: LonLat) -> float:
    """Initial bearing from p1 to p2, degrees clockwise from north."""
    try:
        fwd_azimuth, _, _ = WGS84.inv(p1[0], p1[1], p2[0], p2[1])
    except Exception as e:
        raise GeometryComputationError(f"Bearing from {p1} to {p2} failed: {e}") from e
    return fwd_azimuth


def destination(origin: LonLat, distance: float, bearing_deg: float) -> LonLat:
    """Point reached by travelling `distance` meters from origin along a bearing.

    Negative distances travel in the opposite direction.
    """
    try:
        lon, lat, _ = WGS84.fwd(origin[0], origin[1], bearing_deg, distance)
    except Exception as e:
        raise GeometryComputationError(
            f"Destination from {origin} ({distance}m @ {bearing_deg}°) failed: {e}"
        ) from e
    return (lon, lat)


def geodesic_area(geometry: BaseGeometry | None) -> float:
    """Ground area of a lon/lat polygon or multipolygon in square meters.

    Returns 0.0 for missing or empty geometry.
    """
    if geometry is None or geometry.is_empty:
        return 0.0
    try:
        area, _ = WGS84.geometry_area_perimeter(geometry)
    except Exception as e:
        raise GeometryComputationError(f"Area computation failed: {e}") from e
    return abs(area)


class LocalFrame:
    """Azimuthal-equidistant metric frame centered on a lon/lat origin.

    Distances measured in this frame are accurate to well under a
    centimeter over the extent of a development site.
    """

    def __init__(self, origin: LonLat):
        lon, lat = origin
        if not (-180.0 <= lon <= 180.0 and -90.0 <= lat <= 90.0):
            raise GeometryComputationError(f"Origin {origin} is not a lon/lat coordinate")

        self.origin = (lon, lat)
        proj_string = (
            f"+proj=aeqd +lat_0={lat} +lon_0={lon} +x_0=0 +y_0=0 "
            f"+datum=WGS84 +units=m +no_defs"
        )
        self._to_local = Transformer.from_crs("EPSG:4326", proj_string, always_xy=True)
        self._to_geographic = Transformer.from_crs(proj_string, "EPSG:4326", always_xy=True)

    @classmethod
    def for_geometry(cls, geometry: BaseGeometry) -> "LocalFrame":
        """Build a frame centered on a geometry's centroid."""
        if geometry is None or geometry.is_empty:
            raise GeometryComputationError("Cannot build a local frame for empty geometry")
        centroid = geometry.centroid
        if centroid.is_empty:
            centroid = geometry.representative_point()
        return cls((centroid.x, centroid.y))

    def point_to_local(self, lon: float, lat: float) -> tuple[float, float]:
        x, y = self._to_local.transform(lon, lat)
        return (float(x), float(y))

    def point_to_geographic(self, x: float, y: float) -> LonLat:
        lon, lat = self._to_geographic.transform(x, y)
        return (float(lon), float(lat))

    def coords_to_local(self, coords: list[LonLat]) -> list[tuple[float, float]]:
        arr = np.asarray(coords, dtype=float)
        if arr.size == 0:
            return []
        xs, ys = self._to_local.transform(arr[:, 0], arr[:, 1])
        return list(zip(np.asarray(xs).tolist(), np.asarray(ys).tolist()))

    def to_local(self, geometry: BaseGeometry) -> BaseGeometry:
        """Project a lon/lat Shapely geometry into this frame."""
        return shapely.transform(geometry, self._to_local.transform, interleaved=False)

    def to_geographic(self, geometry: BaseGeometry) -> BaseGeometry:
        """Project a Shapely geometry in this frame back to lon/lat."""
        return shapely.transform(geometry, self._to_geographic.transform, interleaved=False)


def point_to_line_distance(point: LonLat, line: LineString | MultiLineString) -> float:
    """Ground distance from a lon/lat point to the nearest part of a line.

    Args:
        point: (lon, lat)
        line: Lon/lat LineString or MultiLineString

    Returns:
        Distance in meters

    Raises:
        GeometryComputationError: On empty lines or projection failures
    """
    if line is None or line.is_empty:
        raise GeometryComputationError("Reference line is empty")
    try:
        frame = LocalFrame(point)
        local_line = frame.to_local(line)
        dist = Point(0.0, 0.0).distance(local_line)
    except GeometryComputationError:
        raise
    except Exception as e:
        raise GeometryComputationError(f"Point-to-line distance failed: {e}") from e

    if not math.isfinite(dist):
        raise GeometryComputationError("Non-finite point-to-line distance")
    return dist
