# dronesim/geodesy/path.py
"""
Two-point great-circle path on a spherical earth.

Coordinates are converted to unit vectors from the earth's centre once, so
length, bearing and interpolation are plain vector operations: the point
at a distance d along the path is start * cos(d/R) + t * sin(d/R), with t
the unit tangent at the start pointing at the end. Distances are in meters
and angles in degrees.
"""
import math
from dataclasses import dataclass
from functools import cached_property
from typing import List, Tuple

import numpy as np

from ..exceptions import InvalidPathError

LatLng = Tuple[float, float]

# Mean earth radius, matches the common web-map geodesy libraries
EARTH_RADIUS_M = 6371008.8

_NORTH_POLE = np.array([0.0, 0.0, 1.0])

def validate_coordinate(lat: float, lon: float, label: str = "coordinate") -> None:
    for value in (lat, lon):
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            raise InvalidPathError(f"{label} must be a finite number pair, got ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0:
        raise InvalidPathError(f"{label} latitude {lat} outside [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise InvalidPathError(f"{label} longitude {lon} outside [-180, 180]")

def to_unit_vector(point: LatLng) -> np.ndarray:
    lat, lon = np.radians(point[0]), np.radians(point[1])
    return np.array([np.cos(lat) * np.cos(lon), np.cos(lat) * np.sin(lon), np.sin(lat)])

def to_lat_lng(vector: np.ndarray) -> LatLng:
    """Inverse of `to_unit_vector`. atan2 keeps the longitude within (-180, 180]."""
    x, y, z = vector
    lat = math.degrees(math.atan2(z, math.hypot(x, y)))
    lon = math.degrees(math.atan2(y, x))
    return lat, lon

def _local_frame(origin: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """(north, east) unit vectors tangent to the sphere at `origin`."""
    east = np.cross(_NORTH_POLE, origin)
    norm = np.linalg.norm(east)
    if norm < 1e-12:
        # At a pole every direction is south; pick the 0° meridian as reference
        east = np.array([0.0, 1.0, 0.0])
    else:
        east = east / norm
    return np.cross(origin, east), east

def _advance(origin: np.ndarray, tangent: np.ndarray, distance_m: float) -> np.ndarray:
    angle = distance_m / EARTH_RADIUS_M
    return origin * math.cos(angle) + tangent * math.sin(angle)

def distance_m(a: LatLng, b: LatLng) -> float:
    """Great-circle distance. atan2 of cross and dot stays accurate for tiny and near-antipodal separations."""
    u, v = to_unit_vector(a), to_unit_vector(b)
    return EARTH_RADIUS_M * math.atan2(float(np.linalg.norm(np.cross(u, v))), float(np.dot(u, v)))

def destination(origin: LatLng, bearing_deg: float, meters: float) -> LatLng:
    """Point reached by travelling `meters` from `origin` on the initial bearing `bearing_deg`."""
    u = to_unit_vector(origin)
    north, east = _local_frame(u)
    bearing = math.radians(bearing_deg)
    tangent = north * math.cos(bearing) + east * math.sin(bearing)
    return to_lat_lng(_advance(u, tangent, meters))

@dataclass(frozen=True)
class GeodesicPath:
    """Immutable start/end pair. Length, bearing and the start tangent are computed once."""
    start: LatLng
    end: LatLng

    def __post_init__(self):
        validate_coordinate(*self.start, label="start")
        validate_coordinate(*self.end, label="end")
        # Normalise lists from JSON payloads into hashable tuples
        object.__setattr__(self, 'start', (float(self.start[0]), float(self.start[1])))
        object.__setattr__(self, 'end', (float(self.end[0]), float(self.end[1])))

    @cached_property
    def _start_vector(self) -> np.ndarray:
        return to_unit_vector(self.start)

    @cached_property
    def _end_vector(self) -> np.ndarray:
        return to_unit_vector(self.end)

    @cached_property
    def length_m(self) -> float:
        return distance_m(self.start, self.end)

    @cached_property
    def _tangent(self) -> np.ndarray:
        """Unit vector at the start, perpendicular to it, pointing along the path."""
        u, v = self._start_vector, self._end_vector
        toward = v - np.dot(u, v) * u
        norm = np.linalg.norm(toward)
        if norm < 1e-15:
            # Coincident or antipodal endpoints: no unique great circle, head north
            return _local_frame(u)[0]
        return toward / norm

    @cached_property
    def bearing_deg(self) -> float:
        """Initial bearing at the start, in [0, 360)."""
        north, east = _local_frame(self._start_vector)
        bearing = math.degrees(math.atan2(float(np.dot(self._tangent, east)), float(np.dot(self._tangent, north))))
        return bearing % 360.0

    def point_at_distance(self, distance_m: float) -> LatLng:
        """
        Coordinate at `distance_m` along the path, clamped to the endpoints.

        The result stays on the great circle through both endpoints, so it is
        monotonic in distance.
        """
        if distance_m <= 0 or self.length_m == 0:
            return self.start
        if distance_m >= self.length_m:
            return self.end
        return to_lat_lng(_advance(self._start_vector, self._tangent, distance_m))

    def sample(self, num_points: int = 32) -> List[LatLng]:
        """Evenly spaced points from start to end, endpoints included."""
        if num_points < 2:
            raise ValueError("num_points must be at least 2")
        distances = np.linspace(0.0, self.length_m, num_points)
        return [self.point_at_distance(float(d)) for d in distances]

def length(path: GeodesicPath) -> float:
    """Path length in meters."""
    return path.length_m

def point_at_distance(path: GeodesicPath, meters: float) -> LatLng:
    return path.point_at_distance(meters)
