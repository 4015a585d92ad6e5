# dronesim/geodesy/__init__.py
"""
Great-circle geometry used by the simulation engine and the map helpers.

Promotes the path type and the coordinate helpers to the package level:
    from dronesim.geodesy import GeodesicPath, distance_m
"""
from .path import (
    EARTH_RADIUS_M, GeodesicPath, LatLng, destination, distance_m, length, point_at_distance,
    to_lat_lng, to_unit_vector, validate_coordinate
)
