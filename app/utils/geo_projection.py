"""
Geospatial projection utilities for coordinate transformations.
"""
from typing import Tuple
from pyproj import Transformer
from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry
from shapely.ops import transform


def get_utm_zone(longitude: float) -> int:
    """
    Calculate the UTM zone number from longitude.

    Args:
        longitude: Longitude in degrees

    Returns:
        UTM zone number (1-60)
    """
    return min(int((longitude + 180) / 6) + 1, 60)


def get_utm_crs(longitude: float, latitude: float) -> str:
    """
    Get the appropriate UTM CRS (Coordinate Reference System) for a location.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees

    Returns:
        EPSG code for the UTM zone
    """
    zone = get_utm_zone(longitude)
    # Northern hemisphere: EPSG:326XX, Southern hemisphere: EPSG:327XX
    hemisphere = "6" if latitude >= 0 else "7"
    return f"EPSG:32{hemisphere}{zone:02d}"


def build_transformers(latitude: float, longitude: float) -> Tuple[Transformer, Transformer]:
    """
    Build WGS84 <-> UTM transformers for the zone containing a location.

    Both transformers take and return (x, y) order, i.e. (lon, lat) on
    the WGS84 side.

    Args:
        latitude: Reference latitude in degrees
        longitude: Reference longitude in degrees

    Returns:
        Tuple of (forward transformer to meters, reverse transformer to lat/lon)
    """
    utm_crs = get_utm_crs(longitude, latitude)
    forward = Transformer.from_crs("EPSG:4326", utm_crs, always_xy=True)
    reverse = Transformer.from_crs(utm_crs, "EPSG:4326", always_xy=True)
    return forward, reverse


def project_point(latitude: float, longitude: float, transformer: Transformer) -> Point:
    """
    Project a lat/lon location to a planar point in meters.
    """
    x, y = transformer.transform(longitude, latitude)
    return Point(x, y)


def project_geometry(geometry: BaseGeometry, transformer: Transformer) -> BaseGeometry:
    """
    Apply a transformer to every vertex of a shapely geometry.
    """
    return transform(transformer.transform, geometry)


def point_to_latlon(point: Point, transformer: Transformer) -> Tuple[float, float]:
    """
    Project a planar point back to lat/lon.

    Args:
        point: Point in meters
        transformer: Reverse transformer from build_transformers

    Returns:
        (latitude, longitude) tuple in degrees
    """
    lon, lat = transformer.transform(point.x, point.y)
    return (lat, lon)
