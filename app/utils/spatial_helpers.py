"""
Spatial analysis helper functions.

Provides utilities for:
- KD-Tree spatial indexing
- Proximity (single-linkage) clustering
- Centroid and boundary union operations
"""
from collections import deque
from typing import Optional
import numpy as np
from scipy.spatial import KDTree
from shapely.geometry import Point, Polygon, MultiPolygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
import logging

logger = logging.getLogger(__name__)


def build_kdtree(coordinates: list[tuple[float, float]]) -> KDTree:
    """
    Build a KD-Tree for efficient spatial queries.

    Args:
        coordinates: List of (x, y) coordinate tuples

    Returns:
        KDTree instance
    """
    points = np.array(coordinates, dtype=float)
    return KDTree(points)


def point_distance(point1: Point, point2: Point) -> float:
    """
    Planar distance between two points in the units of the coordinate system.

    No geodesic correction is applied; callers project to meters first.
    """
    return float(point1.distance(point2))


def find_proximity_components(
    coordinates: list[tuple[float, float]],
    threshold_distance: float,
) -> list[list[int]]:
    """
    Partition points into connected components of the proximity graph.

    Two points share a component when a chain of points links them with
    every hop no longer than threshold_distance. Components are seeded in
    input order and expanded breadth-first.

    Args:
        coordinates: List of (x, y) coordinate tuples
        threshold_distance: Maximum hop distance (inclusive)

    Returns:
        List of components, each a list of indices into coordinates in
        ascending order
    """
    if not coordinates:
        return []

    kdtree = build_kdtree(coordinates)
    visited = np.zeros(len(coordinates), dtype=bool)
    components = []

    for seed in range(len(coordinates)):
        if visited[seed]:
            continue

        visited[seed] = True
        component = [seed]
        frontier = deque([seed])

        while frontier:
            current = frontier.popleft()
            neighbors = kdtree.query_ball_point(coordinates[current], threshold_distance)

            for neighbor in sorted(neighbors):
                if not visited[neighbor]:
                    visited[neighbor] = True
                    component.append(neighbor)
                    frontier.append(neighbor)

        components.append(sorted(component))

    logger.debug(f"Found {len(components)} proximity components among {len(coordinates)} points "
                 f"(threshold: {threshold_distance:.1f})")
    return components


def mean_centroid(points: list[Point]) -> Point:
    """
    Arithmetic mean of point coordinates (x and y averaged independently).

    Args:
        points: Non-empty list of points

    Returns:
        Mean point
    """
    coords = np.array([(p.x, p.y) for p in points], dtype=float)
    x, y = coords.mean(axis=0)
    return Point(float(x), float(y))


def collapse_to_polygon(geometry: BaseGeometry) -> Optional[Polygon]:
    """
    Reduce a geometry to a single polygon.

    Polygons pass through; multi-part results collapse to their convex hull.
    Returns None when the geometry is empty or the hull is degenerate
    (a point or a line).
    """
    if geometry is None or geometry.is_empty:
        return None

    if isinstance(geometry, Polygon):
        return geometry

    if isinstance(geometry, MultiPolygon):
        logger.debug(f"Collapsing {len(geometry.geoms)}-part union to convex hull")

    hull = geometry.convex_hull
    if isinstance(hull, Polygon) and not hull.is_empty:
        return hull
    return None


def union_boundary(boundaries: list[Polygon]) -> Optional[Polygon]:
    """
    Union plot boundaries into one polygon.

    Args:
        boundaries: Plot boundaries (may be empty)

    Returns:
        Single polygon, or None if there is nothing to union

    Raises:
        shapely.errors.GEOSException: If the union operation fails
    """
    if not boundaries:
        return None

    union = unary_union(boundaries)
    return collapse_to_polygon(union)
