"""
Spatial helpers: great-circle distances and bounding-box filtering.

Bounds are inclusive on every edge. Paths are never clipped: a pipeline with
any point inside the bounds is kept whole.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TypeVar

from pipeline_geo.schemas.geo import (
    GeoPath,
    InfrastructureEntity,
    LatLng,
    MapBounds,
    PipelineGeoData,
)

EARTH_RADIUS_KM = 6371.0

SpatialEntity = InfrastructureEntity | PipelineGeoData | GeoPath
EntityT = TypeVar("EntityT", bound=SpatialEntity)


def haversine_km(a: LatLng, b: LatLng) -> float:
    """
    Great-circle distance between two (lat, lng) points in kilometres.

    Examples:
        >>> round(haversine_km((0.0, 0.0), (0.0, 1.0)), 2)
        111.19
    """
    lat1, lat2 = math.radians(a[0]), math.radians(b[0])
    d_lat = math.radians(b[0] - a[0])
    d_lng = math.radians(b[1] - a[1])
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # Rounding can push h just past 1 for near-antipodal points
    h = min(1.0, h)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def polyline_length_km(points: Sequence[LatLng]) -> float:
    """Sum of great-circle distances between consecutive points (0 for < 2 points)."""
    return sum(haversine_km(points[i], points[i + 1]) for i in range(len(points) - 1))


def calculate_center(points: Sequence[LatLng]) -> LatLng:
    """Arithmetic mean of the points; (0, 0) for an empty sequence."""
    if not points:
        return (0.0, 0.0)
    return (
        sum(p[0] for p in points) / len(points),
        sum(p[1] for p in points) / len(points),
    )


def bounding_box(points: Sequence[LatLng]) -> MapBounds:
    """Smallest bounds enclosing all points; all-zero bounds for an empty sequence."""
    if not points:
        return MapBounds(north=0, south=0, east=0, west=0)
    lats = [p[0] for p in points]
    lngs = [p[1] for p in points]
    return MapBounds(north=max(lats), south=min(lats), east=max(lngs), west=min(lngs))


def is_coordinate_in_bounds(point: LatLng, bounds: MapBounds) -> bool:
    """
    Check whether a (lat, lng) point lies within bounds (edges inclusive).

    Examples:
        >>> b = MapBounds(north=20, south=0, east=20, west=0)
        >>> is_coordinate_in_bounds((10, 10), b)
        True

        >>> is_coordinate_in_bounds((50, 50), b)
        False
    """
    lat, lng = point
    return bounds.south <= lat <= bounds.north and bounds.west <= lng <= bounds.east


def entity_lat_lng(entity: InfrastructureEntity) -> LatLng | None:
    """Position of a point entity, or None when it has no usable location."""
    location = entity.location
    if location is None or location.latitude is None or location.longitude is None:
        return None
    return (location.latitude, location.longitude)


def path_in_bounds(points: Iterable[LatLng], bounds: MapBounds) -> bool:
    """True if any point of the path lies within bounds."""
    return any(is_coordinate_in_bounds(point, bounds) for point in points)


def is_entity_in_bounds(entity: SpatialEntity, bounds: MapBounds) -> bool:
    """
    Inclusion test for a single point or path entity.

    Pipelines and bare paths use the any-point rule; point entities use their
    location and are excluded when they have none.
    """
    if isinstance(entity, PipelineGeoData):
        return path_in_bounds(entity.path.points, bounds)
    if isinstance(entity, GeoPath):
        return path_in_bounds(entity.points, bounds)
    position = entity_lat_lng(entity)
    return position is not None and is_coordinate_in_bounds(position, bounds)


def filter_in_bounds(entities: Iterable[EntityT], bounds: MapBounds) -> list[EntityT]:
    """
    Keep the entities that intersect ``bounds``, preserving input order.

    Args:
        entities: Stations, terminals, production fields, pipelines with
            geo data, or bare paths (may be mixed)
        bounds: Inclusive lat/lng rectangle

    Returns:
        Entities intersecting the bounds

    Examples:
        >>> path = GeoPath(owner_id=1, points=((10, 10), (50, 50)))
        >>> len(filter_in_bounds([path], MapBounds(north=20, south=0, east=20, west=0)))
        1

        >>> len(filter_in_bounds([path], MapBounds(north=5, south=0, east=5, west=0)))
        0
    """
    return [entity for entity in entities if is_entity_in_bounds(entity, bounds)]
