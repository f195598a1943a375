"""
Douglas-Peucker path simplification.

Distances are great-circle kilometres from a point to the nearest point of
the chord (projection clamped to the chord's endpoints), so ``tolerance`` is
in kilometres regardless of latitude.
"""

from __future__ import annotations

from collections.abc import Sequence

from pipeline_geo.helpers.spatial import haversine_km
from pipeline_geo.schemas.geo import LatLng

DEFAULT_TOLERANCE_KM = 0.001


def perpendicular_distance_km(point: LatLng, line_start: LatLng, line_end: LatLng) -> float:
    """
    Distance from ``point`` to the segment ``line_start``-``line_end``.

    The projection is computed in lat/lng space and clamped to the segment;
    the distance to the projected point is measured with the haversine formula.

    Examples:
        >>> perpendicular_distance_km((0.0, 0.5), (0.0, 0.0), (0.0, 1.0))
        0.0
    """
    px, py = point
    x1, y1 = line_start
    x2, y2 = line_end
    dx = x2 - x1
    dy = y2 - y1

    if dx == 0 and dy == 0:
        return haversine_km(point, line_start)

    t = ((px - x1) * dx + (py - y1) * dy) / (dx * dx + dy * dy)
    if t < 0:
        return haversine_km(point, line_start)
    if t > 1:
        return haversine_km(point, line_end)
    return haversine_km(point, (x1 + t * dx, y1 + t * dy))


def _douglas_peucker(points: Sequence[LatLng], tolerance: float) -> list[LatLng]:
    if len(points) <= 2:
        return list(points)

    start = points[0]
    end = points[-1]
    max_distance = 0.0
    max_index = 0
    for i in range(1, len(points) - 1):
        distance = perpendicular_distance_km(points[i], start, end)
        # Strict comparison keeps the first of equally distant points
        if distance > max_distance:
            max_distance = distance
            max_index = i

    if max_distance > tolerance:
        left = _douglas_peucker(points[: max_index + 1], tolerance)
        right = _douglas_peucker(points[max_index:], tolerance)
        return left[:-1] + right

    return [start, end]


def simplify(points: Sequence[LatLng], tolerance: float = DEFAULT_TOLERANCE_KM) -> list[LatLng]:
    """
    Reduce the point count of a path while preserving its shape.

    Finds the point farthest from the first-to-last chord; if it lies more
    than ``tolerance`` km away the path is split there and both halves are
    simplified recursively, otherwise the path collapses to its endpoints.

    Deterministic and idempotent:
    ``simplify(simplify(p, t), t) == simplify(p, t)``.

    Args:
        points: Ordered (lat, lng) points
        tolerance: Maximum allowed deviation in kilometres

    Returns:
        Simplified path; paths of two points or fewer are returned unchanged

    Raises:
        ValueError: If tolerance is negative

    Examples:
        >>> simplify([(0.0, 0.0), (0.0, 0.5), (0.0, 1.0)], 0.001)
        [(0.0, 0.0), (0.0, 1.0)]
    """
    if tolerance < 0:
        msg = f"Tolerance must not be negative, got {tolerance}"
        raise ValueError(msg)
    return _douglas_peucker(points, tolerance)
