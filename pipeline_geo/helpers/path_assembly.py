"""
Path assembly helpers.

Pure functions used by PathAssembler and ReferenceResolver to order resolved
points, stitch segment paths together and validate the result as a usable
geographic path. No network access happens here.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from pipeline_geo.schemas.geo import GeoPath, PipelineSegment, ReferencePoint

MIN_PATH_POINTS = 2
LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


def order_by_sequence(indexed_points: Iterable[tuple[int, ReferencePoint]]) -> list[ReferencePoint]:
    """
    Order resolved points by their sequence number.

    Points without a sequence use their original fetch position instead, so
    a batch with no sequence data keeps the order the IDs were given in.

    Args:
        indexed_points: (fetch_position, point) pairs

    Returns:
        Points sorted by sequence (or fetch position); ties keep fetch order

    Examples:
        >>> a = ReferencePoint(id=1, latitude=0, longitude=0, sequence=2)
        >>> b = ReferencePoint(id=2, latitude=0, longitude=0, sequence=1)
        >>> [p.id for p in order_by_sequence([(0, a), (1, b)])]
        [2, 1]
    """
    pairs = list(indexed_points)
    pairs.sort(key=lambda pair: pair[1].sequence if pair[1].sequence is not None else pair[0])
    return [point for _, point in pairs]


def sort_segments(segments: Sequence[PipelineSegment]) -> list[PipelineSegment]:
    """
    Sort segments by their start point along the pipeline.

    Segments without a start point sort as if they started at 0.
    """
    return sorted(segments, key=lambda s: s.start_point if s.start_point is not None else 0.0)


def _same_position(a: ReferencePoint, b: ReferencePoint, tolerance: float) -> bool:
    return abs(a.latitude - b.latitude) < tolerance and abs(a.longitude - b.longitude) < tolerance


def merge_segment_paths(
    segment_paths: Sequence[Sequence[ReferencePoint]],
    tolerance: float = 0.000001,
) -> list[ReferencePoint]:
    """
    Concatenate ordered segment paths into one pipeline path.

    Adjacent segments usually share their connection point; when a segment's
    first point matches the previous segment's last point within
    ``tolerance`` degrees, it is dropped. Empty segment paths are skipped.

    Args:
        segment_paths: Resolved points per segment, in segment order
        tolerance: Maximum lat/lng difference (degrees) for a duplicate join

    Returns:
        The concatenated path
    """
    merged: list[ReferencePoint] = []
    for path in segment_paths:
        if not path:
            continue
        if merged and _same_position(merged[-1], path[0], tolerance):
            merged.extend(path[1:])
        else:
            merged.extend(path)
    return merged


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    """
    Check that a coordinate is finite and within lat/lng ranges.

    Examples:
        >>> is_valid_coordinate(36.75, 3.05)
        True

        >>> is_valid_coordinate(95.0, 3.05)
        False
    """
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return (
        LATITUDE_RANGE[0] <= latitude <= LATITUDE_RANGE[1]
        and LONGITUDE_RANGE[0] <= longitude <= LONGITUDE_RANGE[1]
    )


def is_valid_path(points: Sequence[ReferencePoint]) -> bool:
    """
    Check that resolved points form a usable geographic path.

    A path needs at least MIN_PATH_POINTS points and every point must be a
    valid coordinate.
    """
    if len(points) < MIN_PATH_POINTS:
        return False
    return all(is_valid_coordinate(p.latitude, p.longitude) for p in points)


def build_geo_path(owner_id: int, points: Sequence[ReferencePoint]) -> GeoPath:
    """
    Build a GeoPath, or an empty one when the points are not a valid path.

    The result always satisfies the GeoPath invariant: empty, or at least
    two in-range points.
    """
    if not is_valid_path(points):
        return GeoPath(owner_id=owner_id)
    return GeoPath(owner_id=owner_id, points=tuple(p.lat_lng for p in points))
