"""
Route grouping and curve separation.

Pipelines running between the same two terminals physically coincide or run
parallel, so on a map they would render as one line. Pipelines are grouped
by the unordered pair of their terminal IDs; inside a group with more than
one member, each straight two-point path is replaced by a quadratic Bezier
curve bowed sideways by a distinct, symmetric offset.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

import structlog

from pipeline_geo.schemas.geo import CurveOffsetAssignment, GeoPath, LatLng, Pipeline, PipelineGeoData

logger = structlog.get_logger(__name__)

RouteGroupKey = tuple[int, int]

DEFAULT_BASE_OFFSET = 0.0001  # degrees
DEFAULT_CURVE_SEGMENTS = 50


def route_key(pipeline: Pipeline) -> RouteGroupKey | None:
    """
    Build the order-independent route key of a pipeline.

    Args:
        pipeline: Pipeline with departure/arrival terminal IDs

    Returns:
        Sorted (low_id, high_id) pair, or None if either terminal ID is missing

    Examples:
        >>> route_key(Pipeline(departure_terminal_id=7, arrival_terminal_id=3))
        (3, 7)

        >>> route_key(Pipeline(departure_terminal_id=7))
    """
    departure = pipeline.departure_terminal_id
    arrival = pipeline.arrival_terminal_id
    if departure is None or arrival is None:
        return None
    return (departure, arrival) if departure <= arrival else (arrival, departure)


def group_by_route(pipelines: Iterable[PipelineGeoData]) -> dict[RouteGroupKey, list[PipelineGeoData]]:
    """
    Group pipelines sharing the same unordered terminal pair.

    Pipelines without both terminal IDs are left out. Groups and their
    members keep input order.
    """
    groups: dict[RouteGroupKey, list[PipelineGeoData]] = {}
    for item in pipelines:
        key = route_key(item.pipeline)
        if key is not None:
            groups.setdefault(key, []).append(item)
    return groups


def curve_offsets(count: int, base_offset: float = DEFAULT_BASE_OFFSET) -> list[float]:
    """
    Offsets for the members of a route group, symmetric around zero.

    Member ``i`` of ``n`` gets ``base_offset * (i - (n - 1) / 2)``; offsets are
    strictly increasing in ``i`` so no two members share one.

    Examples:
        >>> curve_offsets(3, 1.0)
        [-1.0, 0.0, 1.0]

        >>> curve_offsets(2, 1.0)
        [-0.5, 0.5]
    """
    center = (count - 1) / 2
    return [base_offset * (i - center) for i in range(count)]


def assign_curve_offsets(
    group: Sequence[PipelineGeoData],
    base_offset: float = DEFAULT_BASE_OFFSET,
) -> list[CurveOffsetAssignment]:
    """Pair each group member's path owner ID with its curve offset."""
    return [
        CurveOffsetAssignment(path_id=item.path.owner_id, offset=offset)
        for item, offset in zip(group, curve_offsets(len(group), base_offset), strict=True)
    ]


def quadratic_bezier_path(
    start: LatLng,
    end: LatLng,
    offset: float,
    segments: int = DEFAULT_CURVE_SEGMENTS,
) -> list[LatLng]:
    """
    Sample a quadratic Bezier curve between two points.

    The control point sits on the perpendicular bisector of the chord,
    ``offset`` degrees from its midpoint. A zero-length chord has no
    perpendicular, so the two points are returned as-is.

    Args:
        start: (lat, lng) of the first endpoint
        end: (lat, lng) of the second endpoint
        offset: Signed control-point distance from the chord midpoint (degrees)
        segments: Number of curve segments; the result has ``segments + 1`` points

    Returns:
        Sampled curve from ``start`` to ``end`` inclusive
    """
    start_lat, start_lng = start
    end_lat, end_lng = end

    dx = end_lng - start_lng
    dy = end_lat - start_lat
    distance = math.hypot(dx, dy)
    if distance == 0:
        return [start, end]

    mid_lat = (start_lat + end_lat) / 2
    mid_lng = (start_lng + end_lng) / 2
    # Unit vector perpendicular to the chord
    perp_lat = -dx / distance
    perp_lng = dy / distance
    control_lat = mid_lat + perp_lat * offset
    control_lng = mid_lng + perp_lng * offset

    points: list[LatLng] = []
    for i in range(segments + 1):
        t = i / segments
        inv_t = 1 - t
        lat = inv_t * inv_t * start_lat + 2 * inv_t * t * control_lat + t * t * end_lat
        lng = inv_t * inv_t * start_lng + 2 * inv_t * t * control_lng + t * t * end_lng
        points.append((lat, lng))
    # Pin endpoints exactly; floating point can drift in the last digit
    points[0] = start
    points[-1] = end
    return points


def separate(
    pipelines: Sequence[PipelineGeoData],
    base_offset: float = DEFAULT_BASE_OFFSET,
    segments: int = DEFAULT_CURVE_SEGMENTS,
) -> list[PipelineGeoData]:
    """
    Separate coincident routes for rendering.

    Returns rendering copies in input order; the inputs are not modified.
    Pipelines without a route key, and members of single-pipeline groups, pass
    through unchanged. In larger groups only exactly-two-point paths are
    curved; multi-point members keep their surveyed path but still occupy
    an offset slot, so curved siblings are spaced as if every member were
    drawn.

    Args:
        pipelines: Pipelines with assembled paths
        base_offset: Offset step between adjacent group members (degrees)
        segments: Bezier sampling resolution

    Returns:
        Pipelines with curved paths where separation applies
    """
    offsets_by_owner: dict[int, float] = {}
    for key, group in group_by_route(pipelines).items():
        if len(group) < 2:
            continue
        for assignment in assign_curve_offsets(group, base_offset):
            offsets_by_owner[assignment.path_id] = assignment.offset
        logger.debug("route_group_separated", route_key=list(key), members=len(group))

    separated: list[PipelineGeoData] = []
    for item in pipelines:
        offset = offsets_by_owner.get(item.path.owner_id)
        points = item.path.points
        if offset is None or len(points) != 2:
            separated.append(item)
            continue
        curve = quadratic_bezier_path(points[0], points[1], offset, segments)
        curved_path = GeoPath(owner_id=item.path.owner_id, points=tuple(curve))
        separated.append(item.model_copy(update={"path": curved_path}))
    return separated
