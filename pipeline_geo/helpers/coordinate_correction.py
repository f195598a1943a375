"""
Coordinate source strategies for reference resolution.

The legacy ``location`` collection stores latitude and longitude transposed.
Points read from it are swapped unconditionally; points from the current
``coordinate`` collection pass through. The workaround lives only here so it
can be removed once the backend data is fixed.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum

from pipeline_geo.schemas.geo import ReferencePoint

PointCorrection = Callable[[ReferencePoint], ReferencePoint]


class CoordinateSource(StrEnum):
    """Collection a reference point is fetched from."""

    CURRENT = "current"
    LEGACY = "legacy"


def identity(point: ReferencePoint) -> ReferencePoint:
    return point


def swap_axes(point: ReferencePoint) -> ReferencePoint:
    """
    Swap latitude and longitude of a legacy location record.

    Examples:
        >>> p = ReferencePoint(id=1, latitude=3.05, longitude=36.75)
        >>> swap_axes(p).lat_lng
        (36.75, 3.05)
    """
    return point.model_copy(update={"latitude": point.longitude, "longitude": point.latitude})


_CORRECTIONS: dict[CoordinateSource, PointCorrection] = {
    CoordinateSource.CURRENT: identity,
    CoordinateSource.LEGACY: swap_axes,
}

_ENDPOINTS: dict[CoordinateSource, str] = {
    CoordinateSource.CURRENT: "/general/localization/coordinate",
    CoordinateSource.LEGACY: "/general/localization/location",
}


def correction_for(source: CoordinateSource) -> PointCorrection:
    """Return the fixed correction applied to points from ``source``."""
    return _CORRECTIONS[source]


def reference_endpoint(source: CoordinateSource, reference_id: int) -> str:
    """
    Build the by-ID endpoint path for a reference point.

    Examples:
        >>> reference_endpoint(CoordinateSource.LEGACY, 42)
        '/general/localization/location/42'
    """
    return f"{_ENDPOINTS[source]}/{reference_id}"
