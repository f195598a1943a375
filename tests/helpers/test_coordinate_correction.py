"""Tests for coordinate source strategies."""

from pipeline_geo.helpers.coordinate_correction import (
    CoordinateSource,
    correction_for,
    identity,
    reference_endpoint,
    swap_axes,
)
from pipeline_geo.schemas.geo import ReferencePoint


class TestSwapAxes:
    """Tests for the legacy location axis swap."""

    def test_swaps_latitude_and_longitude(self) -> None:
        """A legacy record stored as (3.05, 36.75) is read as (36.75, 3.05)."""
        stored = ReferencePoint(id=1, latitude=3.05, longitude=36.75)

        corrected = swap_axes(stored)

        assert corrected.latitude == 36.75
        assert corrected.longitude == 3.05

    def test_keeps_other_fields_and_source_record(self) -> None:
        """Swapping returns a copy; id, altitude and sequence are preserved."""
        stored = ReferencePoint(id=7, latitude=3.05, longitude=36.75, altitude=12.0, sequence=4)

        corrected = swap_axes(stored)

        assert (corrected.id, corrected.altitude, corrected.sequence) == (7, 12.0, 4)
        assert stored.lat_lng == (3.05, 36.75)

    def test_double_swap_restores_point(self) -> None:
        """The swap is its own inverse."""
        stored = ReferencePoint(id=1, latitude=3.05, longitude=36.75)

        assert swap_axes(swap_axes(stored)) == stored


class TestCorrectionFor:
    """Tests for correction strategy selection."""

    def test_legacy_source_swaps(self) -> None:
        """Legacy location records are always swapped."""
        assert correction_for(CoordinateSource.LEGACY) is swap_axes

    def test_current_source_is_identity(self) -> None:
        """Current coordinate records are used as stored."""
        point = ReferencePoint(id=1, latitude=36.75, longitude=3.05)

        assert correction_for(CoordinateSource.CURRENT) is identity
        assert identity(point) is point


class TestReferenceEndpoint:
    """Tests for reference_endpoint()."""

    def test_current_endpoint(self) -> None:
        assert reference_endpoint(CoordinateSource.CURRENT, 5) == "/general/localization/coordinate/5"

    def test_legacy_endpoint(self) -> None:
        assert reference_endpoint(CoordinateSource.LEGACY, 5) == "/general/localization/location/5"
