"""Tests for network API record schemas."""

import pytest
from pipeline_geo.schemas.geo import Pipeline, PipelineSegment
from pydantic import ValidationError


class TestPipelineIdLists:
    """Tests for Pipeline coordinate/location ID lists."""

    def test_null_id_lists_become_empty(self) -> None:
        pipeline = Pipeline.model_validate({"id": 1, "coordinateIds": None, "locationIds": None})

        assert pipeline.coordinate_ids == []
        assert pipeline.location_ids == []

    def test_missing_id_lists_default_to_empty(self) -> None:
        pipeline = Pipeline.model_validate({"id": 1})

        assert pipeline.coordinate_ids == []
        assert pipeline.location_ids == []

    def test_id_lists_are_kept(self) -> None:
        pipeline = Pipeline.model_validate({"id": 1, "coordinateIds": [3, 4], "locationIds": [5]})

        assert pipeline.coordinate_ids == [3, 4]
        assert pipeline.location_ids == [5]

    def test_non_integer_ids_still_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Pipeline.model_validate({"id": 1, "coordinateIds": ["abc"]})


class TestPipelineSegmentIdList:
    """Tests for PipelineSegment coordinate ID list."""

    def test_null_coordinate_ids_become_empty(self) -> None:
        segment = PipelineSegment.model_validate({"startPoint": 0, "coordinateIds": None})

        assert segment.coordinate_ids == []
        assert segment.start_point == 0
