"""Tests for pipeline attribute filters."""

import pytest
from pipeline_geo.helpers.pipeline_filters import (
    available_products,
    available_statuses,
    filter_pipelines,
    matches_filters,
    product_distribution,
)
from pipeline_geo.schemas.geo import PipelineFilters, PipelineGeoData

from tests.helpers.geo_builders import make_geo_data, make_pipeline

PATH = [(32.93, 3.27), (35.82, -0.32)]


@pytest.fixture
def pipelines() -> list[PipelineGeoData]:
    """Four pipelines with a mix of products and statuses."""
    return [
        make_geo_data(
            make_pipeline(1, product="GN", status="OPERATIONAL", code="GZ1", name="Hassi R'Mel - Arzew"), PATH
        ),
        make_geo_data(
            make_pipeline(2, product="PB", status="MAINTENANCE", code="OB1", name="Haoud El Hamra - Bejaia"), PATH
        ),
        make_geo_data(make_pipeline(3, product="GN", status="INACTIVE", code="GZ2"), PATH),
        make_geo_data(make_pipeline(4, code="LR1"), PATH),
    ]


def ids(items: list[PipelineGeoData]) -> list[int | None]:
    return [item.pipeline.id for item in items]


class TestFilterPipelines:
    """Tests for filter_pipelines() and matches_filters()."""

    def test_empty_filters_keep_everything(self, pipelines: list[PipelineGeoData]) -> None:
        assert filter_pipelines(pipelines, PipelineFilters()) == pipelines

    def test_filter_by_product(self, pipelines: list[PipelineGeoData]) -> None:
        assert ids(filter_pipelines(pipelines, PipelineFilters(products=["GN"]))) == [1, 3]

    def test_filter_by_status(self, pipelines: list[PipelineGeoData]) -> None:
        result = filter_pipelines(pipelines, PipelineFilters(statuses=["MAINTENANCE", "INACTIVE"]))

        assert ids(result) == [2, 3]

    def test_filters_combine(self, pipelines: list[PipelineGeoData]) -> None:
        filters = PipelineFilters(products=["GN"], statuses=["OPERATIONAL"])

        assert ids(filter_pipelines(pipelines, filters)) == [1]

    def test_search_matches_code_case_insensitively(self, pipelines: list[PipelineGeoData]) -> None:
        assert ids(filter_pipelines(pipelines, PipelineFilters(search_code="gz"))) == [1, 3]

    def test_search_matches_name(self, pipelines: list[PipelineGeoData]) -> None:
        assert ids(filter_pipelines(pipelines, PipelineFilters(search_code="bejaia"))) == [2]

    def test_pipeline_without_product_never_matches_product_filter(self, pipelines: list[PipelineGeoData]) -> None:
        assert not matches_filters(pipelines[3], PipelineFilters(products=["GN", "PB"]))


class TestFilterOptions:
    """Tests for available_products(), available_statuses() and product_distribution()."""

    def test_available_products_sorted_and_distinct(self, pipelines: list[PipelineGeoData]) -> None:
        assert available_products(pipelines) == ["GN", "PB"]

    def test_available_statuses_sorted_and_distinct(self, pipelines: list[PipelineGeoData]) -> None:
        assert available_statuses(pipelines) == ["INACTIVE", "MAINTENANCE", "OPERATIONAL"]

    def test_product_distribution_counts_missing_products(self, pipelines: list[PipelineGeoData]) -> None:
        assert product_distribution(pipelines) == {"GN": 2, "PB": 1, "NO_PRODUCT": 1}
