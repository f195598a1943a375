"""
Attribute filters for the pipeline map layer.

Pure functions: the presentation layer holds the selected filters and calls
these to narrow the assembled pipelines by product, status and code search.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pipeline_geo.schemas.geo import PipelineFilters, PipelineGeoData


def available_products(pipelines: Iterable[PipelineGeoData]) -> list[str]:
    """Sorted distinct product codes present in the pipelines."""
    return sorted({code for item in pipelines if (code := item.pipeline.product_code)})


def available_statuses(pipelines: Iterable[PipelineGeoData]) -> list[str]:
    """Sorted distinct operational status codes present in the pipelines."""
    return sorted({code for item in pipelines if (code := item.pipeline.status_code)})


def matches_filters(item: PipelineGeoData, filters: PipelineFilters) -> bool:
    """
    Check a single pipeline against the filters.

    Empty product/status selections match everything. A pipeline with no
    product (or status) never matches a non-empty selection. The search
    text matches code or name, case-insensitively.
    """
    pipeline = item.pipeline

    if filters.products and pipeline.product_code not in filters.products:
        return False

    if filters.statuses and pipeline.status_code not in filters.statuses:
        return False

    if filters.search_code:
        needle = filters.search_code.lower()
        code = (pipeline.code or "").lower()
        name = (pipeline.name or "").lower()
        if needle not in code and needle not in name:
            return False

    return True


def filter_pipelines(pipelines: Sequence[PipelineGeoData], filters: PipelineFilters) -> list[PipelineGeoData]:
    """
    Keep pipelines matching every active filter, preserving order.

    Args:
        pipelines: Assembled pipelines
        filters: Current filter selection

    Returns:
        Matching pipelines
    """
    return [item for item in pipelines if matches_filters(item, filters)]


def product_distribution(pipelines: Iterable[PipelineGeoData]) -> dict[str, int]:
    """
    Count pipelines per product code; pipelines without one count as NO_PRODUCT.

    Examples:
        >>> product_distribution([])
        {}
    """
    counts: dict[str, int] = {}
    for item in pipelines:
        code = item.pipeline.product_code or "NO_PRODUCT"
        counts[code] = counts.get(code, 0) + 1
    return counts
