"""Span assertions for the network API client and geo service."""

from collections.abc import Sequence
from typing import TYPE_CHECKING

from opentelemetry.trace import SpanKind, StatusCode

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan
    from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

FETCH_PAGES_SPAN = "api.fetch_all_pages"
FETCH_INFRASTRUCTURE_SPAN = "geo.fetch_infrastructure"
ASSEMBLE_PIPELINES_SPAN = "geo.assemble_pipelines"


def spans_named(exporter: "InMemorySpanExporter", name: str) -> list["ReadableSpan"]:
    """Finished spans with the given name, in completion order."""
    return [span for span in exporter.get_finished_spans() if span.name == name]


def assert_span_status(
    span: "ReadableSpan",
    expected_status: StatusCode,
    *,
    check_exception: bool = False,
) -> None:
    """Assert span status; with check_exception, ERROR spans must carry an exception event."""
    assert span.status.status_code == expected_status, (
        f"Expected span status {expected_status}, got {span.status.status_code}"
    )

    if check_exception and expected_status == StatusCode.ERROR:
        assert any(e.name == "exception" for e in span.events), "Expected exception event in ERROR span"


def assert_fetch_pages_span(
    span: "ReadableSpan",
    *,
    endpoint: str,
    page_size: int,
    page_count: int,
    item_count: int,
) -> None:
    """
    Assert a successful api.fetch_all_pages span.

    Args:
        span: Span named api.fetch_all_pages
        endpoint: Endpoint path the pages were read from
        page_size: Requested page size
        page_count: Pages requested before the final one was seen
        item_count: Items aggregated across all pages
    """
    assert span.name == FETCH_PAGES_SPAN
    assert span.kind == SpanKind.CLIENT
    assert span.attributes is not None
    assert span.attributes["peer.service"] == "network-api"
    assert span.attributes["api.endpoint"] == endpoint
    assert span.attributes["api.page_size"] == page_size
    assert span.attributes["api.page_count"] == page_count
    assert span.attributes["api.item_count"] == item_count
    assert_span_status(span, StatusCode.OK)


def assert_children_of(parent: "ReadableSpan", children: Sequence["ReadableSpan"]) -> None:
    """Assert every span in children was started inside parent."""
    for child in children:
        assert child.parent is not None, f"{child.name} has no parent"
        assert child.parent.span_id == parent.context.span_id, f"{child.name} is not a child of {parent.name}"
