"""OpenTelemetry test fixtures."""

from collections.abc import Generator

import pytest
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter


@pytest.fixture
def otel_enabled_provider(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[tuple[TracerProvider, InMemorySpanExporter]]:
    """Install a global TracerProvider that records spans in memory.

    No network export: spans are only kept by the InMemorySpanExporter,
    processed synchronously by a SimpleSpanProcessor so they can be asserted
    as soon as the traced call returns.

    Yields:
        Tuple of (TracerProvider, InMemorySpanExporter); read spans with
        ``exporter.get_finished_spans()``.
    """
    from pipeline_geo.core.config import settings  # noqa: PLC0415

    # conftest.py disables the SDK by default
    monkeypatch.delenv("OTEL_SDK_DISABLED", raising=False)
    monkeypatch.setattr(settings, "OTEL_ENABLED", True)

    exporter = InMemorySpanExporter()
    provider = TracerProvider(
        resource=Resource(
            attributes={
                "service.name": "pipeline-geo-test",
                "deployment.environment": "test",
            }
        )
    )
    provider.add_span_processor(SimpleSpanProcessor(exporter))

    # Bypass set_tracer_provider(), which refuses to override an existing provider
    trace._TRACER_PROVIDER = provider  # type: ignore[attr-defined]

    yield provider, exporter

    exporter.clear()
    trace._TRACER_PROVIDER = None  # type: ignore[attr-defined]


@pytest.fixture(autouse=True)
def reset_tracer_provider() -> Generator[None]:
    """Reset telemetry module and OpenTelemetry globals around each test."""
    from pipeline_geo.core import telemetry  # noqa: PLC0415

    telemetry._tracer_provider = None  # type: ignore[attr-defined]
    trace._TRACER_PROVIDER = None  # type: ignore[attr-defined]

    yield

    telemetry._tracer_provider = None  # type: ignore[attr-defined]
    trace._TRACER_PROVIDER = None  # type: ignore[attr-defined]
