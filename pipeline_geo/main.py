"""Entry point wiring logging, tracing and the geo service together."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from opentelemetry import trace

from pipeline_geo.core.config import settings
from pipeline_geo.core.logging import configure_logging
from pipeline_geo.core.telemetry import get_tracer_provider, shutdown_tracer_provider
from pipeline_geo.services.api_client import InfrastructureApiClient
from pipeline_geo.services.geo_service import GeoService

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def geo_service_lifespan() -> AsyncGenerator[GeoService]:
    """
    Set up logging and tracing, then yield a GeoService bound to the configured API.

    On exit the HTTP client is closed and pending spans are flushed.

    Example:
        async with geo_service_lifespan() as service:
            data = await service.get_all_infrastructure()
    """
    configure_logging(log_level=settings.LOG_LEVEL)

    if settings.OTEL_ENABLED and (provider := get_tracer_provider()):
        trace.set_tracer_provider(provider)
        logger.info("otel_tracer_provider_initialized")

    logger.info("geo_service_startup", api_base_url=settings.API_BASE_URL, page_size=settings.PAGE_SIZE)
    try:
        async with InfrastructureApiClient() as client:
            yield GeoService(client)
    finally:
        if settings.OTEL_ENABLED:
            shutdown_tracer_provider()
        logger.info("geo_service_shutdown")
