"""Async client for the network infrastructure REST API."""

from typing import Any, Self

import httpx
import structlog
from opentelemetry.trace import SpanKind

from pipeline_geo.core.config import settings
from pipeline_geo.core.telemetry import service_span
from pipeline_geo.helpers.coordinate_correction import CoordinateSource, reference_endpoint
from pipeline_geo.helpers.pagination import (
    PageFetchError,
    UnexpectedPageShapeError,
    build_page_params,
    resolve_page_shape,
)
from pipeline_geo.schemas.geo import PipelineSegment, ReferencePoint

logger = structlog.get_logger(__name__)

PIPELINE_SEGMENTS_ENDPOINT = "/network/core/pipelineSegment/pipeline"


def _default_headers() -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if settings.API_TOKEN:
        headers["Authorization"] = f"Bearer {settings.API_TOKEN}"
    return headers


class InfrastructureApiClient:
    """Thin wrapper around ``httpx.AsyncClient`` for the endpoints the map consumes."""

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        """
        Initialize the API client.

        Args:
            http_client: Preconfigured client (tests pass one with a mock
                transport). When omitted, a client is built from settings and
                closed by ``aclose()``.
        """
        self._owns_http_client = http_client is None
        self.http = http_client or httpx.AsyncClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.API_TIMEOUT_SECONDS,
            headers=_default_headers(),
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self.http.aclose()

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:  # noqa: ANN401
        """
        GET a path and decode its JSON body.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ValueError: If the body is not valid JSON
        """
        response = await self.http.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def fetch_all_pages(self, endpoint: str, page_size: int | None = None) -> list[Any]:
        """
        Fetch every page of a list endpoint and concatenate the items.

        Pages are requested sequentially (page=0, 1, 2...) because each
        response decides whether another page exists. A bare-array response
        is a single complete page.

        Args:
            endpoint: List endpoint path (e.g., "/network/core/pipeline")
            page_size: Items per page (default: settings.PAGE_SIZE)

        Returns:
            All items across all pages, as decoded JSON

        Raises:
            PageFetchError: If any page fails; no partial result is returned
        """
        size = page_size or settings.PAGE_SIZE
        items: list[Any] = []
        page = 0

        with service_span(
            "api.fetch_all_pages",
            "network-api",
            kind=SpanKind.CLIENT,
            **{"api.endpoint": endpoint, "api.page_size": size},
        ) as span:
            while True:
                try:
                    payload = await self.get_json(endpoint, params=build_page_params(page, size))
                    resolved = resolve_page_shape(payload)
                except (httpx.HTTPError, ValueError, UnexpectedPageShapeError) as e:
                    logger.error("page_fetch_failed", endpoint=endpoint, page=page, error=str(e))
                    raise PageFetchError(endpoint, page, str(e)) from e

                items.extend(resolved.content)
                logger.debug(
                    "page_fetched",
                    endpoint=endpoint,
                    page=page,
                    shape=resolved.kind,
                    count=len(resolved.content),
                )

                if resolved.is_final(page):
                    break
                page += 1

            span.set_attribute("api.page_count", page + 1)
            span.set_attribute("api.item_count", len(items))

        logger.info("all_pages_fetched", endpoint=endpoint, pages=page + 1, count=len(items))
        return items

    async def get_reference_point(self, source: CoordinateSource, reference_id: int) -> ReferencePoint:
        """
        Fetch one coordinate (current) or location (legacy) record by ID.

        The record is returned as stored; axis correction is the resolver's job.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ValueError: If the body is not JSON or not a valid point record
        """
        payload = await self.get_json(reference_endpoint(source, reference_id))
        return ReferencePoint.model_validate(payload)

    async def get_pipeline_segments(self, pipeline_id: int) -> list[PipelineSegment]:
        """
        Fetch the segments of a pipeline (bare array or page envelope).

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ValueError: If the body is not JSON or a record is malformed
            UnexpectedPageShapeError: If the body is neither shape
        """
        payload = await self.get_json(f"{PIPELINE_SEGMENTS_ENDPOINT}/{pipeline_id}")
        resolved = resolve_page_shape(payload)
        return [PipelineSegment.model_validate(record) for record in resolved.content]
