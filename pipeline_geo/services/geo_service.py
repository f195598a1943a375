"""Geo service: aggregates infrastructure and prepares pipeline paths for the map."""

from collections.abc import Sequence
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from pipeline_geo.core.config import settings
from pipeline_geo.core.telemetry import service_span
from pipeline_geo.core.utils import gather_or_cancel
from pipeline_geo.helpers.path_simplification import simplify
from pipeline_geo.helpers.pipeline_filters import product_distribution
from pipeline_geo.helpers.route_grouping import separate
from pipeline_geo.helpers.spatial import filter_in_bounds
from pipeline_geo.schemas.geo import (
    GeoPath,
    InfrastructureData,
    MapBounds,
    Pipeline,
    PipelineGeoData,
    ProductionField,
    Station,
    Terminal,
)
from pipeline_geo.services.api_client import InfrastructureApiClient
from pipeline_geo.services.path_assembler import PathAssembler

logger = structlog.get_logger(__name__)

STATIONS_ENDPOINT = "/network/core/station"
TERMINALS_ENDPOINT = "/network/core/terminal"
PRODUCTION_FIELDS_ENDPOINT = "/network/core/productionField"
PIPELINES_ENDPOINT = "/network/core/pipeline"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_records(model: type[ModelT], records: Sequence[Any], endpoint: str) -> list[ModelT]:
    """Validate raw records one by one; malformed records are logged and skipped."""
    parsed: list[ModelT] = []
    for index, record in enumerate(records):
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning(
                "record_validation_failed",
                endpoint=endpoint,
                index=index,
                errors=e.error_count(),
            )
    return parsed


class GeoService:
    """Service that builds the full map dataset from the network API."""

    def __init__(
        self,
        client: InfrastructureApiClient,
        assembler: PathAssembler | None = None,
        page_size: int | None = None,
    ) -> None:
        """
        Initialize the geo service.

        Args:
            client: API client for the network endpoints
            assembler: Path assembler (default: one built on ``client``)
            page_size: Items per list page (default: settings.PAGE_SIZE)
        """
        self.client = client
        self.assembler = assembler or PathAssembler(client)
        self.page_size = page_size or settings.PAGE_SIZE

    async def _fetch_entities(self, model: type[ModelT], endpoint: str) -> list[ModelT]:
        records = await self.client.fetch_all_pages(endpoint, self.page_size)
        return _parse_records(model, records, endpoint)

    async def fetch_stations(self) -> list[Station]:
        return await self._fetch_entities(Station, STATIONS_ENDPOINT)

    async def fetch_terminals(self) -> list[Terminal]:
        return await self._fetch_entities(Terminal, TERMINALS_ENDPOINT)

    async def fetch_production_fields(self) -> list[ProductionField]:
        return await self._fetch_entities(ProductionField, PRODUCTION_FIELDS_ENDPOINT)

    async def fetch_pipelines_with_geo_data(self) -> list[PipelineGeoData]:
        """
        Fetch every pipeline and assemble its path.

        Pipelines whose geometry cannot be resolved are excluded (see
        ``PathAssembler.assemble``).

        Returns:
            Pipelines with a valid path, in API order

        Raises:
            PageFetchError: If the pipeline list cannot be fetched completely
        """
        pipelines = await self._fetch_entities(Pipeline, PIPELINES_ENDPOINT)
        assembled = await self.assembler.assemble_all(pipelines)
        logger.info("pipeline_product_distribution", distribution=product_distribution(assembled))
        return assembled

    async def get_all_infrastructure(self) -> InfrastructureData:
        """
        Fetch all four entity collections concurrently.

        Any collection failing to paginate fails the whole call and cancels
        the other in-flight fetches.

        Returns:
            InfrastructureData with stations, terminals, production fields
            and pipelines with assembled paths

        Raises:
            PageFetchError: If any list endpoint fails
        """
        with service_span("geo.fetch_infrastructure", "geo-service") as span:
            stations, terminals, production_fields, pipelines = await gather_or_cancel(
                self.fetch_stations(),
                self.fetch_terminals(),
                self.fetch_production_fields(),
                self.fetch_pipelines_with_geo_data(),
            )
            span.set_attribute("geo.station_count", len(stations))
            span.set_attribute("geo.terminal_count", len(terminals))
            span.set_attribute("geo.production_field_count", len(production_fields))
            span.set_attribute("geo.pipeline_count", len(pipelines))

        logger.info(
            "infrastructure_fetched",
            stations=len(stations),
            terminals=len(terminals),
            production_fields=len(production_fields),
            pipelines=len(pipelines),
        )
        return InfrastructureData(
            stations=stations,
            terminals=terminals,
            production_fields=production_fields,
            pipelines=pipelines,
        )

    async def get_infrastructure_in_bounds(self, bounds: MapBounds) -> InfrastructureData:
        """
        Fetch all infrastructure and keep what intersects ``bounds``.

        Point entities without a location are dropped; pipelines are kept
        whole when any of their points lies inside.
        """
        data = await self.get_all_infrastructure()
        return InfrastructureData(
            stations=filter_in_bounds(data.stations, bounds),
            terminals=filter_in_bounds(data.terminals, bounds),
            production_fields=filter_in_bounds(data.production_fields, bounds),
            pipelines=filter_in_bounds(data.pipelines, bounds),
        )


def prepare_for_rendering(
    pipelines: Sequence[PipelineGeoData],
    simplify_tolerance: float | None = None,
    base_offset: float | None = None,
    segments: int | None = None,
) -> list[PipelineGeoData]:
    """
    Produce rendering copies: coincident routes separated, then every path simplified.

    Separation runs first so curves are drawn from the original endpoints;
    simplification then thins both surveyed paths and sampled curves.

    Args:
        pipelines: Assembled pipelines
        simplify_tolerance: Douglas-Peucker tolerance in km (default: settings.SIMPLIFY_TOLERANCE_KM)
        base_offset: Curve offset step in degrees (default: settings.CURVE_BASE_OFFSET)
        segments: Bezier sampling resolution (default: settings.CURVE_SEGMENTS)

    Returns:
        New PipelineGeoData objects; the inputs are not modified
    """
    tolerance = settings.SIMPLIFY_TOLERANCE_KM if simplify_tolerance is None else simplify_tolerance
    separated = separate(
        pipelines,
        base_offset=settings.CURVE_BASE_OFFSET if base_offset is None else base_offset,
        segments=segments or settings.CURVE_SEGMENTS,
    )

    rendered: list[PipelineGeoData] = []
    for item in separated:
        points = simplify(item.path.points, tolerance)
        if len(points) == len(item.path.points):
            rendered.append(item)
            continue
        path = GeoPath(owner_id=item.path.owner_id, points=tuple(points))
        rendered.append(item.model_copy(update={"path": path}))
    return rendered
