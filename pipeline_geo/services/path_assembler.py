"""Path assembler: builds a validated GeoPath for each pipeline."""

import asyncio
from collections.abc import Sequence

import httpx
import structlog

from pipeline_geo.core.config import settings
from pipeline_geo.core.telemetry import service_span
from pipeline_geo.helpers.coordinate_correction import CoordinateSource
from pipeline_geo.helpers.pagination import InfrastructureFetchError
from pipeline_geo.helpers.path_assembly import build_geo_path, merge_segment_paths, sort_segments
from pipeline_geo.schemas.geo import Pipeline, PipelineGeoData, PipelineSegment, ReferencePoint
from pipeline_geo.services.api_client import InfrastructureApiClient
from pipeline_geo.services.reference_resolver import ReferenceResolver

logger = structlog.get_logger(__name__)


class PathAssembler:
    """
    Resolves pipeline geometry from the segment schema or the legacy direct schema.

    A pipeline whose geometry cannot be resolved into a valid path is
    excluded (logged, ``None`` returned), never raised, so one malformed
    pipeline cannot block the rest of the map.
    """

    def __init__(
        self,
        client: InfrastructureApiClient,
        coordinate_resolver: ReferenceResolver | None = None,
        location_resolver: ReferenceResolver | None = None,
        join_tolerance: float | None = None,
    ) -> None:
        """
        Initialize the assembler.

        Args:
            client: API client used to fetch segments
            coordinate_resolver: Resolver for the current coordinate collection
            location_resolver: Resolver for the legacy (axis-swapped) location collection
            join_tolerance: Degrees within which a segment's first point
                duplicates the previous segment's last point
                (default: settings.SEGMENT_JOIN_TOLERANCE)
        """
        self.client = client
        self.coordinate_resolver = coordinate_resolver or ReferenceResolver(client, CoordinateSource.CURRENT)
        self.location_resolver = location_resolver or ReferenceResolver(client, CoordinateSource.LEGACY)
        self.join_tolerance = settings.SEGMENT_JOIN_TOLERANCE if join_tolerance is None else join_tolerance

    async def _fetch_segments(self, pipeline_id: int, code: str | None) -> list[PipelineSegment]:
        """Fetch segments sorted by start point; a failed fetch counts as no segments."""
        try:
            segments = await self.client.get_pipeline_segments(pipeline_id)
        except (httpx.HTTPError, ValueError, InfrastructureFetchError) as e:
            logger.warning("segment_fetch_failed", pipeline_id=pipeline_id, code=code, error=str(e))
            return []
        return sort_segments(segments)

    async def _resolve_segmented(self, pipeline: Pipeline, segments: Sequence[PipelineSegment]) -> list[ReferencePoint]:
        # Every segment's IDs go out in one concurrent batch; ordering stays per segment
        segment_paths = await asyncio.gather(
            *(self.coordinate_resolver.resolve(segment.coordinate_ids) for segment in segments)
        )
        for segment, path in zip(segments, segment_paths, strict=True):
            if not path:
                logger.debug("segment_without_coordinates", pipeline_id=pipeline.id, segment_code=segment.code)
        return merge_segment_paths(segment_paths, self.join_tolerance)

    async def _resolve_direct(self, pipeline: Pipeline) -> list[ReferencePoint]:
        if pipeline.coordinate_ids:
            return await self.coordinate_resolver.resolve(pipeline.coordinate_ids)
        if pipeline.location_ids:
            return await self.location_resolver.resolve(pipeline.location_ids)
        return []

    async def assemble(self, pipeline: Pipeline) -> PipelineGeoData | None:
        """
        Build the geo data of one pipeline.

        Segments are tried first. Only when a pipeline has no segments does
        the direct schema apply: its own ``coordinate_ids`` (current
        collection) or, failing that, ``location_ids`` (legacy collection).

        Args:
            pipeline: Pipeline record

        Returns:
            PipelineGeoData with a path of >= 2 valid points, or None when
            the pipeline is excluded
        """
        if pipeline.id is None:
            logger.warning("pipeline_excluded_without_id", code=pipeline.code)
            return None

        segments = await self._fetch_segments(pipeline.id, pipeline.code)
        if segments:
            schema = "segmented"
            points = await self._resolve_segmented(pipeline, segments)
        else:
            schema = "direct"
            points = await self._resolve_direct(pipeline)

        path = build_geo_path(pipeline.id, points)
        if path.is_empty:
            logger.warning(
                "pipeline_excluded_insufficient_or_invalid_coordinates",
                pipeline_id=pipeline.id,
                code=pipeline.code,
                schema=schema,
                segments=len(segments),
                points=len(points),
            )
            return None

        logger.debug(
            "pipeline_path_assembled",
            pipeline_id=pipeline.id,
            code=pipeline.code,
            schema=schema,
            segments=len(segments),
            points=len(path.points),
        )
        return PipelineGeoData(pipeline=pipeline, locations=tuple(points), path=path)

    async def assemble_all(self, pipelines: Sequence[Pipeline]) -> list[PipelineGeoData]:
        """
        Assemble every pipeline concurrently and drop the excluded ones.

        Branches share no state; each yields an independent result keyed by
        pipeline ID. Input order is preserved.
        """
        with service_span("geo.assemble_pipelines", "geo-service", **{"geo.pipeline_count": len(pipelines)}) as span:
            results = await asyncio.gather(*(self.assemble(pipeline) for pipeline in pipelines))
            assembled = [result for result in results if result is not None]
            span.set_attribute("geo.assembled_count", len(assembled))

        logger.info(
            "pipelines_assembled",
            total=len(pipelines),
            assembled=len(assembled),
            excluded=len(pipelines) - len(assembled),
        )
        return assembled
