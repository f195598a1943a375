"""Reference resolver: turns coordinate/location IDs into corrected points."""

import asyncio
from collections.abc import Sequence

import httpx
import structlog

from pipeline_geo.helpers.coordinate_correction import CoordinateSource, correction_for
from pipeline_geo.helpers.path_assembly import order_by_sequence
from pipeline_geo.schemas.geo import ReferencePoint
from pipeline_geo.services.api_client import InfrastructureApiClient

logger = structlog.get_logger(__name__)


class ReferenceResolver:
    """Resolves reference IDs from one source collection, concurrently."""

    def __init__(
        self,
        client: InfrastructureApiClient,
        source_kind: CoordinateSource = CoordinateSource.CURRENT,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            client: API client used for the by-ID fetches
            source_kind: Collection the IDs refer to. LEGACY points are
                axis-swapped, CURRENT points are used as stored.
        """
        self.client = client
        self.source_kind = source_kind
        self._correct = correction_for(source_kind)

    async def _fetch_one(self, reference_id: int) -> ReferencePoint | None:
        try:
            point = await self.client.get_reference_point(self.source_kind, reference_id)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "reference_fetch_failed",
                source=self.source_kind.value,
                reference_id=reference_id,
                error=str(e),
            )
            return None
        return self._correct(point)

    async def resolve(self, ids: Sequence[int]) -> list[ReferencePoint]:
        """
        Fetch and correct every referenced point.

        One request per ID, all in flight at once. Batches are small (tens of
        IDs per pipeline), so no pool limit is applied beyond the HTTP
        client's own connection limits. Failed fetches are logged and
        dropped; they never raise.

        Args:
            ids: Coordinate or location IDs, in path order

        Returns:
            Successfully resolved points, ordered by sequence when present,
            otherwise by their position in ``ids``
        """
        if not ids:
            return []

        results = await asyncio.gather(*(self._fetch_one(reference_id) for reference_id in ids))
        resolved = order_by_sequence((index, point) for index, point in enumerate(results) if point is not None)

        if len(resolved) < len(ids):
            logger.info(
                "references_partially_resolved",
                source=self.source_kind.value,
                requested=len(ids),
                resolved=len(resolved),
            )
        return resolved
