"""Tests for the geo service lifespan."""

from unittest.mock import patch

import pytest
from pipeline_geo.core.config import settings
from pipeline_geo.main import geo_service_lifespan
from pipeline_geo.services.geo_service import GeoService


class TestGeoServiceLifespan:
    """Tests for geo_service_lifespan()."""

    @pytest.mark.asyncio
    async def test_yields_service_and_closes_client(self) -> None:
        with patch("pipeline_geo.main.configure_logging") as mock_configure:
            async with geo_service_lifespan() as service:
                assert isinstance(service, GeoService)
                http_client = service.client.http
                assert not http_client.is_closed

        mock_configure.assert_called_once_with(log_level=settings.LOG_LEVEL)
        assert http_client.is_closed

    @pytest.mark.asyncio
    async def test_installs_and_flushes_tracer_provider_when_enabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "OTEL_ENABLED", True)

        with (
            patch("pipeline_geo.main.configure_logging"),
            patch("pipeline_geo.main.get_tracer_provider") as mock_get_provider,
            patch("pipeline_geo.main.trace.set_tracer_provider") as mock_set_provider,
            patch("pipeline_geo.main.shutdown_tracer_provider") as mock_shutdown,
        ):
            async with geo_service_lifespan():
                mock_set_provider.assert_called_once_with(mock_get_provider.return_value)
                mock_shutdown.assert_not_called()

        mock_shutdown.assert_called_once()
