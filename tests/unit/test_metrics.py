"""Tests for Prometheus metrics collection."""

import pytest

from streammeta.core.config import PrometheusConfig
from streammeta.monitoring.metrics import MetricsCollector
from streammeta.streams.errors import StreamNotFoundError
from streammeta.streams.models import SchemaField, StreamSchema, StreamType
from streammeta.streams.service import StreamMetadataService


@pytest.fixture
def metrics():
    return MetricsCollector(PrometheusConfig())


def test_collectors_are_isolated():
    """Each collector owns its registry."""
    first = MetricsCollector(PrometheusConfig())
    second = MetricsCollector(PrometheusConfig())

    first.record_request("get_stream", "ok")

    assert first.registry.get_sample_value(
        "streammeta_requests_total", {"operation": "get_stream", "outcome": "ok"}
    ) == 1.0
    assert second.registry.get_sample_value(
        "streammeta_requests_total", {"operation": "get_stream", "outcome": "ok"}
    ) is None


@pytest.mark.asyncio
async def test_disabled_server_not_started(metrics):
    """Nothing listens while Prometheus is disabled."""
    await metrics.start_server()

    assert metrics._server is None
    await metrics.stop_server()


@pytest.mark.asyncio
async def test_service_records_outcomes(metrics, collaborators, codec):
    """Service operations are counted by outcome."""
    service = StreamMetadataService(codec=codec, metrics_collector=metrics, **collaborators)
    await collaborators["schema_store"].set(
        "org1", "s", StreamType.LOGS,
        StreamSchema(fields=[SchemaField(name="a", data_type="Utf8")]),
    )

    await service.get_stream("org1", "s", StreamType.LOGS)
    await service.list_streams("org1")
    with pytest.raises(StreamNotFoundError):
        await service.get_stream("org1", "missing", StreamType.LOGS)

    sample = metrics.registry.get_sample_value
    assert sample("streammeta_requests_total", {"operation": "get_stream", "outcome": "ok"}) == 1.0
    assert sample("streammeta_requests_total", {"operation": "get_stream", "outcome": "not_found"}) == 1.0
    assert sample("streammeta_streams_listed", {"org": "org1"}) == 1.0


@pytest.mark.asyncio
async def test_stop_server_releases_socket():
    """Stopping the exporter closes its listening socket and thread."""
    metrics = MetricsCollector(PrometheusConfig(enabled=True, port=0))
    await metrics.start_server()
    server, thread = metrics._server

    await metrics.stop_server()

    assert metrics._server is None
    assert server.socket.fileno() == -1
    assert not thread.is_alive()
