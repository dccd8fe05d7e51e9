"""Prometheus metrics collection for streammeta."""

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server
import structlog

logger = structlog.get_logger(__name__)


class MetricsCollector:
    """Collects and exposes Prometheus metrics for stream metadata operations."""

    def __init__(self, prometheus_config):
        """Initialize metrics collector."""
        self.config = prometheus_config
        self.registry = CollectorRegistry()
        self._server = None

        self._init_metrics()

    def _init_metrics(self):
        """Initialize Prometheus metrics."""
        self.requests_total = Counter(
            'streammeta_requests_total',
            'Total number of stream metadata operations',
            ['operation', 'outcome'],
            registry=self.registry
        )

        self.delete_failures_total = Counter(
            'streammeta_delete_failures_total',
            'Delete workflow failures by stage',
            ['stage'],
            registry=self.registry
        )

        self.streams_listed = Gauge(
            'streammeta_streams_listed',
            'Number of streams returned by the last listing',
            ['org'],
            registry=self.registry
        )

    async def start_server(self):
        """Start the Prometheus metrics server."""
        if not self.config.enabled:
            return

        logger.info("Starting Prometheus metrics server", port=self.config.port)
        self._server = start_http_server(self.config.port, registry=self.registry)

    async def stop_server(self):
        """Stop the Prometheus metrics server."""
        if self._server:
            logger.info("Stopping Prometheus metrics server")
            server, thread = self._server
            server.shutdown()
            server.server_close()
            thread.join(timeout=5)
            self._server = None

    def record_request(self, operation: str, outcome: str):
        """Record the outcome of a service operation."""
        self.requests_total.labels(operation=operation, outcome=outcome).inc()

    def record_delete_failure(self, stage: str):
        """Record a delete workflow failure at ``stage``."""
        self.delete_failures_total.labels(stage=stage).inc()

    def record_listing(self, org_id: str, count: int):
        """Record the size of a stream listing."""
        self.streams_listed.labels(org=org_id).set(count)
