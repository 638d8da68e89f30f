"""OpenTelemetry metrics provider for the Tourney API."""

import logging
from typing import Optional

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    PeriodicExportingMetricReader,
)
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from ...config import Config
from .constants import (
    WALLET_OPERATIONS_TOTAL,
    WALLET_OPERATION_FAILURES,
    TOURNAMENT_JOINS_TOTAL,
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION,
    LABEL_TRANSACTION_TYPE,
    LABEL_ERROR_TYPE,
    LABEL_JOIN_OUTCOME,
    LABEL_METHOD,
    LABEL_ROUTE,
    LABEL_STATUS_CODE,
)

logger = logging.getLogger(__name__)


class MetricsProvider:
    """Manages OpenTelemetry metrics for the Tourney API."""

    def __init__(self, config: Config):
        """Initialize the metrics provider.

        Args:
            config: Application configuration
        """
        self.config = config
        self._meter_provider: Optional[MeterProvider] = None
        self._meter: Optional[metrics.Meter] = None
        self._initialized = False

        # Metric instruments - initialized in initialize()
        self._wallet_operations_counter = None
        self._wallet_failures_counter = None
        self._tournament_joins_counter = None
        self._http_requests_counter = None
        self._http_duration_histogram = None

    @property
    def enabled(self) -> bool:
        return self._initialized and self._meter is not None

    def initialize(self) -> None:
        """Initialize the OpenTelemetry metrics provider."""
        if self._initialized:
            logger.warning("Metrics provider already initialized")
            return

        if not self.config.otel_enabled:
            logger.info("OpenTelemetry metrics disabled")
            self._initialized = True
            return

        if self.config.otel_exporter_type == "console":
            exporter = ConsoleMetricExporter()
            logger.info("Using console metric exporter")
        elif self.config.otel_exporter_type == "otlp":
            exporter = OTLPMetricExporter(
                endpoint=self.config.otel_otlp_endpoint,
                insecure=True,
            )
            logger.info(f"Using OTLP metric exporter: {self.config.otel_otlp_endpoint}")
        else:
            logger.info("Metrics export disabled (exporter_type='none')")
            self._initialized = True
            return

        resource = Resource.create({
            SERVICE_NAME: self.config.otel_service_name,
            "environment": self.config.environment.value,
        })

        reader = PeriodicExportingMetricReader(
            exporter=exporter,
            export_interval_millis=self.config.otel_export_interval_millis,
            export_timeout_millis=self.config.otel_export_timeout_millis,
        )

        self._meter_provider = MeterProvider(
            resource=resource,
            metric_readers=[reader],
        )
        metrics.set_meter_provider(self._meter_provider)
        self._meter = self._meter_provider.get_meter(__name__)

        self._create_instruments()

        self._initialized = True
        logger.info("Metrics provider initialized successfully")

    def _create_instruments(self) -> None:
        """Create all metric instruments."""
        self._wallet_operations_counter = self._meter.create_counter(
            name=WALLET_OPERATIONS_TOTAL,
            description="Total number of committed wallet balance changes",
            unit="1",
        )

        self._wallet_failures_counter = self._meter.create_counter(
            name=WALLET_OPERATION_FAILURES,
            description="Total number of rejected wallet balance changes",
            unit="1",
        )

        self._tournament_joins_counter = self._meter.create_counter(
            name=TOURNAMENT_JOINS_TOTAL,
            description="Total number of tournament join attempts by outcome",
            unit="1",
        )

        self._http_requests_counter = self._meter.create_counter(
            name=HTTP_REQUESTS_TOTAL,
            description="Total number of HTTP requests served",
            unit="1",
        )

        self._http_duration_histogram = self._meter.create_histogram(
            name=HTTP_REQUEST_DURATION,
            description="Duration of HTTP requests in seconds",
            unit="s",
        )

    def shutdown(self) -> None:
        """Shutdown the metrics provider and flush any pending metrics."""
        if self._meter_provider:
            self._meter_provider.shutdown()
            self._meter_provider = None
            logger.info("Metrics provider shut down")

    # Wallet metrics

    def record_wallet_operation(self, transaction_type: str) -> None:
        """Record a committed wallet balance change."""
        if not self.enabled:
            return

        self._wallet_operations_counter.add(1, {LABEL_TRANSACTION_TYPE: transaction_type})

    def record_wallet_failure(self, transaction_type: str, error_type: str) -> None:
        """Record a rejected wallet balance change."""
        if not self.enabled:
            return

        self._wallet_failures_counter.add(1, {
            LABEL_TRANSACTION_TYPE: transaction_type,
            LABEL_ERROR_TYPE: error_type,
        })

    # Tournament metrics

    def record_tournament_join(self, outcome: str) -> None:
        """Record a tournament join attempt."""
        if not self.enabled:
            return

        self._tournament_joins_counter.add(1, {LABEL_JOIN_OUTCOME: outcome})

    # HTTP metrics

    def record_http_request(
        self, method: str, route: str, status_code: int, duration: float
    ) -> None:
        """Record a served HTTP request."""
        if not self.enabled:
            return

        labels = {
            LABEL_METHOD: method,
            LABEL_ROUTE: route,
            LABEL_STATUS_CODE: str(status_code),
        }
        self._http_requests_counter.add(1, labels)
        self._http_duration_histogram.record(duration, labels)


# Global metrics provider instance
_metrics_provider: Optional[MetricsProvider] = None


def get_metrics_provider() -> Optional[MetricsProvider]:
    """Get the global metrics provider instance."""
    return _metrics_provider


def initialize_metrics(config: Config) -> MetricsProvider:
    """Initialize the global metrics provider.

    Args:
        config: Application configuration

    Returns:
        The initialized MetricsProvider instance
    """
    global _metrics_provider

    if _metrics_provider is not None:
        logger.warning("Metrics provider already initialized")
        return _metrics_provider

    _metrics_provider = MetricsProvider(config)
    _metrics_provider.initialize()

    return _metrics_provider


def shutdown_metrics() -> None:
    """Shutdown the global metrics provider."""
    global _metrics_provider

    if _metrics_provider:
        _metrics_provider.shutdown()
        _metrics_provider = None
