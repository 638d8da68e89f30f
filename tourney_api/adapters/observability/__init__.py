"""Observability adapter for OpenTelemetry metrics."""

from .metrics import MetricsProvider, get_metrics_provider, initialize_metrics, shutdown_metrics

__all__ = ["MetricsProvider", "get_metrics_provider", "initialize_metrics", "shutdown_metrics"]
