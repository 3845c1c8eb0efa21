"""Optional OpenTelemetry export for the bio engine.

The SDK lives in the ``telemetry`` extra.  When it is not installed, or export
is not enabled, :class:`TelemetryManager` stays inert and every method is a
no-op so the service starts the same way with or without it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from .config import TelemetryConfig

LOGGER = logging.getLogger(__name__)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from fastapi import FastAPI


def load_sdk() -> SimpleNamespace:
    """Import the OpenTelemetry pieces used by the exporters.

    Raises :class:`ImportError` when the ``telemetry`` extra is missing.
    """

    from opentelemetry import metrics, trace
    from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

    return SimpleNamespace(
        metrics=metrics,
        trace=trace,
        OTLPMetricExporter=OTLPMetricExporter,
        OTLPSpanExporter=OTLPSpanExporter,
        FastAPIInstrumentor=FastAPIInstrumentor,
        MeterProvider=MeterProvider,
        PeriodicExportingMetricReader=PeriodicExportingMetricReader,
        Resource=Resource,
        TracerProvider=TracerProvider,
        BatchSpanProcessor=BatchSpanProcessor,
        TraceIdRatioBased=TraceIdRatioBased,
    )


@dataclass
class TelemetryManager:
    """Wire OTLP trace and metric exporters for one service process.

    ``sdk_loader`` returns the OpenTelemetry namespace; it is injectable so the
    wiring can run against a stand-in SDK.
    """

    config: TelemetryConfig
    sdk_loader: Callable[[], Any] = load_sdk
    _shutdown_hooks: List[Callable[[], None]] = field(default_factory=list)
    _instrument_fastapi: Optional[Callable[["FastAPI"], None]] = None

    @property
    def enabled(self) -> bool:
        """Whether an SDK was loaded and apps will be instrumented."""

        return self._instrument_fastapi is not None

    def configure(self) -> None:
        if not self.config.enabled:
            LOGGER.debug("Telemetry disabled; set OTEL_ENABLED or an OTLP endpoint to export")
            return
        if not self.config.capture_traces and not self.config.capture_metrics:
            LOGGER.debug("Telemetry disabled by configuration")
            return
        try:
            sdk = self.sdk_loader()
        except ImportError as exc:
            LOGGER.warning("OpenTelemetry SDK not available (%s); telemetry disabled", exc)
            return

        resource = sdk.Resource.create(
            {
                "service.name": self.config.service_name,
                "deployment.environment": self.config.environment,
            }
        )
        if self.config.capture_traces:
            self._start_tracing(sdk, resource)
        if self.config.capture_metrics:
            self._start_metrics(sdk, resource)
        self._instrument_fastapi = sdk.FastAPIInstrumentor().instrument_app

    def _start_tracing(self, sdk: Any, resource: Any) -> None:
        try:
            sampler = sdk.TraceIdRatioBased(self.config.sampling_ratio)
            provider = sdk.TracerProvider(resource=resource, sampler=sampler)
            exporter = sdk.OTLPSpanExporter(endpoint=self.config.exporter_endpoint)
            provider.add_span_processor(sdk.BatchSpanProcessor(exporter))
            sdk.trace.set_tracer_provider(provider)
        except Exception as exc:
            LOGGER.warning("Failed to initialise OTLP span exporter: %s", exc)
            return
        self._shutdown_hooks.append(provider.shutdown)
        LOGGER.info("OpenTelemetry tracing configured (endpoint=%s)", self.config.exporter_endpoint)

    def _start_metrics(self, sdk: Any, resource: Any) -> None:
        try:
            reader = sdk.PeriodicExportingMetricReader(
                sdk.OTLPMetricExporter(endpoint=self.config.exporter_endpoint)
            )
            provider = sdk.MeterProvider(resource=resource, metric_readers=[reader])
            sdk.metrics.set_meter_provider(provider)
        except Exception as exc:
            LOGGER.warning("Failed to initialise OTLP metric exporter: %s", exc)
            return
        self._shutdown_hooks.append(provider.shutdown)
        LOGGER.info("OpenTelemetry metrics configured (endpoint=%s)", self.config.exporter_endpoint)

    def instrument_app(self, app: "FastAPI") -> None:
        if self._instrument_fastapi is None:
            return
        try:
            self._instrument_fastapi(app)
        except Exception as exc:
            LOGGER.warning("Failed to instrument FastAPI: %s", exc)

    def shutdown(self) -> None:
        """Flush exporters in reverse start order; failures are logged."""

        hooks, self._shutdown_hooks = self._shutdown_hooks, []
        for hook in reversed(hooks):
            try:
                hook()
            except Exception as exc:
                LOGGER.warning("Telemetry shutdown hook failed: %s", exc)


def configure_telemetry(
    config: TelemetryConfig,
    sdk_loader: Callable[[], Any] = load_sdk,
) -> TelemetryManager:
    manager = TelemetryManager(config=config, sdk_loader=sdk_loader)
    manager.configure()
    return manager


__all__ = ["TelemetryManager", "configure_telemetry", "load_sdk"]
