# cleanweb/shared/telemetry.py
import structlog
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from cleanweb import __version__
from cleanweb.shared.config import Settings

logger = structlog.get_logger()


def setup_telemetry(settings: Settings) -> bool:
    """
    Initializes the OpenTelemetry SDK with OTLP export.
    Should be called once at process startup.

    Returns False (and leaves the no-op provider in place) when no
    OTEL_EXPORTER_OTLP_ENDPOINT is configured.
    """
    if not settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        logger.info("telemetry_disabled", reason="no OTEL_EXPORTER_OTLP_ENDPOINT")
        return False

    logger.info("telemetry_enabled", service=settings.OTEL_SERVICE_NAME)

    resource = Resource.create(attributes={
        "service.name": settings.OTEL_SERVICE_NAME,
        "deployment.environment": settings.APP_ENV.value,
        "service.version": __version__,
    })

    trace_provider = TracerProvider(resource=resource)
    otlp_exporter = OTLPSpanExporter(endpoint=f"{settings.OTEL_EXPORTER_OTLP_ENDPOINT}/v1/traces")
    trace_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    # Noisy, but handy while developing locally
    if settings.is_development:
        trace_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(trace_provider)
    return True


def instrument_fastapi(app: FastAPI, settings: Settings) -> None:
    """
    Auto-instruments the FastAPI application to trace incoming HTTP requests.
    The instrumentation middleware wraps the whole request pipeline.
    """
    if settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        FastAPIInstrumentor.instrument_app(app)


def get_tracer(name: str):
    """
    Utility to get a tracer for manual instrumentation in use cases.
    """
    return trace.get_tracer(name)
