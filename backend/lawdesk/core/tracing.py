"""
OpenTelemetry tracing configuration
"""
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from lawdesk import __version__
from lawdesk.core.config import get_settings
from lawdesk.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

_tracer_provider: Optional[TracerProvider] = None
_configured = False


def _build_exporter(settings):
    if settings.tracing_exporter == "otlp":
        if settings.tracing_otlp_endpoint:
            logger.info(f"Using OTLP exporter: {settings.tracing_otlp_endpoint}")
            return OTLPSpanExporter(endpoint=settings.tracing_otlp_endpoint)
        logger.warning("OTLP exporter selected but no endpoint configured, falling back to console")
    return ConsoleSpanExporter()


def configure_tracing(app=None, engine=None):
    """
    Configure OpenTelemetry tracing

    Args:
        app: FastAPI application to instrument (optional)
        engine: SQLAlchemy engine to instrument (optional)
    """
    global _tracer_provider, _configured

    if _configured:
        return

    settings = get_settings()
    if not settings.enable_tracing:
        logger.info("OpenTelemetry tracing is disabled via configuration")
        return

    logger.info("Configuring OpenTelemetry tracing...")

    resource = Resource.create({
        "service.name": settings.tracing_service_name,
        "service.version": __version__,
        "service.environment": settings.app_env,
    })
    _tracer_provider = TracerProvider(resource=resource)
    _tracer_provider.add_span_processor(BatchSpanProcessor(_build_exporter(settings)))
    trace.set_tracer_provider(_tracer_provider)

    if app is not None:
        FastAPIInstrumentor.instrument_app(app, tracer_provider=_tracer_provider)
        logger.info("FastAPI instrumentation enabled")

    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine, tracer_provider=_tracer_provider)
        logger.info("SQLAlchemy instrumentation enabled")

    _configured = True
    logger.info("OpenTelemetry tracing configured successfully")


def get_current_trace_id() -> Optional[str]:
    """
    Get current trace ID from context

    Returns:
        Trace ID as hex string or None if not in a trace
    """
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        return format(span_context.trace_id, '032x')
    return None


def add_span_attributes(**kwargs):
    """Attach attributes to the current span if one is recording"""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in kwargs.items():
            span.set_attribute(key, value)


def shutdown_tracing():
    """
    Flush pending spans and shut the tracer provider down

    Called from the application lifespan on shutdown.
    """
    global _tracer_provider, _configured

    if not _configured or _tracer_provider is None:
        return

    logger.info("Shutting down OpenTelemetry tracing...")
    try:
        _tracer_provider.force_flush(timeout_millis=5000)
        _tracer_provider.shutdown()
    except Exception as e:
        logger.warning(f"Error during tracing shutdown: {e}")
    finally:
        _tracer_provider = None
        _configured = False
