"""
OpenTelemetry tracing.

Off unless ``ENABLE_TRACING`` is set. Spans go to ``OTLP_ENDPOINT`` when
configured, otherwise to the console in development.
"""

from typing import Optional

from fastapi import FastAPI
from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio

from storefront.core.config import settings
from storefront.db.session import engine

TRACER_NAME = "storefront"


def _span_processor() -> Optional[SpanProcessor]:
    if settings.OTLP_ENDPOINT:
        return BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT))
    if settings.ENVIRONMENT == "development":
        return BatchSpanProcessor(ConsoleSpanExporter())
    return None


def configure_tracer() -> TracerProvider:
    """Build the tracer provider and install it globally."""
    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.PROJECT_NAME,
                "service.version": settings.VERSION,
                "deployment.environment": settings.ENVIRONMENT,
            }
        ),
        sampler=ParentBasedTraceIdRatio(settings.TRACES_SAMPLE_RATE),
    )

    processor = _span_processor()
    if processor is not None:
        provider.add_span_processor(processor)
    else:
        logger.warning("Tracing enabled without OTLP_ENDPOINT outside development; spans are dropped")

    trace.set_tracer_provider(provider)
    return provider


def get_tracer() -> trace.Tracer:
    """Tracer for manual spans; a no-op tracer until tracing is set up."""
    return trace.get_tracer(TRACER_NAME)


def setup_tracing(app: FastAPI) -> None:
    """
    Instrument incoming requests and the database engine.
    """
    if not settings.ENABLE_TRACING:
        return

    try:
        provider = configure_tracer()
        prefix = settings.API_PREFIX.strip("/")
        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=provider,
            excluded_urls=f"{prefix}/health,metrics",
        )
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=provider)
        logger.info(f"OpenTelemetry tracing configured (sample rate {settings.TRACES_SAMPLE_RATE})")
    except Exception as e:
        # Startup continues without tracing
        logger.error(f"Failed to set up OpenTelemetry tracing: {e}")
