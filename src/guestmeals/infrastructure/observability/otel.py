from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk.resources import DEPLOYMENT_ENVIRONMENT, SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

_OTEL_CONFIGURED = False
_SERVICE_VERSION = "0.1.0"
# Probes and scrapes would otherwise dominate the trace volume.
_EXCLUDED_URLS = "health/live,health/ready,metrics"

logger = logging.getLogger(__name__)


def _resource() -> Resource:
    return Resource.create(
        {
            SERVICE_NAME: os.getenv("OTEL_SERVICE_NAME", "guestmeals"),
            SERVICE_VERSION: _SERVICE_VERSION,
            DEPLOYMENT_ENVIRONMENT: os.getenv("APP_ENV", "dev").lower(),
            "guestmeals.site_timezone": os.getenv("SITE_TIMEZONE", "Asia/Kolkata"),
        }
    )


def configure_otel(app: FastAPI) -> None:
    """Install the tracer provider once per process and instrument ``app``.

    Spans are exported over OTLP/gRPC only when OTEL_EXPORTER_OTLP_ENDPOINT is set;
    otherwise trace ids are still generated so logs and events can carry them.
    """
    global _OTEL_CONFIGURED
    if _OTEL_CONFIGURED:
        return

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    provider = TracerProvider(resource=_resource())
    if endpoint:
        try:
            exporter = OTLPSpanExporter(
                endpoint=endpoint,
                insecure=endpoint.startswith("http://"),
            )
            provider.add_span_processor(BatchSpanProcessor(exporter))
        except Exception:
            logger.exception("otel_exporter_setup_failed")

    trace.set_tracer_provider(provider)
    set_global_textmap(TraceContextTextMapPropagator())
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider,
        excluded_urls=_EXCLUDED_URLS,
    )
    _OTEL_CONFIGURED = True
