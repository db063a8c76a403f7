"""OpenTelemetry tracing for the API and its database.

Built from Settings in the lifespan. Exporter is chosen by TELEMETRY_EXPORTER:
"console", "otlp" (needs TELEMETRY_OTLP_ENDPOINT) or "none".
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

    from workhub.core.config import Settings

logger = logging.getLogger(__name__)

# Probes and the long-lived notification socket would only add noise.
UNTRACED_URLS = "/api/v1/health,/api/v1/ws"


def build_exporter(kind: str, otlp_endpoint: str | None = None) -> SpanExporter | None:
    """Span exporter for kind; None means spans are sampled but not exported."""
    if kind == "none":
        return None
    if kind == "otlp":
        if otlp_endpoint:
            return OTLPSpanExporter(
                endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
            )
        logger.warning("TELEMETRY_OTLP_ENDPOINT is not set; falling back to console")
    elif kind != "console":
        logger.warning("Unknown exporter type '%s', using console", kind)
    return ConsoleSpanExporter()


class TracingSetup:
    """Owns the tracer provider for the process lifetime."""

    def __init__(
        self,
        service_name: str,
        service_version: str,
        environment: str = "development",
        exporter: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.environment = environment
        self.exporter = exporter
        self.otlp_endpoint = otlp_endpoint
        self.sample_rate = sample_rate
        self.tracer_provider: TracerProvider | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> TracingSetup:
        return cls(
            service_name=settings.app_name,
            service_version=settings.app_version,
            environment=settings.telemetry_environment,
            exporter=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )

    def start(self, app: FastAPI, engine: AsyncEngine | None = None) -> TracerProvider:
        """Install the global tracer provider and instrument the app and engine."""
        resource = Resource(
            attributes={
                SERVICE_NAME: self.service_name,
                SERVICE_VERSION: self.service_version,
                "deployment.environment": self.environment,
            }
        )
        provider = TracerProvider(
            resource=resource, sampler=TraceIdRatioBased(self.sample_rate)
        )
        exporter = build_exporter(self.exporter, self.otlp_endpoint)
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        self.tracer_provider = provider

        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=provider, excluded_urls=UNTRACED_URLS
        )
        if engine is not None:
            SQLAlchemyInstrumentor().instrument(
                engine=engine.sync_engine, tracer_provider=provider
            )
        logger.info(
            "Tracing started: service=%s version=%s exporter=%s",
            self.service_name,
            self.service_version,
            self.exporter,
        )
        return provider

    def shutdown(self) -> None:
        """Flush pending spans."""
        if self.tracer_provider is not None:
            self.tracer_provider.shutdown()
            self.tracer_provider = None
