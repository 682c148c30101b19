"""Tracing for the interaction host: one span per WebSocket frame.

``init_telemetry`` installs the tracer provider once from the lifespan.
The host wraps every frame in ``frame_span`` and tags rejected frames with
``mark_frame_error`` so failures can be filtered by error code.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "meeting-interaction-engine"
FRAME_SPAN = "interaction.frame"

_provider: Optional[TracerProvider] = None


def init_telemetry(exporter: str = "console") -> None:
    """Install the global TracerProvider. Later calls are no-ops.

    ``"otlp"`` ships spans to ``OTEL_EXPORTER_OTLP_ENDPOINT``; anything else
    prints them to stdout.
    """
    global _provider
    if _provider is not None:
        return

    provider = TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
    provider.add_span_processor(_span_processor(exporter))
    trace.set_tracer_provider(provider)
    _provider = provider


def _span_processor(exporter: str) -> SpanProcessor:
    if exporter.lower() == "otlp":
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )
        except ImportError:
            logger.warning("[Telemetry] OTLP exporter not installed, using console.")
        else:
            logger.info("[Telemetry] OTLP exporter active.")
            return BatchSpanProcessor(OTLPSpanExporter())

    logger.info("[Telemetry] Console exporter active.")
    return SimpleSpanProcessor(ConsoleSpanExporter())


@contextmanager
def frame_span(frame_type: str, session_id: str) -> Iterator[trace.Span]:
    """Trace the handling of one incoming frame."""
    tracer = trace.get_tracer(__name__)
    attributes = {"frame.type": frame_type, "session.id": session_id}
    with tracer.start_as_current_span(FRAME_SPAN, attributes=attributes) as span:
        yield span


def mark_frame_error(code: str) -> None:
    """Tag the active frame span with the error code sent to the client."""
    trace.get_current_span().set_attribute("frame.error_code", code)
