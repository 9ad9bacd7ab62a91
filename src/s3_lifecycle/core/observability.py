"""Observability setup for s3-lifecycle.

Log events are rendered by structlog, as JSON lines by default or in a
human-readable console format, and always written to stderr so command
output on stdout stays clean. Every storage operation runs inside
``operation_span``, which opens an OpenTelemetry span tagged with the bucket
and key and binds the operation name to every log line emitted inside it.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from .config import settings

# SDK loggers that report credential lookups and connection pooling at INFO
QUIET_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3")


def setup_tracing() -> None:
    """Install a tracer provider exporting spans to stderr, if enabled."""
    if not settings.otel_enabled:
        return

    resource = Resource.create({"service.name": settings.otel_service_name})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
    )
    trace.set_tracer_provider(provider)


def _renderer() -> Any:
    if settings.log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def setup_logging() -> None:
    """Route structlog through stdlib logging to stderr."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level.upper()),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _renderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a logger instance."""
    return structlog.get_logger(name)


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer for wrapping storage operations in spans."""
    return trace.get_tracer(name)


@contextmanager
def operation_span(
    tracer: trace.Tracer, operation: str, **attributes: Any
) -> Iterator[trace.Span]:
    """Run a storage operation inside a span and a bound logging context.

    Attributes with a None value are left out; the rest are recorded on the
    span as ``s3.<name>``.
    """
    span_attributes = {
        f"s3.{name}": value for name, value in attributes.items() if value is not None
    }
    with tracer.start_as_current_span(operation, attributes=span_attributes) as span:
        with structlog.contextvars.bound_contextvars(operation=operation):
            yield span


setup_logging()
setup_tracing()
