"""Optional OpenTelemetry tracing setup and span helpers.

When OTEL_EXPORTER_OTLP_ENDPOINT is configured, this module initializes
a TracerProvider with OTLP gRPC exporter and auto-instruments requests.
When not configured, all functions are safe no-ops.
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator

from .config import Config

log = logging.getLogger(__name__)

_tracer = None
_provider = None


def init_tracing(config: Config) -> None:
    """Initialize OpenTelemetry tracing if configured.

    Sets up TracerProvider, BatchSpanProcessor with OTLPSpanExporter,
    and RequestsInstrumentor so every HTTP call gets a client span.

    Safe to call when config.otel_enabled is False (does nothing).
    """
    global _tracer, _provider

    if not config.otel_enabled:
        log.info("OTel tracing disabled (OTEL_EXPORTER_OTLP_ENDPOINT not set)")
        return

    from opentelemetry import trace
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.requests import RequestsInstrumentor

    resource = Resource.create({"service.name": config.otel_service_name})
    _provider = TracerProvider(resource=resource)

    headers = _parse_headers(config.otel_headers) if config.otel_headers else None

    exporter = OTLPSpanExporter(
        endpoint=config.otel_endpoint,
        headers=headers,
    )
    _provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(_provider)

    _tracer = trace.get_tracer("secchub-load")

    RequestsInstrumentor().instrument()

    log.info("OTel tracing initialized (endpoint=%s, service=%s)",
             config.otel_endpoint, config.otel_service_name)


def shutdown_tracing() -> None:
    """Flush and shut down the tracer provider."""
    global _provider, _tracer
    if _provider is not None:
        from opentelemetry.instrumentation.requests import RequestsInstrumentor

        RequestsInstrumentor().uninstrument()
        _provider.shutdown()
        _provider = None
        _tracer = None
        log.info("OTel tracing shut down")


@contextmanager
def operation_span(domain: str, operation: str, **extra_attrs: Any) -> Generator:
    """Open an INTERNAL span around one scenario operation.

    HTTP calls made inside become child spans through the requests
    instrumentation. Yields None when tracing is disabled.
    """
    if _tracer is None:
        yield None
        return

    from opentelemetry.trace import SpanKind, StatusCode

    attributes = {"loadtest.domain": domain, "loadtest.operation": operation, **extra_attrs}
    with _tracer.start_as_current_span(
        f"{domain}.{operation}", kind=SpanKind.INTERNAL, attributes=attributes,
    ) as span:
        try:
            yield span
        except Exception as exc:
            span.set_status(StatusCode.ERROR, str(exc))
            span.record_exception(exc)
            raise


def record_checks(span, calls: int, failed_checks: int) -> None:
    """Attach call and check counts to an operation span; no-op for None.

    An operation with failed checks ends with ERROR status.
    """
    if span is None:
        return

    from opentelemetry.trace import StatusCode

    span.set_attribute("loadtest.calls", calls)
    span.set_attribute("loadtest.failed_checks", failed_checks)
    if failed_checks:
        span.set_status(StatusCode.ERROR, f"{failed_checks} checks failed")
    else:
        span.set_status(StatusCode.OK)


def _parse_headers(header_str: str) -> dict[str, str]:
    """Parse 'key1=val1,key2=val2' into a dict; entries without '=' are ignored."""
    pairs = (item.partition("=") for item in header_str.split(",") if "=" in item)
    return {key.strip(): value.strip() for key, _, value in pairs}
