"""OpenTelemetry tracing configuration."""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

SERVICE_NAME = "problem-insights"
SERVICE_NAMESPACE = "apm-dashboards"
SERVICE_VERSION = "1.0.0"


def build_tracer_provider(
    otlp_endpoint: str = "http://otel-collector:4317",
    environment: str = "development",
) -> TracerProvider:
    resource = Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.namespace": SERVICE_NAMESPACE,
            "service.version": SERVICE_VERSION,
            "deployment.environment": environment,
        }
    )

    provider = TracerProvider(resource=resource)

    otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
    provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    return provider


def setup_tracing(
    otlp_endpoint: str = "http://otel-collector:4317",
    environment: str = "development",
) -> TracerProvider:
    provider = build_tracer_provider(otlp_endpoint, environment)
    trace.set_tracer_provider(provider)
    return provider
