"""Observability setup: OpenTelemetry, Prometheus booking metrics and structlog."""

import logging

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, generate_latest

from .config import settings

SERVICE_NAME = "hotel-booking-api"

REGISTRY = CollectorRegistry()

HOLDS_CREATED = Counter(
    "booking_holds_created_total",
    "Total room holds created",
    ["hotel_id"],
    registry=REGISTRY,
)

HOLDS_EXPIRED = Counter(
    "booking_holds_expired_total",
    "Total held bookings flipped to expired by the sweeper",
    registry=REGISTRY,
)

BOOKINGS_CONFIRMED = Counter(
    "bookings_confirmed_total",
    "Total bookings confirmed",
    ["hotel_id", "source"],
    registry=REGISTRY,
)

BOOKINGS_CANCELLED = Counter(
    "bookings_cancelled_total",
    "Total bookings cancelled",
    ["previous_status"],
    registry=REGISTRY,
)

STATUS_TRANSITIONS = Counter(
    "booking_status_transitions_total",
    "Staff-driven booking status transitions",
    ["from_status", "to_status"],
    registry=REGISTRY,
)

CASH_PAYMENTS = Counter(
    "booking_cash_payments_total",
    "Bookings marked paid in cash",
    registry=REGISTRY,
)

WALK_INS_CREATED = Counter(
    "booking_walk_ins_created_total",
    "Walk-in bookings created at the desk",
    ["hotel_id"],
    registry=REGISTRY,
)


def setup_structured_logging() -> None:
    """Configure structlog; request ids arrive through context vars."""

    def add_trace_context(logger, method_name, event_dict):
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict["trace_id"] = format(ctx.trace_id, "032x")
            event_dict["span_id"] = format(ctx.span_id, "016x")
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })


def setup_tracing():
    """Install the tracer provider; spans are exported only when OTLP is configured."""
    provider = TracerProvider(resource=_resource())
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def setup_metrics():
    """Install the OTLP meter provider when configured."""
    if settings.otlp_endpoint:
        reader = PeriodicExportingMetricReader(
            exporter=OTLPMetricExporter(endpoint=settings.otlp_endpoint),
            export_interval_millis=60000,
        )
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))
    return metrics.get_meter(__name__)


def instrument_fastapi(app) -> None:
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy() -> None:
    SQLAlchemyInstrumentor().instrument()


class MetricsCollector:
    """Collector for booking lifecycle metrics."""

    @staticmethod
    def record_hold_created(hotel_id: str) -> None:
        HOLDS_CREATED.labels(hotel_id=hotel_id).inc()

    @staticmethod
    def record_holds_expired(count: int) -> None:
        if count > 0:
            HOLDS_EXPIRED.inc(count)

    @staticmethod
    def record_booking_confirmed(hotel_id: str, source: str) -> None:
        """Record a held booking becoming confirmed (``source``: customer or staff)."""
        BOOKINGS_CONFIRMED.labels(hotel_id=hotel_id, source=source).inc()

    @staticmethod
    def record_booking_cancelled(previous_status: str) -> None:
        BOOKINGS_CANCELLED.labels(previous_status=previous_status).inc()

    @staticmethod
    def record_status_transition(from_status: str, to_status: str) -> None:
        STATUS_TRANSITIONS.labels(from_status=from_status, to_status=to_status).inc()

    @staticmethod
    def record_cash_payment() -> None:
        CASH_PAYMENTS.inc()

    @staticmethod
    def record_walk_in(hotel_id: str) -> None:
        WALK_INS_CREATED.labels(hotel_id=hotel_id).inc()


def get_prometheus_metrics() -> bytes:
    """Serialize the booking registry for the /metrics endpoint."""
    return generate_latest(REGISTRY)


metrics_collector = MetricsCollector()


def get_logger(name: str):
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name).bind(logger=name)
