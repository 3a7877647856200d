"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'rail_booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, insufficient_seats, rejected, failed
)

booking_latency = Histogram(
    'rail_booking_latency_seconds',
    'Time spent inside the booking unit of work',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

ticket_id_collisions = Counter(
    'rail_ticket_id_collisions_total',
    'Ticket ids rejected by the ledger because they were already issued'
)

# Cancellation metrics
cancellation_attempts = Counter(
    'rail_cancellation_attempts_total',
    'Total cancellation attempts',
    ['status']  # success, not_found_or_not_owned, rejected, failed
)

# Cache metrics
cache_operations = Counter(
    'rail_cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get: hit/miss, set: stored
)

redis_connection_errors = Counter(
    'rail_redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Render the default registry in the Prometheus text format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, insufficient_seats, rejected, failed"""
    booking_attempts.labels(status=status).inc()


def record_cancellation_attempt(status: str):
    """Record cancellation attempt. Status: success, not_found_or_not_owned, rejected, failed"""
    cancellation_attempts.labels(status=status).inc()


def record_cache_operation(operation: str, result: str):
    """Record cache operation. Result: hit or miss for gets, stored for sets"""
    cache_operations.labels(operation=operation, result=result).inc()
