"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

bookings_confirmed = Counter(
    'bookings_confirmed_total',
    'Total bookings confirmed after payment',
    registry=registry
)

booking_failures = Counter(
    'booking_failures_total',
    'Booking confirmations that did not persist',
    ['reason'],
    registry=registry
)

payments_initiated = Counter(
    'payments_initiated_total',
    'Payment sessions opened with the gateway',
    ['status'],
    registry=registry
)

payment_resolutions = Counter(
    'payment_resolutions_total',
    'Terminal payment outcomes',
    ['outcome'],
    registry=registry
)

catalog_refreshes = Counter(
    'catalog_refreshes_total',
    'Scooter catalog re-fetches',
    ['status'],
    registry=registry
)

listed_scooters = Gauge(
    'listed_scooters',
    'Scooters in the current availability listing',
    registry=registry
)

rate_limit_exceeded = Counter(
    'rate_limit_exceeded_total',
    'Total rate limit exceeded events',
    registry=registry
)

webhook_deliveries = Counter(
    'webhook_deliveries_total',
    'Total webhook delivery attempts',
    ['status'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)

db_connected = Gauge(
    'db_connected',
    'Database connection status (1=connected, 0=disconnected)',
    registry=registry
)


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    return generate_latest(registry).decode('utf-8')
