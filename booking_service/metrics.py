"""
Prometheus metrics for purchases, reservation state changes, the capacity
ledger, confirmation notifications and database operations.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., total purchases)
    - Histogram: Observations bucketed by value (e.g., purchase latency)
    - Gauge: Point-in-time value that can go up or down (e.g., queue depth)

Example:
    >>> from booking_service.metrics import purchase_duration, purchases_total
    >>> with purchase_duration.labels(booking_kind="lodging").time():
    ...     result = purchase(request, engine)
    >>> purchases_total.labels(booking_kind="lodging", outcome="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# =============================================================================
# Booking Metrics
# =============================================================================

purchases_total = Counter(
    "booking_purchases_total",
    "Total number of purchase attempts by outcome",
    ["booking_kind", "outcome"],
)
"""
Counter for purchase attempts.

Labels:
    booking_kind: lodging or experience
    outcome: success or the error kind (validation, capacity_exhausted, ...)
"""

purchase_duration = Histogram(
    "booking_purchase_duration_seconds",
    "Time spent writing a purchase, excluding notification delivery",
    ["booking_kind"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, float("inf")),
)
"""
Histogram for purchase latency as seen by the client.

Labels:
    booking_kind: lodging or experience
"""

state_transitions = Counter(
    "booking_state_transitions_total",
    "Reservation state changes applied",
    ["operation", "to_state"],
)
"""
Counter for reservation state changes.

Labels:
    operation: cancel, confirm or update
    to_state: resulting reservation state
"""

capacity_rejections = Counter(
    "booking_capacity_rejections_total",
    "Experience bookings rejected for insufficient remaining capacity",
)
"""
Counter for capacity rejections. Unlabelled; the experience id is in the
capacity_exhausted log event.
"""

# =============================================================================
# Notification Metrics
# =============================================================================

notifications_total = Counter(
    "booking_notifications_total",
    "Confirmation notifications processed by the queue worker",
    ["kind", "status"],
)
"""
Counter for dispatched notifications.

Labels:
    kind: lodging_confirmation or experience_confirmation
    status: sent or failed
"""

notifications_dropped = Counter(
    "booking_notifications_dropped_total",
    "Notification jobs dropped because the queue was full",
)

notification_queue_depth = Gauge(
    "booking_notification_queue_depth",
    "Notification jobs waiting for the worker",
)

# =============================================================================
# Database Metrics
# =============================================================================

db_operations = Counter(
    "booking_db_operations_total",
    "Total database operations performed",
    ["operation", "table"],
)
"""
Counter for database operations.

Labels:
    operation: Type of operation (insert, update, delete)
    table: Database table name (reservations, payments, experiences)
"""
