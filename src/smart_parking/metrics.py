"""Prometheus metrics for the parking reservation service."""

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

BOOKINGS_CREATED = Counter(
    "parking_bookings_created_total",
    "Total number of bookings created",
    registry=REGISTRY,
)

# Terminal transitions, labelled by target status and who performed them
BOOKING_TRANSITIONS = Counter(
    "parking_booking_transitions_total",
    "Total number of booking status transitions",
    ["status", "actor"],
    registry=REGISTRY,
)

# Create requests that lost the atomic reserve to a concurrent request
RESERVE_CONFLICTS = Counter(
    "parking_reserve_conflicts_total",
    "Number of booking attempts rejected by the atomic slot reserve",
    registry=REGISTRY,
)

SLOTS_BY_STATUS = Gauge(
    "parking_slots",
    "Number of parking slots in each status",
    ["status"],
    registry=REGISTRY,
)

TOTAL_SLOTS = Gauge(
    "parking_slots_total",
    "Total number of parking slots",
    registry=REGISTRY,
)


def record_booking_created() -> None:
    """Increment the created bookings counter."""
    BOOKINGS_CREATED.inc()


def record_booking_transition(status: str, actor: str) -> None:
    """Record a booking moving to ``status``; actor is owner or admin."""
    BOOKING_TRANSITIONS.labels(status=status, actor=actor).inc()


def record_reserve_conflict() -> None:
    RESERVE_CONFLICTS.inc()


def update_slot_counts(counts: dict[str, int]) -> None:
    """Update per-status and total slot gauges."""
    for status, count in counts.items():
        SLOTS_BY_STATUS.labels(status=status).set(count)
    TOTAL_SLOTS.set(sum(counts.values()))


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
