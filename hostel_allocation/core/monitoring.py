"""
Allocation metrics.

Counters are registered on a dedicated registry so that several app
instances (e.g. in tests) never collide on the default one.
"""

from prometheus_client import CollectorRegistry, Counter
from prometheus_client.exposition import generate_latest

registry = CollectorRegistry(auto_describe=True)

allocation_operations = Counter(
    'allocation_operations_total',
    'Allocation operations by outcome',
    ['operation', 'outcome'],
    registry=registry,
)

audit_failures = Counter(
    'allocation_audit_failures_total',
    'Audit entries that could not be written after all retries',
    registry=registry,
)

notification_failures = Counter(
    'allocation_notification_failures_total',
    'Notifications that could not be enqueued after all retries',
    registry=registry,
)


def record_operation(operation: str, outcome: str) -> None:
    allocation_operations.labels(operation=operation, outcome=outcome).inc()


def render_metrics() -> bytes:
    return generate_latest(registry)
