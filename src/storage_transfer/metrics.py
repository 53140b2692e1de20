"""
Prometheus metrics for storage transfers.

Provides instrumentation for:
- Transfer task outcomes by direction and terminal state
- Bytes moved
- Transfer durations
- Presigned URL generation and granted lifetimes
"""

from prometheus_client import Counter, Histogram

# Transfer task metrics
transfer_tasks_total = Counter(
    "storage_transfer_tasks_total",
    "Total number of transfer tasks by terminal state",
    ["direction", "state"],  # state: success, error, canceled
)

transfer_bytes_total = Counter(
    "storage_transfer_bytes_total",
    "Total bytes moved by successful transfer tasks",
    ["direction"],
)

transfer_duration_seconds = Histogram(
    "storage_transfer_duration_seconds",
    "Time from task creation to settlement",
    ["direction"],
    buckets=(
        0.01,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
        60.0,
        300.0,
    ),  # From 10ms to 5min
)

# Presigned URL metrics
presigned_urls_total = Counter(
    "storage_presigned_urls_total",
    "Total number of presigned URL requests",
    ["status"],  # status: success, error
)

presigned_url_expiration_seconds = Histogram(
    "storage_presigned_url_expiration_seconds",
    "Effective lifetime granted to presigned URLs",
    buckets=(60, 300, 900, 1800, 3600, 21600, 43200, 86400, 604800),
)


def record_transfer_outcome(
    direction: str,
    state: str,
    duration_seconds: float,
    bytes_transferred: int = 0,
) -> None:
    """
    Record the settlement of a transfer task.

    Args:
        direction: download or upload
        state: success, error, or canceled
        duration_seconds: Time from creation to settlement
        bytes_transferred: Bytes moved (only counted for success)
    """
    transfer_tasks_total.labels(direction=direction, state=state).inc()
    transfer_duration_seconds.labels(direction=direction).observe(duration_seconds)
    if state == "success" and bytes_transferred:
        transfer_bytes_total.labels(direction=direction).inc(bytes_transferred)


def record_presigned_url(success: bool, expiration_seconds: int = 0) -> None:
    """Record a presigned URL request and, on success, its granted lifetime."""
    presigned_urls_total.labels(status="success" if success else "error").inc()
    if success:
        presigned_url_expiration_seconds.observe(expiration_seconds)
