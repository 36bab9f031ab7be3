"""Prometheus metrics definitions for s3presign.

All metrics use the ``s3presign_`` prefix.  Nothing is registered in the
global ``prometheus_client`` registry until ``init_metrics()`` is called, so
applications that do not expose metrics pay nothing and see no collectors.
"""

from __future__ import annotations

from prometheus_client import Counter

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Operation counters  (labels: status)
# ---------------------------------------------------------------------------
presign_operations_total: Counter | None = None
verify_operations_total: Counter | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics.

    Safe to call more than once; only the first call registers collectors.
    """
    global _initialized
    global presign_operations_total, verify_operations_total

    if _initialized:
        return

    presign_operations_total = Counter(
        "s3presign_presign_operations_total",
        "Total presigned URL generations by outcome",
        ["status"],
    )

    verify_operations_total = Counter(
        "s3presign_verify_operations_total",
        "Total presigned URL verifications by outcome",
        ["status"],
    )

    _initialized = True


def record_presign(status: str) -> None:
    """Count one presign attempt; no-op when metrics are disabled."""
    if presign_operations_total is not None:
        presign_operations_total.labels(status=status).inc()


def record_verify(status: str) -> None:
    """Count one verification attempt; no-op when metrics are disabled."""
    if verify_operations_total is not None:
        verify_operations_total.labels(status=status).inc()
